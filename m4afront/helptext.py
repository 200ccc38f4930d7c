"""Usage and option help texts printed by the command-line encoder."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

PROGRAM_NAME = "m4afront"

USAGE = "Usage: {prog} [options] infile\n\n"


class HelpTopic(IntEnum):
    """Identifiers of the detailed help sections."""

    QUAL = 318
    IO = 319
    MP4 = 320
    ADVANCED = 321


@dataclass(frozen=True)
class HelpEntry:
    """One option: a one-line summary and an optional longer description."""

    short: str
    detail: str | None = None


@dataclass(frozen=True)
class HelpSection:
    """A titled group of option descriptions reachable through its own option."""

    topic: HelpTopic
    title: str
    option: str
    entries: tuple[HelpEntry, ...]


_QUAL = (
    HelpEntry(
        "-q <quality>\tSet encoding quality.\n",
        "\t\tSet default variable bitrate (VBR) quantizer quality in percent.\n"
        "\t\tmax. 5000, min. 10.\n"
        "\t\tdefault: 100, averages at approx. 120 kbps VBR for a normal\n"
        "\t\tstereo input file with 16 bit and 44.1 kHz sample rate\n",
    ),
    HelpEntry(
        "-b <bitrate>\tSet average bitrate to x kbps. (ABR)\n",
        "\t\tSet average bitrate (ABR) to approximately <bitrate> kbps.\n"
        "\t\tmax. ~500 (stereo)\n",
    ),
    HelpEntry(
        "-c <freq>\tSet the bandwidth in Hz.\n",
        "\t\tThe actual frequency is adjusted to maximize upper spectral band\n"
        "\t\tusage.\n",
    ),
)

_IO = (
    HelpEntry(
        "-o <filename>\tSet output file to X (only for one input file)\n",
        "\t\tonly for one input file; you can use *.aac, *.mp4, *.m4a or\n"
        "\t\t*.m4b as file extension, and the file format will be set\n"
        "\t\tautomatically to ADTS or MP4).\n",
    ),
    HelpEntry(
        "-\t\tUse stdin/stdout\n",
        "\t\tIf you simply use a hyphen/minus sign instead\n"
        f"\t\tof a filename, {PROGRAM_NAME} can encode directly from stdin,\n"
        "\t\tthus enabling piping from other applications and utilities. The\n"
        f"\t\tsame works for stdout as well, so {PROGRAM_NAME} can pipe its output to\n"
        "\t\tother apps such as a server.\n",
    ),
    HelpEntry("-v <verbose>\t\tverbosity level (-v0 is quiet mode)\n"),
    HelpEntry(
        "-r\t\tUse RAW AAC output file.\n",
        "\t\tGenerate raw AAC bitstream (i.e. without any headers).\n"
        "\t\tNot advised!!!, RAW AAC files are practically useless!!!\n",
    ),
    HelpEntry(
        "-P\t\tRaw PCM input mode (default 44100Hz 16bit stereo).\n",
        "\t\tRaw PCM input mode (default: off, i.e. expecting a WAV header;\n"
        "\t\tnecessary for input files or bitstreams without a header; using\n"
        "\t\tonly -P assumes the default values for -R, -B and -C in the\n"
        "\t\tinput file).\n",
    ),
    HelpEntry(
        "-R <samplerate>\tRaw PCM input rate.\n",
        "\t\tRaw PCM input sample rate in Hz (default: 44100 Hz, max. 96 kHz)\n",
    ),
    HelpEntry(
        "-B <samplebits>\tRaw PCM input sample size (8, 16 (default), 24 or 32bits).\n",
        "\t\tRaw PCM input sample size (default: 16, also possible 8, 24, 32\n"
        "\t\tbit fixed or float input).\n",
    ),
    HelpEntry(
        "-C <channels>\tRaw PCM input channels.\n",
        "\t\tRaw PCM input channels (default: 2, max. 33 + 1 LFE).\n",
    ),
    HelpEntry(
        "-X\t\tRaw PCM swap input bytes\n",
        "\t\tRaw PCM swap input bytes (default: bigendian).\n",
    ),
    HelpEntry(
        "-I <C[,LFE]>\tInput channel config, default is 3,4 (Center third, LF fourth)\n",
        "\t\tInput multichannel configuration (default: 3,4 which means\n"
        "\t\tCenter is third and LFE is fourth like in 5.1 WAV, so you only\n"
        "\t\thave to specify a different position of these two mono channels\n"
        "\t\tin your multichannel input files if they haven't been reordered\n"
        "\t\talready).\n",
    ),
    HelpEntry("--ignorelength\tIgnore wav length from header (useful with files over 4 GB)\n"),
    HelpEntry("--overwrite\t\tOverwrite existing output file"),
)

_MP4 = (
    HelpEntry(
        "-w\t\tWrap AAC data in MP4 container. (default for *.mp4 and *.m4a)\n",
        "\t\tWrap AAC data in MP4 container. (default for *.mp4, *.m4a and\n"
        "\t\t*.m4b)\n",
    ),
    HelpEntry("--tag <tagname,tagvalue> Add named tag (iTunes '----')\n"),
    HelpEntry("--artist <name>\tSet artist name\n"),
    HelpEntry("--artistsort <name>\tSet artist sort order\n"),
    HelpEntry("--composer <name>\tSet composer name\n"),
    HelpEntry("--composersort <name>\tSet composer sort order\n"),
    HelpEntry("--title <name>\tSet title/track name\n"),
    HelpEntry("--genre <number>\tSet genre number\n"),
    HelpEntry("--album <name>\tSet album/performer\n"),
    HelpEntry("--albumartist <name>\tSet album artist\n"),
    HelpEntry("--albumartistsort <name>\tSet album artist sort order\n"),
    HelpEntry("--albumsort <name>\tSet album sort order\n"),
    HelpEntry("--compilation\tMark as compilation\n"),
    HelpEntry("--track <number/total>\tSet track number\n"),
    HelpEntry("--disc <number/total>\tSet disc number\n"),
    HelpEntry("--year <number>\tSet year\n"),
    HelpEntry(
        "--cover-art <filename>\tRead cover art from file X\n",
        "\t\tSupported image formats are GIF, JPEG, and PNG.\n",
    ),
    HelpEntry("--comment <string>\tSet comment\n"),
)

_ADVANCED = (
    HelpEntry("--tns  \tEnable coding of TNS, temporal noise shaping.\n"),
    HelpEntry("--no-tns\tDisable coding of TNS, temporal noise shaping.\n"),
    HelpEntry("--joint 0\tDisable joint stereo coding.\n"),
    HelpEntry("--joint 1\tUse Mid/Side coding.\n"),
    HelpEntry("--joint 2\tUse Intensity Stereo coding.\n"),
    HelpEntry("--pns <0 .. 10>\tPNS level; 0=disabled.\n"),
    HelpEntry("--mpeg-vers X\tForce AAC MPEG version, X can be 2 or 4\n"),
    HelpEntry(
        "--shortctl X\tEnforce block type (0 = both (default); 1 = no short; 2 = no\n"
        "\t\tlong).\n"
    ),
)

SECTIONS: tuple[HelpSection, ...] = (
    HelpSection(HelpTopic.QUAL, "Quality-related options", "--help-qual", _QUAL),
    HelpSection(HelpTopic.IO, "Input/output options", "--help-io", _IO),
    HelpSection(HelpTopic.MP4, "MP4 specific options", "--help-mp4", _MP4),
    HelpSection(
        HelpTopic.ADVANCED,
        "Advanced options, only for testing purposes",
        "--help-advanced",
        _ADVANCED,
    ),
)

# Sections shown by the short help.
_SHORT_HELP_SECTIONS = 2


def format_section(section: HelpSection, detailed: bool = False) -> str:
    """Render a section's entries, including long descriptions when ``detailed``."""
    lines = []
    for entry in section.entries:
        lines.append(f"    {entry.short}")
        if detailed and entry.detail:
            lines.append(entry.detail)
    return "".join(lines) + "\n\n"


def _titled(section: HelpSection, detailed: bool) -> str:
    return f"{section.title}:\n" + format_section(section, detailed)


def _find_section(mode: object) -> HelpSection | None:
    for section in SECTIONS:
        if mode == section.option:
            return section
        if isinstance(mode, int) and not isinstance(mode, bool) and mode == section.topic:
            return section
    return None


def help_text(mode: str | int = "?") -> str:
    """Return the help printed for ``mode``.

    ``"?"`` lists the help options, ``"h"`` adds a short description of the
    quality and input/output options, ``"H"`` describes every option in full.
    A section's topic or option name (e.g. ``"--help-qual"``) selects that
    section alone. Any other mode yields the usage line only.
    """
    parts = [USAGE.format(prog=PROGRAM_NAME)]
    if mode in ("?", "h", "H"):
        parts.append(
            "Help options:\n"
            f"\t-h\t\tShort help on using {PROGRAM_NAME}\n"
            f"\t-H\t\tDescription of all options for {PROGRAM_NAME}.\n"
            f"\t--license\tLicense terms for {PROGRAM_NAME}.\n"
        )
        parts.extend(f"\t{s.option}\t{s.title}\n" for s in SECTIONS)
        if mode == "h":
            parts.extend(_titled(s, False) for s in SECTIONS[:_SHORT_HELP_SECTIONS])
        elif mode == "H":
            parts.extend(_titled(s, True) for s in SECTIONS)
        return "".join(parts)

    section = _find_section(mode)
    if section is not None:
        parts.append(_titled(section, True))
    return "".join(parts)