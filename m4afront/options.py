"""Command-line option parsing for the encoder front end."""

from __future__ import annotations

import getopt
import re
import sys
from dataclasses import dataclass, field
from typing import Callable, Sequence

from .config import MpegVersion, ObjectType, ShortCtl, StreamFormat
from .helptext import HelpTopic
from .media import check_image_header, is_mp4_name, output_filename
from .mp4writer import TAG_MAX

SHORT_OPTIONS = "Hhb:m:o:rnc:q:PR:B:C:I:Xwv:"

# Long option name -> key of the handler it shares with a short option (or its own).
_LONG_OPTIONS: dict[str, str] = {
    "help": "h",
    "help-qual": "help-qual",
    "help-io": "help-io",
    "help-mp4": "help-mp4",
    "help-advanced": "help-advanced",
    "raw": "r",
    "joint=": "joint",
    "pns=": "pns",
    "cutoff=": "c",
    "quality=": "q",
    "pcmraw": "P",
    "pcmsamplerate=": "R",
    "pcmsamplebits=": "B",
    "pcmchannels=": "C",
    "shortctl=": "shortctl",
    "tns": "tns",
    "no-tns": "no-tns",
    "mpeg-version=": "mpeg-version",
    "license": "L",
    "createmp4": "w",
    "artist=": "artist",
    "artistsort=": "artistsort",
    "title=": "title",
    "album=": "album",
    "albumartist=": "albumartist",
    "albumartistsort=": "albumartistsort",
    "albumsort=": "albumsort",
    "track=": "track",
    "disc=": "disc",
    "genre=": "genre",
    "year=": "year",
    "cover-art=": "cover-art",
    "comment=": "comment",
    "composer=": "composer",
    "composersort=": "composersort",
    "compilation": "compilation",
    "pcmswapbytes": "X",
    "ignorelength": "ignorelength",
    "tag=": "tag",
    "overwrite": "overwrite",
}

_HELP_TOPICS = {
    "help-qual": HelpTopic.QUAL,
    "help-io": HelpTopic.IO,
    "help-mp4": HelpTopic.MP4,
    "help-advanced": HelpTopic.ADVANCED,
}

_TEXT_TAGS = (
    "artist", "artistsort", "title", "album", "albumartist",
    "albumartistsort", "albumsort", "year", "comment", "composer", "composersort",
)

_SIGNED = re.compile(r"\s*([+-]?\d+)")
_UNSIGNED = re.compile(r"\s*\+?(\d+)")

MIN_RAW_BITS = 8
MAX_RAW_BITS = 32
MAX_GENRE = 255
_MIN_COVER_SIZE = 12


class OptionsError(Exception):
    """The command line could not be accepted."""

    def __init__(self, message: str, show_help: bool = False) -> None:
        super().__init__(message)
        self.show_help = show_help


class HelpRequested(Exception):
    """Help or licence text was asked for instead of encoding.

    ``mode`` is ``"?"``, ``"h"``, ``"H"``, a :class:`HelpTopic`, or ``"L"``
    for the licence terms.
    """

    def __init__(self, mode: str | HelpTopic) -> None:
        super().__init__(f"help requested: {mode}")
        self.mode = mode


def _atoi(text: str) -> int:
    match = _SIGNED.match(text)
    return int(match.group(1)) if match else 0


def _scan_uint(text: str) -> int | None:
    match = _UNSIGNED.match(text)
    return int(match.group(1)) if match else None


def _scan_pair(text: str, sep: str) -> list[int]:
    """Read up to two integers separated by ``sep``, as ``"%d<sep>%d"`` would."""
    first = _SIGNED.match(text)
    if not first:
        return []
    values = [int(first.group(1))]
    rest = text[first.end():]
    if rest.startswith(sep):
        second = _SIGNED.match(rest[len(sep):])
        if second:
            values.append(int(second.group(1)))
    return values


@dataclass
class Settings:
    """Everything the command line selects for one encoding run."""

    input_name: str | None = None
    output_name: str | None = None
    output_given: bool = False
    mp4: bool = False
    stream: StreamFormat = StreamFormat.ADTS
    mpeg_version: MpegVersion = MpegVersion.MPEG2
    object_type: ObjectType = ObjectType.LOW
    joint_mode: int = -1
    pns_level: int = -1
    use_tns: bool = False
    cutoff: int = -1
    bitrate: int = 0
    quantqual: int = 0
    chan_center: int = 3
    chan_lfe: int = 4
    raw_channels: int = 0
    raw_bits: int = 16
    raw_rate: int = 44100
    raw_bigendian: bool = True
    shortctl: int = ShortCtl.NORMAL
    trackno: int = 0
    ntracks: int = 0
    discno: int = 0
    ndiscs: int = 0
    compilation: bool = False
    artist: str | None = None
    artistsort: str | None = None
    title: str | None = None
    album: str | None = None
    albumartist: str | None = None
    albumartistsort: str | None = None
    albumsort: str | None = None
    year: str | None = None
    comment: str | None = None
    composer: str | None = None
    composersort: str | None = None
    genre: int = 0
    cover: bytes | None = None
    tags: list[tuple[str, str]] = field(default_factory=list)
    ignore_length: bool = False
    verbose: int = 1
    overwrite: bool = False

    def has_metadata(self) -> bool:
        """True if any option that needs MP4 output was given."""
        return bool(
            self.ntracks or self.trackno or self.discno or self.ndiscs
            or self.genre or self.compilation or self.cover
            or any(getattr(self, name) for name in _TEXT_TAGS)
        )

    def resolve_output(self) -> str:
        """Choose the output name (and container from its extension); return it."""
        if self.input_name is None:
            raise OptionsError("no input file")
        if not self.output_given:
            self.output_name = output_filename(self.input_name, self.mp4)
        elif self.output_name is not None and is_mp4_name(self.output_name):
            self.mp4 = True
        assert self.output_name is not None
        return self.output_name


_LICENSE = object()


class _Parser:
    def __init__(self) -> None:
        self.settings = Settings()
        self.die: object = None
        self.handlers: dict[str, Callable[[str], None]] = {
            "o": self._output,
            "r": self._raw_stream,
            "c": self._cutoff,
            "b": self._bitrate,
            "q": self._quality,
            "I": self._chan_config,
            "P": self._raw_input,
            "R": self._raw_rate,
            "B": self._raw_bits,
            "C": self._raw_channels,
            "w": self._mp4,
            "track": self._track,
            "disc": self._disc,
            "genre": self._genre,
            "tag": self._tag,
            "cover-art": self._cover,
            "shortctl": self._shortctl,
            "mpeg-version": self._mpeg_version,
            "L": self._license,
            "X": self._swap,
            "v": self._verbose,
            "joint": self._joint,
            "pns": self._pns,
            "tns": lambda _: setattr(self.settings, "use_tns", True),
            "no-tns": lambda _: setattr(self.settings, "use_tns", False),
            "compilation": lambda _: setattr(self.settings, "compilation", True),
            "ignorelength": lambda _: setattr(self.settings, "ignore_length", True),
            "overwrite": lambda _: setattr(self.settings, "overwrite", True),
        }
        for name in _TEXT_TAGS:
            self.handlers[name] = self._text_setter(name)

    def _text_setter(self, name: str) -> Callable[[str], None]:
        def setter(value: str) -> None:
            setattr(self.settings, name, value)
        return setter

    def handle(self, key: str, value: str) -> None:
        if key in ("h", "H"):
            raise HelpRequested(key)
        if key in _HELP_TOPICS:
            raise HelpRequested(_HELP_TOPICS[key])
        handler = self.handlers.get(key)
        if handler is None:
            raise OptionsError(f"unsupported option -{key}", show_help=True)
        handler(value)

    def _output(self, value: str) -> None:
        self.settings.output_name = value
        self.settings.output_given = True

    def _raw_stream(self, _: str) -> None:
        self.settings.stream = StreamFormat.RAW

    def _cutoff(self, value: str) -> None:
        number = _scan_uint(value)
        if number is not None:
            self.settings.cutoff = number

    def _bitrate(self, value: str) -> None:
        number = _scan_uint(value)
        if number is not None:
            self.settings.bitrate = 1000 * number

    def _quality(self, value: str) -> None:
        number = _scan_uint(value)
        if number:
            self.settings.quantqual = number

    def _chan_config(self, value: str) -> None:
        values = _scan_pair(value, ",")
        if values:
            self.settings.chan_center = values[0]
        if len(values) > 1:
            self.settings.chan_lfe = values[1]

    def _raw_input(self, _: str) -> None:
        self.settings.raw_channels = 2

    def _ensure_raw(self) -> None:
        if self.settings.raw_channels <= 0:
            self.settings.raw_channels = 2

    def _raw_rate(self, value: str) -> None:
        number = _scan_uint(value)
        if number is not None:
            self.settings.raw_rate = number
            self._ensure_raw()

    def _raw_bits(self, value: str) -> None:
        number = _scan_uint(value)
        if number is not None:
            self.settings.raw_bits = min(max(number, MIN_RAW_BITS), MAX_RAW_BITS)
            self._ensure_raw()

    def _raw_channels(self, value: str) -> None:
        number = _scan_uint(value)
        if number is not None:
            self.settings.raw_channels = number

    def _mp4(self, _: str) -> None:
        self.settings.mp4 = True

    def _track(self, value: str) -> None:
        values = _scan_pair(value, "/")
        if not values:
            self.die = "Wrong track number."
            return
        self.settings.trackno = values[0]
        if len(values) > 1:
            self.settings.ntracks = values[1]

    def _disc(self, value: str) -> None:
        values = _scan_pair(value, "/")
        if not values:
            self.die = "Wrong disc number."
            return
        self.settings.discno = values[0]
        if len(values) > 1:
            self.settings.ndiscs = values[1]

    def _genre(self, value: str) -> None:
        genre = _atoi(value)
        if not 0 <= genre <= MAX_GENRE:
            self.die = "Genre number out of range."
        # Stored one above the ID3 genre number, as the 'gnre' atom expects.
        self.settings.genre = genre + 1

    def _tag(self, value: str) -> None:
        name, sep, data = value.partition(",")
        if not sep:
            self.die = "Missing tag value."
            return
        if len(self.settings.tags) < TAG_MAX:
            self.settings.tags.append((name, data))

    def _cover(self, value: str) -> None:
        try:
            with open(value, "rb") as handle:
                data = handle.read()
        except OSError:
            self.die = "Error opening cover art file!"
            return
        if len(data) < _MIN_COVER_SIZE or not check_image_header(data):
            self.die = "Unsupported cover image file format!"
            return
        self.settings.cover = data

    def _shortctl(self, value: str) -> None:
        self.settings.shortctl = _atoi(value)

    def _mpeg_version(self, value: str) -> None:
        version = _atoi(value)
        if version == 2:
            self.settings.mpeg_version = MpegVersion.MPEG2
        elif version == 4:
            self.settings.mpeg_version = MpegVersion.MPEG4
        else:
            self.die = "Unrecognised MPEG version!"

    def _license(self, _: str) -> None:
        self.die = _LICENSE

    def _swap(self, _: str) -> None:
        self.settings.raw_bigendian = False

    def _verbose(self, value: str) -> None:
        self.settings.verbose = _atoi(value)

    def _joint(self, value: str) -> None:
        self.settings.joint_mode = _atoi(value)

    def _pns(self, value: str) -> None:
        self.settings.pns_level = _atoi(value)


def _option_key(option: str) -> str:
    if option.startswith("--"):
        name = option[2:]
        return _LONG_OPTIONS.get(name, _LONG_OPTIONS.get(name + "=", name))
    return option[1:]


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse the arguments after the program name into :class:`Settings`.

    Raises :class:`HelpRequested` when help or the licence is asked for and
    :class:`OptionsError` when the command line is not usable.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        raise HelpRequested("?")
    try:
        opts, positional = getopt.gnu_getopt(args, SHORT_OPTIONS, list(_LONG_OPTIONS))
    except getopt.GetoptError as exc:
        raise OptionsError(str(exc), show_help=True) from exc

    parser = _Parser()
    for option, value in opts:
        parser.handle(_option_key(option), value)

    settings = parser.settings
    die = parser.die
    if die is None and len(positional) > 1 and settings.output_given:
        die = "Cannot encode several input files to one output file."
    if die is _LICENSE:
        raise HelpRequested("L")
    if die is not None:
        raise OptionsError(str(die))
    if not positional:
        raise OptionsError("no input file")
    settings.input_name = positional[-1]
    return settings