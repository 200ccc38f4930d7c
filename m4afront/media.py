"""Helpers for choosing inputs and outputs: image sniffing, channel maps, file names."""

from __future__ import annotations

_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
_JPEG_SIGNATURES = (b"\xff\xd8\xff\xe0", b"\xff\xd8\xff\xe1")
_GIF_SIGNATURES = (b"GIF87a", b"GIF89a")
_IMAGE_SIGNATURES = (_PNG_SIGNATURE, *_JPEG_SIGNATURES, *_GIF_SIGNATURES)

_MP4_EXTENSIONS = (".m4a", ".m4b", ".mp4")
MP4_EXTENSION = ".m4a"
AAC_EXTENSION = ".aac"


def check_image_header(data: bytes) -> bool:
    """True if ``data`` starts with a PNG, JPEG or GIF signature."""
    data = bytes(data)
    return any(data.startswith(sig) for sig in _IMAGE_SIGNATURES)


def make_channel_map(channels: int, center: int, lfe: int) -> list[int] | None:
    """Build the input-to-output channel order for multichannel input.

    ``center`` and ``lfe`` are 1-based input positions; 0 (or less) selects the
    default AAC position (first for center, last for LFE). Output channel ``i``
    takes input channel ``map[i]``. Returns None when no remapping applies.
    """
    if not center and not lfe:
        return None
    if channels < 3:
        return None

    lfe = lfe - 1 if lfe > 0 else channels - 1
    center = center - 1 if center > 0 else 0

    mapping: list[int] = []
    if 0 <= center < channels:
        mapping.append(center)

    inpos = 0
    while len(mapping) < channels - 1:
        if inpos != center and inpos != lfe:
            mapping.append(inpos)
        inpos += 1

    if len(mapping) < channels:
        mapping.append(lfe if 0 <= lfe < channels else inpos)
    return mapping


def output_filename(input_name: str, mp4: bool) -> str:
    """Replace the text after the last '.' of ``input_name`` with the output extension."""
    dot = input_name.rfind(".")
    stem = input_name if dot < 0 else input_name[:dot]
    return stem + (MP4_EXTENSION if mp4 else AAC_EXTENSION)


def is_mp4_name(name: str) -> bool:
    """True if ``name`` ends in one of the MP4 container extensions."""
    dot = name.rfind(".")
    return dot >= 0 and name[dot:] in _MP4_EXTENSIONS


def clamp_cutoff(cutoff: int, samplerate: int) -> int:
    """Resolve the bandwidth setting.

    A negative value means the encoder default (0), zero means no limit
    (half the sample rate); anything above half the sample rate is clamped.
    """
    nyquist = samplerate // 2
    if cutoff <= 0:
        cutoff = 0 if cutoff < 0 else nyquist
    return min(cutoff, nyquist)