"""Reading PCM samples from WAV files or headerless raw PCM streams."""

from __future__ import annotations

import struct
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Sequence

WAVE_FORMAT_PCM = 1
WAVE_FORMAT_FLOAT = 3
WAVE_FORMAT_EXTENSIBLE = 0xFFFE

# Size of a packed WAVEFORMATEXTENSIBLE structure.
_FORMAT_STRUCT_SIZE = 40
_MIN_FORMAT_SIZE = 16
_MIN_EXTENSIBLE_CB_SIZE = 22
_MAX_SKIPPED_CHUNKS = 10
_SKIP_BLOCK = 1 << 16

_GUID_TAIL = bytes([0x00, 0x00, 0x00, 0x00, 0x10, 0x00, 0x80, 0x00,
                    0x00, 0xAA, 0x00, 0x38, 0x9B, 0x71])
_PCM_GUID = bytes([WAVE_FORMAT_PCM, 0]) + _GUID_TAIL
_FLOAT_GUID = bytes([WAVE_FORMAT_FLOAT, 0]) + _GUID_TAIL


class WavFormatError(ValueError):
    """The input is not a WAV file this reader understands."""


def _skip(stream: BinaryIO, count: int) -> None:
    """Consume ``count`` bytes by reading, so pipes work as well as files."""
    while count > 0:
        chunk = stream.read(min(count, _SKIP_BLOCK))
        if not chunk:
            return
        count -= len(chunk)


def _seek_chunk(stream: BinaryIO, label: bytes) -> int:
    """Advance past chunk headers until ``label``; return its (even) length."""
    for _ in range(_MAX_SKIPPED_CHUNKS):
        header = stream.read(8)
        if len(header) != 8:
            break
        name = header[:4]
        (length,) = struct.unpack("<I", header[4:])
        if length & 1:
            length += 1
        if name == label:
            return length
        _skip(stream, length)
    raise WavFormatError(f"chunk {label.decode('latin-1')!r} not found")


def remap_channels(
    samples: Sequence, channels: int, chanmap: Sequence[int]
) -> list:
    """Reorder the channels of every complete frame; output channel i takes input chanmap[i]."""
    if channels <= 0:
        raise ValueError("channel count must be positive")
    if len(chanmap) < channels:
        raise ValueError(
            f"channel map has {len(chanmap)} entries for {channels} channels"
        )
    mapping = list(chanmap[:channels])
    blocks = len(samples) // channels
    result: list = []
    for block in range(blocks):
        frame = samples[block * channels:(block + 1) * channels]
        result.extend(frame[src] for src in mapping)
    result.extend(samples[blocks * channels:])
    return result


@dataclass
class PcmFile:
    """An open PCM source together with its sample layout."""

    stream: BinaryIO = field(repr=False)
    channels: int = 0
    samplebytes: int = 0
    samplerate: int = 0
    samples: int = 0
    bigendian: bool = False
    isfloat: bool = False
    owns_stream: bool = field(default=True, repr=False)

    def _supported_width(self) -> bool:
        return 1 <= self.samplebytes <= 4

    def _finish(self, values: list, chanmap: Sequence[int] | None) -> list:
        if chanmap is not None and self.channels > 0:
            return remap_channels(values, self.channels, chanmap)
        return values

    def read_float32(self, count: int, chanmap: Sequence[int] | None = None) -> list[float]:
        """Read up to ``count`` samples scaled to the 16-bit range as floats."""
        if not self._supported_width():
            return []
        width = self.samplebytes
        raw = self.stream.read(count * width)
        available = min(count, len(raw) // width)
        if available == 0:
            return []
        data = raw[:available * width]
        order = ">" if self.bigendian else "<"

        if self.isfloat:
            if width != 4:
                return []
            values = [v * 32768.0 for v in struct.unpack(f"<{available}f", data)]
        elif width == 1:
            values = [(b - 128.0) * 256.0 for b in data]
        elif width == 2:
            values = [float(v) for v in struct.unpack(f"{order}{available}h", data)]
        elif width == 3:
            byteorder = "big" if self.bigendian else "little"
            values = [
                int.from_bytes(data[i:i + 3], byteorder, signed=True) / 256.0
                for i in range(0, len(data), 3)
            ]
        else:
            values = [v / 65536.0 for v in struct.unpack(f"{order}{available}i", data)]

        return self._finish(values, chanmap)

    def read_int24(self, count: int, chanmap: Sequence[int] | None = None) -> list[int]:
        """Read up to ``count`` samples as integers in the 24-bit range."""
        if not self._supported_width():
            return []
        width = self.samplebytes
        raw = self.stream.read(count * width)
        available = min(count, len(raw) // width)
        data = raw[:available * width]
        order = ">" if self.bigendian else "<"

        if width == 1:
            values = [(b - 128) * 65536 for b in data]
        elif width == 2:
            values = [v << 8 for v in struct.unpack(f"{order}{available}h", data)]
        elif width == 3:
            byteorder = "big" if self.bigendian else "little"
            values = [
                int.from_bytes(data[i:i + 3], byteorder, signed=True)
                for i in range(0, len(data), 3)
            ]
        else:
            values = list(struct.unpack(f"{order}{available}i", data))

        return self._finish(values, chanmap)

    def close(self) -> None:
        """Release the underlying stream."""
        if self.owns_stream and not self.stream.closed:
            self.stream.close()

    def __enter__(self) -> "PcmFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _parse_header(stream: BinaryIO, name: str) -> PcmFile:
    riff = stream.read(12)
    if len(riff) != 12:
        raise WavFormatError(f"{name}: truncated RIFF header")
    if riff[:4] != b"RIFF":
        raise WavFormatError(f"{name}: not a RIFF file")
    if riff[8:12] != b"WAVE":
        raise WavFormatError(f"{name}: not a WAVE file")

    fmt_len = _seek_chunk(stream, b"fmt ")
    fmt_size = min(fmt_len, _FORMAT_STRUCT_SIZE)
    if fmt_size < _MIN_FORMAT_SIZE:
        raise WavFormatError(f"{name}: format chunk too small")
    fmt = stream.read(fmt_size)
    if len(fmt) != fmt_size:
        raise WavFormatError(f"{name}: truncated format chunk")
    _skip(stream, fmt_len - fmt_size)
    fmt = fmt.ljust(_FORMAT_STRUCT_SIZE, b"\0")

    tag, channels, samplerate, _avg, _align, bits, cb_size = struct.unpack(
        "<HHIIHHH", fmt[:18]
    )
    subformat = fmt[24:40]

    data_len = _seek_chunk(stream, b"data")

    if tag not in (WAVE_FORMAT_PCM, WAVE_FORMAT_FLOAT):
        if tag != WAVE_FORMAT_EXTENSIBLE:
            raise WavFormatError(f"{name}: file format not supported")
        if cb_size < _MIN_EXTENSIBLE_CB_SIZE:
            raise WavFormatError(f"{name}: extensible format structure too small")
        if subformat not in (_PCM_GUID, _FLOAT_GUID):
            raise WavFormatError(f"{name}: file format not supported")

    isfloat = tag == WAVE_FORMAT_FLOAT or subformat[0] == WAVE_FORMAT_FLOAT
    samplebytes = bits // 8
    if not samplebytes or not channels:
        raise WavFormatError(f"{name}: no channels or zero sample size")

    return PcmFile(
        stream=stream,
        channels=channels,
        samplebytes=samplebytes,
        samplerate=samplerate,
        samples=data_len // (samplebytes * channels),
        bigendian=False,
        isfloat=isfloat,
    )


def open_pcm(path: str, raw: bool = False) -> PcmFile:
    """Open a WAV file, or raw PCM when ``raw`` is true; ``"-"`` means standard input.

    For raw input the layout fields are left for the caller to fill in and
    ``samples`` holds the byte length of the file (0 for standard input).
    """
    if path == "-":
        stream: BinaryIO = sys.stdin.buffer
        owns = False
    else:
        stream = open(path, "rb")
        owns = True

    if raw:
        if owns:
            stream.seek(0, 2)
            size = stream.tell()
            stream.seek(0)
        else:
            size = 0
        return PcmFile(stream=stream, samples=size, bigendian=True, owns_stream=owns)

    try:
        pcm = _parse_header(stream, path)
    except BaseException:
        if owns:
            stream.close()
        raise
    pcm.owns_stream = owns
    return pcm