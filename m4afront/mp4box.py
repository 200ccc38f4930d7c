"""Building blocks for MP4 boxes: headers, file type, tags and the esds descriptor."""

from __future__ import annotations

import struct
import time

DATA_TYPE_IMPLICIT = 0x00
DATA_TYPE_TEXT = 0x01
DATA_TYPE_IMAGE = 0x0D
DATA_TYPE_UINT8 = 0x15

_SECS_IN_DAY = 24 * 60 * 60

# Seconds between the start of 1904 (MP4 epoch) and the start of 1970.
_EPOCH_OFFSET = sum(
    (366 if year % 4 == 0 else 365) * _SECS_IN_DAY for year in range(1904, 1970)
)

_TAG_ES = 3
_TAG_DC = 4
_TAG_DSI = 5
_TAG_SLC = 6


def _u32(value: int) -> bytes:
    return struct.pack(">I", value & 0xFFFFFFFF)


def _fourcc(name: str | bytes) -> bytes:
    raw = name.encode("latin-1") if isinstance(name, str) else bytes(name)
    if len(raw) != 4:
        raise ValueError(f"box type must be four bytes, got {raw!r}")
    return raw


def _text(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


def box(name: str | bytes, payload: bytes = b"") -> bytes:
    """Return a complete box: 32-bit size, four-byte type and payload."""
    return _u32(8 + len(payload)) + _fourcc(name) + bytes(payload)


def mp4_time(unix_time: float | None = None) -> int:
    """Convert Unix seconds (default: now) to the 32-bit MP4 timestamp field."""
    if unix_time is None:
        unix_time = time.time()
    return (int(unix_time) + _EPOCH_OFFSET) & 0xFFFFFFFF


def ftyp_payload() -> bytes:
    """Payload of the 'ftyp' box written at the start of the file."""
    return b"M4A " + _u32(0) + b"M4A " + b"mp42" + b"isom" + _u32(0)


def data_tag(name: str | bytes, datatype: int, payload: bytes) -> bytes:
    """Metadata item box holding one 'data' box of the given type."""
    return box(name, box("data", _u32(datatype) + _u32(0) + bytes(payload)))


def text_tag(name: str | bytes, text: str | bytes) -> bytes:
    """Metadata item box holding a UTF-8 text value."""
    return data_tag(name, DATA_TYPE_TEXT, _text(text))


def freeform_tag(mean: str | bytes, name: str | bytes, value: str | bytes) -> bytes:
    """A '----' item with 'mean', 'name' and text 'data' children."""
    children = (
        box("mean", _u32(0) + _text(mean))
        + box("name", _u32(0) + _text(name))
        + box("data", _u32(DATA_TYPE_TEXT) + _u32(0) + _text(value))
    )
    return box("----", children)


def _descriptor_size(size: int) -> bytes:
    """Four-byte expandable size field (7 bits per byte, high bit continues)."""
    if size >= 1 << 28:
        raise ValueError(f"descriptor size {size} too large")
    groups = [(size >> shift) & 0x7F for shift in (21, 14, 7, 0)]
    return bytes(g | 0x80 for g in groups[:-1]) + bytes([groups[-1]])


def _descriptor(tag: int, body: bytes) -> bytes:
    return bytes([tag]) + _descriptor_size(len(body)) + body


def esds_payload(asc: bytes, max_bitrate: int, avg_bitrate: int) -> bytes:
    """Payload of the 'esds' box carrying the AudioSpecificConfig."""
    dsi = _descriptor(_TAG_DSI, bytes(asc))
    decoder_config = _descriptor(
        _TAG_DC,
        bytes([0x40, (5 << 2) | 1])  # MPEG-4 audio, audio stream, reserved bit
        + bytes([0x00, 0x18, 0x00])  # decode buffer size
        + _u32(max_bitrate)
        + _u32(avg_bitrate)
        + dsi,
    )
    sl_config = _descriptor(_TAG_SLC, bytes([2]))
    es = _descriptor(_TAG_ES, struct.pack(">H", 0) + bytes([0]) + decoder_config + sl_config)
    return _u32(0) + es