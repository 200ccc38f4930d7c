"""Writing AAC frames into an MP4 (M4A) container with iTunes-style metadata."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass, field
from typing import BinaryIO

from .mp4box import (
    DATA_TYPE_IMAGE,
    DATA_TYPE_IMPLICIT,
    DATA_TYPE_UINT8,
    box,
    data_tag,
    esds_payload,
    freeform_tag,
    ftyp_payload,
    mp4_time,
    text_tag,
)

TAG_MAX = 100

_UNITY_MATRIX = (0x00010000, 0, 0, 0, 0x00010000, 0, 0, 0, 0x40000000)


class Mp4Error(Exception):
    """The MP4 output could not be created or written."""


def _u8(value: int) -> bytes:
    return bytes([value & 0xFF])


def _u16(value: int) -> bytes:
    return struct.pack(">H", value & 0xFFFF)


def _u32(value: int) -> bytes:
    return struct.pack(">I", value & 0xFFFFFFFF)


def _u32s(*values: int) -> bytes:
    return b"".join(_u32(v) for v in values)


@dataclass
class CoverArt:
    """Cover image bytes (GIF, JPEG or PNG)."""

    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class Mp4Tags:
    """Metadata written to the 'ilst' box."""

    encoder: str = ""
    artist: str | None = None
    artistsort: str | None = None
    composer: str | None = None
    composersort: str | None = None
    title: str | None = None
    album: str | None = None
    albumartist: str | None = None
    albumartistsort: str | None = None
    albumsort: str | None = None
    compilation: int = 0
    trackno: int = 0
    ntracks: int = 0
    discno: int = 0
    ndiscs: int = 0
    genre: int = 0
    year: str | None = None
    cover: CoverArt | None = None
    comment: str | None = None
    custom: list[tuple[str, str]] = field(default_factory=list)
    custom_mean: str = "faac"

    def add_custom(self, name: str, value: str) -> None:
        """Add a free-form ('----') tag; at most TAG_MAX are allowed."""
        if len(self.custom) >= TAG_MAX:
            raise Mp4Error("too many tags")
        self.custom.append((name, value))

    def to_ilst(self) -> bytes:
        """Payload of the 'ilst' box."""
        items = [text_tag("\xa9too", self.encoder)]
        for name, value in (
            ("\xa9ART", self.artist),
            ("soar", self.artistsort),
            ("\xa9wrt", self.composer),
            ("soco", self.composersort),
            ("\xa9nam", self.title),
        ):
            if value:
                items.append(text_tag(name, value))
        if self.genre:
            items.append(data_tag("gnre", DATA_TYPE_IMPLICIT, _u16(self.genre)))
        for name, value in (
            ("\xa9alb", self.album),
            ("aART", self.albumartist),
            ("soaa", self.albumartistsort),
            ("soal", self.albumsort),
        ):
            if value:
                items.append(text_tag(name, value))
        if self.compilation:
            items.append(data_tag("cpil", DATA_TYPE_UINT8, _u8(self.compilation)))
        if self.trackno:
            items.append(
                data_tag(
                    "trkn",
                    DATA_TYPE_IMPLICIT,
                    _u16(0) + _u16(self.trackno) + _u16(self.ntracks) + _u16(0),
                )
            )
        if self.discno:
            items.append(
                data_tag(
                    "disk",
                    DATA_TYPE_IMPLICIT,
                    _u16(0) + _u16(self.discno) + _u16(self.ndiscs) + _u16(0),
                )
            )
        if self.year:
            items.append(text_tag("\xa9day", self.year))
        if self.cover is not None and self.cover.data:
            items.append(data_tag("covr", DATA_TYPE_IMAGE, self.cover.data))
        if self.comment:
            items.append(text_tag("\xa9cmt", self.comment))
        items.extend(
            freeform_tag(self.custom_mean, name, value) for name, value in self.custom
        )
        return b"".join(items)


class Mp4Writer:
    """Streams AAC frames into an MP4 file and writes the index at the end."""

    def __init__(
        self,
        path: str | os.PathLike,
        overwrite: bool = False,
        samplerate: int = 44100,
        channels: int = 2,
        bits: int = 16,
    ) -> None:
        path = os.fspath(path)
        if os.access(path, os.W_OK) and not overwrite:
            raise Mp4Error("output file exists, use --overwrite option")
        try:
            self._out: BinaryIO | None = open(path, "wb")
        except OSError as exc:
            raise Mp4Error(f"{path}: {exc.strerror}") from exc
        self.path = path
        self.samplerate = samplerate
        self.channels = channels
        self.bits = bits
        self.tags = Mp4Tags()
        self.asc = b""
        self.samples = 0
        self.framesamples = 0
        self.buffersize = 0
        self.max_bitrate = 0
        self.avg_bitrate = 0
        self.frame_sizes: list[int] = []
        self.mdat_offset = 0
        self.mdat_size = 0
        self._window_size = 0
        self._window_samples = 0
        self._head_written = False

    def _stream(self) -> BinaryIO:
        if self._out is None:
            raise Mp4Error("MP4 output is closed")
        return self._out

    def _write(self, data: bytes) -> None:
        try:
            self._stream().write(data)
        except OSError as exc:
            raise Mp4Error(f"mp4 output: {exc.strerror}") from exc

    def write_head(self) -> None:
        """Write 'ftyp', 'free' and the opening of 'mdat'."""
        self._write(box("ftyp", ftyp_payload()) + box("free") + box("mdat"))
        self.mdat_offset = self._stream().tell()
        self._head_written = True

    def add_frame(self, data: bytes, samples: int) -> None:
        """Append one encoded frame covering ``samples`` audio samples."""
        data = bytes(data)
        size = len(data)
        if self.framesamples <= samples:
            self._window_samples += samples
            self._window_size += size
            if self._window_samples >= self.samplerate:
                bitrate = int(
                    8.0 * self._window_size * self.samplerate / self._window_samples
                )
                self._window_size = 0
                self._window_samples = 0
                self.max_bitrate = max(self.max_bitrate, bitrate)
            self.framesamples = samples
        self.buffersize = max(self.buffersize, size)
        self.samples += samples
        self._write(data)
        self.mdat_size += size
        self.frame_sizes.append(size)

    def write_tail(self) -> None:
        """Compute bit rates and write the 'moov' box with all metadata."""
        if self.samples:
            self.avg_bitrate = int(8.0 * self.mdat_size * self.samplerate / self.samples)
        else:
            self.avg_bitrate = 0
        if not self.max_bitrate:
            self.max_bitrate = self.avg_bitrate
        self._write(self._moov(mp4_time()))

    def _moov(self, now: int) -> bytes:
        return box("moov", box("mvhd", self._mvhd(now)) + self._trak(now) + self._udta())

    def _mvhd(self, now: int) -> bytes:
        return (
            _u8(0) + _u8(0) + _u16(0)
            + _u32s(now, now, self.samplerate, self.samples, 0x00010000)
            + _u16(0x0100) + _u16(0)
            + _u32s(0, 0)
            + _u32s(*_UNITY_MATRIX)
            + _u32s(0, 0, 0, 0, 0, 0)
            + _u32(2)
        )

    def _tkhd(self, now: int) -> bytes:
        return (
            _u8(0) + _u16(0) + _u8(1)
            + _u32s(now, now, 1, 0, self.samples, 0, 0)
            + _u16(0) + _u16(0) + _u16(0x0100) + _u16(0)
            + _u32s(*_UNITY_MATRIX)
            + _u32s(0, 0)
        )

    def _trak(self, now: int) -> bytes:
        mdhd = _u32s(0, now, now, self.samplerate, self.samples) + _u16(0) + _u16(0)
        hdlr = _u32s(0, 0) + b"soun" + _u32s(0, 0, 0) + _u8(0)
        smhd = _u32(0) + _u16(0) + _u16(0)
        dinf = box("dinf", box("dref", _u32s(0, 1) + box("url ", _u32(1))))
        minf = box("minf", box("smhd", smhd) + dinf + self._stbl())
        mdia = box("mdia", box("mdhd", mdhd) + box("hdlr", hdlr) + minf)
        return box("trak", box("tkhd", self._tkhd(now)) + mdia)

    def _mp4a(self) -> bytes:
        return (
            _u32(0) + _u16(0)
            + _u16(1) + _u16(0) + _u16(0)
            + _u32(0)
            + _u16(self.channels) + _u16(self.bits)
            + _u16(0) + _u16(0)
            + _u16(self.samplerate) + _u16(0)
        )

    def _stbl(self) -> bytes:
        esds = box("esds", esds_payload(self.asc, self.max_bitrate, self.avg_bitrate))
        stsd = box("stsd", _u32s(0, 1) + box("mp4a", self._mp4a() + esds))
        ents = len(self.frame_sizes)
        stts = box("stts", _u32s(0, 1, ents, self.framesamples))
        stsc = box("stsc", _u32s(0, 1, 1, ents, 1))
        stsz_payload = _u32s(0, 0)
        if ents:
            stsz_payload += _u32(ents) + _u32s(*self.frame_sizes)
        stsz = box("stsz", stsz_payload)
        stco = box("stco", _u32s(0, 1, self.mdat_offset))
        return box("stbl", stsd + stts + stsc + stsz + stco)

    def _udta(self) -> bytes:
        hdlr = _u32s(0, 0) + b"mdir" + b"appl" + _u32s(0, 0) + _u8(0)
        meta = _u32(0) + box("hdlr", hdlr) + box("ilst", self.tags.to_ilst())
        return box("udta", box("meta", meta))

    def close(self) -> None:
        """Fix up the 'mdat' size and close the file."""
        if self._out is None:
            return
        try:
            if self._head_written:
                self._out.seek(self.mdat_offset - 8)
                self._out.write(_u32(self.mdat_size + 8))
        finally:
            self._out.close()
            self._out = None

    def __enter__(self) -> "Mp4Writer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()