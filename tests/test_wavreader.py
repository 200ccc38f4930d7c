import struct

import pytest

from m4afront.wavreader import (
    PcmFile,
    WavFormatError,
    open_pcm,
    remap_channels,
)

PCM_GUID = bytes([1, 0, 0, 0, 0, 0, 0x10, 0, 0x80, 0, 0, 0xAA, 0, 0x38, 0x9B, 0x71])
FLOAT_GUID = bytes([3]) + PCM_GUID[1:]


def chunk(label, body):
    out = label + struct.pack("<I", len(body)) + body
    if len(body) & 1:
        out += b"\0"
    return out


def fmt_body(tag, channels, rate, bits, extra=b""):
    align = channels * bits // 8
    return struct.pack("<HHIIHH", tag, channels, rate, rate * align, align, bits) + extra


def wav_bytes(fmt, data, pre=b""):
    body = b"WAVE" + pre + chunk(b"fmt ", fmt) + chunk(b"data", data)
    return b"RIFF" + struct.pack("<I", len(body)) + body


def write(tmp_path, content, name="in.wav"):
    path = tmp_path / name
    path.write_bytes(content)
    return str(path)


def extensible(channels, rate, bits, guid, cb_size=22):
    extra = struct.pack("<HHI", cb_size, bits, 0) + guid
    return fmt_body(0xFFFE, channels, rate, bits, extra)


def test_pcm16_header_fields(tmp_path):
    data = struct.pack("<4h", 1000, -1000, 0, 32767)
    path = write(tmp_path, wav_bytes(fmt_body(1, 2, 44100, 16), data))
    with open_pcm(path) as pcm:
        assert pcm.channels == 2
        assert pcm.samplebytes == 2
        assert pcm.samplerate == 44100
        assert pcm.samples == 2
        assert pcm.bigendian is False
        assert pcm.isfloat is False


def test_pcm16_float_values(tmp_path):
    data = struct.pack("<4h", 1000, -1000, 0, 32767)
    path = write(tmp_path, wav_bytes(fmt_body(1, 2, 44100, 16), data))
    with open_pcm(path) as pcm:
        assert pcm.read_float32(4) == [1000.0, -1000.0, 0.0, 32767.0]
        assert pcm.read_float32(4) == []


def test_pcm16_int24_extremes(tmp_path):
    data = struct.pack("<2h", -32768, 32767)
    path = write(tmp_path, wav_bytes(fmt_body(1, 1, 8000, 16), data))
    with open_pcm(path) as pcm:
        assert pcm.read_int24(2) == [-8388608, 0x7FFF00]


def test_pcm8_values(tmp_path):
    path = write(tmp_path, wav_bytes(fmt_body(1, 1, 8000, 8), bytes([128, 0])))
    with open_pcm(path) as pcm:
        assert pcm.read_float32(2) == [0.0, -32768.0]


def test_pcm8_int24(tmp_path):
    path = write(tmp_path, wav_bytes(fmt_body(1, 2, 8000, 8), bytes([128, 0])))
    with open_pcm(path) as pcm:
        assert pcm.read_int24(2) == [0, -8388608]


def test_pcm24_values(tmp_path):
    data = bytes([0xFF, 0xFF, 0x7F, 0x00, 0x00, 0x80])
    path = write(tmp_path, wav_bytes(fmt_body(1, 2, 48000, 24), data))
    with open_pcm(path) as pcm:
        assert pcm.read_int24(2) == [8388607, -8388608]


def test_pcm24_float_sign(tmp_path):
    data = bytes([0x00, 0x00, 0x80])
    path = write(tmp_path, wav_bytes(fmt_body(1, 1, 48000, 24), data))
    with open_pcm(path) as pcm:
        assert pcm.read_float32(1) == [-32768.0]


def test_float_wav(tmp_path):
    data = struct.pack("<2f", 0.5, -1.0)
    path = write(tmp_path, wav_bytes(fmt_body(3, 1, 44100, 32), data))
    with open_pcm(path) as pcm:
        assert pcm.isfloat is True
        assert pcm.read_float32(2) == [16384.0, -32768.0]


def test_extensible_pcm_accepted(tmp_path):
    data = struct.pack("<2h", 5, -5)
    path = write(tmp_path, wav_bytes(extensible(2, 44100, 16, PCM_GUID), data))
    with open_pcm(path) as pcm:
        assert pcm.isfloat is False
        assert pcm.read_float32(2) == [5.0, -5.0]


def test_extensible_float_accepted(tmp_path):
    data = struct.pack("<f", 0.25)
    path = write(tmp_path, wav_bytes(extensible(1, 44100, 32, FLOAT_GUID), data))
    with open_pcm(path) as pcm:
        assert pcm.isfloat is True
        assert pcm.read_float32(1) == [8192.0]


def test_extensible_unknown_guid(tmp_path):
    guid = bytes([2]) + PCM_GUID[1:]
    path = write(tmp_path, wav_bytes(extensible(2, 44100, 16, guid), b"\0" * 4))
    with pytest.raises(WavFormatError):
        open_pcm(path)


def test_extensible_too_small(tmp_path):
    path = write(tmp_path, wav_bytes(extensible(2, 44100, 16, PCM_GUID, cb_size=10), b"\0" * 4))
    with pytest.raises(WavFormatError):
        open_pcm(path)


def test_unsupported_tag(tmp_path):
    path = write(tmp_path, wav_bytes(fmt_body(2, 2, 44100, 16), b"\0" * 4))
    with pytest.raises(WavFormatError):
        open_pcm(path)


def test_not_riff(tmp_path):
    content = bytearray(wav_bytes(fmt_body(1, 2, 44100, 16), b""))
    content[:4] = b"RIFX"
    path = write(tmp_path, bytes(content))
    with pytest.raises(WavFormatError):
        open_pcm(path)


def test_not_wave(tmp_path):
    content = bytearray(wav_bytes(fmt_body(1, 2, 44100, 16), b""))
    content[8:12] = b"AVI "
    path = write(tmp_path, bytes(content))
    with pytest.raises(WavFormatError):
        open_pcm(path)


def test_format_chunk_too_small(tmp_path):
    body = b"WAVE" + chunk(b"fmt ", b"\0" * 14) + chunk(b"data", b"")
    path = write(tmp_path, b"RIFF" + struct.pack("<I", len(body)) + body)
    with pytest.raises(WavFormatError):
        open_pcm(path)


def test_zero_channels(tmp_path):
    path = write(tmp_path, wav_bytes(fmt_body(1, 0, 44100, 16), b""))
    with pytest.raises(WavFormatError):
        open_pcm(path)


def test_missing_data_chunk(tmp_path):
    body = b"WAVE" + chunk(b"fmt ", fmt_body(1, 1, 8000, 16))
    path = write(tmp_path, b"RIFF" + struct.pack("<I", len(body)) + body)
    with pytest.raises(WavFormatError):
        open_pcm(path)


def test_truncated_file(tmp_path):
    path = write(tmp_path, b"RIFF")
    with pytest.raises(WavFormatError):
        open_pcm(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        open_pcm(str(tmp_path / "absent.wav"))


def test_odd_chunk_before_fmt_is_skipped(tmp_path):
    data = struct.pack("<2h", 7, 8)
    pre = chunk(b"LIST", b"abc")
    path = write(tmp_path, wav_bytes(fmt_body(1, 2, 22050, 16), data, pre=pre))
    with open_pcm(path) as pcm:
        assert pcm.samplerate == 22050
        assert pcm.read_int24(2) == [7 << 8, 8 << 8]


def test_partial_read(tmp_path):
    data = struct.pack("<3h", 1, 2, 3)
    path = write(tmp_path, wav_bytes(fmt_body(1, 1, 8000, 16), data))
    with open_pcm(path) as pcm:
        first = pcm.read_float32(2)
        second = pcm.read_float32(10)
        assert first + second == [1.0, 2.0, 3.0]


def test_read_with_channel_map(tmp_path):
    data = struct.pack("<6h", 1, 2, 3, 4, 5, 6)
    path = write(tmp_path, wav_bytes(fmt_body(1, 3, 48000, 16), data))
    with open_pcm(path) as pcm:
        assert pcm.read_int24(6, [2, 0, 1]) == [3 << 8, 1 << 8, 2 << 8, 6 << 8, 4 << 8, 5 << 8]


def test_raw_input(tmp_path):
    data = struct.pack(">4h", 100, -100, 200, -200)
    path = write(tmp_path, data, name="in.pcm")
    with open_pcm(path, raw=True) as pcm:
        assert pcm.bigendian is True
        assert pcm.samples == len(data)
        pcm.channels = 2
        pcm.samplebytes = 2
        assert pcm.read_float32(4) == [100.0, -100.0, 200.0, -200.0]


def test_raw_little_endian_int24(tmp_path):
    data = struct.pack("<2h", -2, 3)
    path = write(tmp_path, data, name="in.pcm")
    with open_pcm(path, raw=True) as pcm:
        pcm.bigendian = False
        pcm.channels = 1
        pcm.samplebytes = 2
        assert pcm.read_int24(2) == [-2 << 8, 3 << 8]


def test_unsupported_sample_width_returns_nothing(tmp_path):
    path = write(tmp_path, b"\0" * 20, name="in.pcm")
    with open_pcm(path, raw=True) as pcm:
        pcm.channels = 1
        pcm.samplebytes = 5
        assert pcm.read_float32(2) == []
        assert pcm.read_int24(2) == []


def test_context_manager_closes(tmp_path):
    path = write(tmp_path, wav_bytes(fmt_body(1, 1, 8000, 16), b"\0\0"))
    with open_pcm(path) as pcm:
        stream = pcm.stream
        assert stream.closed is False
    assert stream.closed is True


def test_remap_channels_with_tail():
    assert remap_channels([1, 2, 3, 4, 5, 6, 7], 3, [2, 0, 1]) == [3, 1, 2, 6, 4, 5, 7]


def test_remap_identity_roundtrip():
    samples = [9, 8, 7, 6]
    assert remap_channels(samples, 2, [0, 1]) == samples


def test_remap_short_map_rejected():
    with pytest.raises(ValueError):
        remap_channels([1, 2, 3], 3, [0, 1])


def test_remap_invalid_channels():
    with pytest.raises(ValueError):
        remap_channels([1, 2], 0, [])


def test_pcmfile_close_leaves_borrowed_stream(tmp_path):
    path = tmp_path / "x.bin"
    path.write_bytes(b"")
    with open(path, "rb") as handle:
        pcm = PcmFile(stream=handle, owns_stream=False)
        pcm.close()
        assert handle.closed is False