"""Encoder configuration values and the settings record passed to the encoder."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

CONFIG_VERSION = 105

MAX_CHANNELS = 64
FRAME_LEN = 1024
BLOCK_LEN_LONG = 1024
BLOCK_LEN_SHORT = 128
NSFB_LONG = 51
NSFB_SHORT = 15
MAX_SHORT_WINDOWS = 8
MAX_SCFAC_BANDS = (NSFB_SHORT + 1) * MAX_SHORT_WINDOWS

TNS_MAX_ORDER = 20
DEF_TNS_GAIN_THRESH = 1.4
DEF_TNS_COEFF_THRESH = 0.1
DEF_TNS_COEFF_RES = 4
DEF_TNS_RES_OFFSET = 3


class MpegVersion(IntEnum):
    """MPEG identifier written into the stream."""

    MPEG4 = 0
    MPEG2 = 1


class ObjectType(IntEnum):
    """AAC audio object type."""

    MAIN = 1
    LOW = 2
    SSR = 3
    LTP = 4


class InputFormat(IntEnum):
    """Layout of the PCM samples handed to the encoder."""

    NULL = 0
    PCM16 = 1
    PCM24 = 2
    PCM32 = 3
    FLOAT = 4


class ShortCtl(IntEnum):
    """Block type enforcement."""

    NORMAL = 0
    NOSHORT = 1
    NOLONG = 2


class StreamFormat(IntEnum):
    """Bitstream output format."""

    RAW = 0
    ADTS = 1


class JointMode(IntEnum):
    """Joint stereo coding mode."""

    NONE = 0
    MS = 1
    IS = 2


class WindowType(IntEnum):
    """Transform window sequence."""

    ONLY_LONG = 0
    LONG_SHORT = 1
    ONLY_SHORT = 2
    SHORT_LONG = 3


_OBJECT_NAMES = {
    ObjectType.LOW: "Low Complexity",
    ObjectType.MAIN: "Main",
    ObjectType.LTP: "LTP",
}

_JOINT_SUFFIX = {
    JointMode.MS: " + M/S",
    JointMode.IS: " + IS",
}


def _default_channel_map() -> list[int]:
    return list(range(MAX_CHANNELS))


@dataclass
class EncoderConfig:
    """Settings that control one encoder instance."""

    version: int = CONFIG_VERSION
    name: str = ""
    copyright: str = ""
    mpeg_version: MpegVersion = MpegVersion.MPEG2
    object_type: ObjectType = ObjectType.LOW
    joint_mode: JointMode = JointMode.NONE
    use_lfe: bool = False
    use_tns: bool = False
    bit_rate: int = 0
    band_width: int = 0
    quant_qual: int = 100
    output_format: StreamFormat = StreamFormat.ADTS
    input_format: InputFormat = InputFormat.FLOAT
    shortctl: ShortCtl = ShortCtl.NORMAL
    channel_map: list[int] = field(default_factory=_default_channel_map)
    pns_level: int = 0

    def __post_init__(self) -> None:
        self.mpeg_version = MpegVersion(self.mpeg_version)
        self.object_type = ObjectType(self.object_type)
        self.joint_mode = JointMode(self.joint_mode)
        self.output_format = StreamFormat(self.output_format)
        self.input_format = InputFormat(self.input_format)
        self.shortctl = ShortCtl(self.shortctl)
        self.use_lfe = bool(self.use_lfe)
        self.use_tns = bool(self.use_tns)
        if len(self.channel_map) > MAX_CHANNELS:
            raise ValueError(
                f"channel map holds {len(self.channel_map)} entries, "
                f"at most {MAX_CHANNELS} allowed"
            )

    def mpeg_number(self) -> int:
        """Return 4 or 2, the MPEG generation selected."""
        return 4 if self.mpeg_version == MpegVersion.MPEG4 else 2

    def describe(self) -> str:
        """One-line summary of object type, MPEG version and coding tools."""
        parts = [_OBJECT_NAMES.get(self.object_type, ""), f"(MPEG-{self.mpeg_number()})"]
        if self.use_tns:
            parts.append(" + TNS")
        parts.append(_JOINT_SUFFIX.get(self.joint_mode, ""))
        if self.pns_level > 0:
            parts.append(" + PNS")
        return "".join(parts)