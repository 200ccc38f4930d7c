import pytest

from m4afront.config import (
    MAX_CHANNELS,
    EncoderConfig,
    JointMode,
    MpegVersion,
    ObjectType,
    ShortCtl,
    StreamFormat,
)


def test_mpeg_number_for_each_version():
    assert EncoderConfig(mpeg_version=MpegVersion.MPEG4).mpeg_number() == 4
    assert EncoderConfig(mpeg_version=MpegVersion.MPEG2).mpeg_number() == 2


def test_integer_fields_become_enums():
    cfg = EncoderConfig(mpeg_version=0, object_type=2, joint_mode=1, output_format=0, shortctl=2)
    assert cfg.mpeg_version is MpegVersion.MPEG4
    assert cfg.object_type is ObjectType.LOW
    assert cfg.joint_mode is JointMode.MS
    assert cfg.output_format is StreamFormat.RAW
    assert cfg.shortctl is ShortCtl.NOLONG


def test_invalid_enum_value_rejected():
    with pytest.raises(ValueError):
        EncoderConfig(mpeg_version=7)
    with pytest.raises(ValueError):
        EncoderConfig(joint_mode=9)


def test_channel_map_too_long_rejected():
    with pytest.raises(ValueError):
        EncoderConfig(channel_map=list(range(MAX_CHANNELS + 1)))


def test_default_channel_map_is_identity():
    cfg = EncoderConfig()
    assert cfg.channel_map == list(range(MAX_CHANNELS))
    other = EncoderConfig()
    other.channel_map[0] = 5
    assert cfg.channel_map[0] == 0


def test_describe_plain_low_complexity():
    cfg = EncoderConfig(object_type=ObjectType.LOW, mpeg_version=MpegVersion.MPEG2)
    assert cfg.describe() == "Low Complexity(MPEG-2)"


def test_describe_with_all_tools():
    cfg = EncoderConfig(
        object_type=ObjectType.LOW,
        mpeg_version=MpegVersion.MPEG4,
        use_tns=True,
        joint_mode=JointMode.MS,
        pns_level=4,
    )
    assert cfg.describe() == "Low Complexity(MPEG-4) + TNS + M/S + PNS"


def test_describe_intensity_stereo_and_main():
    cfg = EncoderConfig(object_type=ObjectType.MAIN, joint_mode=JointMode.IS)
    assert cfg.describe() == "Main(MPEG-2) + IS"


def test_describe_ssr_has_no_name():
    cfg = EncoderConfig(object_type=ObjectType.SSR, mpeg_version=MpegVersion.MPEG4)
    assert cfg.describe() == "(MPEG-4)"


def test_zero_pns_level_not_reported():
    cfg = EncoderConfig(object_type=ObjectType.LTP, pns_level=0)
    assert "PNS" not in cfg.describe()
    assert cfg.describe().startswith("LTP")