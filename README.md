# m4afront

The pieces around an AAC encoder that deal with files and users:

- reading PCM audio from WAV files (integer PCM, IEEE float and
  `WAVE_FORMAT_EXTENSIBLE`) or from headerless raw PCM;
- writing an MP4/M4A container with its box tree, sample tables,
  elementary stream descriptor and iTunes-style metadata;
- parsing the encoder's command-line options and producing its help text.

The package has no dependencies outside the standard library and needs
Python 3.10 or later.

## Reading audio

`m4afront.wavreader.open_pcm(path, raw)` opens a WAV file (`raw=False`)
or a raw PCM stream (`raw=True`); the path `"-"` reads standard input.
A file that is not a supported WAV raises `WavFormatError`. For raw
input the caller fills in `channels`, `samplebytes` and `samplerate` on
the returned `PcmFile`; its `samples` then holds the byte length of the
file (0 for standard input).

```python
from m4afront.wavreader import open_pcm

with open_pcm("song.wav", False) as pcm:
    print(pcm.samplerate, pcm.channels, pcm.samples)
    block = pcm.read_float32(2048, None)   # floats scaled to the 16-bit range
```

`PcmFile.read_int24(count, chanmap)` returns samples as integers in the
24-bit range instead. Both readers accept 1- to 4-byte samples and
return a list, empty at the end of the data. Either takes an optional
channel map; `m4afront.media.make_channel_map(channels, center, lfe)`
builds one that moves the centre channel first and the LFE channel
last, and `remap_channels(samples, channels, chanmap)` applies a map
to a list of interleaved samples.

## Writing MP4

`m4afront.mp4writer.Mp4Writer(path, overwrite, samplerate, channels, bits)`
opens the output file. It refuses to replace an existing writable file
unless `overwrite` is true and raises `Mp4Error` when the file cannot be
created. `write_head()` writes the `ftyp`, `free` and `mdat` boxes,
`add_frame(data, samples)` appends one encoded frame, and `write_tail()`
computes the bit rates and writes the `moov` tree. `close()` (or leaving
the `with` block) patches the `mdat` size and closes the file.

```python
from m4afront.mp4writer import Mp4Writer

frames = [...]                            # encoded AAC frames as bytes
with Mp4Writer("song.m4a", False, 44100, 2, 16) as mp4:
    mp4.write_head()
    for frame in frames:
        mp4.add_frame(frame, 1024)
    mp4.asc = b"\x12\x10"                 # AudioSpecificConfig from the encoder
    mp4.tags.encoder = "my encoder"
    mp4.tags.artist = "Artist"
    mp4.write_tail()
```

Metadata lives in the writer's `tags`, an `Mp4Tags`: text fields such as
`artist`, `title`, `album` and `year`, numbers such as `trackno`,
`ntracks`, `discno`, `ndiscs`, `genre` and `compilation`, and `cover`
(a `CoverArt`). `add_custom(name, value)` adds a free-form `----` tag and
raises `Mp4Error` past 100 of them; `to_ilst()` gives the bytes of the
`ilst` box. The lower-level builders `box`, `mp4_time`, `ftyp_payload`,
`text_tag`, `data_tag`, `freeform_tag` and `esds_payload` are in
`m4afront.mp4box`.

## Command-line options

`m4afront.options.parse_args(argv)` takes the arguments after the
program name, understands the encoder's short and long options (`-q`,
`-b`, `-c`, `-o`, `-r`, `-P`, `-R`, `-B`, `-C`, `-X`, `-I`, `-w`, `-v`,
`--artist`, `--track`, `--disc`, `--genre`, `--cover-art`, `--tag`,
`--joint`, `--pns`, `--mpeg-version`, `--shortctl` and the rest) and
returns a `Settings` object. Unusable values raise `OptionsError`; the
help options and `--license` raise `HelpRequested`, whose `mode` says
which page was asked for. `Settings.resolve_output()` works out the
output file name and container from the input name and `-o`, and
`Settings.has_metadata()` tells whether any tag was given, since tags
need MP4 output.

`m4afront.helptext.help_text(mode)` returns the usage and help pages:
`"?"` for the list of help options, `"h"` for the short help, `"H"` for
every option, or a section's option name such as `"--help-qual"`.
`format_section(section, detailed)` renders one `HelpSection` from
`SECTIONS`.

## Encoder settings

`m4afront.config` holds the encoder's configuration as `EncoderConfig`
together with the enumerations it uses (`MpegVersion`, `ObjectType`,
`StreamFormat`, `JointMode`, `ShortCtl`, `InputFormat`, `WindowType`).
`EncoderConfig.describe()` gives the one-line summary of object type,
MPEG version and coding tools, such as `Low Complexity(MPEG-4) + TNS`.

## What this package does not do

It does not encode audio: there is no AAC encoder here, only the input,
container, option and configuration parts that sit around one. For the
same reason it installs no command; the option parser and help texts
are for a program that supplies its own encoder.

## Tests

Install with the `test` extra and run `pytest` from the project root.