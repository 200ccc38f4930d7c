"""WAV/raw PCM input, MP4 container writing, option parsing and help texts for an AAC encoder front end."""

__version__ = "1.0.0"