[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "m4afront"
version = "1.0.0"
description = "WAV and raw PCM input, MP4/M4A container writing and command-line option handling for an AAC encoder front end"
requires-python = ">=3.10"
dependencies = []
keywords = ["aac", "mp4", "m4a", "wav", "pcm", "audio", "itunes", "metadata"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["m4afront"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
