[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "reencoder"
version = "0.1.0"
description = "Index FLAC files, track their encoder version and reencode outdated ones"
requires-python = ">=3.10"
keywords = ["flac", "audio", "reencode", "libFLAC", "metaflac"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
]
dependencies = [
    "tqdm",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
reencoder = "reencoder.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["reencoder"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
