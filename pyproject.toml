[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "octavox"
version = "0.1.0"
description = "Zero-crossing octave-divider voice engine with a tempo-synced delay, plus OpenSound Control argument, timetag and version helpers"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "audio",
    "octaver",
    "synthesizer",
    "zero-crossing",
    "delay",
    "opensoundcontrol",
    "osc",
    "timetag",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio",
    "Topic :: Multimedia :: Sound/Audio :: Sound Synthesis",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
octavox = "octavox.engine:main"

[tool.hatch.build.targets.wheel]
packages = ["octavox"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
