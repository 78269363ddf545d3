[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "paneserve"
version = "0.1.0"
description = "Building blocks for a terminal multiplexer server: character styles, cursors, selections, plugin panes, a plugin logging pipe and pty handling"
requires-python = ">=3.10"
dependencies = []
keywords = ["terminal", "multiplexer", "ansi", "sgr", "pty", "selection"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Terminals :: Terminal Emulators/X Terminals",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["paneserve"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
