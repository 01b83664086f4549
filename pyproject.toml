[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bytemachine"
version = "0.1.0"
description = "A small stack-based byte-code virtual machine with an assembler and an interactive debugger"
requires-python = ">=3.10"
dependencies = []
keywords = ["virtual machine", "bytecode", "assembler", "interpreter", "debugger", "stack machine"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Interpreters",
    "Topic :: Software Development :: Assemblers",
    "Topic :: Software Development :: Debuggers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
bmasm = "bytemachine.cli:main"
byte-machine = "bytemachine.cli:run_main"
bmdebug = "bytemachine.debugger:main"

[tool.hatch.build.targets.wheel]
packages = ["bytemachine"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
