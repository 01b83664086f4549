"""Command-line entry points: the assembler and the bytecode runner."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from bytemachine.assembler import AssemblyError, assemble
from bytemachine.machine import ByteMachine


def replace_extension(filename: str, new_ext: str) -> str:
    """Drop the directory and extension of filename and append new_ext."""
    dot = filename.rfind(".")
    stem = filename[:dot] if dot > filename.rfind(os.sep) else filename
    stripped = stem.rstrip(os.sep)
    if not stem:
        base = "."
    elif not stripped:
        base = os.sep
    else:
        base = stripped.rsplit(os.sep, 1)[-1]
    return base + new_ext


def _assembler_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bmasm",
        description="bmasm is a cli for compiling and running bm assembly code",
    )
    parser.add_argument(
        "-o", "--out", default="", help="The name of the output file for the binary"
    )
    parser.add_argument(
        "-i",
        "--in",
        dest="input",
        default="",
        help="The name of the input file containing assembly code",
    )
    parser.add_argument(
        "-r",
        "--run",
        action="store_true",
        help="Skips writing binary to a file and just runs assembly code",
    )
    parser.add_argument(
        "-s", "--source-map", action="store_true", help="Print out source map"
    )
    parser.add_argument("args", nargs="*", help=argparse.SUPPRESS)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Assemble bm assembly to bytecode, writing it out or running it."""
    options = _assembler_parser().parse_args(argv)

    if not options.run and not options.out:
        print("error: --out is required unless --run is set")
        return 1

    if options.input:
        try:
            with open(options.input, encoding="utf-8", errors="surrogateescape") as handle:
                source = handle.read()
        except OSError as exc:
            print(f"error reading file: {exc}")
            return 1
    else:
        source = sys.stdin.read()

    try:
        program, source_map = assemble(source)
    except AssemblyError as exc:
        print(f"assembly error: {exc}")
        return 1

    if options.run:
        ByteMachine(program).run()
        return 0

    try:
        Path(options.out).write_bytes(program)
    except OSError as exc:
        print(f"error creating output file: {exc}")
        return 1

    if options.source_map:
        map_path = Path(replace_extension(options.out, ".bmsmap.json"))
        try:
            map_path.write_text(
                json.dumps(source_map.to_dict(), separators=(",", ":")),
                encoding="utf-8",
            )
        except OSError as exc:
            print(f"writing sourcemap: {exc}")
            return 1

    return 0


def run_main(argv: list[str] | None = None) -> int:
    """Run bytecode read from standard input."""
    parser = argparse.ArgumentParser(
        prog="byte_machine", description="Run byte machine bytecode from stdin"
    )
    parser.parse_args(argv)

    stdin = sys.stdin
    if stdin.isatty():
        print("No input detected. Exiting.")
        return 0

    stream = getattr(stdin, "buffer", None)
    program = stream.read() if stream is not None else stdin.read().encode()
    ByteMachine(program).run()
    return 0