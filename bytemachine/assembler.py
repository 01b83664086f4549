"""Two-pass assembler turning byte machine assembly text into bytecode."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TextIO

from bytemachine.opcodes import OPCODE_DEFS, OpCodeDef

_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


class AssemblyError(ValueError):
    """Raised when assembly source cannot be turned into bytecode."""


@dataclass
class SourceMap:
    """Links bytecode offsets to the 1-based source lines they came from."""

    byte_to_line: dict[int, int] = field(default_factory=dict)
    line_to_byte: dict[int, list[int]] = field(default_factory=dict)

    def _record(self, offset: int, line: int) -> None:
        self.byte_to_line[offset] = line
        self.line_to_byte.setdefault(line, []).append(offset)

    def to_dict(self) -> dict[str, dict[str, object]]:
        """Return a JSON-ready mapping with string keys in sorted order."""

        def by_text(item: tuple[int, object]) -> str:
            return str(item[0])

        return {
            "ByteToLine": {
                str(offset): line
                for offset, line in sorted(self.byte_to_line.items(), key=by_text)
            },
            "LineToByte": {
                str(line): list(offsets)
                for line, offsets in sorted(self.line_to_byte.items(), key=by_text)
            },
        }


def _opcodes_by_name() -> dict[str, tuple[int, OpCodeDef]]:
    return {entry.name: (code, entry) for code, entry in OPCODE_DEFS.items()}


def _parse_number(token: str) -> int | None:
    if not _INTEGER.fullmatch(token):
        return None
    value = int(token)
    if not _INT64_MIN <= value <= _INT64_MAX:
        return None
    return value


def _instructions(lines: list[str]) -> Iterator[tuple[int, list[str]]]:
    """Yield (line number, tokens) for every line that is not blank or a comment."""
    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        tokens = stripped.split()
        if tokens:
            yield number, tokens


def _label_offsets(
    lines: list[str], ops: dict[str, tuple[int, OpCodeDef]]
) -> dict[str, int]:
    labels: dict[str, int] = {}
    offset = 0
    for _, tokens in _instructions(lines):
        first = tokens[0]
        if first.endswith(":"):
            labels[first[:-1]] = offset
            continue
        found = ops.get(first)
        if found is None:
            raise AssemblyError(
                f"unknown opcode '{first}' while building label map"
            )
        offset += 1 + found[1].arg_count
    return labels


def _split_lines(text: str) -> list[str]:
    lines = [line.removesuffix("\r") for line in text.split("\n")]
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def assemble(source: str | TextIO) -> tuple[bytes, SourceMap]:
    """Assemble source text (or a readable text stream) into bytecode and a source map."""
    text = source if isinstance(source, str) else source.read()
    lines = _split_lines(text)
    ops = _opcodes_by_name()
    labels = _label_offsets(lines, ops)

    output = bytearray()
    source_map = SourceMap()

    for line_number, tokens in _instructions(lines):
        name = tokens[0]
        if name.endswith(":"):
            continue

        found = ops.get(name)
        if found is None:
            raise AssemblyError(f"unknown opcode '{name}' on line {line_number}")
        code, entry = found

        source_map._record(len(output), line_number)
        output.append(code)

        args = tokens[1:]
        if len(args) != entry.arg_count:
            raise AssemblyError(
                f"expected {entry.arg_count} args but got {len(args)} "
                f"on line: {line_number}"
            )

        for arg in args:
            value = _parse_number(arg)
            if value is None:
                if arg not in labels:
                    raise AssemblyError(
                        f"unknown label or invalid argument '{arg}' on line {line_number}"
                    )
                value = labels[arg]
            source_map._record(len(output), line_number)
            output.append(value & 0xFF)

    return bytes(output), source_map