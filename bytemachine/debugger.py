"""Interactive step debugger for the byte machine."""

from __future__ import annotations

import argparse
import re
import sys
from collections.abc import Iterable
from typing import TextIO

from bytemachine.machine import ByteMachine
from bytemachine.opcodes import OPCODE_DEFS

_COMMANDS = "step, continue, break <ip>, state, quit"
_INTEGER = re.compile(r"[+-]?[0-9]+")

DEMO_PROGRAM = bytes(
    [
        0x10, 0x01, 0x13, 0x01, 0x14, 0x01, 0x10, 0x0A, 0x24, 0x17, 0x16,
        0x14, 0x01, 0x01, 0x10, 0x01, 0x30, 0x13, 0x01, 0x15, 0x04, 0xFF,
    ]
)


def _go_list(values: Iterable[object]) -> str:
    return "[" + " ".join(str(value) for value in values) + "]"


class Debugger:
    """Steps a machine, stops at breakpoints and shows its state."""

    def __init__(self, machine: ByteMachine, stdin: TextIO | None = None) -> None:
        self.machine = machine
        self.breakpoints: set[int] = set()
        self.running = True
        self._stdin = stdin

    def run(self) -> None:
        """Read commands until quit, end of input or the program halts."""
        stream = self._stdin if self._stdin is not None else sys.stdin
        print(f"ByteMachine Debugger. Commands: {_COMMANDS}")

        while self.running and not self.machine.halted:
            print(self.next_instruction())
            print("> ", end="", flush=True)
            line = stream.readline()
            if not line:
                break
            self.handle_command(line.strip())

        if self.machine.halted:
            print("Program halted.")
            print(self.state())

    def handle_command(self, line: str) -> None:
        """Carry out one debugger command."""
        args = line.split()
        if not args:
            return

        command = args[0]
        if command in ("step", "s"):
            self.step()
        elif command in ("continue", "c"):
            self.continue_execution()
        elif command in ("break", "b"):
            self._set_breakpoint(args[1:])
        elif command in ("state", "st"):
            print(self.state())
        elif command in ("quit", "q"):
            self.running = False
            print("Exiting debugger")
        else:
            print(f"Unknown command. Available: {_COMMANDS}")

    def _set_breakpoint(self, args: list[str]) -> None:
        if len(args) != 1:
            print("Usage: break <ip>")
            return
        if not _INTEGER.fullmatch(args[0]):
            print("Invalid IP address")
            return
        ip = int(args[0])
        if not 0 <= ip < len(self.machine.memory):
            print("Invalid IP address")
            return
        self.breakpoints.add(ip)
        print(f"Breakpoint set at IP {ip}")

    def step(self) -> None:
        """Execute a single instruction."""
        machine = self.machine
        if machine.halted:
            print("Program has halted")
            return
        if machine.ip >= len(machine.memory):
            print("Reached end of program")
            machine.halted = True
            return

        opcode = machine.memory[machine.ip]
        machine.ip += 1
        entry = OPCODE_DEFS.get(opcode)
        if entry is None:
            print(f"Unknown opcode: {opcode}")
            machine.halted = True
        else:
            entry.op.apply(machine)

    def continue_execution(self) -> None:
        """Run until a breakpoint, a halt or the end of memory."""
        machine = self.machine
        while not machine.halted and machine.ip < len(machine.memory):
            if machine.ip in self.breakpoints:
                print(f"Hit breakpoint at IP {machine.ip}")
                return
            self.step()

    def state(self) -> str:
        """Describe the machine and the breakpoints."""
        machine = self.machine
        breakpoints = " ".join(f"{ip}:true" for ip in sorted(self.breakpoints))
        return "\n".join(
            [
                f"IP: {machine.ip}",
                f"Stack: {_go_list(machine.stack)}",
                f"Registers: {_go_list(machine.registers)}",
                f"Halted: {'true' if machine.halted else 'false'}",
                f"Memory: {_go_list(machine.memory)}",
                f"Breakpoints: map[{breakpoints}]",
            ]
        )

    def next_instruction(self) -> str:
        """Describe the instruction at the instruction pointer."""
        machine = self.machine
        if machine.ip >= len(machine.memory):
            return "No more instructions"
        opcode = machine.memory[machine.ip]
        entry = OPCODE_DEFS.get(opcode)
        if entry is None:
            return f"Next instruction (IP {machine.ip}): Unknown opcode {opcode}"
        return f"Next instruction (IP {machine.ip}): {entry.name}"


def main(argv: list[str] | None = None) -> int:
    """Debug the built-in demonstration program interactively."""
    parser = argparse.ArgumentParser(
        prog="bmdebug", description="Step through a byte machine program"
    )
    parser.parse_args(argv)
    Debugger(ByteMachine(DEMO_PROGRAM)).run()
    return 0