"""The byte machine: a stack machine with eight registers."""

from __future__ import annotations

from dataclasses import dataclass, field

from bytemachine.opcodes import OPCODE_DEFS

REGISTER_COUNT = 8


class StackUnderflowError(IndexError):
    """Raised when reading from an empty stack."""


@dataclass
class ByteMachine:
    """Executes a program held in memory, one opcode byte at a time."""

    memory: bytes = b""
    ip: int = 0
    stack: list[int] = field(default_factory=list)
    registers: list[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    halted: bool = False

    def __post_init__(self) -> None:
        self.memory = bytes(self.memory)
        if len(self.registers) != REGISTER_COUNT:
            raise ValueError(f"expected {REGISTER_COUNT} registers")

    def run(self) -> None:
        """Execute until the machine halts or runs off the end of memory."""
        while self.ip < len(self.memory):
            self.step()
            if self.halted:
                break

    def step(self) -> None:
        """Execute the instruction at the instruction pointer."""
        if self.ip >= len(self.memory):
            raise IndexError("instruction pointer is past the end of memory")
        opcode = self.memory[self.ip]
        self.ip += 1
        entry = OPCODE_DEFS.get(opcode)
        if entry is None:
            print(f"unknown opcode: {opcode}")
            self.halted = True
        else:
            entry.op.apply(self)

    def push(self, value: int) -> None:
        self.stack.append(value)

    def pop(self) -> int:
        if not self.stack:
            raise StackUnderflowError("pop from empty stack")
        return self.stack.pop()

    def peek(self) -> int:
        if not self.stack:
            raise StackUnderflowError("peek at empty stack")
        return self.stack[-1]

    def set_register(self, register: int, value: int) -> None:
        if not 0 <= register < REGISTER_COUNT:
            raise IndexError(f"register {register} out of range")
        self.registers[register] = value

    def halt(self) -> None:
        self.halted = True