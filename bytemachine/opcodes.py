"""Instruction set of the byte machine: opcode semantics and the opcode table."""

from __future__ import annotations

import math
import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Protocol


class Machine(Protocol):
    """The machine state that opcodes read and change."""

    memory: bytes
    ip: int
    stack: list[int]
    registers: list[int]
    halted: bool

    def push(self, value: int) -> None: ...

    def pop(self) -> int: ...

    def peek(self) -> int: ...

    def set_register(self, register: int, value: int) -> None: ...

    def halt(self) -> None: ...


def parse_int(parts: bytes) -> int:
    """Decode a 1, 2 or 4 byte big-endian unsigned integer."""
    if len(parts) not in (1, 2, 4):
        raise ValueError(f"unsupported number of bytes to parse_int: {len(parts)}")
    return int.from_bytes(parts, "big")


def _operand(machine: Machine) -> int:
    """Read the one-byte operand at the instruction pointer."""
    return parse_int(bytes([machine.memory[machine.ip]]))


def _trunc_div(left: int, right: int) -> int:
    quotient = abs(left) // abs(right)
    return -quotient if (left < 0) != (right < 0) else quotient


def _trunc_mod(left: int, right: int) -> int:
    return left - right * _trunc_div(left, right)


class OpCode(ABC):
    """An instruction that acts on a machine."""

    @abstractmethod
    def apply(self, machine: Machine) -> None:
        """Execute the instruction; the IP already points past the opcode byte."""


class _BinaryOp(OpCode):
    """Pops the right operand, then the left, and pushes the result."""

    _compute: Callable[[int, int], int]

    def apply(self, machine: Machine) -> None:
        right = machine.pop()
        left = machine.pop()
        machine.push(int(type(self)._compute(left, right)))


class NoOp(OpCode):
    def apply(self, machine: Machine) -> None:
        pass


class Out(OpCode):
    def apply(self, machine: Machine) -> None:
        print(machine.peek())


class Push(OpCode):
    def apply(self, machine: Machine) -> None:
        machine.push(_operand(machine))
        machine.ip += 1


class Pop(OpCode):
    def apply(self, machine: Machine) -> None:
        machine.pop()


class Unimplemented(OpCode):
    def apply(self, machine: Machine) -> None:
        print(
            f"The opcode {machine.memory[machine.ip - 1]} is not currently implemented."
        )
        machine.halt()


class Store(OpCode):
    def apply(self, machine: Machine) -> None:
        register = _operand(machine)
        machine.ip += 1
        machine.set_register(register, machine.pop())


class Load(OpCode):
    def apply(self, machine: Machine) -> None:
        register = _operand(machine)
        machine.ip += 1
        machine.push(machine.registers[register])


class Jump(OpCode):
    def apply(self, machine: Machine) -> None:
        machine.ip = _operand(machine)


class JumpIfZero(OpCode):
    def apply(self, machine: Machine) -> None:
        if machine.pop() == 0:
            machine.ip = _operand(machine)
        else:
            machine.ip += 1


class JumpIfNotZero(OpCode):
    def apply(self, machine: Machine) -> None:
        if machine.pop() != 0:
            machine.ip = _operand(machine)
        else:
            machine.ip += 1


class Eq(_BinaryOp):
    def apply(self, machine: Machine) -> None:
        super().apply(machine)

    _compute = staticmethod(operator.eq)


class Ne(_BinaryOp):
    def apply(self, machine: Machine) -> None:
        super().apply(machine)

    _compute = staticmethod(operator.ne)


class Less(_BinaryOp):
    def apply(self, machine: Machine) -> None:
        super().apply(machine)

    _compute = staticmethod(operator.lt)


class LessOrEq(_BinaryOp):
    def apply(self, machine: Machine) -> None:
        super().apply(machine)

    _compute = staticmethod(operator.le)


class Greater(_BinaryOp):
    def apply(self, machine: Machine) -> None:
        super().apply(machine)

    _compute = staticmethod(operator.gt)


class GreaterOrEq(_BinaryOp):
    def apply(self, machine: Machine) -> None:
        super().apply(machine)

    _compute = staticmethod(operator.ge)


class Add(_BinaryOp):
    def apply(self, machine: Machine) -> None:
        super().apply(machine)

    _compute = staticmethod(operator.add)


class Subtract(_BinaryOp):
    def apply(self, machine: Machine) -> None:
        super().apply(machine)

    _compute = staticmethod(operator.sub)


class Multiply(_BinaryOp):
    def apply(self, machine: Machine) -> None:
        super().apply(machine)

    _compute = staticmethod(operator.mul)


class Divide(_BinaryOp):
    """Integer division truncating toward zero."""

    def apply(self, machine: Machine) -> None:
        super().apply(machine)

    _compute = staticmethod(_trunc_div)


class Modulo(_BinaryOp):
    """Remainder whose sign follows the dividend."""

    def apply(self, machine: Machine) -> None:
        super().apply(machine)

    _compute = staticmethod(_trunc_mod)


class Power(_BinaryOp):
    """Floating-point power, truncated to an integer."""

    def apply(self, machine: Machine) -> None:
        super().apply(machine)

    _compute = staticmethod(lambda base, exponent: int(math.pow(base, exponent)))


class Halt(OpCode):
    def apply(self, machine: Machine) -> None:
        machine.halt()


@dataclass(frozen=True)
class OpCodeDef:
    """Table entry describing one opcode."""

    name: str
    description: str
    op: OpCode
    arg_count: int


_COMPARE_SUFFIX = "puts 0 on register if false, 1 if true"

OPCODE_DEFS: dict[int, OpCodeDef] = {
    0x00: OpCodeDef("NO_OP", "Does nothing", NoOp(), 0),
    0x01: OpCodeDef("OUT", "Prints outs top of stack", Out(), 0),
    # 0x02 - 0x0F are reserved
    0x10: OpCodeDef("PUSH", "Puts value onto stack", Push(), 1),
    0x11: OpCodeDef("POP", "Pops value from stack", Pop(), 0),
    0x12: OpCodeDef(
        "PEEK", "Puts top of stack on register without removing", Unimplemented(), 0
    ),
    0x13: OpCodeDef("STORE", "Stores value to register", Store(), 1),
    0x14: OpCodeDef("LOAD", "Loads value from register", Load(), 1),
    0x15: OpCodeDef("JUMP", "Jumps to instruction", Jump(), 1),
    0x16: OpCodeDef("JUMP_IF_ZERO", "Jump if false", JumpIfZero(), 1),
    0x17: OpCodeDef("JUMP_IF_NOT_ZERO", "Jump if true", JumpIfNotZero(), 1),
    # 0x18 - 0x1F are reserved for more control flow
    0x20: OpCodeDef("EQ", f"Checks equality and {_COMPARE_SUFFIX}", Eq(), 0),
    0x21: OpCodeDef("NE", f"Checks NOT equal to and {_COMPARE_SUFFIX}", Ne(), 0),
    0x22: OpCodeDef("LESS", f"Checks less than and {_COMPARE_SUFFIX}", Less(), 0),
    0x23: OpCodeDef(
        "LESS_OR_EQ", f"Checks less than or equal to and {_COMPARE_SUFFIX}", LessOrEq(), 0
    ),
    0x24: OpCodeDef(
        "GREATER", f"Checks greater than and {_COMPARE_SUFFIX}", Greater(), 0
    ),
    0x25: OpCodeDef(
        "GREATER_OR_EQ",
        f"Checks greater than or equal and {_COMPARE_SUFFIX}",
        GreaterOrEq(),
        0,
    ),
    # 0x26 - 0x2F are reserved for more compare functions
    0x30: OpCodeDef(
        "ADD", "Adds two values from stack and places result back on stack", Add(), 0
    ),
    0x31: OpCodeDef(
        "SUB",
        "Subtracts two values from stack and places result back on stack "
        "(first pop is right operand)",
        Subtract(),
        0,
    ),
    0x32: OpCodeDef(
        "MUL",
        "Multiplies two values from stack and places result back on stack",
        Multiply(),
        0,
    ),
    0x33: OpCodeDef(
        "DIV",
        "Divides two values from stack and places result back on stack "
        "(first pop is right operand)",
        Divide(),
        0,
    ),
    0x34: OpCodeDef(
        "MOD",
        "Modulo two vales from stack and places result back on stack "
        "(first pop is right operand)",
        Modulo(),
        0,
    ),
    0x35: OpCodeDef(
        "POW", "Raises a value to a power (first pop is exponent)", Power(), 0
    ),
    0xFF: OpCodeDef("HALT", "Stops program", Halt(), 0),
}