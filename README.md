# bytemachine

A small stack-based virtual machine that executes one-byte opcodes, together
with an assembler for a plain-text assembly language and an interactive,
step-by-step debugger.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## The machine

`bytemachine.machine.ByteMachine` holds a program in `memory`, an instruction
pointer `ip`, a value `stack`, eight integer `registers` and a `halted` flag.
Instructions are one opcode byte, followed by one argument byte for the
instructions that take one. The instruction set lives in `bytemachine.opcodes`
(`OPCODE_DEFS` maps each byte to an `OpCodeDef` with its name, description,
operation and argument count).

| Byte | Name               | Args | Effect                                                      |
|------|--------------------|------|-------------------------------------------------------------|
| 0x00 | `NO_OP`            | 0    | does nothing                                                |
| 0x01 | `OUT`              | 0    | prints the top of the stack without removing it             |
| 0x10 | `PUSH`             | 1    | pushes the argument byte                                    |
| 0x11 | `POP`              | 0    | discards the top of the stack                               |
| 0x12 | `PEEK`             | 0    | reserved; reports that it is not implemented and halts      |
| 0x13 | `STORE`            | 1    | pops a value into the given register                        |
| 0x14 | `LOAD`             | 1    | pushes the value of the given register                      |
| 0x15 | `JUMP`             | 1    | jumps to the given address                                  |
| 0x16 | `JUMP_IF_ZERO`     | 1    | pops; jumps if the value is zero                            |
| 0x17 | `JUMP_IF_NOT_ZERO` | 1    | pops; jumps if the value is not zero                        |
| 0x20 | `EQ`               | 0    | pushes 1 if the two popped values are equal, else 0         |
| 0x21 | `NE`               | 0    | pushes 1 if they differ, else 0                             |
| 0x22 | `LESS`             | 0    | pushes 1 if left < right                                    |
| 0x23 | `LESS_OR_EQ`       | 0    | pushes 1 if left <= right                                   |
| 0x24 | `GREATER`          | 0    | pushes 1 if left > right                                    |
| 0x25 | `GREATER_OR_EQ`    | 0    | pushes 1 if left >= right                                   |
| 0x30 | `ADD`              | 0    | left + right                                                |
| 0x31 | `SUB`              | 0    | left - right (the first value popped is the right operand)  |
| 0x32 | `MUL`              | 0    | left * right                                                |
| 0x33 | `DIV`              | 0    | left / right, truncated toward zero                         |
| 0x34 | `MOD`              | 0    | remainder of left / right, with the sign of left            |
| 0x35 | `POW`              | 0    | left ** right, truncated to an integer (exponent popped first) |
| 0xFF | `HALT`             | 0    | stops the program                                           |

`run()` executes until the machine halts or the instruction pointer runs past
the end of memory; `step()` executes a single instruction. An unknown opcode
byte is reported (`unknown opcode: <byte>`) and stops the machine. Popping from
or peeking at an empty stack raises `StackUnderflowError`.

```python
from bytemachine.machine import ByteMachine

machine = ByteMachine(bytes([0x10, 0x02, 0x10, 0x05, 0x30, 0xFF]))
machine.run()
print(machine.stack)   # [7]
print(machine.halted)  # True
```

## Assembly language

One instruction per line: the mnemonic followed by its arguments, separated by
whitespace. Blank lines and lines starting with `#` are ignored. A line whose
first word ends in `:` defines a label at the current byte offset; a label can
be used wherever an argument is expected. Numeric arguments are stored as their
low byte.

```
# count from 1 to 10
PUSH 1
STORE 1

loop:
LOAD 1
PUSH 10
GREATER
JUMP_IF_NOT_ZERO end

LOAD 1
OUT
PUSH 1
ADD
STORE 1
JUMP loop

end:
HALT
```

From Python, `bytemachine.assembler.assemble` takes a string or a text stream
and returns the byte code together with a `SourceMap`, which links byte
offsets to 1-based source lines (`byte_to_line`, `line_to_byte`):

```python
import io
from bytemachine.assembler import assemble

code, source_map = assemble(io.StringIO("PUSH 5\nPUSH 10\nADD\nOUT\nHALT\n"))
print(code.hex())            # 1005100a3001ff
print(source_map.to_dict())
```

Unknown mnemonics, the wrong number of arguments and unknown labels raise
`AssemblyError`, naming the offending line.

## Command line

### `bmasm` — assemble and run

```
bmasm --in program.bm --out program.bin
bmasm --in program.bm --out program.bin --source-map
bmasm --in program.bm --run
cat program.bm | bmasm --run
```

Options:

- `-i`, `--in FILE` — assembly source to read; standard input when omitted.
- `-o`, `--out FILE` — where to write the byte code; required unless `--run` is given.
- `-r`, `--run` — run the assembled program instead of writing it out.
- `-s`, `--source-map` — also write a JSON source map, named after the output
  file with its extension replaced by `.bmsmap.json`, into the current directory.

Errors are printed and the command exits with status 1.

### `byte-machine` — run byte code

Reads a compiled program from standard input and executes it:

```
byte-machine < program.bin
```

If standard input is a terminal, it prints `No input detected. Exiting.` and
stops.

### `bmdebug` — interactive debugger

```
bmdebug
```

Before each command the debugger shows the next instruction. Commands:

- `step` / `s` — execute one instruction
- `continue` / `c` — run until a breakpoint or the program halts
- `break <ip>` / `b <ip>` — set a breakpoint at an address
- `state` / `st` — show the instruction pointer, stack, registers, memory and breakpoints
- `quit` / `q` — leave the debugger

The same session can be driven from Python with `Debugger` from
`bytemachine.debugger`, wrapping a `ByteMachine`; it accepts an optional text
stream to read commands from.

## Limitations

`bmdebug` always debugs a built-in demonstration program (a loop that prints
1 to 10); it does not load a program from a file or from standard input. To
debug your own byte code, create a `Debugger` around a `ByteMachine` in Python.
Source maps written by `bmasm` are not read by the debugger.