import pytest

from bytemachine.machine import ByteMachine, StackUnderflowError


def _run(program):
    machine = ByteMachine(bytes(program))
    machine.run()
    return machine


def test_math_program():
    machine = _run(
        [0x10, 0x02, 0x10, 0x05, 0x30, 0x10, 0x03, 0x10, 0x01, 0x31, 0x32, 0xFF]
    )
    assert machine.halted is True
    assert machine.stack == [14]


def test_simple_branching():
    machine = _run([0x10, 0x00, 0x16, 0x06, 0x10, 0x63, 0x10, 0x2A, 0xFF])
    assert machine.halted is True
    assert machine.stack == [42]


def test_compare_and_branch():
    machine = _run(
        [0x10, 0x07, 0x10, 0x05, 0x24, 0x17, 0x09, 0x10, 0x63, 0x10, 0x2A, 0xFF]
    )
    assert machine.halted is True
    assert machine.stack == [42]


def test_store_and_load_math():
    machine = _run(
        [0x10, 0x06, 0x13, 0x00, 0x10, 0x04, 0x13, 0x01, 0x14, 0x00, 0x14, 0x01, 0x32, 0xFF]
    )
    assert machine.halted is True
    assert machine.stack == [24]


def test_loop():
    machine = _run(
        [
            0x10, 0x03, 0x13, 0x00, 0x14, 0x00, 0x10, 0x00, 0x20, 0x17, 0x14,
            0x14, 0x00, 0x10, 0x01, 0x31, 0x13, 0x00, 0x15, 0x04, 0xFF,
        ]
    )
    assert machine.halted is True
    assert machine.registers[0] == 0


def test_nested_looping():
    machine = _run(
        [
            0x10, 0x02, 0x13, 0x00,
            0x14, 0x00, 0x10, 0x00, 0x20, 0x17, 0x28,
            0x10, 0x03, 0x13, 0x01,
            0x14, 0x01, 0x10, 0x00, 0x20, 0x17, 0x1F,
            0x14, 0x01, 0x10, 0x01, 0x31, 0x13, 0x01, 0x15, 0x0F,
            0x14, 0x00, 0x10, 0x01, 0x31, 0x13, 0x00, 0x15, 0x04,
            0xFF,
        ]
    )
    assert machine.halted is True
    assert machine.registers[0] == 0
    assert machine.registers[1] == 0


def test_loop_with_inc_prints_and_runs_off_end(capsys):
    machine = _run(
        [
            0x10, 0x01, 0x13, 0x01, 0x14, 0x01, 0x10, 0x0A, 0x24, 0x17, 0x16,
            0x14, 0x01, 0x01, 0x10, 0x01, 0x30, 0x13, 0x01, 0x15, 0x04, 0xFF,
        ]
    )
    assert capsys.readouterr().out == "".join(f"{n}\n" for n in range(1, 11))
    assert machine.registers[1] == 11
    assert machine.halted is False


def test_unknown_opcode_halts(capsys):
    machine = _run([0x10, 0x01, 0x02, 0x10, 0x05])
    assert capsys.readouterr().out == "unknown opcode: 2\n"
    assert machine.halted is True
    assert machine.stack == [1]
    assert machine.ip == 3


def test_step_executes_one_instruction():
    machine = ByteMachine(bytes([0x10, 0x07, 0xFF]))
    machine.step()
    assert machine.stack == [7]
    assert machine.ip == 2
    assert machine.halted is False


def test_step_past_end_raises():
    machine = ByteMachine(b"", ip=0)
    with pytest.raises(IndexError):
        machine.step()


def test_push_pop_peek():
    machine = ByteMachine()
    machine.push(3)
    machine.push(4)
    assert machine.peek() == 4
    assert machine.pop() == 4
    assert machine.stack == [3]


def test_pop_empty_raises():
    with pytest.raises(StackUnderflowError):
        ByteMachine().pop()


def test_peek_empty_raises():
    with pytest.raises(StackUnderflowError):
        ByteMachine().peek()


def test_set_register():
    machine = ByteMachine()
    machine.set_register(7, 99)
    assert machine.registers == [0] * 7 + [99]


def test_set_register_out_of_range():
    with pytest.raises(IndexError):
        ByteMachine().set_register(8, 1)


def test_halt_sets_flag():
    machine = ByteMachine()
    machine.halt()
    assert machine.halted is True


def test_wrong_register_count_rejected():
    with pytest.raises(ValueError):
        ByteMachine(registers=[0, 0])