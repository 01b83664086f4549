import io
import json

import pytest

from bytemachine.assembler import AssemblyError, SourceMap, assemble


SIMPLE_ADD = """PUSH 5
		PUSH 10
		ADD
		OUT
		HALT
	"""

LOOPING = """
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

		"""


def test_simple_add_program():
    output, source_map = assemble(SIMPLE_ADD)

    assert output == bytes([0x10, 0x05, 0x10, 0x0A, 0x30, 0x01, 0xFF])
    assert len(source_map.byte_to_line) == 7
    assert len(source_map.line_to_byte) == 5
    assert source_map.byte_to_line[0] == 1
    assert source_map.byte_to_line[1] == 1
    assert source_map.byte_to_line[2] == 2
    assert source_map.byte_to_line[3] == 2
    assert source_map.byte_to_line[4] == 3


def test_bad_opcode():
    with pytest.raises(AssemblyError):
        assemble("FROBNICATE")


def test_not_enough_args():
    with pytest.raises(AssemblyError):
        assemble("PUSH")


def test_too_many_args():
    with pytest.raises(AssemblyError):
        assemble("PUSH 10 11")


def test_looping():
    expected = bytes(
        [
            0x10, 0x01,
            0x13, 0x01,
            0x14, 0x01,
            0x10, 0x0A,
            0x24, 0x17,
            0x15, 0x14,
            0x01, 0x01,
            0x10, 0x01,
            0x30, 0x13,
            0x01, 0x15,
            0x04, 0xFF,
        ]
    )

    output, source_map = assemble(LOOPING)

    assert output == expected
    assert len(source_map.byte_to_line) == 22
    assert len(source_map.line_to_byte) == 13


def test_accepts_text_stream():
    from_stream, _ = assemble(io.StringIO(SIMPLE_ADD))
    from_text, _ = assemble(SIMPLE_ADD)
    assert from_stream == from_text


def test_comments_and_blank_lines_are_skipped():
    output, source_map = assemble("# comment\n\n   # indented comment\nHALT\n")
    assert output == bytes([0xFF])
    assert source_map.byte_to_line == {0: 4}


def test_unknown_label_reports_argument_and_line():
    with pytest.raises(AssemblyError, match="'nowhere' on line 2"):
        assemble("PUSH 1\nJUMP nowhere\n")


def test_unknown_opcode_found_in_first_pass():
    with pytest.raises(AssemblyError, match="while building label map"):
        assemble("PUSH 1\nFROBNICATE\n")


def test_arg_count_error_message():
    with pytest.raises(AssemblyError, match="expected 1 args but got 0 on line: 1"):
        assemble("PUSH")


def test_numbers_wrap_to_a_byte():
    output, _ = assemble("PUSH -1\nPUSH 256\n")
    assert output == bytes([0x10, 0xFF, 0x10, 0x00])


def test_label_before_code_resolves_to_zero():
    output, _ = assemble("start:\nJUMP start\n")
    assert output == bytes([0x15, 0x00])


def test_windows_line_endings():
    unix, _ = assemble("PUSH 5\nHALT\n")
    windows, _ = assemble("PUSH 5\r\nHALT\r\n")
    assert unix == windows


def test_line_to_byte_lists_every_offset_of_a_line():
    _, source_map = assemble(SIMPLE_ADD)
    assert source_map.line_to_byte[1] == [0, 1]
    assert source_map.line_to_byte[3] == [4]


def test_source_map_dict_round_trips_through_json():
    _, source_map = assemble(LOOPING)
    data = json.loads(json.dumps(source_map.to_dict()))
    assert {int(k): v for k, v in data["ByteToLine"].items()} == source_map.byte_to_line
    assert {
        int(k): v for k, v in data["LineToByte"].items()
    } == source_map.line_to_byte


def test_source_map_dict_keys_sorted_as_text():
    source_map = SourceMap(byte_to_line={2: 1, 10: 2}, line_to_byte={1: [2], 2: [10]})
    assert list(source_map.to_dict()["ByteToLine"]) == ["10", "2"]