import numpy as np
from returns.result import Failure, Success

from conftest import make_interpreter, words
from pychip8.exception import EmptyProgram, LoadError, ProgramTooLarge
from pychip8.interpreter import Interpreter
from pychip8.program import Program


def test_largest_program_loads():
    chip8 = Interpreter()
    result = chip8.load_program(bytes([0xAB]) * 3584)
    assert result == Success(3584)
    assert chip8.state.RAM[0x200] == 0xAB
    assert chip8.state.RAM[0xFFF] == 0xAB
    assert chip8.state.pc == 0x200


def test_oversized_program_is_rejected():
    chip8 = Interpreter()
    before = chip8.state.RAM.copy()
    result = chip8.load_program(bytes(3585))
    assert isinstance(result, Failure)
    error = result.failure()
    assert isinstance(error, ProgramTooLarge)
    assert error.size == 3585
    assert error.limit == 3584
    assert np.array_equal(chip8.state.RAM, before)


def test_empty_program_is_rejected():
    result = Interpreter().load_program(b"")
    assert isinstance(result.failure(), EmptyProgram)


def test_non_bytes_is_rejected():
    result = Program.from_bytes("6005")  # type: ignore[arg-type]
    assert isinstance(result.failure(), LoadError)


def test_load_does_not_reset_machine():
    chip8 = Interpreter()
    chip8.state.V[3] = 0x42
    chip8.state.pc = 0x300
    chip8.load_program(b"\x60\x01").unwrap()
    assert chip8.state.V[3] == 0x42
    assert chip8.state.pc == 0x200


def test_reset_and_load_clears_machine():
    chip8 = Interpreter()
    chip8.state.V[3] = 0x42
    chip8.state.FrameBuffer[5] = True
    assert chip8.reset_and_load(b"\x60\x01").unwrap() == 2
    assert chip8.state.V[3] == 0
    assert not chip8.display().any()


def test_load_cancels_pending_key_wait():
    chip8 = make_interpreter([0xF20A])
    chip8.step().unwrap()
    assert chip8.state.Architecture.AwaitingKey
    chip8.load_program(words(0x6A42, 0x6B01)).unwrap()
    chip8.key_down(3)
    chip8.step().unwrap()
    assert chip8.state.V[0xA] == 0x42
    assert chip8.state.V[2] == 0
    assert chip8.state.pc == 0x202


def test_reset_and_load_failure_keeps_state():
    chip8 = Interpreter()
    chip8.state.V[3] = 0x42
    assert isinstance(chip8.reset_and_load(b"").failure(), EmptyProgram)
    assert chip8.state.V[3] == 0x42


def test_from_file(tmp_path):
    rom = tmp_path / "pong.ch8"
    rom.write_bytes(b"\x12\x00")
    program = Program.from_file(rom).unwrap()
    assert program.file == str(rom)
    assert len(program) == 2


def test_from_missing_file(tmp_path):
    result = Program.from_file(tmp_path / "missing.ch8")
    assert isinstance(result.failure(), LoadError)
    assert "Failed to read file" in result.failure().message


def test_interpreter_load_file(tmp_path):
    rom = tmp_path / "empty.ch8"
    rom.write_bytes(b"")
    chip8 = Interpreter()
    assert isinstance(chip8.load_file(rom).failure(), EmptyProgram)
    rom.write_bytes(b"\x60\x05")
    assert chip8.load_file(rom).unwrap() == 2
    assert chip8.program is not None and chip8.program.file == str(rom)
