from typing import Iterable

import pytest

from pychip8.interpreter import Interpreter


class FixedRandom:
    """Stands in for numpy's Generator and always returns the same byte."""

    def __init__(self, value: int) -> None:
        self.value = value
        self.calls = 0

    def integers(self, low: int, high: int) -> int:
        self.calls += 1
        return self.value


def words(*opcodes: int) -> bytes:
    return b"".join(op.to_bytes(2, "big") for op in opcodes)


def make_interpreter(opcodes: Iterable[int], rng=None, quirks=None) -> Interpreter:
    interpreter = Interpreter(rng=rng or FixedRandom(0xFF), quirks=quirks)
    interpreter.load_program(words(*opcodes)).unwrap()
    return interpreter


@pytest.fixture
def chip8() -> Interpreter:
    return Interpreter(rng=FixedRandom(0xFF))
