"""
Machine state for the CHIP-8 virtual machine.

Everything the hardware exposes lives here: memory, registers, the call
stack, both timers, the framebuffer and the keypad. The state has no idea
how it is rendered or where key presses come from; the interpreter drives
it and a front end reads it.
"""

from dataclasses import dataclass, field
from typing import Final, Optional

import numpy as np
from numpy.typing import NDArray

from .exception import AddressOutOfRange, Chip8Error, StackOverflow, StackUnderflow
from .fontset import FONT_START, FONTSET
from .keypad import Keypad

MEMORY_SIZE: Final[int] = 0x1000
PROGRAM_START: Final[int] = 0x200
MAX_PROGRAM_SIZE: Final[int] = MEMORY_SIZE - PROGRAM_START
REGISTER_COUNT: Final[int] = 16
STACK_DEPTH: Final[int] = 16
SCREEN_WIDTH: Final[int] = 64
SCREEN_HEIGHT: Final[int] = 32
SCREEN_SIZE: Final[int] = SCREEN_WIDTH * SCREEN_HEIGHT


@dataclass
class Architecture:
    V: NDArray[np.uint8] = field(default_factory=lambda: np.zeros(REGISTER_COUNT, dtype=np.uint8))
    I: int = 0
    ProgramCounter: int = PROGRAM_START
    StackPointer: int = 0
    Stack: NDArray[np.uint16] = field(default_factory=lambda: np.zeros(STACK_DEPTH, dtype=np.uint16))
    DelayTimer: int = 0
    SoundTimer: int = 0
    Cycles: int = 0
    Halted: bool = False
    HaltReason: Optional[Chip8Error] = None
    AwaitingKey: bool = False
    AwaitingRegister: int = 0

    def copy(self) -> "Architecture":
        return Architecture(
            V=self.V.copy(),
            I=self.I,
            ProgramCounter=self.ProgramCounter,
            StackPointer=self.StackPointer,
            Stack=self.Stack.copy(),
            DelayTimer=self.DelayTimer,
            SoundTimer=self.SoundTimer,
            Cycles=self.Cycles,
            Halted=self.Halted,
            HaltReason=self.HaltReason,
            AwaitingKey=self.AwaitingKey,
            AwaitingRegister=self.AwaitingRegister,
        )


class MachineState:
    def __init__(self) -> None:
        self.Architecture: Architecture = Architecture()
        self.RAM: NDArray[np.uint8] = np.zeros(MEMORY_SIZE, dtype=np.uint8)
        self.FrameBuffer: NDArray[np.bool_] = np.zeros(SCREEN_SIZE, dtype=np.bool_)
        self.keypad: Keypad = Keypad()
        self._load_font_set()

    def __repr__(self) -> str:
        arch = self.Architecture
        return (
            f"<MachineState PC=${arch.ProgramCounter:04X} I=${arch.I:04X} "
            f"SP={arch.StackPointer} DT={arch.DelayTimer} ST={arch.SoundTimer} "
            f"halted={arch.Halted}>"
        )

    def _load_font_set(self) -> None:
        self.RAM[FONT_START : FONT_START + len(FONTSET)] = FONTSET

    def reset(self) -> None:
        """Return to power-on state: zeroed, font loaded, PC at 0x200."""
        self.Architecture = Architecture()
        self.RAM.fill(0)
        self.FrameBuffer.fill(False)
        self.keypad.clear()
        self._load_font_set()

    def copy(self) -> "MachineState":
        clone = MachineState.__new__(MachineState)
        clone.Architecture = self.Architecture.copy()
        clone.RAM = self.RAM.copy()
        clone.FrameBuffer = self.FrameBuffer.copy()
        clone.keypad = self.keypad.copy()
        return clone

    # registers

    @property
    def V(self) -> NDArray[np.uint8]:
        return self.Architecture.V

    @property
    def pc(self) -> int:
        return self.Architecture.ProgramCounter

    @pc.setter
    def pc(self, value: int) -> None:
        self.Architecture.ProgramCounter = value

    @property
    def I(self) -> int:
        return self.Architecture.I

    @I.setter
    def I(self, value: int) -> None:
        self.Architecture.I = value & 0xFFFF

    # memory

    def read_byte(self, address: int) -> int:
        if not (0 <= address < MEMORY_SIZE):
            raise AddressOutOfRange(address, self.pc)
        return int(self.RAM[address])

    def write_byte(self, address: int, value: int) -> None:
        if not (0 <= address < MEMORY_SIZE):
            raise AddressOutOfRange(address, self.pc)
        self.RAM[address] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read a big-endian 16-bit word."""
        if not (0 <= address and address + 1 < MEMORY_SIZE):
            raise AddressOutOfRange(address + 1, self.pc)
        return (int(self.RAM[address]) << 8) | int(self.RAM[address + 1])

    def check_range(self, address: int, length: int) -> None:
        """Raise AddressOutOfRange unless ``[address, address+length)`` is inside memory."""
        if length <= 0:
            return
        last = address + length - 1
        if address < 0 or last >= MEMORY_SIZE:
            raise AddressOutOfRange(last if address >= 0 else address, self.pc)

    # stack

    def push(self, address: int) -> None:
        arch = self.Architecture
        if arch.StackPointer >= STACK_DEPTH:
            raise StackOverflow(arch.ProgramCounter)
        arch.Stack[arch.StackPointer] = address
        arch.StackPointer += 1

    def pop(self) -> int:
        arch = self.Architecture
        if arch.StackPointer <= 0:
            raise StackUnderflow(arch.ProgramCounter)
        arch.StackPointer -= 1
        return int(arch.Stack[arch.StackPointer])

    # timers

    def tick_timers(self) -> None:
        arch = self.Architecture
        if arch.DelayTimer > 0:
            arch.DelayTimer -= 1
        if arch.SoundTimer > 0:
            arch.SoundTimer -= 1

    # display and input

    def display(self) -> NDArray[np.bool_]:
        """The framebuffer as a (32, 64) grid, valid until the next step."""
        return self.FrameBuffer.reshape(SCREEN_HEIGHT, SCREEN_WIDTH).copy()

    def clear_display(self) -> None:
        self.FrameBuffer.fill(False)

    def key_down(self, key: int) -> None:
        self.keypad.press(key)

    def key_up(self, key: int) -> None:
        self.keypad.release(key)
