from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from string import Template
from typing import Any, Callable, Dict, Final, Optional, Protocol, Union

import numpy as np
from numpy.typing import NDArray
from returns.result import Failure, Result, Success
from typing_extensions import deprecated

from .exception import Chip8Error, LoadError, MachineHalted, UnknownOpcode
from .fontset import FONT_START, GLYPH_SIZE
from .logger import log as _logger
from .machine import PROGRAM_START, SCREEN_HEIGHT, SCREEN_SIZE, SCREEN_WIDTH, MachineState
from .program import Program
from .quirks import DrawWrap, Quirks
from .util.OpCodes import OpCodes, split_nibbles

# Template
TEMPLATE: Final[Template] = Template(
    "${PC}: opcode: ${OP} ${ASM} | I: ${I} | SP: ${SP} | DT: ${DT} | ST: ${ST} | V: ${V}"
)


class RandomSource(Protocol):
    def integers(self, low: int, high: int) -> Any: ...


@dataclass
class HaltOn:
    UnknownOpcode: bool = False


@dataclass
class Debug:
    Logging: bool = False
    HaltOn: HaltOn = field(default_factory=HaltOn)


class Interpreter:
    """
    CHIP-8 fetch-decode-execute engine.

    Owns one MachineState and advances it one instruction per ``step()``.
    Faults are returned as ``Failure`` values rather than raised, and a
    faulted machine stays halted until ``reset()``. Rendering, input polling
    and pacing are left to whoever calls ``step()``.
    """

    def __init__(
        self,
        rng: Optional[RandomSource] = None,
        quirks: Optional[Quirks] = None,
    ) -> None:
        self.state: MachineState = MachineState()
        self.quirks: Quirks = quirks if quirks is not None else Quirks()
        self.rng: RandomSource = rng if rng is not None else np.random.default_rng()
        self.debug: Debug = Debug()
        self.tracelog: deque[str] = deque(maxlen=2024)
        self._events: Dict[str, deque[Callable[..., Any]]] = {}
        self.program: Optional[Program] = None

        if not self.quirks.is_default:
            _logger.info(f"Non-default quirks in effect: {self.quirks}")

    def __repr__(self) -> str:
        return f"<Interpreter {self.state!r} program={self.program!r}>"

    # events

    def on(self, event_name: str):
        def decorator(func: Callable):
            self._events.setdefault(event_name, deque()).append(func)
            return func

        return decorator

    def _emit(self, event_name: str, *args: Any, **kwargs: Any) -> None:
        """Emit an event to all registered callbacks."""
        callbacks = self._events.get(event_name)
        if not callbacks:
            return

        for callback in callbacks:
            if not callable(callback):
                raise TypeError(f"Callback {callback} is not Callable")
            callback(*args, **kwargs)

    def _tracelogger(self, opcode: int) -> None:
        arch = self.state.Architecture
        line = TEMPLATE.substitute(
            PC=f"{arch.ProgramCounter:04X}",
            OP=f"{opcode:04X}",
            ASM=f"{OpCodes.Disassemble(opcode):<16}",
            I=f"{arch.I:04X}",
            SP=f"{arch.StackPointer:X}",
            DT=f"{arch.DelayTimer:02X}",
            ST=f"{arch.SoundTimer:02X}",
            V=" ".join(f"{int(v):02X}" for v in arch.V),
        )
        self.tracelog.append(line)

    # loading

    def reset(self) -> None:
        """Reset the machine to power-on state; the loaded program is discarded."""
        _logger.info("Resetting interpreter...")
        self.state.reset()
        self.program = None
        self._emit("draw", self.state.display())

    def load_program(self, data: Union[bytes, bytearray, Program]) -> Result[int, LoadError]:
        """
        Copy a program image to 0x200 and point PC at it.

        Registers, stack, timers and the framebuffer are left alone; call
        ``reset()`` first (or use ``reset_and_load``) for a clean start.

        Returns:
            Success with the number of bytes loaded, or Failure with the LoadError.
            On failure the machine is untouched.
        """
        result = Success(data) if isinstance(data, Program) else Program.from_bytes(data)
        return result.map(self._install)

    def load_file(self, filepath: Union[Path, str]) -> Result[int, LoadError]:
        return Program.from_file(filepath).map(self._install)

    def reset_and_load(self, data: Union[bytes, bytearray, Program]) -> Result[int, LoadError]:
        checked = Success(data) if isinstance(data, Program) else Program.from_bytes(data)
        if isinstance(checked, Failure):
            return checked
        self.reset()
        return checked.map(self._install)

    def _install(self, program: Program) -> int:
        size = len(program)
        self.state.RAM[PROGRAM_START : PROGRAM_START + size] = program.data
        self.state.pc = PROGRAM_START
        self.state.Architecture.AwaitingKey = False
        self.state.Architecture.AwaitingRegister = 0
        self.program = program
        _logger.info(f"Loaded {size} bytes at ${PROGRAM_START:03X}" + (f" from {program.file}" if program.file else ""))
        return size

    # input / output

    def key_down(self, key: int) -> None:
        self.state.key_down(key)

    def key_up(self, key: int) -> None:
        self.state.key_up(key)

    def display(self) -> NDArray[np.bool_]:
        return self.state.display()

    @property
    def halted(self) -> bool:
        return self.state.Architecture.Halted

    @deprecated("Use .display() instead of .get_display()")
    def get_display(self) -> NDArray[np.bool_]:
        return self.display()

    @deprecated("Use .step() instead of .emulate_cycle()")
    def emulate_cycle(self) -> Result[int, Chip8Error]:
        return self.step()

    # execution

    def step(self) -> Result[int, Chip8Error]:
        """
        Run one fetch-decode-execute cycle, then tick both timers.

        Returns:
            Success with the executed instruction word, or Failure with the
            fault that halted the machine.
        """
        arch = self.state.Architecture
        if arch.Halted:
            return Failure(MachineHalted(arch.HaltReason))

        self._emit("before_cycle", arch.Cycles)
        try:
            if arch.AwaitingKey:
                opcode = 0xF00A | (arch.AwaitingRegister << 8)
                self._do_poll_key()
            else:
                opcode = self.state.read_word(arch.ProgramCounter)
                if self.debug.Logging:
                    self._tracelogger(opcode)
                    self._emit("tracelogger", self.tracelog[-1])
                self._do_execute_opcode(opcode)
        except Chip8Error as e:
            return self._halt(e)

        self.state.tick_timers()
        arch.Cycles += 1
        self._emit("after_cycle", arch.Cycles)
        return Success(opcode)

    def run(self, cycles: int) -> Result[int, Chip8Error]:
        """Step up to ``cycles`` times, stopping at the first fault; returns the cycles run."""
        for _ in range(cycles):
            result = self.step()
            if isinstance(result, Failure):
                return result
        return Success(cycles)

    def _halt(self, error: Chip8Error) -> Result[int, Chip8Error]:
        arch = self.state.Architecture
        arch.Halted = True
        arch.HaltReason = error
        _logger.error(f"Machine halted: {error.message}")
        self._emit("halt", error)
        return Failure(error)

    def _do_poll_key(self) -> None:
        arch = self.state.Architecture
        key = self.state.keypad.last_pressed()
        if key is None:
            return
        arch.V[arch.AwaitingRegister] = key
        arch.AwaitingKey = False
        arch.ProgramCounter += 2

    def _skip_if(self, condition: bool) -> None:
        self.state.pc += 4 if condition else 2

    def _draw_sprite(self, vx: int, vy: int, height: int) -> None:
        state = self.state
        arch = state.Architecture
        state.check_range(arch.I, height)
        collision = 0
        for row in range(height):
            sprite = state.read_byte(arch.I + row)
            for col in range(8):
                if not sprite & (0x80 >> col):
                    continue
                if self.quirks.draw_wrap is DrawWrap.AXIS:
                    index = ((vy + row) % SCREEN_HEIGHT) * SCREEN_WIDTH + (vx + col) % SCREEN_WIDTH
                else:
                    index = (vx + col + (vy + row) * SCREEN_WIDTH) % SCREEN_SIZE
                if state.FrameBuffer[index]:
                    collision = 1
                state.FrameBuffer[index] ^= True
        arch.V[0xF] = collision

    def _do_execute_opcode(self, opcode: int) -> None:
        """
        Execute one instruction word.
        """
        state = self.state
        arch = state.Architecture
        V = arch.V
        nibbles = split_nibbles(opcode)
        _, x, y, n = nibbles
        kk = opcode & 0x00FF
        nnn = opcode & 0x0FFF

        match nibbles:
            case (0x0, 0x0, 0xE, 0x0):  # CLS
                state.clear_display()
                arch.ProgramCounter += 2
                self._emit("draw", state.display())

            case (0x0, 0x0, 0xE, 0xE):  # RET
                arch.ProgramCounter = state.pop() + 2

            case (0x1, _, _, _):  # JP nnn
                arch.ProgramCounter = nnn

            case (0x2, _, _, _):  # CALL nnn
                state.push(arch.ProgramCounter)
                arch.ProgramCounter = nnn

            case (0x3, _, _, _):  # SE Vx, kk
                self._skip_if(int(V[x]) == kk)

            case (0x4, _, _, _):  # SNE Vx, kk
                self._skip_if(int(V[x]) != kk)

            case (0x5, _, _, 0x0):  # SE Vx, Vy
                self._skip_if(V[x] == V[y])

            case (0x6, _, _, _):  # LD Vx, kk
                V[x] = kk
                arch.ProgramCounter += 2

            case (0x7, _, _, _):  # ADD Vx, kk (no carry)
                V[x] = (int(V[x]) + kk) & 0xFF
                arch.ProgramCounter += 2

            case (0x8, _, _, 0x0):  # LD Vx, Vy
                V[x] = V[y]
                arch.ProgramCounter += 2

            case (0x8, _, _, 0x1):  # OR
                V[x] = V[x] | V[y]
                arch.ProgramCounter += 2

            case (0x8, _, _, 0x2):  # AND
                V[x] = V[x] & V[y]
                arch.ProgramCounter += 2

            case (0x8, _, _, 0x3):  # XOR
                V[x] = V[x] ^ V[y]
                arch.ProgramCounter += 2

            # VF is written after Vx so the flag survives when x == 0xF.
            case (0x8, _, _, 0x4):  # ADD Vx, Vy
                total = int(V[x]) + int(V[y])
                V[x] = total & 0xFF
                V[0xF] = 1 if total > 0xFF else 0
                arch.ProgramCounter += 2

            case (0x8, _, _, 0x5):  # SUB Vx, Vy
                vx, vy = int(V[x]), int(V[y])
                V[x] = (vx - vy) & 0xFF
                V[0xF] = 0 if vy > vx else 1
                arch.ProgramCounter += 2

            case (0x8, _, _, 0x6):  # SHR Vx
                vx = int(V[x])
                V[x] = vx >> 1
                V[0xF] = vx & 0x01
                arch.ProgramCounter += 2

            case (0x8, _, _, 0x7):  # SUBN Vx, Vy
                vx, vy = int(V[x]), int(V[y])
                V[x] = (vy - vx) & 0xFF
                V[0xF] = 0 if vx > vy else 1
                arch.ProgramCounter += 2

            case (0x8, _, _, 0xE):  # SHL Vx
                vx = int(V[x])
                V[x] = (vx << 1) & 0xFF
                V[0xF] = (vx & 0x80) >> 7
                arch.ProgramCounter += 2

            case (0x9, _, _, 0x0):  # SNE Vx, Vy
                self._skip_if(V[x] != V[y])

            case (0xA, _, _, _):  # LD I, nnn
                state.I = nnn
                arch.ProgramCounter += 2

            case (0xB, _, _, _):  # JP V0, nnn
                arch.ProgramCounter = nnn + int(V[0])

            case (0xC, _, _, _):  # RND Vx, kk
                V[x] = int(self.rng.integers(0, 256)) & kk
                arch.ProgramCounter += 2

            case (0xD, _, _, _):  # DRW Vx, Vy, n
                self._draw_sprite(int(V[x]), int(V[y]), n)
                arch.ProgramCounter += 2
                self._emit("draw", state.display())

            case (0xE, _, 0x9, 0xE):  # SKP Vx
                self._skip_if(state.keypad.is_down(int(V[x])))

            case (0xE, _, 0xA, 0x1):  # SKNP Vx
                self._skip_if(not state.keypad.is_down(int(V[x])))

            case (0xF, _, 0x0, 0x7):  # LD Vx, DT
                V[x] = arch.DelayTimer
                arch.ProgramCounter += 2

            case (0xF, _, 0x0, 0xA):  # LD Vx, K
                arch.AwaitingKey = True
                arch.AwaitingRegister = x
                self._do_poll_key()

            case (0xF, _, 0x1, 0x5):  # LD DT, Vx
                arch.DelayTimer = int(V[x])
                arch.ProgramCounter += 2

            case (0xF, _, 0x1, 0x8):  # LD ST, Vx
                arch.SoundTimer = int(V[x])
                arch.ProgramCounter += 2

            case (0xF, _, 0x1, 0xE):  # ADD I, Vx
                state.I = arch.I + int(V[x])
                arch.ProgramCounter += 2

            case (0xF, _, 0x2, 0x9):  # LD F, Vx
                state.I = FONT_START + int(V[x]) * GLYPH_SIZE
                arch.ProgramCounter += 2

            case (0xF, _, 0x3, 0x3):  # LD B, Vx
                state.check_range(arch.I, 3)
                vx = int(V[x])
                for offset, digit in enumerate((vx // 100, (vx // 10) % 10, vx % 10)):
                    state.write_byte(arch.I + offset, digit)
                arch.ProgramCounter += 2

            case (0xF, _, 0x5, 0x5):  # LD [I], Vx
                state.check_range(arch.I, x + 1)
                for offset in range(x + 1):
                    state.write_byte(arch.I + offset, int(V[offset]))
                arch.ProgramCounter += 2

            case (0xF, _, 0x6, 0x5):  # LD Vx, [I]
                state.check_range(arch.I, x + 1)
                for offset in range(x + 1):
                    V[offset] = state.read_byte(arch.I + offset)
                arch.ProgramCounter += 2

            case _:
                _logger.debug(f"Unmatched opcode ${opcode:04X} at PC=${arch.ProgramCounter:04X}")
                if self.debug.HaltOn.UnknownOpcode:
                    raise UnknownOpcode(opcode, arch.ProgramCounter)
                arch.ProgramCounter += 2
