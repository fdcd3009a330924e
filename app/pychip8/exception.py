from typing import Optional


class Chip8Error(Exception):
    """Base exception for all PyChip8 machine faults."""

    def __init__(self, message: str, address: Optional[int] = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.address: Optional[int] = address


class LoadError(Chip8Error):
    """A program image could not be loaded."""


class EmptyProgram(LoadError):
    def __init__(self) -> None:
        super().__init__("Program image is empty")


class ProgramTooLarge(LoadError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"Program image is {size} bytes, limit is {limit}")
        self.size: int = size
        self.limit: int = limit


class AddressOutOfRange(Chip8Error):
    def __init__(self, address: int, pc: Optional[int] = None) -> None:
        where = f" (PC=${pc:04X})" if pc is not None else ""
        super().__init__(f"Address ${address:04X} is outside memory{where}", address)
        self.pc: Optional[int] = pc


class StackOverflow(Chip8Error):
    def __init__(self, pc: int) -> None:
        super().__init__(f"Call stack overflow at PC=${pc:04X}", pc)


class StackUnderflow(Chip8Error):
    def __init__(self, pc: int) -> None:
        super().__init__(f"Return with empty call stack at PC=${pc:04X}", pc)


class UnknownOpcode(Chip8Error):
    def __init__(self, opcode: int, pc: int) -> None:
        super().__init__(f"Unknown opcode ${opcode:04X} at PC=${pc:04X}", pc)
        self.opcode: int = opcode


class MachineHalted(Chip8Error):
    """Raised for a step on a machine stopped by an earlier fault."""

    def __init__(self, cause: Optional[Chip8Error] = None) -> None:
        reason = f": {cause.message}" if cause is not None else ""
        super().__init__(f"Machine is halted{reason}")
        self.cause: Optional[Chip8Error] = cause
