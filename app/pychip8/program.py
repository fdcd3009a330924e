from pathlib import Path
from typing import Final, Union

import numpy as np
from numpy.typing import NDArray
from returns.result import Failure, Result, Success

from .exception import EmptyProgram, LoadError, ProgramTooLarge
from .machine import MAX_PROGRAM_SIZE


class Program:
    """
    A CHIP-8 program image.

    The format has no header and no magic number: the bytes are copied
    verbatim to memory starting at 0x200, so the only checks are that the
    image is non-empty and fits in the 3584 bytes above the reserved area.
    """

    MAX_SIZE: Final[int] = MAX_PROGRAM_SIZE

    def __init__(self) -> None:
        self.file: str = ""
        self.data: NDArray[np.uint8] = np.zeros(0, dtype=np.uint8)

    def __repr__(self) -> str:
        return f"<Program file={self.file!r} size={len(self)} bytes>"

    def __len__(self) -> int:
        return len(self.data)

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray]) -> Result["Program", LoadError]:
        """
        Validate a raw program image.

        Args:
            data: Raw bytes of the program

        Returns:
            Result containing either a Program instance or the LoadError.
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            return Failure(LoadError(f"Expected bytes or bytearray, got {type(data).__name__}"))

        if len(data) == 0:
            return Failure(EmptyProgram())

        if len(data) > cls.MAX_SIZE:
            return Failure(ProgramTooLarge(len(data), cls.MAX_SIZE))

        obj = cls()
        obj.data = np.frombuffer(bytes(data), dtype=np.uint8).copy()
        return Success(obj)

    @classmethod
    def from_file(cls, filepath: Union[Path, str]) -> Result["Program", LoadError]:
        """
        Load a program image from a file path.

        Returns:
            Result containing either a Program instance or the LoadError.
        """
        try:
            with open(filepath, "rb") as f:
                data = f.read()
        except OSError as e:
            return Failure(LoadError(f"Failed to read file {filepath}: {e}"))

        def attach_file(program: "Program") -> "Program":
            program.file = str(filepath)
            return program

        return cls.from_bytes(data).map(attach_file)
