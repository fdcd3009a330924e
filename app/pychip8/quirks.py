from dataclasses import dataclass
from enum import Enum


class DrawWrap(Enum):
    """
    How sprite pixels past the screen edge wrap around.

    FLAT wraps the flattened index ``x + y*64`` modulo 2048, so a sprite
    running off the right edge continues on the next row. AXIS wraps x
    modulo 64 and y modulo 32 independently, as most interpreters do.
    """

    FLAT = "flat"
    AXIS = "axis"


@dataclass
class Quirks:
    draw_wrap: DrawWrap = DrawWrap.FLAT

    @property
    def is_default(self) -> bool:
        return self == Quirks()
