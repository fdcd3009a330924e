from typing import Optional

import numpy as np
from numpy.typing import NDArray
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .interpreter import Interpreter

# Two framebuffer rows per character cell: (top, bottom) -> glyph
_HALF_BLOCKS = {
    (False, False): " ",
    (True, False): "▀",
    (False, True): "▄",
    (True, True): "█",
}


def render_framebuffer(frame: NDArray[np.bool_]) -> Text:
    """Render a (32, 64) framebuffer as half-block text, 16 lines of 64 columns."""
    text = Text()
    height = frame.shape[0]
    for y in range(0, height, 2):
        top = frame[y]
        bottom = frame[y + 1] if y + 1 < height else np.zeros_like(top)
        text.append("".join(_HALF_BLOCKS[(bool(t), bool(b))] for t, b in zip(top, bottom)))
        if y + 2 < height:
            text.append("\n")
    return text


def register_table(interpreter: Interpreter) -> Table:
    arch = interpreter.state.Architecture
    table = Table(box=box.ROUNDED, border_style="cyan", show_header=True)
    for i in range(16):
        table.add_column(f"V{i:X}", justify="center")
    table.add_row(*(f"{int(v):02X}" for v in arch.V))
    table.caption = (
        f"PC ${arch.ProgramCounter:04X}  I ${arch.I:04X}  SP {arch.StackPointer}  "
        f"DT {arch.DelayTimer}  ST {arch.SoundTimer}  cycles {arch.Cycles}"
    )
    return table


def print_machine(interpreter: Interpreter, console: Optional[Console] = None, title: str = "PyChip8") -> None:
    console = console or Console()
    console.print(Panel.fit(render_framebuffer(interpreter.display()), title=title, border_style="bright_blue"))
    console.print(register_table(interpreter))
