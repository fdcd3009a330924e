"""
pygame window driver.

Polls keyboard events into the interpreter, steps it at the configured
cadence and blits the framebuffer whenever a draw happened. Needs the
``gui`` extra.
"""

from os import environ

environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"

from typing import Dict, Optional

import numpy as np
import pygame
from returns.result import Failure

from .interpreter import Interpreter
from .logger import console
from .logger import log as _log
from .machine import SCREEN_HEIGHT, SCREEN_WIDTH
from .util.config import Config, key_map_from_config
from .util.timer import Timer, pace


def build_key_mapping(cfg: Config) -> Dict[int, int]:
    """pygame key code -> CHIP-8 key index; unknown key names are skipped with a warning."""
    mapping: Dict[int, int] = {}
    for name, chip8_key in key_map_from_config(cfg).items():
        try:
            mapping[pygame.key.key_code(name)] = chip8_key
        except ValueError:
            _log.warning(f"Unknown key name {name!r} for CHIP-8 key {chip8_key:X}")
    return mapping


class Window:
    def __init__(self, interpreter: Interpreter, cfg: Config, title: str = "PyChip8") -> None:
        self.interpreter = interpreter
        self.scale: int = cfg["general"]["scale"]
        self.foreground = np.array(cfg["general"]["foreground"], dtype=np.uint8)
        self.background = np.array(cfg["general"]["background"], dtype=np.uint8)
        self.cycle_delay: float = cfg["general"]["cycle_delay_us"] / 1_000_000
        self.title = title

        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH * self.scale, SCREEN_HEIGHT * self.scale))
        pygame.display.set_caption(title)
        self.key_mapping = build_key_mapping(cfg)

        self.running: bool = False
        self.paused: bool = False
        self._dirty: bool = True

        @interpreter.on("draw")
        def _on_draw(_frame) -> None:
            self._dirty = True

    def _blit(self) -> None:
        frame = self.interpreter.display()
        rgb = np.where(frame[..., None], self.foreground, self.background).astype(np.uint8)
        surf = pygame.surfarray.make_surface(rgb.swapaxes(0, 1))
        surf = pygame.transform.scale(surf, (SCREEN_WIDTH * self.scale, SCREEN_HEIGHT * self.scale))
        self.screen.blit(surf, (0, 0))
        pygame.display.flip()
        self._dirty = False

    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key in self.key_mapping:
                    self.interpreter.key_down(self.key_mapping[event.key])
                elif event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_p:
                    self.paused = not self.paused
                    pygame.display.set_caption(self.title + (" [PAUSED]" if self.paused else ""))
                elif event.key == pygame.K_F5:
                    console.print("[bold red]Resetting...[/bold red]")
                    program = self.interpreter.program
                    if program is not None:
                        self.interpreter.reset_and_load(program)
            elif event.type == pygame.KEYUP:
                if event.key in self.key_mapping:
                    self.interpreter.key_up(self.key_mapping[event.key])

    def run(self, max_cycles: Optional[int] = None) -> int:
        """Main loop; returns 0 on a clean quit, 2 if the machine faulted."""
        self.running = True
        exit_code = 0
        cycles = 0
        timer = Timer()
        timer.start()

        while self.running:
            self._handle_events()
            if not self.paused:
                result = self.interpreter.step()
                if isinstance(result, Failure):
                    console.print(f"[bold red]Machine fault:[/bold red] {result.failure().message}")
                    exit_code = 2
                    self.running = False
                cycles += 1
                if max_cycles is not None and cycles >= max_cycles:
                    self.running = False
            if self._dirty:
                self._blit()
            pace(timer, self.cycle_delay)

        pygame.quit()
        return exit_code
