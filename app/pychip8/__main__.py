import argparse
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
from returns.result import Failure
from rich.traceback import install

from .__version__ import __version_string__
from .interpreter import Interpreter
from .logger import console, enable_file_logging, set_debug
from .logger import log as _log
from .terminal import print_machine
from .util.config import load_config, quirks_from_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pychip8", description="CHIP-8 interpreter")
    parser.add_argument("rom", type=Path, help="program image to load at 0x200")
    parser.add_argument("--headless", action="store_true", help="run without a window and print the screen")
    parser.add_argument("--cycles", type=int, default=None, help="stop after this many cycles")
    parser.add_argument("--seed", type=int, default=None, help="seed for the RND instruction")
    parser.add_argument("--config", type=Path, default=None, help="path to config.toml")
    parser.add_argument("--trace", action="store_true", help="log every executed instruction")
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version_string__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    install()
    args = build_parser().parse_args(argv)
    set_debug(args.debug)

    cfg = load_config(args.config)
    if cfg["debug"]["log_file"]:
        _log.info(f"Logging to {enable_file_logging()}")

    interpreter = Interpreter(rng=np.random.default_rng(args.seed), quirks=quirks_from_config(cfg))
    interpreter.debug.Logging = args.trace or cfg["debug"]["logging"]
    interpreter.debug.HaltOn.UnknownOpcode = cfg["debug"]["halt_on_unknown_opcode"]

    if interpreter.debug.Logging:

        @interpreter.on("tracelogger")
        def _trace(line: str) -> None:
            _log.debug(line)

    loaded = interpreter.load_file(args.rom)
    if isinstance(loaded, Failure):
        console.print(f"[bold red]Failed to load program:[/bold red] {loaded.failure().message}")
        return 1

    if args.headless:
        cycles = args.cycles if args.cycles is not None else 1000
        result = interpreter.run(cycles)
        print_machine(interpreter, console, title=args.rom.name)
        if isinstance(result, Failure):
            console.print(f"[bold red]Machine fault:[/bold red] {result.failure().message}")
            return 2
        return 0

    try:
        from .frontend import Window
    except ImportError as e:
        console.print(f"[bold red]Window mode needs pygame (pip install pychip8[gui]):[/bold red] {e}")
        return 1

    return Window(interpreter, cfg, title=f"PyChip8 - {args.rom.name}").run(args.cycles)


if __name__ == "__main__":
    sys.exit(main())
