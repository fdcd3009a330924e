import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Final, List, Optional, Tuple, Union

from rich.console import Console
from rich.logging import RichHandler

console: Final[Console] = Console()


class Chip8FileHandler(logging.Handler):
    """Append-only file handler that retries entries which failed to write."""

    def __init__(self, file_name: Union[str, Path]):
        super().__init__()
        self._file_name = Path(file_name)
        self._log_hold: List[Tuple[logging.LogRecord, Exception]] = []

    def _write_log_entry(self, log_entry: str) -> None:
        with open(self._file_name, "a", encoding="utf-8") as f:
            f.write(log_entry + "\n")

    def emit(self, record: logging.LogRecord) -> None:
        log_entry = self.format(record)

        self.acquire()
        try:
            if self._log_hold:
                still_failed = []
                for old_record, _ in self._log_hold:
                    try:
                        self._write_log_entry(self.format(old_record))
                    except OSError as e:
                        still_failed.append((old_record, e))
                self._log_hold = still_failed

            try:
                self._write_log_entry(log_entry)
            except OSError as e:
                self._log_hold.append((record, e))
        finally:
            self.release()


debug_mode: Final[bool] = "--debug" in sys.argv

level: Final[int] = logging.DEBUG if debug_mode else logging.INFO
time_format: Final[str] = "%Y-%m-%d %H:%M:%S"
log_format: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_time() -> str:
    return datetime.now().strftime("%Y-%m-%d_%H-%M-%S")


log: Final[logging.Logger] = logging.getLogger("PyChip8")
log.setLevel(level)

if not log.handlers:
    log.addHandler(
        RichHandler(
            rich_tracebacks=True,
            show_path=debug_mode,
            tracebacks_show_locals=debug_mode,
            show_level=True,
            console=console,
        )
    )


def set_debug(enabled: bool) -> None:
    """Switch the PyChip8 logger between DEBUG and INFO at runtime."""
    log.setLevel(logging.DEBUG if enabled else logging.INFO)


def enable_file_logging(log_root: Optional[Path] = None) -> Path:
    """
    Attach a file handler writing to ``<log_root>/pychip8_<timestamp>.log``.

    Returns the path of the log file.
    """
    root = (log_root or Path("log")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    path = root / f"pychip8_{get_time()}.log"
    handler = Chip8FileHandler(path)
    handler.setFormatter(logging.Formatter(log_format, datefmt=time_format))
    log.addHandler(handler)
    return path
