from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, TypedDict

import tomllib

from ..logger import log as _log
from ..quirks import DrawWrap, Quirks

config_file: Path = Path("config.toml")


class GeneralConfig(TypedDict):
    cycle_delay_us: int
    scale: int
    foreground: List[int]
    background: List[int]


class QuirksConfig(TypedDict):
    draw_wrap: str


class DebugConfig(TypedDict):
    logging: bool
    halt_on_unknown_opcode: bool
    log_file: bool


class Config(TypedDict):
    general: GeneralConfig
    quirks: QuirksConfig
    debug: DebugConfig
    keyboard: Dict[str, str]


# CHIP-8 key (hex digit) -> pygame key name. COSMAC VIP layout:
#   1 2 3 C      1 2 3 4
#   4 5 6 D  ->  Q W E R
#   7 8 9 E      A S D F
#   A 0 B F      Z X C V
DEFAULT_CONFIG: Config = {
    "general": {
        "cycle_delay_us": 500,
        "scale": 10,
        "foreground": [255, 255, 255],
        "background": [0, 0, 0],
    },
    "quirks": {"draw_wrap": "flat"},
    "debug": {"logging": False, "halt_on_unknown_opcode": False, "log_file": False},
    "keyboard": {
        "1": "1", "2": "2", "3": "3", "C": "4",
        "4": "q", "5": "w", "6": "e", "D": "r",
        "7": "a", "8": "s", "9": "d", "E": "f",
        "A": "z", "0": "x", "B": "c", "F": "v",
    },
}


def _deep_merge(
    target: MutableMapping[str, Any],
    overrides: Mapping[str, Any],
) -> MutableMapping[str, Any]:
    for key, value in overrides.items():
        if isinstance(target.get(key), dict) and isinstance(value, dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value
    return target


def _validate_color(name: str, value: Any) -> None:
    if (
        not isinstance(value, list)
        or len(value) != 3
        or not all(isinstance(c, int) and 0 <= c <= 255 for c in value)
    ):
        raise ValueError(f"general.{name} must be a list of three integers 0-255")


def _validate_config(cfg: Config) -> None:
    general = cfg["general"]
    if not isinstance(general["cycle_delay_us"], int) or general["cycle_delay_us"] < 0:
        raise ValueError("general.cycle_delay_us must be a non-negative integer")

    if not isinstance(general["scale"], int) or general["scale"] <= 0:
        raise ValueError("general.scale must be a positive integer")

    _validate_color("foreground", general["foreground"])
    _validate_color("background", general["background"])

    if cfg["quirks"]["draw_wrap"] not in {mode.value for mode in DrawWrap}:
        raise ValueError(f"quirks.draw_wrap must be one of {[mode.value for mode in DrawWrap]}")

    for key in ("logging", "halt_on_unknown_opcode", "log_file"):
        if not isinstance(cfg["debug"][key], bool):
            raise ValueError(f"debug.{key} must be a boolean")

    for chip8_key, name in cfg["keyboard"].items():
        try:
            value = int(chip8_key, 16)
        except ValueError:
            value = -1
        if not (0 <= value <= 0xF) or len(chip8_key) != 1:
            raise ValueError(f"keyboard key {chip8_key!r} must be a single hex digit")
        if not isinstance(name, str) or not name:
            raise ValueError(f"keyboard.{chip8_key} must be a non-empty key name")


def load_config(path: Optional[Path] = None) -> Config:
    """
    Load ``config.toml`` over the defaults.

    A missing file yields the defaults; an unreadable or invalid file is
    logged and also yields the defaults.
    """
    path = path if path is not None else config_file
    if not path.exists():
        return deepcopy(DEFAULT_CONFIG)

    config = deepcopy(DEFAULT_CONFIG)

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)

        _deep_merge(config, data)
        _validate_config(config)

    except (OSError, tomllib.TOMLDecodeError, ValueError, TypeError, KeyError) as e:
        _log.error(f"Failed to load config: {e}", exc_info=(type(e), e, e.__traceback__))
        return deepcopy(DEFAULT_CONFIG)

    return config


def quirks_from_config(cfg: Config) -> Quirks:
    return Quirks(draw_wrap=DrawWrap(cfg["quirks"]["draw_wrap"]))


def key_map_from_config(cfg: Config) -> Dict[str, int]:
    """Key name -> CHIP-8 key index, lower-cased for lookup."""
    return {name.lower(): int(chip8_key, 16) for chip8_key, name in cfg["keyboard"].items()}
