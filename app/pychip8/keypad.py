from typing import Final, List, Optional

from bitarray import bitarray  # type: ignore

KEY_COUNT: Final[int] = 16


class Keypad:
    """Represents the 16-key hexadecimal keypad (0x0-0xF) as a bit per key."""

    def __init__(self) -> None:
        self._bits = bitarray(KEY_COUNT)
        self._bits.setall(0)

    def __repr__(self) -> str:
        return f"<Keypad down={[f'{k:X}' for k in self.pressed()]}>"

    def press(self, key: int) -> None:
        """Mark ``key`` as down; keys outside 0x0-0xF are ignored."""
        if 0 <= key < KEY_COUNT:
            self._bits[key] = 1

    def release(self, key: int) -> None:
        """Mark ``key`` as up; keys outside 0x0-0xF are ignored."""
        if 0 <= key < KEY_COUNT:
            self._bits[key] = 0

    def is_down(self, key: int) -> bool:
        # Out-of-range indices can come from a register value; no such key exists.
        if not (0 <= key < KEY_COUNT):
            return False
        return bool(self._bits[key])

    def pressed(self) -> List[int]:
        return [i for i in range(KEY_COUNT) if self._bits[i]]

    def last_pressed(self) -> Optional[int]:
        """Highest-numbered key currently down, or None."""
        keys = self.pressed()
        return keys[-1] if keys else None

    def clear(self) -> None:
        self._bits.setall(0)

    def copy(self) -> "Keypad":
        clone = Keypad()
        clone._bits = self._bits.copy()
        return clone
