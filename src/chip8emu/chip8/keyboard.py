"""CHIP-8 hexadecimal keypad handling."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Dict, Iterable, List, Protocol, Set

KEY_COUNT = 16

# Host key names (pygame.key.name values) to logical keys. The QWERTY block
# 1234/qwer/asdf/zxcv stands in for the COSMAC VIP layout 123C/456D/789E/A0BF.
DEFAULT_KEYMAP: Dict[str, int] = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "q": 0x4, "w": 0x5, "e": 0x6, "r": 0xD,
    "a": 0x7, "s": 0x8, "d": 0x9, "f": 0xE,
    "z": 0xA, "x": 0x0, "c": 0xB, "v": 0xF,
}


class KeyState(Protocol):
    """Anything able to answer whether a logical key is held down."""

    def is_pressed(self, key: int) -> bool:
        ...


def _check_key(key: int) -> int:
    if not (0 <= key < KEY_COUNT):
        raise ValueError(f"keypad key out of range: {key}")
    return key


@dataclass
class Chip8Keypad:
    """Sixteen key pad whose state the host refreshes once per frame."""

    _pressed: Set[int] = field(default_factory=set)

    def press(self, key: int) -> None:
        self._pressed.add(_check_key(key))

    def release(self, key: int) -> None:
        self._pressed.discard(_check_key(key))

    def is_pressed(self, key: int) -> bool:
        return _check_key(key) in self._pressed

    def set_pressed(self, keys: Iterable[int]) -> None:
        self._pressed = {_check_key(key) for key in keys}

    def pressed_keys(self) -> List[int]:
        return sorted(self._pressed)

    def clear(self) -> None:
        self._pressed = set()


def validate_keymap(mapping: object) -> Dict[str, int]:
    if not isinstance(mapping, dict):
        raise ValueError("keymap must be a JSON object")
    result: Dict[str, int] = {}
    for name, value in mapping.items():
        if not isinstance(name, str) or not name:
            raise ValueError("keymap keys must be non-empty strings")
        if isinstance(value, str):
            try:
                value = int(value, 16)
            except ValueError:
                raise ValueError(f"invalid logical key for {name!r}: {value!r}") from None
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"invalid logical key for {name!r}: {value!r}")
        result[name.lower()] = _check_key(value)
    return result


def load_keymap_file(path: str | Path) -> Dict[str, int]:
    """Read a ``{"host key name": logical key}`` JSON mapping."""

    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"cannot read keymap {path}: {exc}") from exc
    return validate_keymap(data)


def write_keymap_template(path: str | Path) -> None:
    template = {name: f"{key:X}" for name, key in DEFAULT_KEYMAP.items()}
    Path(path).write_text(json.dumps(template, indent=2), encoding="utf-8")
