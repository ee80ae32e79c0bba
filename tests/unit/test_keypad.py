"""Tests for CHIP-8 keypad handling."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from chip8emu.chip8.keyboard import (
    DEFAULT_KEYMAP,
    Chip8Keypad,
    load_keymap_file,
    validate_keymap,
    write_keymap_template,
)


def test_press_and_release() -> None:
    keypad = Chip8Keypad()
    keypad.press(0xA)
    keypad.press(0x3)
    assert keypad.is_pressed(0xA)
    assert keypad.pressed_keys() == [0x3, 0xA]
    keypad.release(0xA)
    assert not keypad.is_pressed(0xA)
    keypad.release(0xA)
    keypad.clear()
    assert keypad.pressed_keys() == []


def test_set_pressed_replaces_state() -> None:
    keypad = Chip8Keypad()
    keypad.press(0x1)
    keypad.set_pressed([0x5, 0xF])
    assert keypad.pressed_keys() == [0x5, 0xF]


@pytest.mark.parametrize("key", [-1, 16])
def test_out_of_range_keys_rejected(key: int) -> None:
    keypad = Chip8Keypad()
    with pytest.raises(ValueError):
        keypad.press(key)
    with pytest.raises(ValueError):
        keypad.is_pressed(key)


def test_default_keymap_covers_every_key() -> None:
    assert sorted(DEFAULT_KEYMAP.values()) == list(range(16))
    assert DEFAULT_KEYMAP["x"] == 0x0
    assert DEFAULT_KEYMAP["v"] == 0xF


def test_validate_keymap_accepts_hex_strings_and_lowercases() -> None:
    assert validate_keymap({"Up": "5", "space": 0xA}) == {"up": 0x5, "space": 0xA}


@pytest.mark.parametrize("mapping", [[], {"a": "G"}, {"a": 16}, {"a": True}, {"": 1}])
def test_validate_keymap_rejects_bad_entries(mapping) -> None:
    with pytest.raises(ValueError):
        validate_keymap(mapping)


def test_keymap_template_round_trip(tmp_path: Path) -> None:
    target = tmp_path / "keymap.json"
    write_keymap_template(target)
    data = json.loads(target.read_text(encoding="utf-8"))
    assert data["4"] == "C"
    assert load_keymap_file(target) == DEFAULT_KEYMAP


def test_load_keymap_file_reports_bad_json(tmp_path: Path) -> None:
    target = tmp_path / "broken.json"
    target.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_keymap_file(target)
    with pytest.raises(ValueError):
        load_keymap_file(tmp_path / "missing.json")
