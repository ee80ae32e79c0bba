"""CHIP-8 peripheral bundle shared by the engine and the host loop."""

from __future__ import annotations

from dataclasses import dataclass

from chip8emu.chip8.display import Chip8Display
from chip8emu.chip8.keyboard import Chip8Keypad
from chip8emu.chip8.sound import Chip8Beeper


@dataclass
class Chip8Hardware:
    display: Chip8Display
    keypad: Chip8Keypad
    beeper: Chip8Beeper
