"""Flat RAM used by the CHIP-8 machine."""

from __future__ import annotations

from typing import Iterable, List, Protocol

from chip8emu.errors import InvalidAddress, MemoryOverflow

MEMORY_SIZE = 0x1000
ADDRESS_MASK = 0xFFF

DIGIT_SPRITE_START = 0x000
DIGIT_SPRITE_HEIGHT = 5
DIGIT_SPRITES = (
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
)


class Addressable(Protocol):
    """Protocol describing the byte-level accesses the CPU relies on."""

    def load8(self, address: int) -> int:
        ...

    def store8(self, address: int, value: int) -> None:
        ...

    def load16(self, address: int) -> int:
        ...


class Memory(Addressable):
    """4 KiB of byte addressable RAM with strict bounds checking."""

    length: int
    data: List[int]

    def __init__(self, length: int = MEMORY_SIZE) -> None:
        if length <= 0:
            raise ValueError("invalid memory size")
        self.length = length
        self.data = [0x00] * length

    def get_start_address(self) -> int:
        return 0x000

    def get_end_address(self) -> int:
        return self.length - 1

    def _check(self, address: int) -> int:
        if not (0 <= address < self.length):
            raise InvalidAddress(f"address out of range: 0x{address:04X}")
        return address

    def load8(self, address: int) -> int:
        return self.data[self._check(address)] & 0xFF

    def store8(self, address: int, value: int) -> None:
        self.data[self._check(address)] = value & 0xFF

    def load16(self, address: int) -> int:
        hi = self.load8(address)
        lo = self.load8(address + 1)
        return ((hi << 8) | lo) & 0xFFFF

    def load_block(self, address: int, length: int) -> List[int]:
        self.check_span(address, length)
        return self.data[address:address + length]

    def store_block(self, address: int, values: Iterable[int]) -> None:
        payload = [value & 0xFF for value in values]
        self.check_span(address, len(payload))
        self.data[address:address + len(payload)] = payload

    def check_span(self, address: int, length: int) -> None:
        if address < 0 or length < 0 or address + length > self.length:
            raise MemoryOverflow(
                f"cannot access {length} bytes from address 0x{address:04X}"
            )

    def clear(self) -> None:
        self.data = [0x00] * self.length

    def install_digit_sprites(self) -> None:
        self.store_block(DIGIT_SPRITE_START, DIGIT_SPRITES)

    def dump(self) -> List[int]:
        return list(self.data)
