"""Tests covering the CHIP-8 memory map."""

from __future__ import annotations

import pytest

from chip8emu.errors import InvalidAddress, MemoryOverflow
from chip8emu.memory import DIGIT_SPRITES, MEMORY_SIZE, Memory


def test_memory_is_zeroed_and_sized() -> None:
    memory = Memory()
    assert memory.get_start_address() == 0
    assert memory.get_end_address() == MEMORY_SIZE - 1
    assert memory.dump() == [0] * MEMORY_SIZE


def test_store_masks_to_byte_and_load16_is_big_endian() -> None:
    memory = Memory()
    memory.store8(0x200, 0x1AB)
    memory.store8(0x201, 0xCD)
    assert memory.load8(0x200) == 0xAB
    assert memory.load16(0x200) == 0xABCD


@pytest.mark.parametrize("address", [-1, MEMORY_SIZE])
def test_out_of_range_access_raises(address: int) -> None:
    memory = Memory()
    with pytest.raises(InvalidAddress):
        memory.load8(address)
    with pytest.raises(InvalidAddress):
        memory.store8(address, 0)


def test_load16_at_last_byte_raises() -> None:
    with pytest.raises(InvalidAddress):
        Memory().load16(MEMORY_SIZE - 1)


def test_block_transfers_check_the_whole_span() -> None:
    memory = Memory()
    memory.store_block(0xFFD, (1, 2, 3))
    assert memory.load_block(0xFFD, 3) == [1, 2, 3]
    with pytest.raises(MemoryOverflow):
        memory.store_block(0xFFE, (1, 2, 3))
    assert memory.load8(0xFFE) == 2
    with pytest.raises(MemoryOverflow):
        memory.load_block(0xFFF, 2)


def test_digit_sprites_install_at_zero() -> None:
    memory = Memory()
    memory.install_digit_sprites()
    assert len(DIGIT_SPRITES) == 80
    assert memory.load_block(0, 80) == list(DIGIT_SPRITES)
    memory.clear()
    assert memory.load8(0) == 0
