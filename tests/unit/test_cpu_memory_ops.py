"""Index register, block transfer and sprite drawing behaviour."""

from __future__ import annotations

import random

import pytest

from chip8emu.chip8.keyboard import Chip8Keypad
from chip8emu.cpu import opcodes
from chip8emu.cpu.cpu import Chip8CPU
from chip8emu.errors import AddressOverflow, InvalidDigit, MemoryOverflow


@pytest.fixture
def cpu() -> Chip8CPU:
    return Chip8CPU(rng=random.Random(0))


def run(cpu: Chip8CPU, *operations) -> None:
    keypad = Chip8Keypad()
    for operation in operations:
        cpu.execute(operation, keypad)


def test_store_bcd_writes_three_digits(cpu: Chip8CPU) -> None:
    cpu.registers.v[0x3] = 254
    run(cpu, opcodes.LoadIndex(0x300), opcodes.StoreBCD(0x3))
    assert [cpu.memory.load8(0x300 + offset) for offset in range(3)] == [2, 5, 4]
    assert cpu.registers.index == 0x300


def test_store_bcd_past_memory_end_raises(cpu: Chip8CPU) -> None:
    cpu.registers.v[0x0] = 123
    run(cpu, opcodes.LoadIndex(0xFFE))
    with pytest.raises(MemoryOverflow):
        run(cpu, opcodes.StoreBCD(0x0))
    assert cpu.memory.load8(0xFFE) == 0


def test_store_and_load_registers_round_trip(cpu: Chip8CPU) -> None:
    for register in range(16):
        cpu.registers.v[register] = register * 3
    run(cpu, opcodes.LoadIndex(0x400), opcodes.StoreRegs(0x4))
    assert [cpu.memory.load8(0x400 + offset) for offset in range(6)] == [0, 3, 6, 9, 12, 0]
    assert cpu.registers.index == 0x400

    cpu.registers.v = [0xEE] * 16
    run(cpu, opcodes.LoadRegs(0x4))
    assert cpu.registers.v[:5] == [0, 3, 6, 9, 12]
    assert cpu.registers.v[5] == 0xEE


def test_store_registers_fills_memory_to_last_byte(cpu: Chip8CPU) -> None:
    cpu.registers.v = list(range(16))
    run(cpu, opcodes.LoadIndex(0xFF0), opcodes.StoreRegs(0xF))
    assert cpu.memory.load8(0xFFF) == 0xF


def test_register_transfers_past_memory_end_raise(cpu: Chip8CPU) -> None:
    run(cpu, opcodes.LoadIndex(0xFF1))
    with pytest.raises(MemoryOverflow):
        run(cpu, opcodes.StoreRegs(0xF))
    with pytest.raises(MemoryOverflow):
        run(cpu, opcodes.LoadRegs(0xF))


def test_add_to_index(cpu: Chip8CPU) -> None:
    cpu.registers.v[0x2] = 0x10
    run(cpu, opcodes.LoadIndex(0xFEF), opcodes.AddToIndex(0x2))
    assert cpu.registers.index == 0xFFF
    assert cpu.registers.v[0xF] == 0


def test_add_to_index_overflow_raises(cpu: Chip8CPU) -> None:
    cpu.registers.v[0x2] = 0x01
    run(cpu, opcodes.LoadIndex(0xFFF))
    with pytest.raises(AddressOverflow):
        run(cpu, opcodes.AddToIndex(0x2))
    assert cpu.registers.index == 0xFFF


def test_load_digit_sprite_points_at_font(cpu: Chip8CPU) -> None:
    cpu.registers.v[0x1] = 0xA
    run(cpu, opcodes.LoadDigitSprite(0x1))
    assert cpu.registers.index == 0xA * 5
    assert cpu.memory.load8(cpu.registers.index) == 0xF0


def test_load_digit_sprite_accepts_f_and_rejects_above(cpu: Chip8CPU) -> None:
    cpu.registers.v[0x1] = 0xF
    run(cpu, opcodes.LoadDigitSprite(0x1))
    assert cpu.registers.index == 75
    cpu.registers.v[0x1] = 0x10
    with pytest.raises(InvalidDigit):
        run(cpu, opcodes.LoadDigitSprite(0x1))


def test_draw_uses_register_coordinates(cpu: Chip8CPU) -> None:
    cpu.memory.store_block(0x300, (0b10000001,))
    cpu.registers.v[0x1] = 10
    cpu.registers.v[0x2] = 5
    run(cpu, opcodes.LoadIndex(0x300), opcodes.Draw(0x1, 0x2, 1))
    assert cpu.display.is_on(10, 5)
    assert cpu.display.is_on(17, 5)
    assert not cpu.display.is_on(11, 5)
    assert cpu.display.lit_count() == 2
    assert cpu.registers.v[0xF] == 0


def test_draw_twice_erases_and_reports_collision(cpu: Chip8CPU) -> None:
    cpu.registers.v[0x0] = 0
    run(cpu, opcodes.LoadDigitSprite(0x0), opcodes.Draw(0x0, 0x0, 5))
    lit = cpu.display.lit_count()
    assert lit == 14
    assert cpu.registers.v[0xF] == 0

    run(cpu, opcodes.Draw(0x0, 0x0, 5))
    assert cpu.display.lit_count() == 0
    assert cpu.registers.v[0xF] == 1


def test_draw_clear_bits_leave_pixels_alone(cpu: Chip8CPU) -> None:
    cpu.display.set_pixel(1, 0, True)
    cpu.memory.store_block(0x300, (0b10000000,))
    run(cpu, opcodes.LoadIndex(0x300), opcodes.Draw(0x0, 0x0, 1))
    assert cpu.display.is_on(0, 0)
    assert cpu.display.is_on(1, 0)
    assert cpu.registers.v[0xF] == 0


def test_draw_wraps_at_screen_edges(cpu: Chip8CPU) -> None:
    cpu.memory.store_block(0x300, (0xFF, 0xFF))
    cpu.registers.v[0x1] = 60
    cpu.registers.v[0x2] = 31
    run(cpu, opcodes.LoadIndex(0x300), opcodes.Draw(0x1, 0x2, 2))
    assert cpu.display.is_on(63, 31)
    assert cpu.display.is_on(0, 31)
    assert cpu.display.is_on(3, 0)
    assert cpu.display.lit_count() == 16


def test_draw_resets_stale_flag(cpu: Chip8CPU) -> None:
    cpu.registers.v[0xF] = 1
    cpu.memory.store_block(0x300, (0x80,))
    run(cpu, opcodes.LoadIndex(0x300), opcodes.Draw(0x0, 0x0, 1))
    assert cpu.registers.v[0xF] == 0


def test_draw_sprite_past_memory_end_raises(cpu: Chip8CPU) -> None:
    run(cpu, opcodes.LoadIndex(0xFFE))
    with pytest.raises(MemoryOverflow):
        run(cpu, opcodes.Draw(0x0, 0x0, 3))


def test_clear_screen(cpu: Chip8CPU) -> None:
    cpu.display.set_pixel(5, 5, True)
    run(cpu, opcodes.Clear())
    assert cpu.display.lit_count() == 0
    assert cpu.registers.program_counter == 0x202
