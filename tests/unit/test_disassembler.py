"""Tests for mnemonic rendering."""

from __future__ import annotations

import pytest

from chip8emu.cpu import opcodes
from chip8emu.cpu.disassembler import disassemble, format_operation, format_word
from chip8emu.memory import Memory


@pytest.mark.parametrize(
    "word, text",
    [
        (0x00E0, "CLS"),
        (0x00EE, "RET"),
        (0x1234, "JP 0x234"),
        (0x2ABC, "CALL 0xABC"),
        (0x3A42, "SE VA, 0x42"),
        (0x8125, "SUB V1, V2"),
        (0x8127, "SUBN V1, V2"),
        (0x8306, "SHR V3"),
        (0xB300, "JP V0, 0x300"),
        (0xD125, "DRW V1, V2, 5"),
        (0xE29E, "SKP V2"),
        (0xF30A, "LD V3, K"),
        (0xF833, "LD B, V8"),
        (0xF955, "LD [I], V9"),
        (0xFA65, "LD VA, [I]"),
    ],
)
def test_format_word(word: int, text: str) -> None:
    assert format_word(word) == text


def test_unknown_word_renders_as_data() -> None:
    assert format_word(0x5001) == "DW 0x5001"


def test_format_operation_rejects_foreign_objects() -> None:
    with pytest.raises(TypeError):
        format_operation("CLS")  # type: ignore[arg-type]


def test_every_operation_has_a_mnemonic() -> None:
    for word in (0x00E0, 0x00EE, 0x1000, 0x2000, 0x3000, 0x4000, 0x5000, 0x6000, 0x7000,
                 0x8000, 0x8001, 0x8002, 0x8003, 0x8004, 0x8005, 0x8006, 0x8007, 0x800E,
                 0x9000, 0xA000, 0xB000, 0xC000, 0xD000, 0xE09E, 0xE0A1, 0xF007, 0xF00A,
                 0xF015, 0xF018, 0xF01E, 0xF029, 0xF033, 0xF055, 0xF065):
        assert not format_word(word).startswith("DW")
    assert isinstance(opcodes.decode(0xF065), opcodes.LoadRegs)


def test_disassemble_walks_words() -> None:
    memory = Memory()
    memory.store_block(0x200, (0x60, 0x01, 0x12, 0x00, 0xFF, 0xFF))
    listing = list(disassemble(memory, 0x200, 0x205))
    assert listing == [
        (0x200, 0x6001, "LD V0, 0x01"),
        (0x202, 0x1200, "JP 0x200"),
        (0x204, 0xFFFF, "DW 0xFFFF"),
    ]


def test_disassemble_stops_before_partial_word() -> None:
    memory = Memory()
    assert [entry[0] for entry in disassemble(memory, 0xFFC, 0xFFF)] == [0xFFC, 0xFFE]
    assert list(disassemble(memory, 0x200, 0x200)) == []
