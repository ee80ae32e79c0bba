"""Mnemonic rendering for decoded CHIP-8 operations."""

from __future__ import annotations

from typing import Callable, Dict, Iterator, Tuple

from chip8emu.cpu import opcodes
from chip8emu.errors import InvalidOpcode
from chip8emu.memory import Addressable

_FORMATTERS: Dict[type, Callable] = {
    opcodes.Clear: lambda op: "CLS",
    opcodes.Return: lambda op: "RET",
    opcodes.Jump: lambda op: f"JP 0x{op.addr:03X}",
    opcodes.Call: lambda op: f"CALL 0x{op.addr:03X}",
    opcodes.SkipEq: lambda op: f"SE V{op.x:X}, 0x{op.byte:02X}",
    opcodes.SkipNeq: lambda op: f"SNE V{op.x:X}, 0x{op.byte:02X}",
    opcodes.SkipRegEq: lambda op: f"SE V{op.x:X}, V{op.y:X}",
    opcodes.Load: lambda op: f"LD V{op.x:X}, 0x{op.byte:02X}",
    opcodes.Add: lambda op: f"ADD V{op.x:X}, 0x{op.byte:02X}",
    opcodes.LoadReg: lambda op: f"LD V{op.x:X}, V{op.y:X}",
    opcodes.Or: lambda op: f"OR V{op.x:X}, V{op.y:X}",
    opcodes.And: lambda op: f"AND V{op.x:X}, V{op.y:X}",
    opcodes.Xor: lambda op: f"XOR V{op.x:X}, V{op.y:X}",
    opcodes.AddReg: lambda op: f"ADD V{op.x:X}, V{op.y:X}",
    opcodes.Sub: lambda op: f"SUB V{op.x:X}, V{op.y:X}",
    opcodes.ShiftRight: lambda op: f"SHR V{op.x:X}",
    opcodes.SubReverse: lambda op: f"SUBN V{op.x:X}, V{op.y:X}",
    opcodes.ShiftLeft: lambda op: f"SHL V{op.x:X}",
    opcodes.SkipRegNeq: lambda op: f"SNE V{op.x:X}, V{op.y:X}",
    opcodes.LoadIndex: lambda op: f"LD I, 0x{op.addr:03X}",
    opcodes.JumpIndexed: lambda op: f"JP V0, 0x{op.addr:03X}",
    opcodes.Random: lambda op: f"RND V{op.x:X}, 0x{op.byte:02X}",
    opcodes.Draw: lambda op: f"DRW V{op.x:X}, V{op.y:X}, {op.n}",
    opcodes.SkipKeyPressed: lambda op: f"SKP V{op.x:X}",
    opcodes.SkipKeyNotPressed: lambda op: f"SKNP V{op.x:X}",
    opcodes.GetDelay: lambda op: f"LD V{op.x:X}, DT",
    opcodes.WaitKey: lambda op: f"LD V{op.x:X}, K",
    opcodes.SetDelay: lambda op: f"LD DT, V{op.x:X}",
    opcodes.SetSound: lambda op: f"LD ST, V{op.x:X}",
    opcodes.AddToIndex: lambda op: f"ADD I, V{op.x:X}",
    opcodes.LoadDigitSprite: lambda op: f"LD F, V{op.x:X}",
    opcodes.StoreBCD: lambda op: f"LD B, V{op.x:X}",
    opcodes.StoreRegs: lambda op: f"LD [I], V{op.x:X}",
    opcodes.LoadRegs: lambda op: f"LD V{op.x:X}, [I]",
}


def format_operation(operation: opcodes.Operation) -> str:
    formatter = _FORMATTERS.get(type(operation))
    if formatter is None:
        raise TypeError(f"not a CHIP-8 operation: {operation!r}")
    return formatter(operation)


def format_word(word: int) -> str:
    """Render a raw instruction word, falling back to a data directive."""

    try:
        return format_operation(opcodes.decode(word))
    except InvalidOpcode:
        return f"DW 0x{word & 0xFFFF:04X}"


def disassemble(memory: Addressable, start: int, end: int) -> Iterator[Tuple[int, int, str]]:
    """Yield ``(address, word, text)`` for every instruction in ``[start, end]``."""

    address = start
    while address + 1 <= end:
        word = memory.load16(address)
        yield address, word, format_word(word)
        address += 2
