"""Typed CHIP-8 operations and the instruction word decoder."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from chip8emu.errors import InvalidOpcode


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class Return:
    pass


@dataclass(frozen=True)
class Jump:
    addr: int


@dataclass(frozen=True)
class Call:
    addr: int


@dataclass(frozen=True)
class SkipEq:
    x: int
    byte: int


@dataclass(frozen=True)
class SkipNeq:
    x: int
    byte: int


@dataclass(frozen=True)
class SkipRegEq:
    x: int
    y: int


@dataclass(frozen=True)
class Load:
    x: int
    byte: int


@dataclass(frozen=True)
class Add:
    x: int
    byte: int


@dataclass(frozen=True)
class LoadReg:
    x: int
    y: int


@dataclass(frozen=True)
class Or:
    x: int
    y: int


@dataclass(frozen=True)
class And:
    x: int
    y: int


@dataclass(frozen=True)
class Xor:
    x: int
    y: int


@dataclass(frozen=True)
class AddReg:
    x: int
    y: int


@dataclass(frozen=True)
class Sub:
    x: int
    y: int


@dataclass(frozen=True)
class ShiftRight:
    x: int


@dataclass(frozen=True)
class SubReverse:
    x: int
    y: int


@dataclass(frozen=True)
class ShiftLeft:
    x: int


@dataclass(frozen=True)
class SkipRegNeq:
    x: int
    y: int


@dataclass(frozen=True)
class LoadIndex:
    addr: int


@dataclass(frozen=True)
class JumpIndexed:
    addr: int


@dataclass(frozen=True)
class Random:
    x: int
    byte: int


@dataclass(frozen=True)
class Draw:
    x: int
    y: int
    n: int


@dataclass(frozen=True)
class SkipKeyPressed:
    x: int


@dataclass(frozen=True)
class SkipKeyNotPressed:
    x: int


@dataclass(frozen=True)
class GetDelay:
    x: int


@dataclass(frozen=True)
class WaitKey:
    x: int


@dataclass(frozen=True)
class SetDelay:
    x: int


@dataclass(frozen=True)
class SetSound:
    x: int


@dataclass(frozen=True)
class AddToIndex:
    x: int


@dataclass(frozen=True)
class LoadDigitSprite:
    x: int


@dataclass(frozen=True)
class StoreBCD:
    x: int


@dataclass(frozen=True)
class StoreRegs:
    x: int


@dataclass(frozen=True)
class LoadRegs:
    x: int


Operation = Union[
    Clear, Return, Jump, Call, SkipEq, SkipNeq, SkipRegEq, Load, Add,
    LoadReg, Or, And, Xor, AddReg, Sub, ShiftRight, SubReverse, ShiftLeft,
    SkipRegNeq, LoadIndex, JumpIndexed, Random, Draw, SkipKeyPressed,
    SkipKeyNotPressed, GetDelay, WaitKey, SetDelay, SetSound, AddToIndex,
    LoadDigitSprite, StoreBCD, StoreRegs, LoadRegs,
]

# Register-pair ALU operations keyed by the low nibble of an 8xyN word.
_ALU_OPS = {
    0x0: LoadReg,
    0x1: Or,
    0x2: And,
    0x3: Xor,
    0x4: AddReg,
    0x5: Sub,
    0x7: SubReverse,
}

# Single-register operations keyed by the low byte of an FxNN word.
_MISC_OPS = {
    0x07: GetDelay,
    0x0A: WaitKey,
    0x15: SetDelay,
    0x18: SetSound,
    0x1E: AddToIndex,
    0x29: LoadDigitSprite,
    0x33: StoreBCD,
    0x55: StoreRegs,
    0x65: LoadRegs,
}


def nibbles(word: int) -> Tuple[int, int, int, int]:
    return (word >> 12) & 0xF, (word >> 8) & 0xF, (word >> 4) & 0xF, word & 0xF


def decode(word: int) -> Operation:
    """Translate a 16-bit instruction word into its typed operation.

    Raises
    ------
    InvalidOpcode
        If ``word`` is not a 16-bit value or matches no instruction pattern.
    """

    if not (0 <= word <= 0xFFFF):
        raise InvalidOpcode(word)

    hi, x, y, n = nibbles(word)
    addr = word & 0x0FFF
    byte = word & 0x00FF

    if word == 0x00E0:
        return Clear()
    if word == 0x00EE:
        return Return()
    if hi == 0x1:
        return Jump(addr)
    if hi == 0x2:
        return Call(addr)
    if hi == 0x3:
        return SkipEq(x, byte)
    if hi == 0x4:
        return SkipNeq(x, byte)
    if hi == 0x5 and n == 0x0:
        return SkipRegEq(x, y)
    if hi == 0x6:
        return Load(x, byte)
    if hi == 0x7:
        return Add(x, byte)
    if hi == 0x8:
        if n in _ALU_OPS:
            return _ALU_OPS[n](x, y)
        if n == 0x6:
            return ShiftRight(x)
        if n == 0xE:
            return ShiftLeft(x)
    if hi == 0x9 and n == 0x0:
        return SkipRegNeq(x, y)
    if hi == 0xA:
        return LoadIndex(addr)
    if hi == 0xB:
        return JumpIndexed(addr)
    if hi == 0xC:
        return Random(x, byte)
    if hi == 0xD:
        return Draw(x, y, n)
    if hi == 0xE:
        if byte == 0x9E:
            return SkipKeyPressed(x)
        if byte == 0xA1:
            return SkipKeyNotPressed(x)
    if hi == 0xF and byte in _MISC_OPS:
        return _MISC_OPS[byte](x)
    raise InvalidOpcode(word)


def encode(operation: Operation) -> int:
    """Build the instruction word for ``operation`` (inverse of :func:`decode`)."""

    op = operation
    if isinstance(op, Clear):
        return 0x00E0
    if isinstance(op, Return):
        return 0x00EE
    for cls, prefix in ((Jump, 0x1000), (Call, 0x2000), (LoadIndex, 0xA000), (JumpIndexed, 0xB000)):
        if isinstance(op, cls):
            return prefix | (op.addr & 0x0FFF)
    for cls, prefix in ((SkipEq, 0x3000), (SkipNeq, 0x4000), (Load, 0x6000), (Add, 0x7000), (Random, 0xC000)):
        if isinstance(op, cls):
            return prefix | ((op.x & 0xF) << 8) | (op.byte & 0xFF)
    if isinstance(op, SkipRegEq):
        return 0x5000 | ((op.x & 0xF) << 8) | ((op.y & 0xF) << 4)
    if isinstance(op, SkipRegNeq):
        return 0x9000 | ((op.x & 0xF) << 8) | ((op.y & 0xF) << 4)
    for low, cls in _ALU_OPS.items():
        if isinstance(op, cls):
            return 0x8000 | ((op.x & 0xF) << 8) | ((op.y & 0xF) << 4) | low
    if isinstance(op, ShiftRight):
        return 0x8006 | ((op.x & 0xF) << 8)
    if isinstance(op, ShiftLeft):
        return 0x800E | ((op.x & 0xF) << 8)
    if isinstance(op, Draw):
        return 0xD000 | ((op.x & 0xF) << 8) | ((op.y & 0xF) << 4) | (op.n & 0xF)
    if isinstance(op, SkipKeyPressed):
        return 0xE09E | ((op.x & 0xF) << 8)
    if isinstance(op, SkipKeyNotPressed):
        return 0xE0A1 | ((op.x & 0xF) << 8)
    for low, cls in _MISC_OPS.items():
        if isinstance(op, cls):
            return 0xF000 | ((op.x & 0xF) << 8) | low
    raise TypeError(f"not a CHIP-8 operation: {operation!r}")
