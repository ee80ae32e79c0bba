"""Fatal conditions raised by the CHIP-8 virtual machine."""

from __future__ import annotations


class Chip8Error(RuntimeError):
    """Base class for every unrecoverable virtual machine condition."""


class InvalidOpcode(Chip8Error):
    """Raised when an instruction word matches no known pattern."""

    def __init__(self, word: int) -> None:
        super().__init__(f"invalid opcode: 0x{word & 0xFFFF:04X}")
        self.word = word


class StackOverflow(Chip8Error):
    """Raised by CALL when every stack slot is already in use."""


class StackUnderflow(Chip8Error):
    """Raised by RET when no call is pending."""


class InvalidAddress(Chip8Error):
    """Raised when a jump target or fetch address lies outside memory."""


class AddressOverflow(Chip8Error):
    """Raised when adding to I pushes it past the last memory cell."""


class MemoryOverflow(Chip8Error):
    """Raised when a block transfer starting at I runs off the end of memory."""


class InvalidDigit(Chip8Error):
    """Raised when a digit sprite is requested for a value above 0xF."""
