"""File loading helpers for the CHIP-8 emulator."""

from chip8emu.emulator.file.program import (
    MAX_PROGRAM_LENGTH,
    PROGRAM_START_ADDRESS,
    ProgramInfo,
    ProgramLoadError,
    ProgramTooLarge,
    check_program_size,
    load_rom,
)

__all__ = [
    "MAX_PROGRAM_LENGTH",
    "PROGRAM_START_ADDRESS",
    "ProgramInfo",
    "ProgramLoadError",
    "ProgramTooLarge",
    "check_program_size",
    "load_rom",
]
