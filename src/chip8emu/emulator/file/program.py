"""Program loaders for CHIP-8 ROM images."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from chip8emu.memory import MEMORY_SIZE

PROGRAM_START_ADDRESS = 0x200
MAX_PROGRAM_LENGTH = MEMORY_SIZE - PROGRAM_START_ADDRESS


class ProgramLoadError(RuntimeError):
    """Raised when a user program cannot be read."""


class ProgramTooLarge(ProgramLoadError):
    """Raised when a program does not fit between 0x200 and the end of memory."""


@dataclass
class ProgramInfo:
    data: bytes
    name: str = ""
    path: Optional[Path] = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def end_address(self) -> int:
        return PROGRAM_START_ADDRESS + max(len(self.data), 1) - 1


def check_program_size(data: bytes) -> None:
    if len(data) > MAX_PROGRAM_LENGTH:
        raise ProgramTooLarge(
            f"program is {len(data)} bytes, at most {MAX_PROGRAM_LENGTH} fit in memory"
        )


def load_rom(path: str | Path) -> ProgramInfo:
    """Read a raw CHIP-8 ROM image from disk."""

    file_path = Path(path)
    try:
        data = file_path.read_bytes()
    except OSError as exc:
        raise ProgramLoadError(f"cannot read {file_path}: {exc}") from exc
    if not data:
        raise ProgramLoadError(f"empty program: {file_path}")
    check_program_size(data)
    return ProgramInfo(data=data, name=file_path.stem.upper(), path=file_path)
