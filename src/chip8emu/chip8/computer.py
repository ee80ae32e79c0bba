"""CHIP-8 system wiring."""

from __future__ import annotations

import os
from pathlib import Path
import random
from typing import Optional

from chip8emu.chip8.display import Chip8Display
from chip8emu.chip8.hardware import Chip8Hardware
from chip8emu.chip8.keyboard import Chip8Keypad
from chip8emu.chip8.sound import Chip8Beeper
from chip8emu.cpu.cpu import Chip8CPU
from chip8emu.cpu.disassembler import format_operation
from chip8emu.cpu.opcodes import Operation
from chip8emu.emulator.file import ProgramInfo, check_program_size, load_rom
from chip8emu.memory import Memory
from chip8emu.system.computer import DEFAULT_INSTRUCTIONS_PER_SECOND, Computer


class Chip8Computer(Computer):
    """Concrete CHIP-8 machine: engine, keypad, beeper and timer schedule."""

    ENV_TRACE_PC = "CHIP8EMU_TRACE_PC"

    def __init__(
        self,
        *,
        instructions_per_second: int = DEFAULT_INSTRUCTIONS_PER_SECOND,
        enable_audio: bool = False,
        seed: int | None = None,
        trace: bool | None = None,
    ) -> None:
        super().__init__(instructions_per_second=instructions_per_second)
        display = Chip8Display()
        self.hardware = Chip8Hardware(
            display=display,
            keypad=Chip8Keypad(),
            beeper=Chip8Beeper(enable_audio=bool(enable_audio)),
        )
        self.cpu_core = Chip8CPU(display=display, rng=random.Random(seed))
        self.program_info: Optional[ProgramInfo] = None
        self.trace = trace if trace is not None else os.getenv(self.ENV_TRACE_PC) is not None
        self.power_on()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def memory(self) -> Memory:
        return self.cpu_core.memory

    @property
    def display(self) -> Chip8Display:
        return self.hardware.display

    @property
    def keypad(self) -> Chip8Keypad:
        return self.hardware.keypad

    @property
    def beeper(self) -> Chip8Beeper:
        return self.hardware.beeper

    # ------------------------------------------------------------------
    # User program loading
    # ------------------------------------------------------------------
    def load_user_program(self, path: str | os.PathLike[str]) -> ProgramInfo:
        info = load_rom(Path(path))
        self.program_info = info
        self.power_on()
        return info

    def load_bytes(self, data: bytes, *, name: str = "") -> ProgramInfo:
        check_program_size(data)
        info = ProgramInfo(data=bytes(data), name=name)
        self.program_info = info
        self.power_on()
        return info

    # ------------------------------------------------------------------
    # Computer hooks
    # ------------------------------------------------------------------
    def _reset_machine(self) -> None:
        self.cpu_core.reset()
        self.hardware.keypad.clear()
        self.hardware.beeper.shutdown()
        if self.program_info is not None:
            self.cpu_core.load_program(self.program_info.data)

    def _step_cpu(self) -> Operation:
        pc = self.cpu_core.registers.program_counter
        operation = self.cpu_core.step(self.hardware.keypad)
        self.hardware.beeper.update(self.cpu_core.registers.sound_timer)
        if self.trace:
            regs = self.cpu_core.registers
            print(
                f"TRACE-PC pc={pc:03X} op={format_operation(operation)} "
                f"I={regs.index:03X} SP={regs.stack_pointer:X} clock={self.clock_count}",
                flush=True,
            )
        return operation

    def tick_timers(self) -> None:
        # A sound timer of 1 still sounds for the tick that clears it.
        self.hardware.beeper.update(self.cpu_core.registers.sound_timer)
        self.cpu_core.tick_timers()
        self.hardware.beeper.update(self.cpu_core.registers.sound_timer)

    def shutdown(self) -> None:
        self.hardware.beeper.shutdown()
        self._apply_power_off()
