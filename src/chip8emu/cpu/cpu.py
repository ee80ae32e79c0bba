"""CHIP-8 execution engine."""

from __future__ import annotations

from dataclasses import dataclass, field
import random
from typing import Callable, Dict, List, Optional

from chip8emu.chip8.display import Chip8Display
from chip8emu.chip8.keyboard import KeyState
from chip8emu.cpu import opcodes
from chip8emu.cpu.opcodes import Operation, decode
from chip8emu.emulator.file.program import check_program_size
from chip8emu.errors import (
    AddressOverflow,
    InvalidAddress,
    InvalidDigit,
    StackOverflow,
    StackUnderflow,
)
from chip8emu.memory import DIGIT_SPRITE_HEIGHT, DIGIT_SPRITE_START, MEMORY_SIZE, Memory

PROGRAM_START = 0x200
REGISTER_COUNT = 16
STACK_SIZE = 16
FLAG = 0xF
INSTRUCTION_WIDTH = 2


@dataclass
class CPURegisters:
    """Register file, stack and timers of the CHIP-8 machine."""

    v: List[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    index: int = 0
    program_counter: int = PROGRAM_START
    stack_pointer: int = 0
    stack: List[int] = field(default_factory=lambda: [0] * STACK_SIZE)
    delay_timer: int = 0
    sound_timer: int = 0


@dataclass
class CPUStatus:
    waiting_for_key: bool = False
    instruction_count: int = 0


# A handler returns how far to advance PC, or None when it set PC itself.
Handler = Callable[[Operation, KeyState], Optional[int]]


class Chip8CPU:
    """Decode/execute engine owning memory, registers and the framebuffer."""

    def __init__(self, *, display: Chip8Display | None = None, rng: random.Random | None = None) -> None:
        self.memory = Memory(MEMORY_SIZE)
        self.display = display if display is not None else Chip8Display()
        self.registers = CPURegisters()
        self.status = CPUStatus()
        self._rng = rng if rng is not None else random.Random()
        self._dispatch: Dict[type, Handler] = {}
        self._init_dispatch_table()
        self.reset()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self.registers = CPURegisters()
        self.status = CPUStatus()
        self.memory.clear()
        self.memory.install_digit_sprites()
        self.display.clear()

    def seed(self, value: int) -> None:
        self._rng.seed(value)

    def load_program(self, program: bytes) -> None:
        """Copy ``program`` into memory at 0x200.

        Nothing is modified when the program does not fit.
        """

        check_program_size(program)
        self.memory.store_block(PROGRAM_START, program)

    # ------------------------------------------------------------------
    # Fetch / decode / execute
    # ------------------------------------------------------------------
    def fetch(self) -> int:
        pc = self.registers.program_counter
        if not (0 <= pc <= MEMORY_SIZE - INSTRUCTION_WIDTH):
            raise InvalidAddress(f"program counter out of range: 0x{pc:04X}")
        return self.memory.load16(pc)

    def decode(self, word: int) -> Operation:
        return decode(word)

    def execute(self, operation: Operation, keypad: KeyState) -> None:
        handler = self._dispatch.get(type(operation))
        if handler is None:
            raise TypeError(f"not a CHIP-8 operation: {operation!r}")
        advance = handler(operation, keypad)
        if advance is not None:
            self.registers.program_counter = (self.registers.program_counter + advance) & 0xFFFF
        self.status.instruction_count += 1

    def step(self, keypad: KeyState) -> Operation:
        operation = self.decode(self.fetch())
        self.execute(operation, keypad)
        return operation

    def tick_timers(self) -> None:
        regs = self.registers
        regs.delay_timer = max(regs.delay_timer - 1, 0)
        regs.sound_timer = max(regs.sound_timer - 1, 0)

    def get_register_map(self) -> Dict[str, int]:
        regs = self.registers
        values = {f"V{index:X}": value for index, value in enumerate(regs.v)}
        values.update(
            I=regs.index,
            PC=regs.program_counter,
            SP=regs.stack_pointer,
            DT=regs.delay_timer,
            ST=regs.sound_timer,
        )
        return values

    # ------------------------------------------------------------------
    # Dispatch table
    # ------------------------------------------------------------------
    def _register(self, cls: type, handler: Handler) -> None:
        self._dispatch[cls] = handler

    def _init_dispatch_table(self) -> None:
        self._dispatch.clear()
        self._register(opcodes.Clear, self._op_clear)
        self._register(opcodes.Return, self._op_return)
        self._register(opcodes.Jump, self._op_jump)
        self._register(opcodes.Call, self._op_call)
        self._register(opcodes.SkipEq, self._op_skip_eq)
        self._register(opcodes.SkipNeq, self._op_skip_neq)
        self._register(opcodes.SkipRegEq, self._op_skip_reg_eq)
        self._register(opcodes.SkipRegNeq, self._op_skip_reg_neq)
        self._register(opcodes.Load, self._op_load)
        self._register(opcodes.Add, self._op_add)
        self._register(opcodes.LoadReg, self._op_load_reg)
        self._register(opcodes.Or, self._op_or)
        self._register(opcodes.And, self._op_and)
        self._register(opcodes.Xor, self._op_xor)
        self._register(opcodes.AddReg, self._op_add_reg)
        self._register(opcodes.Sub, self._op_sub)
        self._register(opcodes.SubReverse, self._op_sub_reverse)
        self._register(opcodes.ShiftRight, self._op_shift_right)
        self._register(opcodes.ShiftLeft, self._op_shift_left)
        self._register(opcodes.LoadIndex, self._op_load_index)
        self._register(opcodes.JumpIndexed, self._op_jump_indexed)
        self._register(opcodes.Random, self._op_random)
        self._register(opcodes.Draw, self._op_draw)
        self._register(opcodes.SkipKeyPressed, self._op_skip_key_pressed)
        self._register(opcodes.SkipKeyNotPressed, self._op_skip_key_not_pressed)
        self._register(opcodes.GetDelay, self._op_get_delay)
        self._register(opcodes.WaitKey, self._op_wait_key)
        self._register(opcodes.SetDelay, self._op_set_delay)
        self._register(opcodes.SetSound, self._op_set_sound)
        self._register(opcodes.AddToIndex, self._op_add_to_index)
        self._register(opcodes.LoadDigitSprite, self._op_load_digit_sprite)
        self._register(opcodes.StoreBCD, self._op_store_bcd)
        self._register(opcodes.StoreRegs, self._op_store_regs)
        self._register(opcodes.LoadRegs, self._op_load_regs)

    @staticmethod
    def _skip_if(condition: bool) -> int:
        return INSTRUCTION_WIDTH * 2 if condition else INSTRUCTION_WIDTH

    # ------------------------------------------------------------------
    # Flow control
    # ------------------------------------------------------------------
    def _op_clear(self, op: opcodes.Clear, keypad: KeyState) -> int:
        self.display.clear()
        return INSTRUCTION_WIDTH

    def _op_return(self, op: opcodes.Return, keypad: KeyState) -> None:
        regs = self.registers
        if regs.stack_pointer == 0:
            raise StackUnderflow("return with an empty call stack")
        regs.program_counter = regs.stack[regs.stack_pointer]
        regs.stack_pointer -= 1

    def _op_jump(self, op: opcodes.Jump, keypad: KeyState) -> None:
        self.registers.program_counter = op.addr

    def _op_call(self, op: opcodes.Call, keypad: KeyState) -> None:
        regs = self.registers
        if regs.stack_pointer >= STACK_SIZE - 1:
            raise StackOverflow(f"call stack full at 0x{regs.program_counter:04X}")
        if op.addr >= MEMORY_SIZE:
            raise InvalidAddress(f"invalid call target: 0x{op.addr:04X}")
        if regs.program_counter >= MEMORY_SIZE:
            raise InvalidAddress(f"invalid program counter: 0x{regs.program_counter:04X}")
        regs.stack_pointer += 1
        # Slot 0 stays unused; the pushed value is the instruction after CALL.
        regs.stack[regs.stack_pointer] = (regs.program_counter + INSTRUCTION_WIDTH) & 0xFFFF
        regs.program_counter = op.addr

    def _op_jump_indexed(self, op: opcodes.JumpIndexed, keypad: KeyState) -> None:
        self.registers.program_counter = (self.registers.v[0] + op.addr) & 0xFFFF

    def _op_skip_eq(self, op: opcodes.SkipEq, keypad: KeyState) -> int:
        return self._skip_if(self.registers.v[op.x] == op.byte)

    def _op_skip_neq(self, op: opcodes.SkipNeq, keypad: KeyState) -> int:
        return self._skip_if(self.registers.v[op.x] != op.byte)

    def _op_skip_reg_eq(self, op: opcodes.SkipRegEq, keypad: KeyState) -> int:
        return self._skip_if(self.registers.v[op.x] == self.registers.v[op.y])

    def _op_skip_reg_neq(self, op: opcodes.SkipRegNeq, keypad: KeyState) -> int:
        return self._skip_if(self.registers.v[op.x] != self.registers.v[op.y])

    # ------------------------------------------------------------------
    # Register arithmetic
    # ------------------------------------------------------------------
    def _op_load(self, op: opcodes.Load, keypad: KeyState) -> int:
        self.registers.v[op.x] = op.byte & 0xFF
        return INSTRUCTION_WIDTH

    def _op_add(self, op: opcodes.Add, keypad: KeyState) -> int:
        v = self.registers.v
        v[op.x] = (v[op.x] + op.byte) & 0xFF
        return INSTRUCTION_WIDTH

    def _op_load_reg(self, op: opcodes.LoadReg, keypad: KeyState) -> int:
        v = self.registers.v
        v[op.x] = v[op.y]
        return INSTRUCTION_WIDTH

    def _op_or(self, op: opcodes.Or, keypad: KeyState) -> int:
        v = self.registers.v
        v[op.x] = v[op.x] | v[op.y]
        return INSTRUCTION_WIDTH

    def _op_and(self, op: opcodes.And, keypad: KeyState) -> int:
        v = self.registers.v
        v[op.x] = v[op.x] & v[op.y]
        return INSTRUCTION_WIDTH

    def _op_xor(self, op: opcodes.Xor, keypad: KeyState) -> int:
        v = self.registers.v
        v[op.x] = v[op.x] ^ v[op.y]
        return INSTRUCTION_WIDTH

    def _op_add_reg(self, op: opcodes.AddReg, keypad: KeyState) -> int:
        v = self.registers.v
        result = v[op.x] + v[op.y]
        v[op.x] = result & 0xFF
        v[FLAG] = 1 if result > 0xFF else 0
        return INSTRUCTION_WIDTH

    def _subtract(self, dest: int, minuend: int, subtrahend: int) -> None:
        v = self.registers.v
        # Strictly greater, not >=: equal operands clear the flag.
        v[FLAG] = 1 if minuend > subtrahend else 0
        v[dest] = (minuend - subtrahend) & 0xFF

    def _op_sub(self, op: opcodes.Sub, keypad: KeyState) -> int:
        v = self.registers.v
        self._subtract(op.x, v[op.x], v[op.y])
        return INSTRUCTION_WIDTH

    def _op_sub_reverse(self, op: opcodes.SubReverse, keypad: KeyState) -> int:
        v = self.registers.v
        self._subtract(op.x, v[op.y], v[op.x])
        return INSTRUCTION_WIDTH

    def _op_shift_right(self, op: opcodes.ShiftRight, keypad: KeyState) -> int:
        v = self.registers.v
        value = v[op.x]
        v[FLAG] = value & 0x01
        v[op.x] = value >> 1
        return INSTRUCTION_WIDTH

    def _op_shift_left(self, op: opcodes.ShiftLeft, keypad: KeyState) -> int:
        v = self.registers.v
        value = v[op.x]
        v[FLAG] = (value >> 7) & 0x01
        v[op.x] = (value << 1) & 0xFF
        return INSTRUCTION_WIDTH

    def _op_random(self, op: opcodes.Random, keypad: KeyState) -> int:
        self.registers.v[op.x] = self._rng.randrange(0x100) & op.byte
        return INSTRUCTION_WIDTH

    # ------------------------------------------------------------------
    # Index register and memory
    # ------------------------------------------------------------------
    def _op_load_index(self, op: opcodes.LoadIndex, keypad: KeyState) -> int:
        self.registers.index = op.addr
        return INSTRUCTION_WIDTH

    def _op_add_to_index(self, op: opcodes.AddToIndex, keypad: KeyState) -> int:
        regs = self.registers
        result = regs.index + regs.v[op.x]
        if result >= MEMORY_SIZE:
            raise AddressOverflow(f"index register overflow: 0x{result:04X}")
        regs.index = result
        return INSTRUCTION_WIDTH

    def _op_load_digit_sprite(self, op: opcodes.LoadDigitSprite, keypad: KeyState) -> int:
        digit = self.registers.v[op.x]
        if digit > 0xF:
            raise InvalidDigit(f"no sprite for digit 0x{digit:02X}")
        self.registers.index = DIGIT_SPRITE_START + digit * DIGIT_SPRITE_HEIGHT
        return INSTRUCTION_WIDTH

    def _op_store_bcd(self, op: opcodes.StoreBCD, keypad: KeyState) -> int:
        value = self.registers.v[op.x]
        self.memory.store_block(self.registers.index, (value // 100, (value // 10) % 10, value % 10))
        return INSTRUCTION_WIDTH

    def _op_store_regs(self, op: opcodes.StoreRegs, keypad: KeyState) -> int:
        regs = self.registers
        self.memory.store_block(regs.index, regs.v[: op.x + 1])
        return INSTRUCTION_WIDTH

    def _op_load_regs(self, op: opcodes.LoadRegs, keypad: KeyState) -> int:
        regs = self.registers
        values = self.memory.load_block(regs.index, op.x + 1)
        regs.v[: op.x + 1] = values
        return INSTRUCTION_WIDTH

    # ------------------------------------------------------------------
    # Display, timers and keypad
    # ------------------------------------------------------------------
    def _op_draw(self, op: opcodes.Draw, keypad: KeyState) -> int:
        regs = self.registers
        sprite = self.memory.load_block(regs.index, op.n)
        origin_x = regs.v[op.x]
        origin_y = regs.v[op.y]
        regs.v[FLAG] = 0
        collision = False
        for row, value in enumerate(sprite):
            for column in range(8):
                if value & (0x80 >> column):
                    if self.display.set_pixel(origin_x + column, origin_y + row, True):
                        collision = True
        regs.v[FLAG] = 1 if collision else 0
        return INSTRUCTION_WIDTH

    def _op_skip_key_pressed(self, op: opcodes.SkipKeyPressed, keypad: KeyState) -> int:
        return self._skip_if(keypad.is_pressed(self.registers.v[op.x] & 0x0F))

    def _op_skip_key_not_pressed(self, op: opcodes.SkipKeyNotPressed, keypad: KeyState) -> int:
        return self._skip_if(not keypad.is_pressed(self.registers.v[op.x] & 0x0F))

    def _op_wait_key(self, op: opcodes.WaitKey, keypad: KeyState) -> int:
        for key in range(16):
            if keypad.is_pressed(key):
                self.registers.v[op.x] = key
                self.status.waiting_for_key = False
                return INSTRUCTION_WIDTH
        self.status.waiting_for_key = True
        return 0

    def _op_get_delay(self, op: opcodes.GetDelay, keypad: KeyState) -> int:
        self.registers.v[op.x] = self.registers.delay_timer
        return INSTRUCTION_WIDTH

    def _op_set_delay(self, op: opcodes.SetDelay, keypad: KeyState) -> int:
        self.registers.delay_timer = self.registers.v[op.x]
        return INSTRUCTION_WIDTH

    def _op_set_sound(self, op: opcodes.SetSound, keypad: KeyState) -> int:
        self.registers.sound_timer = self.registers.v[op.x]
        return INSTRUCTION_WIDTH
