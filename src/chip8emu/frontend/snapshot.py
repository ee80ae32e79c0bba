"""JSON snapshot slots for the pygame debugger."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
import time
from typing import List, Optional

from chip8emu.chip8.keyboard import KEY_COUNT

SNAPSHOT_DIR = Path("snapshots")
SNAPSHOT_SLOTS = ["slot0", "slot1", "slot2", "slot3"]
DEFAULT_SLOT = SNAPSHOT_SLOTS[0]


@dataclass
class Snapshot:
    memory: List[int]
    registers: dict
    stack: List[int]
    display: List[bool]
    keys: List[int] = field(default_factory=list)
    clock_count: int = 0
    timer_ticks: int = 0


def take_snapshot(computer) -> Snapshot:
    cpu = computer.cpu_core
    regs = cpu.registers
    return Snapshot(
        memory=computer.memory.dump(),
        registers=dict(
            v=list(regs.v),
            index=regs.index,
            program_counter=regs.program_counter,
            stack_pointer=regs.stack_pointer,
            delay_timer=regs.delay_timer,
            sound_timer=regs.sound_timer,
        ),
        stack=list(regs.stack),
        display=computer.display.dump_state(),
        keys=computer.keypad.pressed_keys(),
        clock_count=computer.clock_count,
        timer_ticks=computer.timer_ticks,
    )


def restore_snapshot(computer, snapshot: Snapshot) -> None:
    memory = computer.memory
    if len(snapshot.memory) != memory.get_end_address() + 1:
        raise ValueError("snapshot memory size does not match the machine")
    if len(snapshot.display) != computer.display.WIDTH * computer.display.HEIGHT:
        raise ValueError("snapshot framebuffer size does not match the machine")

    # Read every field before touching the machine.
    saved = snapshot.registers
    v = [int(value) & 0xFF for value in saved["v"]]
    if len(v) != len(computer.cpu_core.registers.v):
        raise ValueError("snapshot must hold 16 V registers")
    index = int(saved["index"])
    program_counter = int(saved["program_counter"])
    stack_pointer = int(saved["stack_pointer"])
    delay_timer = int(saved["delay_timer"])
    sound_timer = int(saved["sound_timer"])
    stack = [int(value) for value in snapshot.stack]
    if len(stack) != len(computer.cpu_core.registers.stack):
        raise ValueError("snapshot call stack size does not match the machine")
    keys = [int(key) for key in snapshot.keys]
    if any(not 0 <= key < KEY_COUNT for key in keys):
        raise ValueError("snapshot holds a key outside 0..15")

    memory.store_block(0, snapshot.memory)
    regs = computer.cpu_core.registers
    regs.v = v
    regs.index = index
    regs.program_counter = program_counter
    regs.stack_pointer = stack_pointer
    regs.delay_timer = delay_timer
    regs.sound_timer = sound_timer
    regs.stack = stack
    computer.cpu_core.status.waiting_for_key = False

    computer.display.load_state(snapshot.display)
    computer.keypad.set_pressed(keys)
    computer.restore_clock(snapshot.clock_count, snapshot.timer_ticks)


def snapshot_to_dict(slot: str, snapshot: Snapshot, timestamp: Optional[float] = None) -> dict:
    return {
        "slot": slot,
        "timestamp": timestamp if timestamp is not None else time.time(),
        "memory": snapshot.memory,
        "registers": snapshot.registers,
        "stack": snapshot.stack,
        "display": [int(value) for value in snapshot.display],
        "keys": snapshot.keys,
        "clock_count": snapshot.clock_count,
        "timer_ticks": snapshot.timer_ticks,
    }


def snapshot_from_dict(data: dict) -> Snapshot:
    return Snapshot(
        memory=list(data.get("memory", [])),
        registers=dict(data.get("registers", {})),
        stack=list(data.get("stack", [])),
        display=[bool(value) for value in data.get("display", [])],
        keys=list(data.get("keys", [])),
        clock_count=int(data.get("clock_count", 0)),
        timer_ticks=int(data.get("timer_ticks", 0)),
    )


def slot_path(slot: str, directory: Path = SNAPSHOT_DIR) -> Path:
    return Path(directory) / f"{slot}.json"


def write_snapshot(slot: str, snapshot: Snapshot, *, directory: Path = SNAPSHOT_DIR) -> Path:
    path = slot_path(slot, directory)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(snapshot_to_dict(slot, snapshot)))
    return path


def read_snapshot(slot: str, *, directory: Path = SNAPSHOT_DIR) -> Optional[Snapshot]:
    path = slot_path(slot, directory)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError:
        return None
    return snapshot_from_dict(data)


def delete_snapshot(slot: str, *, directory: Path = SNAPSHOT_DIR) -> None:
    path = slot_path(slot, directory)
    if path.exists():
        path.unlink()
