"""Headless runner for CHIP-8 program debugging workflows."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from chip8emu.chip8.computer import Chip8Computer
from chip8emu.cpu.disassembler import disassemble
from chip8emu.emulator.file import ProgramLoadError
from chip8emu.errors import Chip8Error
from chip8emu.memory import ADDRESS_MASK, MEMORY_SIZE


DEFAULT_MAX_STEPS = 10_000

EXIT_OK = 0
EXIT_LOAD_FAILED = 1
EXIT_STEP_LIMIT = 2
EXIT_VM_ERROR = 4


@dataclass(frozen=True)
class DumpRange:
    """Inclusive memory range used for dumping."""

    start: int
    end: int

    def iter_addresses(self) -> Iterable[int]:
        for address in range(self.start, self.end + 1):
            yield address & ADDRESS_MASK


def _parse_hex(value: str) -> int:
    text = value.strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    if not text:
        raise ValueError("empty hexadecimal value")
    result = int(text, 16)
    if not (0 <= result <= ADDRESS_MASK):
        raise ValueError("hex value out of range")
    return result


def _parse_range(spec: str) -> DumpRange:
    start_str, sep, end_str = spec.partition(":")
    if not sep:
        raise ValueError("range specification must contain ':'")
    start = _parse_hex(start_str)
    end = _parse_hex(end_str)
    if end < start:
        raise ValueError("range end must be >= start")
    return DumpRange(start, end)


def _parse_keys(spec: str) -> List[int]:
    keys: List[int] = []
    for item in spec.split(","):
        item = item.strip()
        if not item:
            continue
        value = int(item, 16)
        if not (0 <= value <= 0xF):
            raise ValueError(f"key out of range: {item}")
        keys.append(value)
    return keys


def _merge_ranges(ranges: Sequence[DumpRange]) -> List[DumpRange]:
    if not ranges:
        return [DumpRange(0x000, ADDRESS_MASK)]
    ordered = sorted(ranges, key=lambda r: (r.start, r.end))
    merged: List[DumpRange] = []
    for current in ordered:
        if not merged:
            merged.append(current)
            continue
        last = merged[-1]
        if current.start <= last.end + 1:
            merged[-1] = DumpRange(last.start, max(last.end, current.end))
        else:
            merged.append(current)
    return merged


def _format_hex_dump(memory, dump_ranges: Sequence[DumpRange]) -> str:
    lines: List[str] = []
    header = "ADDR " + " ".join(f"+{offset:X}" for offset in range(16))
    for index, dump_range in enumerate(dump_ranges):
        if index:
            lines.append("")
        lines.append(header)
        start_line = dump_range.start & ~0x0F
        end_line = dump_range.end | 0x0F
        for base in range(start_line, end_line + 1, 16):
            row = [f"{base & ADDRESS_MASK:04X}"]
            for offset in range(16):
                address = (base + offset) & ADDRESS_MASK
                value = memory.load8(address) & 0xFF
                row.append(f"{value:02X}")
            lines.append(" ".join(row))
    return "\n".join(lines)


def _write_dump(memory, dump_ranges: Sequence[DumpRange], *, target: Path | None, fmt: str) -> None:
    ranges = _merge_ranges(dump_ranges)
    if fmt == "bin":
        data = bytearray()
        for dump_range in ranges:
            for address in dump_range.iter_addresses():
                data.append(memory.load8(address) & 0xFF)
        if target is None:
            sys.stdout.buffer.write(bytes(data))
            return
        target.write_bytes(bytes(data))
        return

    text = _format_hex_dump(memory, ranges)
    if target is None:
        print(text)
    else:
        target.write_text(text + "\n")


def _format_registers(computer: Chip8Computer) -> str:
    values = computer.cpu_core.get_register_map()
    regs = computer.cpu_core.registers
    lines = [
        " ".join(f"V{index:X}={values[f'V{index:X}']:02X}" for index in range(8)),
        " ".join(f"V{index:X}={values[f'V{index:X}']:02X}" for index in range(8, 16)),
        f"I={values['I']:03X} PC={values['PC']:03X} SP={values['SP']:X} "
        f"DT={values['DT']:02X} ST={values['ST']:02X}",
        "STACK " + " ".join(f"{regs.stack[level]:03X}" for level in range(1, regs.stack_pointer + 1)),
    ]
    return "\n".join(line.rstrip() for line in lines)


def _format_disassembly(computer: Chip8Computer, dump_range: DumpRange) -> str:
    end = min(dump_range.end, MEMORY_SIZE - 1)
    return "\n".join(
        f"{address:03X}: {word:04X}  {text}"
        for address, word, text in disassemble(computer.memory, dump_range.start, end)
    )


def _execute_program(
    computer: Chip8Computer,
    *,
    max_steps: int | None,
    breakpoints: Sequence[int],
) -> Tuple[int, bool, bool]:
    """Step until a breakpoint, the step limit, or the machine stops.

    Returns ``(executed, break_hit, step_limit_hit)``. Chip8Error from the
    engine propagates to the caller.
    """

    cpu = computer.cpu_core
    break_set = {value & ADDRESS_MASK for value in breakpoints}
    executed = 0
    while computer.running:
        if break_set and cpu.registers.program_counter in break_set and executed:
            return executed, True, False
        if max_steps is not None and executed >= max_steps:
            return executed, False, True
        computer.step()
        executed += 1
    return executed, False, False


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8-debug-runner",
        description="Headless CHIP-8 runner for program diagnostics.",
    )
    parser.add_argument("--program", type=str, required=True, help="CHIP-8 program image (.ch8)")
    parser.add_argument(
        "--steps",
        type=int,
        default=DEFAULT_MAX_STEPS,
        help="Maximum instructions to execute (0 or negative disables the limit)",
    )
    parser.add_argument(
        "--break-pc",
        action="append",
        default=[],
        help="Break when PC reaches the given hex address (repeatable)",
    )
    parser.add_argument(
        "--dump",
        type=str,
        default=None,
        help="File path for memory dump ('-' for stdout)",
    )
    parser.add_argument(
        "--dump-range",
        action="append",
        default=[],
        help="Memory range to dump in START:END hex form (inclusive). Repeat to add multiple ranges.",
    )
    parser.add_argument(
        "--dump-format",
        choices=("hex", "bin"),
        default="hex",
        help="Dump format (hex table or raw binary)",
    )
    parser.add_argument("--screen", action="store_true", help="Print the framebuffer after the run")
    parser.add_argument("--registers", action="store_true", help="Print registers after the run")
    parser.add_argument(
        "--disassemble",
        type=str,
        default=None,
        help="Print a disassembly of START:END (hex, inclusive) after the run",
    )
    parser.add_argument(
        "--keys",
        type=str,
        default="",
        help="Comma separated hex keys held down for the whole run (e.g. 5,A)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the RND instruction")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    breakpoints: List[int] = []
    for spec in args.break_pc:
        try:
            breakpoints.append(_parse_hex(spec))
        except ValueError as exc:
            parser.error(f"invalid breakpoint address '{spec}': {exc}")

    dump_ranges: List[DumpRange] = []
    for spec in args.dump_range:
        try:
            dump_ranges.append(_parse_range(spec))
        except ValueError as exc:
            parser.error(f"invalid dump range '{spec}': {exc}")

    disassembly_range = None
    if args.disassemble is not None:
        try:
            disassembly_range = _parse_range(args.disassemble)
        except ValueError as exc:
            parser.error(f"invalid disassembly range '{args.disassemble}': {exc}")

    try:
        held_keys = _parse_keys(args.keys)
    except ValueError as exc:
        parser.error(f"invalid key list '{args.keys}': {exc}")

    computer = Chip8Computer(enable_audio=False, seed=args.seed)

    try:
        computer.load_user_program(args.program)
    except ProgramLoadError as exc:
        print(f"Failed to load program: {exc}", file=sys.stderr)
        return EXIT_LOAD_FAILED

    computer.keypad.set_pressed(held_keys)

    step_limit = args.steps if args.steps > 0 else None
    vm_error: Chip8Error | None = None
    try:
        executed, break_hit, step_limit_hit = _execute_program(
            computer,
            max_steps=step_limit,
            breakpoints=breakpoints,
        )
    except Chip8Error as exc:
        vm_error = exc
        executed, break_hit, step_limit_hit = computer.clock_count, False, False

    if args.registers:
        print(_format_registers(computer))
    if args.screen:
        print(computer.display.render_text())
    if disassembly_range is not None:
        print(_format_disassembly(computer, disassembly_range))
    if args.dump is not None or dump_ranges:
        dump_target = Path(args.dump) if args.dump not in (None, "-") else None
        _write_dump(computer.memory, dump_ranges, target=dump_target, fmt=args.dump_format)

    if vm_error is not None:
        pc = computer.cpu_core.registers.program_counter
        print(f"Execution stopped: {vm_error} (PC=0x{pc:03X}, steps={executed})", file=sys.stderr)
        return EXIT_VM_ERROR
    if break_hit:
        return EXIT_OK
    if step_limit_hit:
        print("Execution stopped: step limit reached", file=sys.stderr)
        return EXIT_STEP_LIMIT
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
