"""Debug overlay rendering for the pygame front end."""

from __future__ import annotations

from collections import deque
from typing import Iterable, List

from chip8emu.cpu.disassembler import format_word
from chip8emu.frontend.snapshot import DEFAULT_SLOT


class DebugOverlay:
    """Collects and renders debug information for the CHIP-8 window."""

    TRACE_LENGTH = 32
    DISASSEMBLY_LINES = 8
    INSTRUCTIONS = [
        "ESC: toggle debug",
        "SPACE: resume",
        "N: step",
        "S: snapshot",
        "R: restore",
        "Q: quit",
    ]

    def __init__(self, computer) -> None:
        self._computer = computer
        self._trace: deque[int] = deque(maxlen=self.TRACE_LENGTH)
        self._font = None
        self._line_height = 0
        self._cached_cpu_lines: list[str] = []
        self._cached_stack_lines: list[str] = []
        self._cached_code_lines: list[str] = []
        self._cached_program: list[str] = []
        self._status_message: str = ""
        self._snapshot_available: bool = False
        self._slot_name: str = DEFAULT_SLOT

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def record_execution(self, pc: int) -> None:
        """Record the latest program counter for trace display."""

        self._trace.append(pc & 0xFFFF)

    def capture_state(self) -> None:
        cpu = self._computer.cpu_core
        self._cached_cpu_lines = self._snapshot_cpu(cpu)
        self._cached_stack_lines = self._snapshot_stack(cpu)
        self._cached_code_lines = self._snapshot_code(cpu)
        self._cached_program = self._snapshot_program(getattr(self._computer, "program_info", None))

    def render(self, screen) -> None:
        """Render the overlay onto the given pygame surface."""

        import pygame  # type: ignore

        self._ensure_font()
        self.capture_state()

        overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 196))

        x_cursor = 8
        y_cursor = 8
        column_gap = max(6, self._line_height // 2)

        left_sections = [
            ("CPU", self._cached_cpu_lines),
            ("Stack", self._cached_stack_lines),
            ("Program", self._cached_program),
        ]
        left_width = self._measure_sections(left_sections) + 16

        if self._font is not None:
            status_surface = self._font.render(self._status_header(), True, (173, 216, 230))
            overlay.blit(status_surface, (x_cursor, y_cursor))
            y_cursor += self._line_height + 4

        top = y_cursor
        y_cursor = self._render_section(overlay, x_cursor, y_cursor, "CPU", self._cached_cpu_lines)
        y_cursor = self._render_section(overlay, x_cursor, y_cursor + column_gap, "Stack", self._cached_stack_lines)
        self._render_section(overlay, x_cursor, y_cursor + column_gap, "Program", self._cached_program)

        right_x = x_cursor + left_width
        right_y = self._render_section(overlay, right_x, top, "Code", self._cached_code_lines)
        trace_lines = self._format_trace_lines()
        right_y = self._render_section(overlay, right_x, right_y + column_gap, "Trace", trace_lines)
        self._render_section(overlay, right_x, right_y + column_gap, "Controls", self.INSTRUCTIONS)

        screen.blit(overlay, (0, 0))

    def get_trace(self) -> list[int]:
        """Expose a copy of the recent trace for tests."""

        return list(self._trace)

    def get_lines(self) -> dict[str, list[str]]:
        return {
            "CPU": list(self._cached_cpu_lines),
            "Stack": list(self._cached_stack_lines),
            "Code": list(self._cached_code_lines),
            "Program": list(self._cached_program),
            "Trace": self._format_trace_lines(),
        }

    def set_status(self, message: str) -> None:
        self._status_message = message

    def set_snapshot_available(self, available: bool) -> None:
        self._snapshot_available = available

    def set_slot_name(self, slot: str) -> None:
        self._slot_name = slot

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _ensure_font(self) -> None:
        if self._font is not None:
            return
        import pygame  # type: ignore

        pygame.font.init()
        self._font = pygame.font.SysFont("Courier", 12)
        self._line_height = self._font.get_linesize()

    def _render_section(self, surface, x: int, y: int, title: str, lines: Iterable[str]) -> int:
        if self._font is None:
            return y
        title_surface = self._font.render(title, True, (255, 215, 0))
        surface.blit(title_surface, (x, y))
        cursor_y = y + self._line_height
        for line in lines:
            rendered = self._font.render(line, True, (230, 230, 230))
            surface.blit(rendered, (x, cursor_y))
            cursor_y += self._line_height
        return cursor_y

    def _measure_sections(self, sections: Iterable[tuple[str, Iterable[str]]]) -> int:
        if self._font is None:
            return 0
        max_width = 0
        for title, lines in sections:
            max_width = max(max_width, self._font.size(title)[0])
            for line in lines:
                max_width = max(max_width, self._font.size(line)[0])
        return max_width

    def _snapshot_cpu(self, cpu) -> list[str]:
        regs = cpu.registers
        lines = [
            " ".join(f"V{index:X}:{regs.v[index]:02X}" for index in range(start, start + 4))
            for start in range(0, 16, 4)
        ]
        lines.append(f"PC:{regs.program_counter:03X}  I:{regs.index:03X}  SP:{regs.stack_pointer:X}")
        lines.append(f"DT:{regs.delay_timer:02X}  ST:{regs.sound_timer:02X}")
        if cpu.status.waiting_for_key:
            lines.append("STATUS:WAIT KEY")
        return lines

    def _snapshot_stack(self, cpu) -> list[str]:
        regs = cpu.registers
        if regs.stack_pointer == 0:
            return ["<empty>"]
        return [
            f"{level:X}:{regs.stack[level]:03X}"
            for level in range(regs.stack_pointer, 0, -1)
        ]

    def _snapshot_code(self, cpu) -> list[str]:
        lines: List[str] = []
        address = cpu.registers.program_counter
        memory = cpu.memory
        for _ in range(self.DISASSEMBLY_LINES):
            if address + 1 > memory.get_end_address():
                break
            word = memory.load16(address)
            marker = ">" if address == cpu.registers.program_counter else " "
            lines.append(f"{marker}{address:03X} {word:04X} {format_word(word)}")
            address += 2
        return lines or ["<out of range>"]

    def _snapshot_program(self, info) -> list[str]:
        if info is None:
            return ["No program loaded"]
        lines = [f"Name: {info.name or '-'}", f"Size: {info.size} bytes"]
        if info.path is not None:
            lines.append(f"File: {info.path.name}")
        return lines

    def _format_trace_lines(self) -> list[str]:
        entries = list(self._trace)
        if not entries:
            return ["<empty>"]
        grouped: list[str] = []
        line: list[str] = []
        for pc in reversed(entries):
            line.append(f"{pc:03X}")
            if len(line) == 8:
                grouped.append(" ".join(line))
                line = []
        if line:
            grouped.append(" ".join(line))
        return grouped

    def _status_header(self) -> str:
        suffix = " [snapshot]" if self._snapshot_available else ""
        base = self._status_message or "Debug menu"
        return f"{base} [slot:{self._slot_name}]" + suffix
