"""CHIP-8 emulator pygame application."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import Dict, Iterable, Optional

from chip8emu.chip8.computer import Chip8Computer
from chip8emu.chip8.keyboard import (
    DEFAULT_KEYMAP,
    Chip8Keypad,
    load_keymap_file,
    write_keymap_template,
)
from chip8emu.emulator.file import ProgramInfo, ProgramLoadError
from chip8emu.errors import Chip8Error
from chip8emu.frontend.debug_overlay import DebugOverlay
from chip8emu.frontend.snapshot import (
    DEFAULT_SLOT,
    Snapshot,
    read_snapshot,
    restore_snapshot,
    take_snapshot,
    write_snapshot,
)

BASE_CAPTION = "CHIP-8 Emulator"
DEFAULT_SCALE = 10
DEFAULT_FPS = 60


def _handle_key_event(keypad: Chip8Keypad, keymap: Dict[str, int], name: str, pressed: bool) -> bool:
    key = keymap.get(name.lower())
    if key is None:
        return False
    if pressed:
        keypad.press(key)
    else:
        keypad.release(key)
    return True


def _build_caption(info: Optional[ProgramInfo], computer: Chip8Computer) -> str:
    caption = BASE_CAPTION
    if info is not None:
        caption = f"{caption} | Program: {info.name}"
    if not computer.running:
        caption = f"{caption} | halted"
    return caption


def _execute_instructions(computer: Chip8Computer, overlay: DebugOverlay, count: int) -> int:
    executed = 0
    cpu = computer.cpu_core
    while executed < count and computer.running:
        overlay.record_execution(cpu.registers.program_counter)
        computer.step()
        executed += 1
    return executed


def _pygame_loop(
    rom_path: str,
    scale: int,
    fps: int,
    *,
    instructions_per_frame: int | None = None,
    enable_audio: bool = False,
    keymap: Dict[str, int] | None = None,
    seed: int | None = None,
) -> None:
    import pygame  # type: ignore

    ips = instructions_per_frame * fps if instructions_per_frame else None
    if ips is not None:
        computer = Chip8Computer(instructions_per_second=ips, enable_audio=enable_audio, seed=seed)
    else:
        computer = Chip8Computer(enable_audio=enable_audio, seed=seed)
    try:
        program_info = computer.load_user_program(rom_path)
    except ProgramLoadError as exc:
        raise RuntimeError(f"Failed to load program: {exc}") from exc

    keymap = dict(keymap if keymap is not None else DEFAULT_KEYMAP)
    display = computer.display
    keypad = computer.keypad
    overlay = DebugOverlay(computer)

    pygame.init()
    screen = pygame.display.set_mode((display.WIDTH * scale, display.HEIGHT * scale))
    pygame.display.set_caption(_build_caption(program_info, computer))
    clock = pygame.time.Clock()

    running = True
    debug_mode = False
    snapshot_slot = DEFAULT_SLOT
    snapshot: Optional[Snapshot] = read_snapshot(snapshot_slot)
    overlay.set_snapshot_available(snapshot is not None)
    overlay.set_slot_name(snapshot_slot)

    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
                continue

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    debug_mode = not debug_mode
                    if debug_mode:
                        overlay.capture_state()
                        overlay.set_status("Debug paused")
                    else:
                        overlay.set_status("")
                    continue
                if debug_mode:
                    if event.key == pygame.K_q:
                        running = False
                    elif event.key == pygame.K_SPACE:
                        debug_mode = False
                        overlay.set_status("Resumed")
                    elif event.key == pygame.K_n:
                        try:
                            _execute_instructions(computer, overlay, 1)
                        except Chip8Error as exc:
                            print(f"CHIP-8 error: {exc}", file=sys.stderr)
                            overlay.set_status(f"Halted: {exc}")
                        else:
                            overlay.set_status("Stepped")
                        overlay.capture_state()
                    elif event.key == pygame.K_s:
                        snapshot = take_snapshot(computer)
                        path = write_snapshot(snapshot_slot, snapshot)
                        overlay.set_snapshot_available(True)
                        overlay.set_status(f"Snapshot saved to {path}")
                        overlay.capture_state()
                    elif event.key == pygame.K_r:
                        if snapshot is None:
                            snapshot = read_snapshot(snapshot_slot)
                        if snapshot is None:
                            overlay.set_status("No snapshot")
                        else:
                            try:
                                restore_snapshot(computer, snapshot)
                            except (KeyError, ValueError) as exc:
                                overlay.set_status(f"Snapshot unusable: {exc}")
                            else:
                                overlay.set_snapshot_available(True)
                                overlay.set_status("Snapshot restored")
                            overlay.capture_state()
                    continue
                _handle_key_event(keypad, keymap, pygame.key.name(event.key), True)
            elif event.type == pygame.KEYUP:
                _handle_key_event(keypad, keymap, pygame.key.name(event.key), False)

        if not debug_mode:
            try:
                _execute_instructions(computer, overlay, computer.instructions_per_frame(fps))
            except Chip8Error as exc:
                pc = computer.cpu_core.registers.program_counter
                print(f"CHIP-8 error at PC=0x{pc:03X}: {exc}", file=sys.stderr)
                debug_mode = True
                overlay.set_status(f"Halted: {exc}")
                overlay.capture_state()

        surface = display.render_pygame_surface(scale)
        screen.blit(surface, (0, 0))
        if debug_mode:
            overlay.render(screen)
        pygame.display.set_caption(_build_caption(program_info, computer))
        pygame.display.flip()
        clock.tick(fps)

    computer.shutdown()
    pygame.quit()


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="CHIP-8 emulator")
    parser.add_argument("rom", nargs="?", help="Path to a CHIP-8 program image")
    parser.add_argument(
        "--write-keymap-template",
        metavar="PATH",
        help="Write a JSON keymap template to the given path and exit",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=DEFAULT_SCALE,
        help=f"Integer scaling factor for display (default: {DEFAULT_SCALE})",
    )
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Target frames per second")
    parser.add_argument(
        "--ipf",
        type=int,
        default=None,
        help="Instructions executed per frame (default: 600 per second divided by fps)",
    )
    parser.add_argument(
        "--audio",
        dest="audio",
        action="store_true",
        help="Enable square-wave audio output (requires pygame mixer)",
    )
    parser.add_argument(
        "--no-audio",
        dest="audio",
        action="store_false",
        help="Disable audio output",
    )
    parser.set_defaults(audio=True)
    parser.add_argument(
        "--keymap",
        type=str,
        default=None,
        help="Path to JSON file mapping host key names to keypad keys",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the RND instruction")
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.write_keymap_template:
        write_keymap_template(Path(args.write_keymap_template))
        return

    if args.rom is None:
        parser.error("a program image is required")
    if args.scale <= 0:
        raise SystemExit("scale must be positive")
    if args.fps <= 0:
        raise SystemExit("fps must be positive")
    if args.ipf is not None and args.ipf <= 0:
        raise SystemExit("ipf must be positive")

    keymap = None
    if args.keymap:
        try:
            keymap = load_keymap_file(args.keymap)
        except ValueError as exc:
            raise SystemExit(str(exc))

    try:
        _pygame_loop(
            args.rom,
            args.scale,
            args.fps,
            instructions_per_frame=args.ipf,
            enable_audio=args.audio,
            keymap=keymap,
            seed=args.seed,
        )
    except RuntimeError as exc:
        raise SystemExit(str(exc))


if __name__ == "__main__":
    main()
