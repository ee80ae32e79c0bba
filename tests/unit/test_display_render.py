"""Tests for the CHIP-8 framebuffer."""

from __future__ import annotations

import pytest

from chip8emu.chip8.display import Chip8Display, Pixel


def test_set_pixel_toggles_and_reports_collision() -> None:
    display = Chip8Display()
    assert display.set_pixel(3, 4, True) is False
    assert display.is_on(3, 4)
    assert display.set_pixel(3, 4, True) is True
    assert not display.is_on(3, 4)


def test_writing_off_never_collides() -> None:
    display = Chip8Display()
    display.set_pixel(0, 0, True)
    assert display.set_pixel(0, 0, False) is False
    assert not display.is_on(0, 0)
    assert display.set_pixel(0, 0, False) is False


@pytest.mark.parametrize("x, y, expected", [(64, 0, (0, 0)), (65, 33, (1, 1)), (127, 63, (63, 31)), (-1, 0, (63, 0))])
def test_coordinates_wrap(x: int, y: int, expected) -> None:
    display = Chip8Display()
    display.set_pixel(x, y, True)
    assert display.is_on(*expected)
    assert display.lit_count() == 1


def test_pixels_are_row_major_snapshot() -> None:
    display = Chip8Display()
    display.set_pixel(1, 0, True)
    display.set_pixel(0, 1, True)
    pixels = display.pixels()
    assert len(pixels) == 64 * 32
    assert pixels[0] == Pixel(0, 0, False)
    assert pixels[1] == Pixel(1, 0, True)
    assert pixels[64] == Pixel(0, 1, True)
    assert pixels[-1] == Pixel(63, 31, False)

    display.clear()
    assert pixels[1].on is True
    assert display.lit_count() == 0


def test_render_pixels_uses_color_map() -> None:
    display = Chip8Display()
    display.color_map = [0x101010, 0xF0F0F0]
    display.set_pixel(63, 31, True)
    rows = display.render_pixels()
    assert len(rows) == 32 and len(rows[0]) == 64
    assert rows[31][63] == 0xF0F0F0
    assert rows[0][0] == 0x101010


def test_render_text() -> None:
    display = Chip8Display()
    display.set_pixel(2, 0, True)
    lines = display.render_text().splitlines()
    assert len(lines) == 32
    assert lines[0].startswith("..#.")
    assert set(lines[1]) == {"."}


def test_state_dump_and_load() -> None:
    display = Chip8Display()
    display.set_pixel(10, 10, True)
    state = display.dump_state()
    other = Chip8Display()
    other.load_state(state)
    assert other.is_on(10, 10)
    with pytest.raises(ValueError):
        other.load_state([True])
