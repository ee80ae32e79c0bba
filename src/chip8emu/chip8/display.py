"""CHIP-8 monochrome framebuffer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, NamedTuple


def _rgb(color: int) -> tuple:
    return ((color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF)


class Pixel(NamedTuple):
    x: int
    y: int
    on: bool


@dataclass
class Chip8Display:
    WIDTH: int = 64
    HEIGHT: int = 32

    color_map: List[int] = field(default_factory=lambda: [0x000000, 0xFFFFFF])
    _pixels: List[bool] = field(default_factory=lambda: [False] * (64 * 32))

    def _index(self, x: int, y: int) -> int:
        return (y % self.HEIGHT) * self.WIDTH + (x % self.WIDTH)

    # ------------------------------------------------------------------
    # Pixel access
    # ------------------------------------------------------------------
    def set_pixel(self, x: int, y: int, on: bool) -> bool:
        """Write a pixel with XOR semantics and report a collision.

        Coordinates wrap around both edges. Writing ``on`` over a lit pixel
        turns it off and returns True; every other write returns False.
        """

        index = self._index(x, y)
        if on and self._pixels[index]:
            self._pixels[index] = False
            return True
        self._pixels[index] = on
        return False

    def is_on(self, x: int, y: int) -> bool:
        return self._pixels[self._index(x, y)]

    def clear(self) -> None:
        self._pixels = [False] * (self.WIDTH * self.HEIGHT)

    def pixels(self) -> List[Pixel]:
        """Return a fresh row-major snapshot of every pixel."""

        return [
            Pixel(x, y, self._pixels[y * self.WIDTH + x])
            for y in range(self.HEIGHT)
            for x in range(self.WIDTH)
        ]

    def lit_count(self) -> int:
        return sum(1 for value in self._pixels if value)

    def load_state(self, values: List[bool]) -> None:
        if len(values) != self.WIDTH * self.HEIGHT:
            raise ValueError("framebuffer state must hold 2048 pixels")
        self._pixels = [bool(value) for value in values]

    def dump_state(self) -> List[bool]:
        return list(self._pixels)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render_pixels(self) -> List[List[int]]:
        off_color, on_color = self.color_map
        return [
            [on_color if self._pixels[y * self.WIDTH + x] else off_color for x in range(self.WIDTH)]
            for y in range(self.HEIGHT)
        ]

    def render_text(self, on: str = "#", off: str = ".") -> str:
        rows = []
        for y in range(self.HEIGHT):
            start = y * self.WIDTH
            rows.append("".join(on if value else off for value in self._pixels[start:start + self.WIDTH]))
        return "\n".join(rows)

    def render_pygame_surface(self, scaling: int = 1):
        """Render the framebuffer into a pygame Surface.

        Parameters
        ----------
        scaling:
            Integer scale factor applied to both axes.

        Returns
        -------
        pygame.Surface
            RGB surface representing the current screen.

        Raises
        ------
        RuntimeError
            If pygame is not available.
        """

        if scaling <= 0:
            raise ValueError("scaling factor must be positive")

        try:
            import pygame  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("pygame is required for render_pygame_surface") from exc

        surface = pygame.Surface((self.WIDTH * scaling, self.HEIGHT * scaling))
        off_color, on_color = (_rgb(color) for color in self.color_map)
        surface.fill(off_color)
        for pixel in self.pixels():
            if pixel.on:
                surface.fill(on_color, (pixel.x * scaling, pixel.y * scaling, scaling, scaling))
        return surface
