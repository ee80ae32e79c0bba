"""CHIP-8 beeper driven by the sound timer."""

from __future__ import annotations

from array import array
from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass
class Chip8Beeper:
    """Square wave tone that sounds while the sound timer is non-zero."""

    history: List[Tuple[str, ...]] = field(default_factory=list)
    sample_rate: int = 44100
    frequency: float = 440.0
    volume: float = 0.3
    enable_audio: bool = False

    def __post_init__(self) -> None:
        self._tone_on: bool = False
        self._audio_initialized: bool = False
        self._channel = None
        self._sound = None

    @property
    def tone_on(self) -> bool:
        return self._tone_on

    def update(self, sound_timer: int) -> None:
        """Follow the sound timer: on while it is above zero, off otherwise."""

        if sound_timer > 0 and not self._tone_on:
            self._start_tone()
        elif sound_timer <= 0 and self._tone_on:
            self._stop_tone()

    def shutdown(self) -> None:
        if self._tone_on:
            self._stop_tone()

    # ------------------------------------------------------------------
    # Audio control helpers
    # ------------------------------------------------------------------
    def _start_tone(self) -> None:
        self._tone_on = True
        self.history.append(("tone_on",))
        if not self._ensure_mixer():
            return
        self._channel.set_volume(self.volume)
        self._channel.play(self._sound, loops=-1)

    def _stop_tone(self) -> None:
        self._tone_on = False
        self.history.append(("tone_off",))
        if self._audio_initialized and self._channel is not None:
            self._channel.stop()

    def _ensure_mixer(self) -> bool:
        if not self.enable_audio:
            return False
        if self._audio_initialized:
            return True
        try:
            import pygame  # type: ignore

            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=self.sample_rate, size=-16, channels=1)
            self._channel = pygame.mixer.Channel(0)
            self._sound = pygame.mixer.Sound(buffer=self._render_period())
            self._audio_initialized = True
        except Exception:
            self.enable_audio = False
            self._channel = None
            self._sound = None
            self._audio_initialized = False
        return self._audio_initialized

    def _render_period(self) -> array:
        """One second of square wave, looped by the mixer channel."""

        amplitude = 32767
        half_period = max(int(self.sample_rate / (2.0 * self.frequency)), 1)
        buffer = array("h")
        for index in range(self.sample_rate):
            high = (index // half_period) % 2 == 0
            buffer.append(amplitude if high else -amplitude)
        return buffer
