"""Beeper tests."""

from __future__ import annotations

import sys

import pytest

from chip8emu.chip8.sound import Chip8Beeper


class DummySound:
    def __init__(self, buffer):
        self.buffer = buffer


class DummyChannel:
    def __init__(self, mixer):
        self.mixer = mixer

    def play(self, sound, loops=-1):
        self.mixer.last_sound = sound
        self.mixer.last_loops = loops

    def set_volume(self, volume):
        self.mixer.last_volume = volume

    def stop(self):
        self.mixer.stopped = True


class DummyMixer:
    def __init__(self):
        self.initialized = False
        self.last_sound = None
        self.last_volume = None
        self.last_loops = None
        self.stopped = False

    def init(self, **kwargs):
        self.initialized = True

    def get_init(self):
        return self.initialized

    def Channel(self, index):
        return DummyChannel(self)

    def Sound(self, *args, **kwargs):
        buffer = kwargs.get("buffer") or (args[0] if args else None)
        return DummySound(buffer)


class DummyPygame:
    def __init__(self):
        self.mixer = DummyMixer()


def test_beeper_history_follows_sound_timer():
    beeper = Chip8Beeper()
    beeper.update(0)
    beeper.update(3)
    beeper.update(2)
    beeper.update(0)
    assert beeper.history == [("tone_on",), ("tone_off",)]
    assert beeper.tone_on is False


def test_beeper_audio(monkeypatch):
    dummy = DummyPygame()
    monkeypatch.setitem(sys.modules, "pygame", dummy)

    beeper = Chip8Beeper(enable_audio=True)
    beeper.update(5)
    assert dummy.mixer.initialized is True
    assert dummy.mixer.last_sound is not None
    assert dummy.mixer.last_loops == -1
    assert dummy.mixer.last_volume == pytest.approx(beeper.volume)
    assert len(dummy.mixer.last_sound.buffer) == beeper.sample_rate
    beeper.update(0)
    assert dummy.mixer.stopped is True


def test_beeper_without_mixer_stays_silent(monkeypatch):
    monkeypatch.setitem(sys.modules, "pygame", None)

    beeper = Chip8Beeper(enable_audio=True)
    beeper.update(1)
    assert beeper.tone_on is True
    assert beeper.enable_audio is False
    beeper.shutdown()
    assert beeper.history[-1] == ("tone_off",)
