"""Tests for the pygame and headless bridges."""

import numpy as np
import pygame
import pytest
from chipvm import DisplayError, EmulatorConfig, InputSnapshot
from chipvm.frontend import KEY_MAP, HeadlessFrontend, PygameFrontend


@pytest.fixture
def window(monkeypatch):
    """Pygame front end on SDL's dummy video driver."""
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
    frontend = PygameFrontend(EmulatorConfig(scale=2))
    pygame.event.clear()
    yield frontend
    frontend.close()


def press(key):
    pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=key))


def release(key):
    pygame.event.post(pygame.event.Event(pygame.KEYUP, key=key))


class TestKeypad:
    """Test keyboard to hex keypad mapping."""

    def test_layout(self):
        """Test the four keyboard rows cover all sixteen keys once."""
        assert sorted(KEY_MAP.values()) == list(range(16))
        assert KEY_MAP[pygame.K_x] == 0x0
        assert KEY_MAP[pygame.K_4] == 0xC
        assert KEY_MAP[pygame.K_v] == 0xF

    def test_key_held_until_released(self, window):
        """Test a key stays down across polls until KEYUP."""
        press(pygame.K_x)
        assert window.poll().keypad[0x0]
        assert window.poll().keypad[0x0]

        release(pygame.K_x)
        assert not any(window.poll().keypad)

    def test_several_keys(self, window):
        """Test simultaneous presses are all reported."""
        press(pygame.K_1)
        press(pygame.K_f)
        keypad = window.poll().keypad
        assert keypad[0x1] and keypad[0xE]
        assert sum(keypad) == 2

    def test_unmapped_key_ignored(self, window):
        """Test keys outside the layout change nothing."""
        press(pygame.K_p)
        snapshot = window.poll()
        assert snapshot == InputSnapshot()


class TestControlKeys:
    """Test pause and quit signals."""

    def test_pause_is_edge_triggered(self, window):
        """Test a held SPACE toggles pause exactly once."""
        press(pygame.K_SPACE)
        assert window.poll().pause_toggled
        assert not window.poll().pause_toggled

        release(pygame.K_SPACE)
        assert not window.poll().pause_toggled

    def test_pause_is_not_a_keypad_key(self, window):
        """Test SPACE does not reach the keypad."""
        press(pygame.K_SPACE)
        assert not any(window.poll().keypad)

    def test_escape_quits(self, window):
        """Test ESC raises the quit signal."""
        press(pygame.K_ESCAPE)
        assert window.poll().quit

    def test_window_close_quits(self, window):
        """Test closing the window raises the quit signal."""
        pygame.event.post(pygame.event.Event(pygame.QUIT))
        assert window.poll().quit


class TestPresent:
    """Test frames reach the window surface."""

    def test_lit_pixel_drawn_scaled(self, window):
        """Test one lit pixel covers a scale x scale block."""
        display = np.zeros((64, 32), dtype=np.bool_)
        display[1, 0] = True
        window.present(display, ((255, 0, 0), (0, 0, 255)), pixel_outlines=False)

        assert tuple(window.screen.get_at((2, 0)))[:3] == (255, 0, 0)
        assert tuple(window.screen.get_at((3, 1)))[:3] == (255, 0, 0)
        assert tuple(window.screen.get_at((0, 0)))[:3] == (0, 0, 255)
        assert window.screen.get_size() == (128, 64)


class TestHeadlessFrontend:
    """Test the window-less bridges."""

    def test_script_then_idle(self):
        """Test scripted snapshots are replayed, then the keypad stays idle."""
        frontend = HeadlessFrontend([InputSnapshot(quit=True)])
        assert frontend.poll().quit
        assert frontend.poll() == InputSnapshot()

    def test_save_without_frame(self, tmp_path):
        """Test saving before any frame was presented."""
        with pytest.raises(DisplayError):
            HeadlessFrontend().save(str(tmp_path / "shot.png"), 2)

    def test_save_unknown_format(self, tmp_path):
        """Test saving to a path with no known image format."""
        frontend = HeadlessFrontend()
        frontend.present(np.zeros((64, 32), dtype=np.bool_), ((255, 255, 255), (0, 0, 0)), False)
        with pytest.raises(DisplayError):
            frontend.save(str(tmp_path / "shot.notanimage"), 2)
