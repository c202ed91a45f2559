"""Input and renderer bridges: a pygame window and a headless recorder."""

from typing import Iterable, Optional, Tuple

import numpy as np
import pygame

from chipvm.config import EmulatorConfig
from chipvm.constants import NUM_KEYS
from chipvm.controller import InputSnapshot
from chipvm.errors import DisplayError
from chipvm.rendering import Color, chip8_display_to_rgb, save_screenshot

# COSMAC VIP keypad laid over the left side of a QWERTY keyboard
#   1 2 3 C      1 2 3 4
#   4 5 6 D  ->  Q W E R
#   7 8 9 E      A S D F
#   A 0 B F      Z X C V
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}

PAUSE_KEY = pygame.K_SPACE
QUIT_KEY = pygame.K_ESCAPE


class PygameFrontend:
    """Window, keyboard and frame clock backed by pygame."""

    def __init__(self, config: EmulatorConfig, title: str = "CHIP8"):
        self.config = config
        self.keypad = [False] * NUM_KEYS
        try:
            pygame.init()
            self.screen = pygame.display.set_mode(
                (config.width * config.scale, config.height * config.scale)
            )
        except pygame.error as e:
            pygame.quit()
            raise DisplayError(f"Could not create window: {e}") from e
        pygame.display.set_caption(title)
        self.clock = pygame.time.Clock()

    def poll(self) -> InputSnapshot:
        pause_toggled = False
        quit_requested = False
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                quit_requested = True
            elif event.type == pygame.KEYDOWN:
                if event.key == QUIT_KEY:
                    quit_requested = True
                elif event.key == PAUSE_KEY:
                    # KEYDOWN fires once per press, held keys do not repeat
                    pause_toggled = not pause_toggled
                elif event.key in KEY_MAP:
                    self.keypad[KEY_MAP[event.key]] = True
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    self.keypad[KEY_MAP[event.key]] = False
        return InputSnapshot(tuple(self.keypad), pause_toggled, quit_requested)

    def present(self, display, colors: Tuple[Color, Color], pixel_outlines: bool) -> None:
        on_color, off_color = colors
        frame = chip8_display_to_rgb(display, self.config.scale, on_color, off_color, pixel_outlines)
        # surfarray is indexed [x, y]
        pygame.surfarray.blit_array(self.screen, frame.swapaxes(0, 1))
        pygame.display.flip()

    def wait(self) -> None:
        """Frame pacing through pygame's clock."""
        self.clock.tick(self.config.cadence_hz)

    def close(self) -> None:
        pygame.quit()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class HeadlessFrontend:
    """Bridges without a window.

    Input comes from an optional script of snapshots, after which the keypad
    stays idle. Presented frames are counted and the latest one is kept.
    """

    def __init__(self, script: Optional[Iterable[InputSnapshot]] = None):
        self.script = iter(script or ())
        self.frames_presented = 0
        self.last_frame: Optional[np.ndarray] = None
        self.colors: Optional[Tuple[Color, Color]] = None
        self.pixel_outlines = False

    def poll(self) -> InputSnapshot:
        return next(self.script, InputSnapshot())

    def present(self, display, colors: Tuple[Color, Color], pixel_outlines: bool) -> None:
        self.last_frame = np.array(display, dtype=np.bool_)
        self.colors = colors
        self.pixel_outlines = pixel_outlines
        self.frames_presented += 1

    def save(self, filename: str, scale: int) -> None:
        """Write the most recent frame to an image file.

        Raises:
            DisplayError: No frame was presented, or the image could not be written
        """
        if self.last_frame is None:
            raise DisplayError("No frame has been presented yet")
        try:
            save_screenshot(self.last_frame, filename, scale, self.colors, self.pixel_outlines)
        except (ValueError, OSError) as e:
            raise DisplayError(f"Could not save screenshot {filename}: {e}") from e
