"""CHIP-8 rendering utilities for visualization."""

import numpy as np
from typing import Tuple

from PIL import Image

Color = Tuple[int, int, int]


def chip8_display_to_rgb(
    display,
    scale: int = 8,
    on_color: Color = (255, 255, 255),
    off_color: Color = (0, 0, 0),
    pixel_outlines: bool = False,
) -> np.ndarray:
    """Convert CHIP-8 boolean display to RGB array with optional upscaling.

    Args:
        display: Boolean array of shape (width, height) representing the framebuffer
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: white)
        off_color: RGB color for "off" pixels (default: black)
        pixel_outlines: Draw a one-pixel border in ``off_color`` around every lit
            pixel. Ignored when ``scale`` is below 3 since nothing would be left
            of the pixel itself.

    Returns:
        RGB array of shape (height*scale, width*scale, 3) with uint8 values
    """
    pixels = np.array(display, dtype=np.bool_)

    # (width, height) -> (height, width) row-major image
    pixels = pixels.T
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)

    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Apply upscaling using nearest neighbor interpolation
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    if pixel_outlines and scale >= 3:
        cell_border = np.zeros((scale, scale), dtype=np.bool_)
        cell_border[[0, -1], :] = True
        cell_border[:, [0, -1]] = True
        lit = np.repeat(np.repeat(pixels, scale, axis=0), scale, axis=1)
        rgb_frame[lit & np.tile(cell_border, (height, width))] = off_color

    return rgb_frame


def create_color_scheme(
    scheme: str = "classic",
) -> Tuple[Color, Color]:
    """Get predefined color schemes for CHIP-8 rendering.

    Args:
        scheme: Color scheme name ("mono", "classic", "amber", "white", "blue", "retro", "octo")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "mono": ((255, 255, 255), (0, 0, 0)),  # White on black
        "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
        "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
        "white": ((0, 0, 0), (255, 255, 255)),  # Black on white
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
        "octo": ((255, 204, 0), (153, 102, 0)),  # Octo default palette
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]


def parse_color(value: str) -> Color:
    """Parse ``#RRGGBB`` or ``#RRGGBBAA`` into an RGB tuple. Alpha is discarded."""
    digits = value[1:] if value.startswith("#") else value
    if len(digits) not in (6, 8):
        raise ValueError(f"Invalid color '{value}', expected #RRGGBB or #RRGGBBAA")
    try:
        packed = int(digits[:6], 16)
    except ValueError:
        raise ValueError(f"Invalid color '{value}', expected hexadecimal digits") from None
    return (packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF


def save_screenshot(
    display,
    filename: str,
    scale: int = 8,
    colors: Tuple[Color, Color] = ((255, 255, 255), (0, 0, 0)),
    pixel_outlines: bool = False,
) -> None:
    """Write the framebuffer to an image file."""
    on_color, off_color = colors
    frame = chip8_display_to_rgb(display, scale, on_color, off_color, pixel_outlines)
    Image.fromarray(frame).save(filename)
