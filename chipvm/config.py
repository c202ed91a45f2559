"""Emulator configuration.

Defaults live on :class:`EmulatorConfig`. A YAML file and ``key=value``
overrides are merged on top with OmegaConf, which also type-checks every field.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import yaml
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from chipvm.constants import FRAME_RATE, SCREEN_HEIGHT, SCREEN_WIDTH
from chipvm.errors import ConfigError
from chipvm.rendering import create_color_scheme, parse_color


@dataclass
class EmulatorConfig:
    """All knobs consumed by the controller and the front ends.

    Only ``width`` and ``height`` affect instruction semantics; everything
    else is presentation or pacing.
    """
    width: int = SCREEN_WIDTH
    height: int = SCREEN_HEIGHT
    scale: int = 20
    fg_color: str = "#FFFFFF"
    bg_color: str = "#000000"
    color_scheme: Optional[str] = None
    pixel_outlines: bool = True
    cadence_hz: float = FRAME_RATE
    instructions_per_frame: int = 1
    modern_mode: bool = True
    strict_opcodes: bool = False
    trace: bool = False
    log_level: str = "INFO"
    seed: int = 0

    @property
    def frame_period(self) -> float:
        return 1.0 / self.cadence_hz

    def colors(self) -> tuple[tuple[int, int, int], tuple[int, int, int]]:
        """Return the (on, off) RGB pair."""
        if self.color_scheme is not None:
            return create_color_scheme(self.color_scheme)
        return parse_color(self.fg_color), parse_color(self.bg_color)


def validate_config(config: EmulatorConfig) -> EmulatorConfig:
    """Check value ranges that the type system cannot express."""
    if config.width <= 0 or config.height <= 0:
        raise ConfigError(f"Display size must be positive, got {config.width}x{config.height}")
    if config.scale <= 0:
        raise ConfigError(f"Scale factor must be positive, got {config.scale}")
    if config.cadence_hz <= 0:
        raise ConfigError(f"Cadence must be positive, got {config.cadence_hz}")
    if config.instructions_per_frame <= 0:
        raise ConfigError(
            f"instructions_per_frame must be positive, got {config.instructions_per_frame}"
        )
    if config.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigError(f"Unknown log level '{config.log_level}'")
    try:
        config.colors()
    except ValueError as e:
        raise ConfigError(str(e)) from e
    return config


def load_config(path: Optional[str] = None, overrides: Sequence[str] = ()) -> EmulatorConfig:
    """Build a config from defaults, an optional YAML file and dotlist overrides.

    Args:
        path: YAML file whose keys are EmulatorConfig fields
        overrides: ``key=value`` strings, applied last

    Raises:
        ConfigError: Unknown key, wrong type, unreadable file or invalid value
    """
    try:
        cfg = OmegaConf.structured(EmulatorConfig)
        if path is not None:
            cfg = OmegaConf.merge(cfg, OmegaConf.load(path))
        if overrides:
            cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(list(overrides)))
        config = OmegaConf.to_object(cfg)
    except (OmegaConfBaseException, yaml.YAMLError, OSError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
    return validate_config(config)
