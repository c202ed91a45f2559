"""CHIP-8 virtual machine package."""

from chipvm.state import EmulatorState, StackState, create_state
from chipvm.emulator import execute, load_rom, load_program, fetch, step, tick_timers
from chipvm.decode import DecodedInstruction, decode, is_supported
from chipvm.disassemble import disassemble
from chipvm.constants import *
from chipvm.errors import (
    ChipVMError, ConfigError, LoadError, RomLoadError, RomTooLargeError, DisplayError,
    MachineError, StackOverflowError, StackUnderflowError, ProgramCounterError,
    UnsupportedInstructionError,
)
from chipvm.config import EmulatorConfig, load_config
from chipvm.controller import Controller, RunState, InputSnapshot, FramePacer, NullPacer
from chipvm.rendering import chip8_display_to_rgb, create_color_scheme, parse_color

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "load_rom",
    "load_program",
    "DecodedInstruction",
    "decode",
    "is_supported",
    "disassemble",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "STACK_SIZE",
    "MEMORY_SIZE",
    "ChipVMError",
    "ConfigError",
    "LoadError",
    "RomLoadError",
    "RomTooLargeError",
    "DisplayError",
    "MachineError",
    "StackOverflowError",
    "StackUnderflowError",
    "ProgramCounterError",
    "UnsupportedInstructionError",
    "EmulatorConfig",
    "load_config",
    "Controller",
    "RunState",
    "InputSnapshot",
    "FramePacer",
    "NullPacer",
    "chip8_display_to_rgb",
    "create_color_scheme",
    "parse_color",
]
