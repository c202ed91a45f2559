"""Exception hierarchy for the CHIP-8 virtual machine."""

from typing import Optional


class ChipVMError(Exception):
    """Base class for every error raised by chipvm."""


class ConfigError(ChipVMError):
    """Invalid emulator configuration."""


class LoadError(ChipVMError):
    """The machine could not be prepared for execution."""


class RomLoadError(LoadError):
    """ROM file is missing or unreadable."""


class RomTooLargeError(LoadError):
    """Program image does not fit above the reserved region."""

    def __init__(self, size: int, max_size: int):
        super().__init__(f"Program is too big: {size} bytes, max allowed is {max_size} bytes")
        self.size = size
        self.max_size = max_size


class DisplayError(LoadError):
    """Presentation surface could not be created."""


class MachineError(ChipVMError):
    """Fatal machine-state violation. The current run cannot continue.

    Attributes:
        pc: Program counter at the point of failure (already advanced past the word)
        instruction: Raw 16-bit word being executed, if any
    """

    kind = "machine error"

    def __init__(self, message: str, pc: int, instruction: Optional[int] = None):
        self.pc = pc
        self.instruction = instruction
        location = f"PC=0x{pc:04X}"
        if instruction is not None:
            location += f", opcode=0x{instruction:04X}"
        super().__init__(f"{message} ({location})")


class StackOverflowError(MachineError):
    """Subroutine call with a full call stack."""

    kind = "stack overflow"


class StackUnderflowError(MachineError):
    """Return with an empty call stack."""

    kind = "stack underflow"


class ProgramCounterError(MachineError):
    """Program counter points outside addressable memory."""

    kind = "program counter out of bounds"


class UnsupportedInstructionError(MachineError):
    """Unsupported instruction word, raised only in strict mode."""

    kind = "unsupported instruction"
