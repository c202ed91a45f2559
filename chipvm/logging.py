"""Console logging utilities for chipvm.

Provides a small levelled console logger and an instruction tracer that acts
as the executor's diagnostics sink.
"""

import time
import sys

from chipvm.decode import DecodedInstruction, is_supported
from chipvm.disassemble import disassemble
from chipvm.state import EmulatorState


class ConsoleLogger:
    """Flexible console logger with level filtering and colors."""

    def __init__(
        self,
        name: str = "chipvm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.stream = stream if stream is not None else sys.stdout
        self.use_colors = (
            use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, file=self.stream, flush=True)

    def debug(self, message: str):
        """Log debug message."""
        self.log("DEBUG", message)

    def info(self, message: str):
        """Log info message."""
        self.log("INFO", message)

    def warning(self, message: str):
        """Log warning message."""
        self.log("WARNING", message)

    def error(self, message: str):
        """Log error message."""
        self.log("ERROR", message)

    def critical(self, message: str):
        """Log critical message."""
        self.log("CRITICAL", message)

    def log_state(self, state: EmulatorState, level: str = "INFO"):
        """Dump program counter, index, timers and registers."""
        self.log(level, f"PC: 0x{int(state.pc):04X}  I: 0x{int(state.I):04X}  "
                        f"SP: {int(state.stack.pointer)}  "
                        f"DT: {int(state.delay_timer)}  ST: {int(state.sound_timer)}")
        for row in range(0, 16, 4):
            regs = "  ".join(f"V{r:X}: 0x{int(state.V[r]):02X}" for r in range(row, row + 4))
            self.log(level, regs)


class InstructionTracer:
    """Diagnostics sink passed to ``execute`` as its ``trace`` callback.

    Every instruction is logged at DEBUG level. Unsupported words are counted
    and reported at WARNING level the first time each one is seen.
    """

    def __init__(self, logger: ConsoleLogger):
        self.logger = logger
        self.unsupported = {}

    def __call__(self, state: EmulatorState, instruction: DecodedInstruction):
        address = int(state.pc) - 2
        if not is_supported(instruction):
            count = self.unsupported.get(instruction.raw, 0)
            self.unsupported[instruction.raw] = count + 1
            if count == 0:
                self.logger.warning(
                    f"Unsupported opcode 0x{instruction.raw:04X} at 0x{address:04X} ignored"
                )
        if self.logger._should_log("DEBUG"):
            self.logger.debug(
                f"Address: 0x{address:04X}, Opcode: 0x{instruction.raw:04X} Desc: {disassemble(instruction)}"
            )
