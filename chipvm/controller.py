"""Execution controller: the run/pause/quit loop around the emulator core."""

import enum
import itertools
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, Sequence, Tuple

import jax.numpy as jnp
from tqdm import tqdm

from chipvm.config import EmulatorConfig
from chipvm.constants import NUM_KEYS
from chipvm.decode import DecodedInstruction
from chipvm.emulator import TraceFn, step, tick_timers
from chipvm.logging import ConsoleLogger
from chipvm.rendering import Color
from chipvm.state import EmulatorState


class RunState(enum.Enum):
    RUNNING = "running"
    PAUSED = "paused"
    QUIT = "quit"


@dataclass(frozen=True)
class InputSnapshot:
    """What the input side reports once per cycle.

    Attributes:
        keypad: 16 flags, one per hexadecimal key
        pause_toggled: True only on the cycle the pause key went down
        quit: Window closed or quit key pressed
    """
    keypad: Sequence[bool] = field(default_factory=lambda: (False,) * NUM_KEYS)
    pause_toggled: bool = False
    quit: bool = False


class InputBridge(Protocol):
    def poll(self) -> InputSnapshot: ...


class RendererBridge(Protocol):
    def present(self, display, colors: Tuple[Color, Color], pixel_outlines: bool) -> None: ...


class Pacer(Protocol):
    def wait(self) -> None: ...


class FramePacer:
    """Blocks so that successive ``wait`` calls are one period apart."""

    def __init__(
        self,
        cadence_hz: float,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.period = 1.0 / cadence_hz
        self.clock = clock
        self.sleep = sleep
        self.deadline = None

    def wait(self) -> None:
        now = self.clock()
        if self.deadline is None:
            self.deadline = now
        self.deadline += self.period
        remaining = self.deadline - now
        if remaining > 0:
            self.sleep(remaining)
        else:
            # Fell behind; drop the missed frames instead of bursting
            self.deadline = now


class NullPacer:
    """Never waits. For batch runs and tests."""

    def wait(self) -> None:
        pass


def next_run_state(current: RunState, snapshot: InputSnapshot) -> RunState:
    """Apply the quit signal and pause-toggle edge to the current run state."""
    if current is RunState.QUIT or snapshot.quit:
        return RunState.QUIT
    if snapshot.pause_toggled:
        return RunState.PAUSED if current is RunState.RUNNING else RunState.RUNNING
    return current


class Controller:
    """Owns one emulator state and drives it cycle by cycle.

    Each cycle polls input, then (unless paused) executes
    ``config.instructions_per_frame`` instructions, ticks the timers once,
    waits for the cadence and presents the framebuffer. Fatal machine errors
    propagate out of ``cycle``/``run`` and leave ``state`` as it was before
    the failing instruction.
    """

    def __init__(
        self,
        state: EmulatorState,
        input_bridge: InputBridge,
        renderer: RendererBridge,
        config: Optional[EmulatorConfig] = None,
        pacer: Optional[Pacer] = None,
        logger: Optional[ConsoleLogger] = None,
        trace: Optional[TraceFn] = None,
    ):
        self.config = config or EmulatorConfig()
        self.state = state
        self.input_bridge = input_bridge
        self.renderer = renderer
        self.pacer = pacer or FramePacer(self.config.cadence_hz)
        self.logger = logger or ConsoleLogger(log_level=self.config.log_level)
        self.trace = trace
        self.colors = self.config.colors()

        self.run_state = RunState.RUNNING
        self.current_instruction: Optional[DecodedInstruction] = None
        self.cycles = 0
        self.instructions = 0

    def _apply_input(self) -> None:
        snapshot = self.input_bridge.poll()
        self.state = self.state.replace(keypad=jnp.asarray(snapshot.keypad, dtype=jnp.bool_))

        previous = self.run_state
        self.run_state = next_run_state(previous, snapshot)
        if self.run_state is not previous:
            if self.run_state is RunState.PAUSED:
                self.logger.info("------- PAUSED -------")
            elif self.run_state is RunState.RUNNING:
                self.logger.info("------- RESUMED -------")
            else:
                self.logger.info("Quit requested")

    def _present(self) -> None:
        self.renderer.present(self.state.display, self.colors, self.config.pixel_outlines)

    def cycle(self) -> RunState:
        """Run one controller cycle and return the resulting run state."""
        if self.run_state is RunState.QUIT:
            return self.run_state

        self._apply_input()
        if self.run_state is RunState.QUIT:
            return self.run_state

        if self.run_state is RunState.PAUSED:
            self.pacer.wait()
            self._present()
            return self.run_state

        state = self.state
        for _ in range(self.config.instructions_per_frame):
            state, self.current_instruction = step(
                state, trace=self.trace, strict=self.config.strict_opcodes
            )
            # Commit per instruction so a fatal error leaves the last good state
            self.state = state
            self.instructions += 1

        self.state = tick_timers(self.state)
        self.cycles += 1
        self.pacer.wait()
        self._present()
        return self.run_state

    def run(self, max_cycles: Optional[int] = None, progress: bool = False) -> RunState:
        """Cycle until quit, or until ``max_cycles`` cycles have been attempted."""
        cycles = itertools.count() if max_cycles is None else range(max_cycles)
        for _ in tqdm(cycles, total=max_cycles, disable=not progress, unit="cycle"):
            if self.cycle() is RunState.QUIT:
                break
        return self.run_state
