"""Tests for the execution controller and its run/pause/quit state machine."""

import jax.numpy as jnp
import pytest
from chipvm import (
    Controller, EmulatorConfig, FramePacer, InputSnapshot, NullPacer, RunState,
    StackUnderflowError,
)
from chipvm.controller import next_run_state
from chipvm.frontend import HeadlessFrontend
from chipvm.logging import ConsoleLogger
from conftest import state_with_program

PAUSE = InputSnapshot(pause_toggled=True)
QUIT = InputSnapshot(quit=True)
IDLE = InputSnapshot()


def make_controller(state, script=(), **config):
    frontend = HeadlessFrontend(script)
    controller = Controller(
        state, frontend, frontend,
        config=EmulatorConfig(**config),
        pacer=NullPacer(),
        logger=ConsoleLogger(log_level="CRITICAL"),
    )
    return controller, frontend


class TestRunStateTransitions:
    """Test the run state machine."""

    @pytest.mark.parametrize("current, snapshot, expected", [
        (RunState.RUNNING, IDLE, RunState.RUNNING),
        (RunState.RUNNING, PAUSE, RunState.PAUSED),
        (RunState.PAUSED, PAUSE, RunState.RUNNING),
        (RunState.PAUSED, IDLE, RunState.PAUSED),
        (RunState.RUNNING, QUIT, RunState.QUIT),
        (RunState.PAUSED, QUIT, RunState.QUIT),
        (RunState.QUIT, PAUSE, RunState.QUIT),
        (RunState.RUNNING, InputSnapshot(pause_toggled=True, quit=True), RunState.QUIT),
    ])
    def test_next_run_state(self, current, snapshot, expected):
        """Test each input signal from each run state."""
        assert next_run_state(current, snapshot) is expected

    def test_keys_do_not_change_run_state(self):
        """Test keypad presses never change the run state."""
        keys = InputSnapshot(keypad=(True,) * 16)
        assert next_run_state(RunState.RUNNING, keys) is RunState.RUNNING


class TestScenarios:
    """Test whole programs driven through the controller."""

    def test_clear_and_jump_to_self(self):
        """00E0 1200: screen stays clear, PC is 0x200 before every fetch."""
        state = state_with_program(0x00E0, 0x1200)
        state = state.replace(display=state.display.at[5, 5].set(True))
        controller, frontend = make_controller(state)

        for _ in range(10):
            assert controller.state.pc == 0x200
            controller.cycle()
            controller.cycle()

        assert not controller.state.display.any()
        assert controller.state.pc == 0x200
        assert not frontend.last_frame.any()

    def test_load_then_add(self):
        """Test 6A05 7A02 leaves VA = 7 after two cycles."""
        controller, _ = make_controller(state_with_program(0x6A05, 0x7A02))
        controller.cycle()
        controller.cycle()
        assert controller.state.V[0xA] == 7

    def test_instructions_per_frame(self):
        """Test several instructions run in one cycle."""
        controller, _ = make_controller(state_with_program(0x6A05, 0x7A02), instructions_per_frame=2)
        controller.cycle()
        assert controller.state.V[0xA] == 7
        assert controller.instructions == 2
        assert controller.cycles == 1

    def test_current_instruction_is_tracked(self):
        """Test the controller records the last decoded instruction."""
        controller, _ = make_controller(state_with_program(0x6A05))
        controller.cycle()
        assert controller.current_instruction.raw == 0x6A05


class TestPause:
    """Test the paused state."""

    def test_paused_cycles_change_nothing(self):
        """Test paused cycles execute nothing and freeze the timers."""
        state = state_with_program(0x7001, 0x1200)
        state = state.replace(delay_timer=jnp.asarray(50, dtype=jnp.uint8))
        controller, frontend = make_controller(state, script=[IDLE, PAUSE] + [IDLE] * 5)

        controller.cycle()
        before = controller.state
        controller.cycle()
        assert controller.run_state is RunState.PAUSED

        for _ in range(5):
            controller.cycle()
            assert controller.state.pc == before.pc
            assert (controller.state.V == before.V).all()
            assert (controller.state.display == before.display).all()
            assert controller.state.delay_timer == before.delay_timer
            assert controller.state.sound_timer == before.sound_timer

        assert frontend.frames_presented == 7

    def test_resume_restores_progress(self):
        """Test toggling pause again resumes execution."""
        state = state_with_program(0x7001, 0x1200)
        controller, _ = make_controller(state, script=[PAUSE, IDLE, PAUSE, IDLE])

        controller.cycle()  # pauses before executing
        controller.cycle()
        assert controller.state.V[0] == 0

        controller.cycle()  # resumes and executes 7001
        assert controller.run_state is RunState.RUNNING
        assert controller.state.V[0] == 1


class TestQuit:
    """Test quitting and cycle budgets."""

    def test_quit_stops_execution(self):
        """Test the quit signal ends the run before executing."""
        controller, frontend = make_controller(state_with_program(0x7001, 0x1200), script=[IDLE, QUIT])
        assert controller.run() is RunState.QUIT
        assert controller.state.V[0] == 1
        assert controller.cycle() is RunState.QUIT
        assert frontend.frames_presented == 1

    def test_quit_while_paused(self):
        """Test quit is honoured while paused."""
        controller, _ = make_controller(state_with_program(0x1200), script=[PAUSE, IDLE, QUIT])
        assert controller.run() is RunState.QUIT

    def test_run_respects_cycle_budget(self):
        """Test run stops after max_cycles."""
        controller, _ = make_controller(state_with_program(0x7001, 0x1200))
        assert controller.run(max_cycles=6) is RunState.RUNNING
        assert controller.cycles == 6
        assert controller.state.V[0] == 3


class TestInputAndTimers:
    """Test input latching and timer ticks."""

    def test_keypad_latched_each_cycle(self):
        """Test the keypad snapshot is copied into the state every cycle."""
        pressed = tuple(i == 0xB for i in range(16))
        controller, _ = make_controller(state_with_program(0x1200), script=[InputSnapshot(keypad=pressed)])

        controller.cycle()
        assert controller.state.keypad[0xB]
        controller.cycle()
        assert not controller.state.keypad.any()

    def test_timers_tick_once_per_cycle(self):
        """Test timers tick once per cycle."""
        state = state_with_program(0x6005, 0xF015, 0x1204)  # DT = 5, then spin
        controller, _ = make_controller(state)
        controller.cycle()
        controller.cycle()
        assert controller.state.delay_timer == 4
        controller.run(max_cycles=10)
        assert controller.state.delay_timer == 0

    def test_wait_for_key_resumes_on_press(self):
        """Test FX0A holds the PC until a key is pressed."""
        pressed = tuple(i == 4 for i in range(16))
        script = [IDLE, IDLE, InputSnapshot(keypad=pressed)]
        controller, _ = make_controller(state_with_program(0xF30A, 0x1202), script=script)

        controller.cycle()
        controller.cycle()
        assert controller.state.pc == 0x200
        controller.cycle()
        assert controller.state.V[3] == 4
        assert controller.state.pc == 0x202

    def test_renderer_receives_colors_and_outline_flag(self):
        """Test configured colors and outlines reach the renderer."""
        controller, frontend = make_controller(
            state_with_program(0x1200), fg_color="#FF0000", bg_color="#000080", pixel_outlines=False
        )
        controller.cycle()
        assert frontend.colors == ((255, 0, 0), (0, 0, 128))
        assert frontend.pixel_outlines is False


class TestFatalErrors:
    """Test fatal machine errors."""

    def test_fatal_error_propagates_with_last_good_state(self):
        """Test the error carries the PC and the state stays at the last good step."""
        controller, _ = make_controller(state_with_program(0x6A05, 0x00EE))
        controller.cycle()
        with pytest.raises(StackUnderflowError) as excinfo:
            controller.cycle()

        assert excinfo.value.pc == 0x204
        assert controller.state.V[0xA] == 5
        assert controller.state.pc == 0x202


class TestFramePacer:
    """Test wall-clock pacing."""

    def test_sleeps_for_remaining_period(self):
        """Test the pacer sleeps only for what is left of the period."""
        now = [0.0]
        sleeps = []

        def sleep(seconds):
            sleeps.append(seconds)
            now[0] += seconds

        pacer = FramePacer(50.0, clock=lambda: now[0], sleep=sleep)
        pacer.wait()
        now[0] += 0.005
        pacer.wait()

        assert sleeps[0] == pytest.approx(0.02)
        assert sleeps[1] == pytest.approx(0.015)

    def test_does_not_sleep_when_behind(self):
        """Test the pacer does not sleep when it is behind."""
        now = [0.0]
        sleeps = []
        pacer = FramePacer(60.0, clock=lambda: now[0], sleep=sleeps.append)

        pacer.wait()
        now[0] += 1.0
        pacer.wait()

        assert len(sleeps) == 1
