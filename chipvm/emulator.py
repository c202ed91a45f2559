"""Main CHIP-8 emulator execution engine."""

from typing import Callable, Optional

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction, decode, is_supported
from chipvm.constants import MAX_PROGRAM_SIZE, MEMORY_SIZE, PROGRAM_START
from chipvm.errors import ProgramCounterError, RomLoadError, RomTooLargeError, UnsupportedInstructionError
from chipvm.stack import check_pop, check_push
from chipvm.instructions.system import execute_system_instruction
from chipvm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset_modern,
    execute_jump_with_offset_legacy, execute_skip_if_key
)
from chipvm.instructions.alu import execute_alu_operation
from chipvm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipvm.instructions.display import execute_display
from chipvm.instructions.misc import execute_misc_instruction

TraceFn = Callable[[EmulatorState, DecodedInstruction], None]


@jax.jit
def _dispatch(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Apply a validated instruction, switching on its top nibble."""
    return jax.lax.switch(
        instruction.opcode,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset_modern if state.modern_mode else execute_jump_with_offset_legacy,
            execute_random,
            execute_display,
            execute_skip_if_key,
            execute_misc_instruction,
        ],
        state, instruction
    )


def execute(
    state: EmulatorState,
    instruction: int,
    trace: Optional[TraceFn] = None,
    strict: bool = False,
) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    The program counter must already point past the instruction word.

    Args:
        state: Current emulator state
        instruction: Raw 16-bit instruction word
        trace: Diagnostics sink called with the decoded instruction before any mutation
        strict: Raise on unsupported words instead of ignoring them

    Raises:
        StackOverflowError: 2NNN with a full call stack
        StackUnderflowError: 00EE with an empty call stack
        UnsupportedInstructionError: Unsupported word in strict mode
    """
    decoded = decode(int(instruction))
    if trace is not None:
        trace(state, decoded)

    if not is_supported(decoded):
        if strict:
            raise UnsupportedInstructionError("Unsupported instruction", int(state.pc), decoded.raw)
        return state

    if decoded.opcode == 0x2:
        check_push(state.stack, int(state.pc), decoded.raw)
    elif decoded.opcode == 0x0 and decoded.nn == 0xEE:
        check_pop(state.stack, int(state.pc), decoded.raw)

    return _dispatch(state, decoded)


def _pack_u16(high: int, low: int) -> int:
    """Pack two bytes into a big-endian 16-bit word."""
    return (int(high) << 8) | int(low)


def fetch(state: EmulatorState) -> tuple[EmulatorState, int]:
    """Fetch next instruction from memory and advance PC past it."""
    pc = int(state.pc)
    if pc + 1 >= MEMORY_SIZE:
        raise ProgramCounterError("Program counter outside memory", pc)
    high, low = np.asarray(state.memory[pc:pc + 2])
    return state.replace(pc=jnp.astype(pc + 2, jnp.uint16)), _pack_u16(high, low)


def step(state: EmulatorState, trace: Optional[TraceFn] = None, strict: bool = False) -> tuple[EmulatorState, DecodedInstruction]:
    """Fetch, decode and execute one instruction."""
    state, instruction = fetch(state)
    return execute(state, instruction, trace=trace, strict=strict), decode(instruction)


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement delay and sound timers toward zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def load_program(state: EmulatorState, data: bytes) -> EmulatorState:
    """Copy a program image into CHIP-8 memory starting at 0x200."""
    if len(data) > MAX_PROGRAM_SIZE:
        raise RomTooLargeError(len(data), MAX_PROGRAM_SIZE)
    if not data:
        return state
    rom_array = jnp.array(list(data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    try:
        with open(filename, 'rb') as f:
            rom_data = f.read()
    except OSError as e:
        raise RomLoadError(f"Rom file {filename} is corrupted or does not exist: {e}") from e
    return load_program(state, rom_data)
