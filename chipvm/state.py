"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chipvm.constants import (
    MEMORY_SIZE, NUM_KEYS, NUM_REGISTERS, PROGRAM_START, FONT_START, FONT_DATA,
    SCREEN_WIDTH, SCREEN_HEIGHT, STACK_SIZE,
)


@dataclass(frozen=True)
class StackState:
    """Bounded return-address stack for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))

    @property
    def depth(self) -> int:
        return int(self.pointer)

    @property
    def capacity(self) -> int:
        return self.data.shape[0]


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state."""
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    stack: StackState = field(default_factory=lambda: StackState())
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    modern_mode: bool = field(pytree_node=False, default=True)

    @property
    def width(self) -> int:
        return self.display.shape[0]

    @property
    def height(self) -> int:
        return self.display.shape[1]


def create_state(
    rng: jax.random.PRNGKey = jax.random.PRNGKey(0),
    width: int = SCREEN_WIDTH,
    height: int = SCREEN_HEIGHT,
    modern_mode: bool = True,
) -> EmulatorState:
    """Create initial emulator state with font data loaded.

    Args:
        rng: PRNG key consumed by the CXNN instruction
        width: Logical framebuffer width in pixels
        height: Logical framebuffer height in pixels
        modern_mode: Select modern quirk behaviour (8XY6/8XYE, BNNN, FX55/FX65)
    """
    state = EmulatorState(
        rng,
        display=jnp.zeros((width, height), dtype=jnp.bool_),
        modern_mode=modern_mode,
    )
    font = jnp.array(FONT_DATA, dtype=jnp.uint8)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(font))
