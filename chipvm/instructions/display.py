"""CHIP-8 display operations."""

import jax.numpy as jnp
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction
from chipvm.constants import FLAG_REGISTER, MEMORY_SIZE, SPRITE_WIDTH, MAX_SPRITE_HEIGHT

# Pre-computed sprite-local coordinates, shape (SPRITE_WIDTH, MAX_SPRITE_HEIGHT)
cols, rows = jnp.meshgrid(jnp.arange(SPRITE_WIDTH), jnp.arange(MAX_SPRITE_HEIGHT), indexing='ij')


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    The origin wraps around the screen, the sprite itself is clipped at the
    right and bottom edges. Pixels are XORed with the sprite and VF is set
    when a lit pixel is turned off.
    """
    width, height = state.width, state.height
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % width
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % height

    xs = sprite_x + cols
    ys = sprite_y + rows
    visible = (rows < instruction.n) & (xs < width) & (ys < height)

    addresses = (jnp.astype(state.I, jnp.int32) + rows) % MEMORY_SIZE
    sprite_bytes = jnp.astype(state.memory[addresses], jnp.int32)
    sprite = (((sprite_bytes >> (7 - cols)) & 1) == 1) & visible

    # Clipped cells are pointed off-screen so the scatter drops them
    xs = jnp.where(visible, xs, width)
    ys = jnp.where(visible, ys, height)
    current = state.display.at[xs, ys].get(mode='fill', fill_value=False)
    collision = jnp.any(current & sprite)

    return state.replace(
        display=state.display.at[xs, ys].set(current ^ sprite, mode='drop'),
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
