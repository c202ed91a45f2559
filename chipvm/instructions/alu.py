"""CHIP-8 ALU operations (8xxx).

Every operation receives VX, VY and the current VF as int32 scalars and returns
the new VX and VF. Narrowing to uint8 happens once, in the dispatcher.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chipvm.constants import FLAG_REGISTER
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction


def alu_set(vx, vy, vf):
    """8XY0 - Set: VX = VY."""
    return vy, vf


def alu_or(vx, vy, vf):
    """8XY1 - Binary OR: VX |= VY, VF reset."""
    return vx | vy, jnp.zeros_like(vf)


def alu_and(vx, vy, vf):
    """8XY2 - Binary AND: VX &= VY, VF reset."""
    return vx & vy, jnp.zeros_like(vf)


def alu_xor(vx, vy, vf):
    """8XY3 - Logical XOR: VX ^= VY, VF reset."""
    return vx ^ vy, jnp.zeros_like(vf)


def alu_add(vx, vy, vf):
    """8XY4 - Add: VX += VY, set carry flag."""
    result = vx + vy
    return result & 0xFF, jnp.astype(result > 0xFF, jnp.int32)


def alu_sub_xy(vx, vy, vf):
    """8XY5 - Subtract: VX -= VY, VF = NOT borrow."""
    return (vx - vy) & 0xFF, jnp.astype(vx >= vy, jnp.int32)


def alu_shift_right(vx, vy, vf):
    """8XY6 - Shift right: VX >>= 1, VF = shifted-out bit."""
    return vx >> 1, vx & 1


def alu_sub_yx(vx, vy, vf):
    """8XY7 - Subtract: VX = VY - VX, VF = NOT borrow."""
    return (vy - vx) & 0xFF, jnp.astype(vy >= vx, jnp.int32)


def alu_shift_left(vx, vy, vf):
    """8XYE - Shift left: VX <<= 1, VF = shifted-out bit."""
    return (vx << 1) & 0xFF, (vx & 0x80) >> 7


def alu_undefined(vx, vy, vf):
    """Undefined ALU operation.

    Only fills the lax.switch slots for N nibbles that ``is_supported`` rejects
    before dispatch.
    """
    return vx, vf


# N nibble -> branch index into the dispatcher table
_ALU_BRANCH = jnp.array([0, 1, 2, 3, 4, 5, 6, 7, 9, 9, 9, 9, 9, 9, 8, 9], dtype=jnp.int32)


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    vx = jnp.astype(state.V[instruction.x], jnp.int32)
    vy = jnp.astype(state.V[instruction.y], jnp.int32)
    vf = jnp.astype(state.V[FLAG_REGISTER], jnp.int32)

    def _alu_shift_right(vx, vy, vf):
        if not state.modern_mode:
            vx = vy
        return alu_shift_right(vx, vy, vf)

    def _alu_shift_left(vx, vy, vf):
        if not state.modern_mode:
            vx = vy
        return alu_shift_left(vx, vy, vf)

    result, flag = jax.lax.switch(
        _ALU_BRANCH[instruction.n],
        [alu_set, alu_or, alu_and, alu_xor, alu_add,
         alu_sub_xy, _alu_shift_right, alu_sub_yx, _alu_shift_left, alu_undefined],
        vx, vy, vf
    )

    # Flag written last so VF as destination ends up holding the flag
    new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
    new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
    return state.replace(V=new_V)
