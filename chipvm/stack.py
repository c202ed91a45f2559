"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chipvm.constants import ADDRESS_MASK
from chipvm.errors import StackOverflowError, StackUnderflowError
from chipvm.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack."""
    masked_address = jnp.astype(address & ADDRESS_MASK, jnp.uint16)
    new_data = stack.data.at[stack.pointer].set(masked_address)
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack."""
    new_pointer = stack.pointer - 1
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address


def check_push(stack: StackState, pc: int, instruction: int) -> None:
    """Raise StackOverflowError if a push would exceed capacity."""
    if stack.depth >= stack.capacity:
        raise StackOverflowError(
            f"Call stack is full ({stack.capacity} entries)", pc, instruction
        )


def check_pop(stack: StackState, pc: int, instruction: int) -> None:
    """Raise StackUnderflowError if the stack is empty."""
    if stack.depth <= 0:
        raise StackUnderflowError("Return with an empty call stack", pc, instruction)
