"""Tests for memory and register operations."""

import pytest
from chipvm import execute


class TestBasicMemory:
    """Test basic register loads and adds."""

    def test_set_basic(self, fresh_state):
        """6XNN - Set VX = NN."""
        state = execute(fresh_state, 0x600A)
        assert state.V[0] == 0xA

    def test_set_flag_register(self, fresh_state):
        """6FNN writes VF like any other register."""
        state = execute(fresh_state, 0x6F7E)
        assert state.V[0xF] == 0x7E

    def test_add_basic(self, fresh_state):
        """7XNN - Add NN to VX."""
        state = fresh_state.replace(V=fresh_state.V.at[1].set(0x10))
        state = execute(state, 0x7105)
        assert state.V[1] == 0x15

    def test_add_wraps_without_touching_flag(self, fresh_state):
        """7XNN - 0xFF + 1 wraps to 0 and VF keeps its value."""
        state = fresh_state.replace(V=fresh_state.V.at[3].set(0xFF).at[0xF].set(0x00))
        state = execute(state, 0x7301)
        assert state.V[3] == 0x00
        assert state.V[0xF] == 0x00

    def test_add_does_not_clear_flag(self, fresh_state):
        """Test 7XNN leaves VF alone."""
        state = fresh_state.replace(V=fresh_state.V.at[3].set(0x01).at[0xF].set(0x01))
        state = execute(state, 0x7302)
        assert state.V[3] == 0x03
        assert state.V[0xF] == 0x01

    def test_add_large_wrap(self, fresh_state):
        """Test 7XNN wraps a large sum."""
        state = fresh_state.replace(V=fresh_state.V.at[2].set(0xF0))
        state = execute(state, 0x7220)
        assert state.V[2] == 0x10


class TestIndexRegister:
    """Test I register operations."""

    @pytest.mark.parametrize("value", [0x000, 0x123, 0x200, 0x500, 0xEA0, 0xFFF])
    def test_set_index(self, fresh_state, value):
        """ANNN - Set I register to NNN."""
        state = execute(fresh_state, 0xA000 | value)
        assert state.I == value

    def test_set_index_multiple_operations(self, fresh_state):
        """Test ANNN replaces the index each time."""
        state = fresh_state
        for value in (0x111, 0x222, 0x000):
            state = execute(state, 0xA000 | value)
            assert state.I == value


class TestRandom:
    """Test random number generation."""

    def test_random_zero_mask(self, fresh_state):
        """CXNN - Random AND with 0x00 is always 0."""
        state = execute(fresh_state, 0xC000)
        assert state.V[0] == 0

    @pytest.mark.parametrize("mask", [0x01, 0x0F, 0x80, 0xFF])
    def test_random_respects_mask(self, fresh_state, mask):
        """Test CXNN masks the random byte."""
        state = execute(fresh_state, 0xC600 | mask)
        assert int(state.V[6]) & ~mask == 0

    def test_random_advances_key(self, fresh_state):
        """Test CXNN advances the PRNG key."""
        state = execute(fresh_state, 0xC1FF)
        assert not (state.rng == fresh_state.rng).all()

    def test_random_preserves_state(self, fresh_state):
        """Test CXNN touches only VX and the key."""
        state = execute(fresh_state, 0x6142)
        state = execute(state, 0xA300)

        after = execute(state, 0xC0FF)

        assert after.V[1] == 0x42
        assert after.I == 0x300
        assert after.pc == state.pc
