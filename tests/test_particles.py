"""
Unit tests for the fixed-capacity particle buffer.
"""

import numpy as np
import pytest

from diffusion_sim import (
    CapacityExceeded,
    InvalidParameter,
    NumpyRandomSource,
    ParticleIndexError,
    ParticleSet,
)


def test_activate_returns_new_slot_range():
    particles = ParticleSet(capacity=10)
    assert particles.activate(4) == (0, 4)
    assert particles.activate(3) == (4, 7)
    assert particles.active_count() == 7
    assert len(particles) == 7


def test_activate_beyond_capacity_fails_without_change():
    particles = ParticleSet(capacity=5)
    particles.activate(3)
    with pytest.raises(CapacityExceeded):
        particles.activate(3)
    assert particles.active_count() == 3


def test_negative_counts_rejected():
    particles = ParticleSet(capacity=5)
    with pytest.raises(InvalidParameter):
        particles.activate(-1)
    with pytest.raises(InvalidParameter):
        particles.deactivate(1)


def test_position_roundtrip_and_index_checks():
    particles = ParticleSet(capacity=4)
    particles.activate(2)
    particles.set_position_at(1, 1.5, -0.5, 0.25)
    assert particles.position_at(1) == (1.5, -0.5, 0.25)

    with pytest.raises(ParticleIndexError):
        particles.position_at(2)
    with pytest.raises(IndexError):
        particles.set_position_at(-1, 0.0, 0.0, 0.0)


def test_deactivate_keeps_buffer_untouched():
    """Inert slots are just excluded; their data stays in place."""
    particles = ParticleSet(capacity=4)
    particles.activate(3)
    particles.set_position_at(2, 7.0, 0.0, 0.0)
    particles.deactivate(1)
    assert particles.active_count() == 2
    assert particles.x_coords().shape == (2,)
    assert particles.positions[0, 2] == 7.0


def test_place_at_source_spreads_laterally():
    particles = ParticleSet(capacity=200)
    particles.activate(200)
    particles.place_at_source(0, 200, 0.0, 4.0, NumpyRandomSource(3))
    pos = particles.active_positions()
    assert pos.shape == (200, 3)
    assert np.all(pos[:, 0] == 0.0)
    assert np.all(np.abs(pos[:, 1:]) <= 2.0)
    # A real spread, not a single point
    assert np.std(pos[:, 1]) > 0.5


def test_place_at_source_rejects_inactive_range():
    particles = ParticleSet(capacity=10)
    particles.activate(2)
    with pytest.raises(ParticleIndexError):
        particles.place_at_source(0, 5, 0.0, 4.0, NumpyRandomSource(0))
