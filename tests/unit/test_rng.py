"""
Unit tests for the per-instance normal variate generator.
"""

import numpy as np
import pytest

from option_engine.core.rng import RandomGenerator


def test_normals_have_standard_moments():
    draws = RandomGenerator(seed=1).normals(10_000)

    assert draws.shape == (10_000,)
    assert abs(draws.mean()) < 0.1
    assert abs(draws.var() - 1.0) < 0.2


def test_next_normal_moments():
    gen = RandomGenerator(seed=2)
    draws = np.array([gen.next_normal() for _ in range(10_000)])

    assert abs(draws.mean()) < 0.1
    assert abs(draws.var() - 1.0) < 0.2


def test_spare_is_cached_and_consumed():
    gen = RandomGenerator(seed=3)
    assert not gen.has_spare

    gen.next_normal()
    assert gen.has_spare

    gen.next_normal()
    assert not gen.has_spare


def test_odd_batch_leaves_spare_for_next_call():
    gen = RandomGenerator(seed=4)
    gen.normals(3)
    assert gen.has_spare

    gen.normals(1)
    assert not gen.has_spare


def test_spare_emitted_first_in_batch():
    first = RandomGenerator(seed=5)
    first.next_normal()
    spare_then_batch = first.normals(4)

    second = RandomGenerator(seed=5)
    pair = [second.next_normal(), second.next_normal()]

    assert spare_then_batch[0] == pair[1]


def test_reset_discards_spare():
    gen = RandomGenerator(seed=6)
    gen.next_normal()
    gen.reset()
    assert not gen.has_spare


def test_same_seed_reproduces_stream():
    a = RandomGenerator(seed=42).normals(1000)
    b = RandomGenerator(seed=42).normals(1000)
    np.testing.assert_array_equal(a, b)


def test_instances_do_not_share_state():
    """Drawing from one generator leaves another's stream untouched."""
    reference = RandomGenerator(seed=7).normals(10)

    a = RandomGenerator(seed=7)
    b = RandomGenerator(seed=7)
    b.normals(500)
    b.next_normal()

    np.testing.assert_array_equal(a.normals(10), reference)


def test_spawned_children_are_independent_and_reproducible():
    children = RandomGenerator(seed=8).spawn(3)
    streams = [child.normals(100) for child in children]

    assert not np.array_equal(streams[0], streams[1])
    assert not np.array_equal(streams[1], streams[2])

    again = [child.normals(100) for child in RandomGenerator(seed=8).spawn(3)]
    for original, repeated in zip(streams, again):
        np.testing.assert_array_equal(original, repeated)


def test_zero_size_batch():
    assert RandomGenerator(seed=9).normals(0).shape == (0,)


def test_negative_size_raises():
    with pytest.raises(ValueError):
        RandomGenerator(seed=10).normals(-1)
