"""
Standard normal variates via the Box-Muller transform.

Box-Muller turns two uniform draws into a *pair* of independent standard
normals. RandomGenerator returns one and caches the other as its spare.
The spare belongs to the generator instance, so concurrent simulation
workers each holding their own generator never share cached state.
"""

import math
from typing import Optional, Union

import numpy as np

_TWO_PI = 2.0 * math.pi


class RandomGenerator:
    """
    Per-instance source of standard normal variates.

    Args:
        seed: Integer seed, numpy SeedSequence, or None for fresh OS entropy

    Example:
        >>> gen = RandomGenerator(seed=42)
        >>> z = gen.next_normal()
        >>> batch = gen.normals(1000)
    """

    def __init__(self, seed: Union[int, np.random.SeedSequence, None] = None) -> None:
        if isinstance(seed, np.random.SeedSequence):
            self._seed_sequence = seed
        else:
            self._seed_sequence = np.random.SeedSequence(seed)
        self._uniform = np.random.default_rng(self._seed_sequence)
        self._spare: Optional[float] = None

    @property
    def has_spare(self) -> bool:
        return self._spare is not None

    def reset(self) -> None:
        """Discard the cached spare variate."""
        self._spare = None

    def spawn(self, n: int) -> list["RandomGenerator"]:
        """Create n statistically independent child generators."""
        return [RandomGenerator(child) for child in self._seed_sequence.spawn(n)]

    def _box_muller(self, pairs: int) -> tuple[np.ndarray, np.ndarray]:
        # 1 - U maps [0, 1) onto (0, 1] so the logarithm stays finite
        u1 = 1.0 - self._uniform.random(pairs)
        u2 = self._uniform.random(pairs)
        magnitude = np.sqrt(-2.0 * np.log(u1))
        angle = _TWO_PI * u2
        return magnitude * np.cos(angle), magnitude * np.sin(angle)

    def next_normal(self) -> float:
        """Return one standard normal variate, consuming the spare if cached."""
        if self._spare is not None:
            value = self._spare
            self._spare = None
            return value

        z0, z1 = self._box_muller(1)
        self._spare = float(z1[0])
        return float(z0[0])

    def normals(self, size: int) -> np.ndarray:
        """
        Return an array of standard normal variates.

        The cached spare (if any) is emitted first. Remaining variates are
        generated pairwise; when an odd count leaves one unused, it becomes
        the new spare.
        """
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")

        out = np.empty(size, dtype=np.float64)
        filled = 0
        if size > 0 and self._spare is not None:
            out[0] = self._spare
            self._spare = None
            filled = 1

        remaining = size - filled
        if remaining > 0:
            pairs = (remaining + 1) // 2
            z0, z1 = self._box_muller(pairs)
            stream = np.empty(2 * pairs, dtype=np.float64)
            stream[0::2] = z0
            stream[1::2] = z1
            out[filled:] = stream[:remaining]
            if 2 * pairs > remaining:
                self._spare = float(stream[-1])

        return out
