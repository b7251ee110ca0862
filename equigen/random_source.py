"""Random sources and weighted selection for equigen."""

import math
from abc import ABC, abstractmethod
from typing import Mapping, Optional, Sequence
import numpy as np

from .exceptions import ConfigurationError


class RandomSource(ABC):
    """Narrow random capability threaded through the engines."""

    @abstractmethod
    def next(self) -> float:
        """
        Return the next random number.

        Returns:
            Float in the half-open interval [0.0, 1.0)
        """
        pass


class NumpyRandomSource(RandomSource):
    """RandomSource backed by a NumPy PCG64 generator."""

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize the generator.

        Args:
            seed: Optional seed. None draws fresh entropy from the OS.
        """
        self.seed = seed
        self._rng = np.random.Generator(np.random.PCG64(seed))

    def next(self) -> float:
        return float(self._rng.random())


class SequenceRandomSource(RandomSource):
    """Scripted RandomSource that cycles through a fixed list of values."""

    def __init__(self, values: Sequence[float]):
        if not values:
            raise ValueError("SequenceRandomSource requires at least one value")
        for value in values:
            if not (0.0 <= value < 1.0):
                raise ValueError(f"Scripted values must be in [0, 1), got {value}")
        self.values = list(values)
        self.calls = 0

    def next(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


def weighted_choice(weights: Mapping[str, float], rng: RandomSource) -> str:
    """
    Select an outcome by relative weight.

    Draws a point uniformly over the cumulative weight sum and returns the
    first outcome whose cumulative weight exceeds it. Zero-weight outcomes
    are never returned.

    Args:
        weights: Mapping of outcome -> non-negative weight
        rng: Random source

    Returns:
        Selected outcome

    Raises:
        ConfigurationError: If the mapping is empty, has a negative or
            non-numeric weight, or sums to zero
    """
    if not weights:
        raise ConfigurationError("Cannot make a weighted choice from an empty table")

    total = 0.0
    for outcome, weight in weights.items():
        numeric = isinstance(weight, (int, float)) and not isinstance(weight, bool)
        if not numeric or not math.isfinite(weight) or weight < 0:
            raise ConfigurationError(f"Invalid weight for '{outcome}': {weight!r}")
        total += weight

    if total <= 0:
        raise ConfigurationError(f"All weights are zero: {sorted(weights)}")

    point = rng.next() * total
    cumulative = 0.0
    last_positive = None
    for outcome, weight in weights.items():
        if weight <= 0:
            continue
        cumulative += weight
        last_positive = outcome
        if point < cumulative:
            return outcome

    # Floating point accumulation can leave point == total
    return last_positive


def bernoulli(probability: float, rng: RandomSource) -> bool:
    """Return True with the given probability (clamped to [0, 1])."""
    return rng.next() < max(0.0, min(1.0, probability))
