"""Uniform random sources for trade draws."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

import numpy as np


class RandomSource(Protocol):
    def random(self) -> float:  # pragma: no cover - interface
        """Return the next uniform float in [0, 1)."""


class NumpyRandomSource:
    def __init__(self, generator: np.random.Generator) -> None:
        self.generator = generator

    @classmethod
    def from_seed(cls, seed: Optional[int | np.random.SeedSequence]) -> "NumpyRandomSource":
        return cls(np.random.default_rng(seed))

    def random(self) -> float:
        return float(self.generator.random())


class SequenceRandomSource:
    """Replays a fixed list of draws, cycling when exhausted."""

    def __init__(self, draws: Sequence[float]) -> None:
        if not draws:
            raise ValueError("draws must not be empty")
        for value in draws:
            if not 0.0 <= value < 1.0:
                raise ValueError(f"draw out of range [0, 1): {value}")
        self.draws = list(draws)
        self._index = 0

    def random(self) -> float:
        value = self.draws[self._index % len(self.draws)]
        self._index += 1
        return value

    @property
    def consumed(self) -> int:
        return self._index


def spawn_seeds(seed: Optional[int], count: int) -> list[np.random.SeedSequence]:
    """Child seed sequences, one per run; child i depends only on (seed, i)."""
    return np.random.SeedSequence(seed).spawn(count)


def spawn_sources(seed: Optional[int], count: int) -> list[NumpyRandomSource]:
    return [NumpyRandomSource.from_seed(child) for child in spawn_seeds(seed, count)]
