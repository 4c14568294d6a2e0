"""Monte Carlo loop over independent simulated runs."""

from __future__ import annotations

import threading
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, TypeVar

import numpy as np

from edge_sim.simulator.random_source import NumpyRandomSource, RandomSource, spawn_seeds

P = TypeVar("P")
R = TypeVar("R")

SimulateFn = Callable[[P, RandomSource, int, bool], R]


class SimulationCancelled(RuntimeError):
    def __init__(self, completed: int, total: int) -> None:
        super().__init__(f"Simulation cancelled after {completed}/{total} runs")
        self.completed = completed
        self.total = total


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class Ensemble(Generic[R]):
    """All run summaries in run order; ``sample_run`` is run 0 with full detail."""

    sample_run: R
    runs: list[R]


def resolve_seed(seed: Optional[int]) -> int:
    if seed is not None:
        return int(seed)
    return int(np.random.SeedSequence().entropy)


def _run_chunk(
    simulate: SimulateFn,
    params: P,
    start: int,
    seeds: Sequence[np.random.SeedSequence],
) -> list[R]:
    results = []
    for offset, child in enumerate(seeds):
        run_id = start + offset
        source = NumpyRandomSource.from_seed(child)
        results.append(simulate(params, source, run_id, run_id == 0))
    return results


def run_ensemble(
    simulate: SimulateFn,
    params: P,
    count: int,
    seed: int,
    max_workers: int = 1,
    chunk_size: Optional[int] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> Ensemble[R]:
    if count < 1:
        raise ValueError("count must be at least 1")
    seeds = spawn_seeds(seed, count)

    if max_workers <= 1:
        runs: list[R] = []
        for run_id, child in enumerate(seeds):
            if cancel_token is not None and cancel_token.cancelled:
                raise SimulationCancelled(run_id, count)
            source = NumpyRandomSource.from_seed(child)
            runs.append(simulate(params, source, run_id, run_id == 0))
        return Ensemble(sample_run=runs[0], runs=runs)

    if chunk_size is None:
        chunk_size = max(1, -(-count // (max_workers * 4)))
    starts = list(range(0, count, chunk_size))
    runs = []
    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(_run_chunk, simulate, params, start, seeds[start : start + chunk_size])
            for start in starts
        ]
        for future in futures:
            if cancel_token is not None and cancel_token.cancelled:
                for pending in futures:
                    pending.cancel()
                raise SimulationCancelled(len(runs), count)
            runs.extend(future.result())
    return Ensemble(sample_run=runs[0], runs=runs)
