"""Cross-frame cache of known escape iterations."""

from __future__ import annotations

import threading

Sample = tuple[int, int]


class CacheConsistencyError(RuntimeError):
    """Raised when two different escape iterations are recorded for one sample."""


class FrameCache:
    """Escape iterations shared by every frame of a run.

    A recorded value is the true escape iteration of the recurrence for that
    sample, so it answers any frame whose cap is larger than the value. Frames
    may finish in any order: a value found by a high cap frame is not an
    answer for a lower cap frame, and ``lookup`` reports it as a miss.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._table: dict[Sample, int] = {}
        self.stale_lookups = 0

    def lookup(self, sample: Sample, current_cap: int) -> int | None:
        with self._lock:
            iteration = self._table.get(sample)
            if iteration is not None and iteration >= current_cap:
                self.stale_lookups += 1
                return None
        return iteration

    def record(self, sample: Sample, iteration: int) -> None:
        if iteration < 0:
            raise ValueError(f"escape iteration must be non-negative, got {iteration}")
        with self._lock:
            existing = self._table.setdefault(sample, iteration)
        if existing != iteration:
            raise CacheConsistencyError(
                f"sample {sample} escaped at iteration {iteration}, cache holds {existing}"
            )

    def snapshot(self) -> dict[Sample, int]:
        with self._lock:
            return dict(self._table)

    def __len__(self) -> int:
        with self._lock:
            return len(self._table)

    def __contains__(self, sample: object) -> bool:
        with self._lock:
            return sample in self._table
