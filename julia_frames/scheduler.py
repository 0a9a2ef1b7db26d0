"""Distribution of frames and pixel rows across a fixed pool of threads."""

from __future__ import annotations

import os
import queue
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, TypeVar

import numpy as np

from .config import RenderConfig
from .evaluator import BOUNDED
from .output import FrameWriteError
from .renderer import FrameRenderer
from .reporting import ProgressCounter, error, log

Unit = TypeVar("Unit")

ROW_BLOCK = 8


class SchedulingError(RuntimeError):
    """Raised when merged worker results do not cover the work set exactly once."""


@dataclass(frozen=True)
class TimingRecord:
    frame: int
    seconds: float


@dataclass(frozen=True)
class FrameFailure:
    frame: int
    message: str


@dataclass
class RenderReport:
    """Aggregate result of a run, assembled after every worker has finished."""

    timings: list[TimingRecord] = field(default_factory=list)
    failures: list[FrameFailure] = field(default_factory=list)
    hits: int = 0
    misses: int = 0
    stale: int = 0

    @property
    def frames(self) -> list[int]:
        return [record.frame for record in self.timings] + [failure.frame for failure in self.failures]

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class _WorkerResult:
    timings: list[TimingRecord] = field(default_factory=list)
    failures: list[FrameFailure] = field(default_factory=list)
    hits: int = 0
    misses: int = 0


def available_cpu_count() -> int:
    """Logical CPUs this process may run on, honouring affinity masks."""

    process_cpu_count = getattr(os, "process_cpu_count", None)
    if process_cpu_count is not None:
        return process_cpu_count() or 1
    if hasattr(os, "sched_getaffinity"):
        return len(os.sched_getaffinity(0)) or 1
    return os.cpu_count() or 1


def default_worker_count() -> int:
    """Worker threads for a run, keeping one core for the coordinating thread."""

    return max(1, available_cpu_count() - 1)


def fill_queue(units: Iterable[Unit]) -> "queue.Queue[Unit]":
    work: queue.Queue = queue.Queue()
    for unit in units:
        work.put(unit)
    return work


def row_blocks(height: int, block: int = ROW_BLOCK) -> list[range]:
    return [range(start, min(start + block, height)) for start in range(0, height, block)]


class WorkScheduler:
    """Drain a queue of work units with ``workers`` threads."""

    def __init__(self, config: RenderConfig, workers: int | None = None, progress: ProgressCounter | None = None):
        if workers is None:
            workers = config.workers if config.workers is not None else default_worker_count()
        if workers < 1:
            raise ValueError(f"worker count must be at least 1, got {workers}")
        self.config = config
        self.workers = workers
        self.progress = progress

    def _run_pool(self, work: queue.Queue, drain: Callable[[queue.Queue], object]) -> list:
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="julia-worker") as pool:
            futures = [pool.submit(drain, work) for _ in range(self.workers)]
            return [future.result() for future in futures]

    def _tick(self) -> None:
        if self.progress is not None:
            self.progress.increment()

    def _drain_frames(self, work: queue.Queue, render: Callable[[int], object]) -> _WorkerResult:
        result = _WorkerResult()
        while True:
            try:
                cap = work.get_nowait()
            except queue.Empty:
                return result
            start = time.perf_counter()
            try:
                frame = render(cap)
            except FrameWriteError as exc:
                error(f"Error Occurred: {exc}")
                result.failures.append(FrameFailure(cap, str(exc)))
            else:
                result.timings.append(TimingRecord(cap, time.perf_counter() - start))
                result.hits += getattr(frame, "hits", 0)
                result.misses += getattr(frame, "misses", 0)
            self._tick()

    def run_frames(self, caps: Iterable[int], renderer: FrameRenderer | Callable[[int], object]) -> RenderReport:
        """Render every distinct cap in ``caps`` and merge the per-worker results."""

        caps = list(dict.fromkeys(caps))
        render = renderer.render if isinstance(renderer, FrameRenderer) else renderer
        work = fill_queue(caps)
        log(f"Rendering {len(caps)} frames with {self.workers} workers")

        report = RenderReport()
        for result in self._run_pool(work, lambda q: self._drain_frames(q, render)):
            report.timings.extend(result.timings)
            report.failures.extend(result.failures)
            report.hits += result.hits
            report.misses += result.misses

        _check_complete(caps, report.frames, "frame")
        return report

    def _drain_rows(self, work: queue.Queue, renderer: FrameRenderer, cap: int) -> list[tuple[int, np.ndarray]]:
        rows: list[tuple[int, np.ndarray]] = []
        while True:
            try:
                block = work.get_nowait()
            except queue.Empty:
                return rows
            rows.extend(renderer.escape_rows(block, cap))
            self._tick()

    def run_pixels(self, cap: int, renderer: FrameRenderer) -> np.ndarray:
        """Compute one frame's escape grid with rows spread across the workers."""

        height, width = self.config.height, self.config.width
        blocks = row_blocks(height)
        work = fill_queue(blocks)
        log(f"Evaluating {height} rows of frame {cap} with {self.workers} workers")

        grid = np.full((height, width), BOUNDED, dtype=np.int32)
        produced: list[int] = []
        for rows in self._run_pool(work, lambda q: self._drain_rows(q, renderer, cap)):
            for y, values in rows:
                grid[y] = values
                produced.append(y)

        _check_complete(range(height), produced, "row")
        return grid


def _check_complete(expected: Iterable[int], produced: Iterable[int], unit: str) -> None:
    expected_counts = Counter(expected)
    produced_counts = Counter(produced)
    if produced_counts != expected_counts:
        missing = sorted((expected_counts - produced_counts).elements())
        extra = sorted((produced_counts - expected_counts).elements())
        raise SchedulingError(f"{unit} partition mismatch: missing {missing[:10]}, unexpected {extra[:10]}")
