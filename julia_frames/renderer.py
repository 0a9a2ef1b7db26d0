"""Rendering of single frames from escape-time samples."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import numpy as np

from .cache import FrameCache
from .config import RenderConfig
from .evaluator import BOUNDED, SampleEvaluator
from .output import colorize, write_frame_image


@dataclass(frozen=True)
class FrameData:
    """Escape grid of one frame and how it was obtained."""

    cap: int
    grid: np.ndarray
    hits: int = 0
    misses: int = 0
    path: Optional[Path] = None


def derive_grid(grid: np.ndarray, cap: int) -> np.ndarray:
    """Restrict an escape grid computed at a larger cap to ``cap``."""

    grid = np.asarray(grid)
    return np.where((grid >= 0) & (grid < cap), grid, BOUNDED).astype(np.int32)


class FrameRenderer:
    """Evaluate every pixel of a frame, consulting ``cache`` when given."""

    def __init__(self, config: RenderConfig, cache: FrameCache | None = None):
        self.config = config
        self.cache = cache
        self.evaluator = SampleEvaluator(config)

    def _row(self, y: int, cap: int) -> tuple[np.ndarray, int]:
        cache = self.cache
        width = self.config.width
        row = np.full(width, BOUNDED, dtype=np.int32)
        pending = np.ones(width, dtype=np.bool_)
        if cache is not None:
            for x in range(width):
                cached = cache.lookup((x, y), cap)
                if cached is not None:
                    row[x] = cached
                    pending[x] = False
        hits = width - int(np.count_nonzero(pending))
        self.evaluator.row(y, cap, pending, row)
        if cache is not None:
            for x in np.flatnonzero(pending & (row != BOUNDED)):
                cache.record((int(x), y), int(row[x]))
        return row, hits

    def escape_rows(self, rows: Iterable[int], cap: int) -> list[tuple[int, np.ndarray]]:
        return [(y, self._row(y, cap)[0]) for y in rows]

    def escape_grid(self, cap: int) -> FrameData:
        grid = np.empty((self.config.height, self.config.width), dtype=np.int32)
        hits = 0
        for y in range(self.config.height):
            grid[y], row_hits = self._row(y, cap)
            hits += row_hits
        return FrameData(cap=cap, grid=grid, hits=hits, misses=grid.size - hits)

    def render(self, cap: int) -> FrameData:
        """Compute, color and write one frame.

        Raises ``FrameWriteError`` when the image cannot be written.
        """

        frame = self.escape_grid(cap)
        path = write_frame_image(
            colorize(frame.grid, cap),
            self.config.output_dir,
            cap,
            self.config.extension,
        )
        return FrameData(cap=cap, grid=frame.grid, hits=frame.hits, misses=frame.misses, path=path)


class DerivedFrameRenderer(FrameRenderer):
    """Frames cut from one escape grid computed at the largest cap."""

    def __init__(self, config: RenderConfig, source: np.ndarray, source_cap: int):
        super().__init__(config)
        self.source = np.asarray(source)
        self.source_cap = source_cap

    def escape_grid(self, cap: int) -> FrameData:
        if cap > self.source_cap:
            raise ValueError(f"cannot derive frame {cap} from a grid computed at cap {self.source_cap}")
        grid = derive_grid(self.source, cap)
        return FrameData(cap=cap, grid=grid, hits=grid.size)
