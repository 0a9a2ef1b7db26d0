"""Complete rendering runs."""

from __future__ import annotations

import time

from .cache import FrameCache
from .config import RenderConfig
from .output import write_timings
from .renderer import DerivedFrameRenderer, FrameRenderer
from .reporting import ProgressCounter, error, log
from .scheduler import RenderReport, WorkScheduler, row_blocks


def _derived_renderer(config: RenderConfig, cap: int, quiet: bool) -> DerivedFrameRenderer:
    progress = ProgressCounter(len(row_blocks(config.height)), label="row block", quiet=quiet)
    scheduler = WorkScheduler(config, progress=progress)
    now = time.perf_counter()
    grid = scheduler.run_pixels(cap, FrameRenderer(config))
    progress.finish()
    if not quiet:
        print(f"Elapsed: {time.perf_counter() - now:.2f}s")
    return DerivedFrameRenderer(config, grid, cap)


def render_run(config: RenderConfig, *, quiet: bool = False) -> RenderReport:
    """Render every frame of ``config`` and write its timing log.

    Raises ``ConfigurationError`` before any worker starts when ``config`` is
    invalid. Frames whose image cannot be written are listed in the report's
    failures; the remaining frames are still rendered.
    """

    config.validate()
    caps = config.frame_caps()
    cache = None

    if config.strategy == "derived":
        renderer = _derived_renderer(config, max(caps), quiet)
    elif config.strategy == "cached":
        cache = FrameCache()
        renderer = FrameRenderer(config, cache)
    else:
        renderer = FrameRenderer(config)

    progress = ProgressCounter(len(caps), quiet=quiet)
    scheduler = WorkScheduler(config, progress=progress)
    report = scheduler.run_frames(caps, renderer)
    progress.finish()

    if cache is not None:
        report.stale = cache.stale_lookups
        log(f"Cache: {len(cache)} entries, {report.hits} hits, {report.misses} misses, {report.stale} stale lookups")

    if config.timings_path is not None:
        try:
            write_timings(config.timings_path, ((t.frame, t.seconds) for t in report.timings))
        except OSError as exc:
            error(f"Error Occurred: {exc}")

    return report
