"""Public API for rendering Julia frame sequences."""

from .cache import CacheConsistencyError, FrameCache
from .config import ConfigurationError, RenderConfig
from .evaluator import BOUNDED, PlaneMapping, SampleEvaluator, evaluate, evaluate_sample
from .output import FrameWriteError, color_for, colorize, write_frame_image, write_timings
from .pipeline import render_run
from .renderer import DerivedFrameRenderer, FrameData, FrameRenderer, derive_grid
from .scheduler import (
    FrameFailure,
    RenderReport,
    SchedulingError,
    TimingRecord,
    WorkScheduler,
    default_worker_count,
)

__all__ = [
    "BOUNDED",
    "CacheConsistencyError",
    "ConfigurationError",
    "DerivedFrameRenderer",
    "FrameCache",
    "FrameData",
    "FrameFailure",
    "FrameRenderer",
    "FrameWriteError",
    "PlaneMapping",
    "RenderConfig",
    "RenderReport",
    "SampleEvaluator",
    "SchedulingError",
    "TimingRecord",
    "WorkScheduler",
    "color_for",
    "colorize",
    "default_worker_count",
    "derive_grid",
    "evaluate",
    "evaluate_sample",
    "render_run",
    "write_frame_image",
    "write_timings",
]
