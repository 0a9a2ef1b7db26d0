"""Run configuration for Julia frame sequences."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path

import PIL.Image

FRACTALS = ("julia", "mandelbrot")
STRATEGIES = ("cached", "direct", "derived")

DEFAULT_ORIGINS = {
    "julia": (0.5, 0.5),
    "mandelbrot": (0.6, 0.5),
}


class ConfigurationError(ValueError):
    """Raised when a run cannot start with the supplied parameters."""


@dataclass(frozen=True)
class RenderConfig:
    """Parameters that describe a full rendering run."""

    width: int = 1920
    height: int = 1080
    scale: float = math.pi
    origin_x: float = 0.5
    origin_y: float = 0.5
    fractal: str = "julia"
    c: complex = complex(-0.8, 0.156)
    threshold: float = 2.0
    max_iterations: int = 2000
    output_dir: Path = field(default_factory=lambda: Path("julia"))
    extension: str = "bmp"
    final_frame_only: bool = True
    timings_path: Path | None = field(default_factory=lambda: Path("timings.csv"))
    workers: int | None = None
    strategy: str = "cached"

    @property
    def aspect(self) -> float:
        return self.width / self.height

    def frame_caps(self) -> list[int]:
        """Return the iteration caps of the frames this run produces."""

        if self.final_frame_only:
            return [self.max_iterations]
        return list(range(0, self.max_iterations + 1))

    def frame_path(self, cap: int) -> Path:
        return Path(self.output_dir) / f"{cap}.{self.extension}"

    def validate(self) -> "RenderConfig":
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"image size must be positive, got {self.width}x{self.height}")
        if self.max_iterations <= 0:
            raise ConfigurationError(f"maximum iteration cap must be positive, got {self.max_iterations}")
        if not self.threshold > 0:
            raise ConfigurationError(f"escape threshold must be positive, got {self.threshold}")
        if not self.scale > 0:
            raise ConfigurationError(f"plane scale must be positive, got {self.scale}")
        if self.fractal not in FRACTALS:
            raise ConfigurationError(f"unknown fractal '{self.fractal}'. Valid choices: {', '.join(FRACTALS)}.")
        if self.strategy not in STRATEGIES:
            raise ConfigurationError(f"unknown strategy '{self.strategy}'. Valid choices: {', '.join(STRATEGIES)}.")
        if not self.extension or "." in self.extension or "/" in self.extension:
            raise ConfigurationError(f"invalid image extension '{self.extension}'")
        if f".{self.extension.lower()}" not in PIL.Image.registered_extensions():
            raise ConfigurationError(f"image extension '{self.extension}' is not supported by Pillow")
        if self.workers is not None and self.workers < 1:
            raise ConfigurationError(f"worker count must be at least 1, got {self.workers}")
        return self
