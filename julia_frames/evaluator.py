"""Escape-time evaluation of the quadratic recurrence."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numba import njit

from .config import RenderConfig

BOUNDED = -1


@njit(nogil=True, cache=True)
def _escape_iteration(c_param, start_z, cap, threshold):
    z = start_z
    for i in range(cap):
        z = z * z + c_param
        if abs(z) > threshold:
            return i
    return BOUNDED


@njit(nogil=True, cache=True)
def _escape_row(re, im, c_param, julia, cap, threshold, pending, row):
    # only samples flagged in ``pending`` are iterated; the rest keep their value
    for x in range(re.shape[0]):
        if not pending[x]:
            continue
        sample = complex(re[x], im)
        if julia:
            row[x] = _escape_iteration(c_param, sample, cap, threshold)
        else:
            row[x] = _escape_iteration(sample, 0j, cap, threshold)
    return row


def evaluate(c_param: complex, start_z: complex, cap: int, threshold: float = 2.0) -> int | None:
    """Return the 0-based iteration at which ``z`` escapes, or ``None``.

    ``z`` starts at ``start_z`` and is updated ``z = z * z + c_param`` at most
    ``cap`` times. The magnitude is checked after every update; the index of
    the first update that exceeds ``threshold`` is returned. A cap of zero
    performs no iterations.
    """

    if cap <= 0:
        return None
    result = _escape_iteration(complex(c_param), complex(start_z), int(cap), float(threshold))
    return None if result == BOUNDED else int(result)


@dataclass(frozen=True)
class PlaneMapping:
    """Affine map from pixel coordinates to the complex plane."""

    width: int
    height: int
    scale: float
    origin_x: float
    origin_y: float

    @classmethod
    def from_config(cls, config: RenderConfig) -> "PlaneMapping":
        return cls(
            width=config.width,
            height=config.height,
            scale=config.scale,
            origin_x=config.origin_x,
            origin_y=config.origin_y,
        )

    @property
    def aspect(self) -> float:
        return self.width / self.height

    def pixel_to_complex(self, x: int, y: int) -> complex:
        re = (x / self.width - self.origin_x) * self.scale
        im = (y / self.height - self.origin_y) * self.scale / self.aspect
        return complex(re, im)

    def sample_grid(self) -> tuple[np.ndarray, np.ndarray]:
        """Real coordinates per column and imaginary coordinates per row."""

        xs = np.arange(self.width, dtype=np.float64)
        ys = np.arange(self.height, dtype=np.float64)
        re = (xs / np.float64(self.width) - np.float64(self.origin_x)) * np.float64(self.scale)
        im = (ys / np.float64(self.height) - np.float64(self.origin_y)) * np.float64(self.scale) / np.float64(self.aspect)
        return re, im


class SampleEvaluator:
    """Evaluate pixels of one configured fractal."""

    def __init__(self, config: RenderConfig):
        self.mapping = PlaneMapping.from_config(config)
        self.threshold = config.threshold
        self.julia = config.fractal == "julia"
        self.c = complex(config.c)
        self._re, self._im = self.mapping.sample_grid()

    def point(self, x: int, y: int) -> complex:
        return complex(float(self._re[x]), float(self._im[y]))

    def __call__(self, x: int, y: int, cap: int) -> int | None:
        sample = self.point(x, y)
        if self.julia:
            return evaluate(self.c, sample, cap, self.threshold)
        return evaluate(sample, 0j, cap, self.threshold)

    def row(self, y: int, cap: int, pending: np.ndarray, out: np.ndarray) -> np.ndarray:
        """Evaluate the pending samples of row ``y`` into ``out``, without holding the GIL."""

        return _escape_row(
            self._re, float(self._im[y]), self.c, self.julia, int(cap), float(self.threshold), pending, out
        )


def evaluate_sample(config: RenderConfig, x: int, y: int, cap: int) -> int | None:
    """Evaluate a single pixel of ``config``'s fractal."""

    sample = PlaneMapping.from_config(config).pixel_to_complex(x, y)
    if config.fractal == "julia":
        return evaluate(complex(config.c), sample, cap, config.threshold)
    return evaluate(sample, 0j, cap, config.threshold)
