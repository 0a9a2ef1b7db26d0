"""Color mapping and file output for rendered frames."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import numpy as np
import PIL.Image
from matplotlib.colors import hsv_to_rgb

from .evaluator import BOUNDED

BACKGROUND = (0, 0, 0)
VALUE_EXPONENT = 0.25
TIMINGS_HEADER = "frame, time"


class FrameWriteError(OSError):
    """Raised when a frame image cannot be written."""

    def __init__(self, frame: int, path: Path, cause: OSError):
        super().__init__(f"could not write frame {frame} to {path}: {cause}")
        self.frame = frame
        self.path = path


def _escaped_mask(grid: np.ndarray, cap: int) -> np.ndarray:
    return (grid >= 0) & (grid < cap)


def _hsv_for(fraction: np.ndarray) -> np.ndarray:
    hsv = np.stack(
        (fraction, np.ones_like(fraction), fraction ** VALUE_EXPONENT),
        axis=-1,
    )
    return hsv_to_rgb(hsv)


def colorize(grid: np.ndarray, cap: int) -> np.ndarray:
    """Map an escape grid to an ``(height, width, 3)`` uint8 RGB array."""

    grid = np.asarray(grid)
    rgb = np.zeros(grid.shape + (3,), dtype=np.uint8)
    rgb[...] = BACKGROUND
    if cap <= 0:
        return rgb
    escaped = _escaped_mask(grid, cap)
    if not np.any(escaped):
        return rgb
    fraction = grid[escaped].astype(np.float64) / np.float64(cap)
    rgb[escaped] = np.uint8(np.clip(_hsv_for(fraction) * 255, 0, 255))
    return rgb


def color_for(result: int | None, cap: int) -> tuple[int, int, int]:
    """Color of a single escape result under ``cap``."""

    if result is None or result == BOUNDED or not 0 <= result < cap:
        return BACKGROUND
    pixel = colorize(np.array([[result]], dtype=np.int32), cap)[0, 0]
    return tuple(int(channel) for channel in pixel)


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def write_frame_image(rgb: np.ndarray, output_dir: Path, cap: int, image_format: str) -> Path:
    """Persist one frame as ``<output_dir>/<cap>.<image_format>``."""

    output_dir = Path(output_dir)
    frame_path = output_dir / f"{cap}.{image_format}"
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        PIL.Image.fromarray(rgb).save(str(frame_path), format=_pil_format_name(image_format))
    except OSError as exc:
        raise FrameWriteError(cap, frame_path, exc) from exc
    return frame_path


def write_timings(path: Path, timings: Iterable[tuple[int, float]]) -> None:
    """Write the ``frame, time`` log, one line per frame in the given order."""

    with open(path, "w") as handle:
        handle.write(TIMINGS_HEADER)
        for frame, seconds in timings:
            handle.write(f"\n{frame}, {seconds}")
