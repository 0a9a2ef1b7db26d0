"""Shared fixtures: small grids that render in milliseconds."""

from __future__ import annotations

import pytest

from julia_frames import RenderConfig


@pytest.fixture()
def small_config(tmp_path) -> RenderConfig:
    return RenderConfig(
        width=12,
        height=9,
        max_iterations=12,
        output_dir=tmp_path / "frames",
        final_frame_only=False,
        timings_path=tmp_path / "timings.csv",
        workers=3,
    )


@pytest.fixture()
def mandelbrot_config(tmp_path) -> RenderConfig:
    return RenderConfig(
        width=16,
        height=10,
        origin_x=0.6,
        fractal="mandelbrot",
        max_iterations=15,
        output_dir=tmp_path / "mandelbrot",
        final_frame_only=False,
        timings_path=None,
        workers=2,
    )
