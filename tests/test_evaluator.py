from __future__ import annotations

import math

import numpy as np
import pytest

from julia_frames import PlaneMapping, RenderConfig, SampleEvaluator, evaluate, evaluate_sample

JULIA_C = complex(-0.8, 0.156)


def _points(n: int = 15):
    re = np.linspace(-1.8, 1.8, n)
    im = np.linspace(-1.1, 1.1, n)
    return [complex(a, b) for a in re for b in im]


def test_zero_cap_is_bounded_without_iterating():
    class Exploding(complex):
        def __mul__(self, other):
            raise AssertionError("recurrence evaluated")

    assert evaluate(JULIA_C, Exploding(100, 100), 0) is None


def test_negative_cap_is_bounded():
    assert evaluate(JULIA_C, 5 + 5j, -3) is None


@pytest.mark.parametrize(
    "c, cap, expected",
    [
        (1 + 0j, 5, 2),  # 1, 2, 5
        (1 + 0j, 2, None),
        (1 + 0j, 3, 2),
        (2 + 0j, 5, 1),  # 2, 6
        (3 + 0j, 1, 0),
        (0.5 + 0j, 10, 4),  # 0.5, 0.75, 1.0625, 1.6289..., 3.153...
        (-2 + 0j, 100, None),  # settles on the threshold, never above it
        (0j, 50, None),
    ],
)
def test_mandelbrot_points_by_hand(c, cap, expected):
    assert evaluate(c, 0j, cap) == expected


def test_threshold_is_configurable():
    assert evaluate(2 + 0j, 0j, 5, threshold=2.0) == 1
    assert evaluate(2 + 0j, 0j, 5, threshold=1.5) == 0


def test_escape_iteration_does_not_depend_on_cap():
    caps = [1, 2, 3, 5, 8, 13, 40]
    for z0 in _points():
        results = [evaluate(JULIA_C, z0, cap) for cap in caps]
        escaped = [r for r in results if r is not None]
        assert len(set(escaped)) <= 1
        for cap, result in zip(caps, results):
            if result is not None:
                assert result < cap
                # every larger cap finds the same iteration
                for larger_cap, larger in zip(caps, results):
                    if larger_cap > cap:
                        assert larger == result


def test_bounded_at_cap_is_bounded_below_it():
    for z0 in _points():
        for cap in (4, 9, 25):
            if evaluate(JULIA_C, z0, cap) is None:
                assert all(evaluate(JULIA_C, z0, smaller) is None for smaller in range(cap))


def test_four_by_four_corner_sample():
    config = RenderConfig(width=4, height=4, max_iterations=5)
    mapping = PlaneMapping.from_config(config)
    corner = mapping.pixel_to_complex(0, 0)
    assert corner.real == pytest.approx(-math.pi / 2)
    assert corner.imag == pytest.approx(-math.pi / 2)

    # z1 = z0**2 + c = (0 + pi**2/2 i) + (-0.8 + 0.156i), already far outside |z| = 2
    z1 = corner * corner + JULIA_C
    assert abs(z1) > 2.0
    assert evaluate_sample(config, 0, 0, 5) == 0
    assert evaluate(JULIA_C, corner, 5) == 0


def test_center_sample_maps_to_origin():
    mapping = PlaneMapping(width=10, height=6, scale=math.pi, origin_x=0.5, origin_y=0.5)
    assert mapping.pixel_to_complex(5, 3) == 0j


def test_sample_grid_matches_scalar_mapping():
    config = RenderConfig(width=7, height=5, scale=3.3, origin_x=0.6, origin_y=0.45)
    mapping = PlaneMapping.from_config(config)
    re, im = mapping.sample_grid()
    for y in range(config.height):
        for x in range(config.width):
            assert complex(re[x], im[y]) == mapping.pixel_to_complex(x, y)


def test_sample_evaluator_agrees_with_evaluate_sample(mandelbrot_config):
    evaluator = SampleEvaluator(mandelbrot_config)
    for y in range(mandelbrot_config.height):
        for x in range(mandelbrot_config.width):
            assert evaluator(x, y, 15) == evaluate_sample(mandelbrot_config, x, y, 15)


def test_mandelbrot_uses_sample_as_parameter(mandelbrot_config):
    evaluator = SampleEvaluator(mandelbrot_config)
    sample = evaluator.point(3, 4)
    assert evaluator(3, 4, 15) == evaluate(sample, 0j, 15)


def test_row_kernel_matches_pixel_evaluation(small_config):
    evaluator = SampleEvaluator(small_config)
    for cap in (0, 1, 7, 12):
        for y in range(small_config.height):
            pending = np.ones(small_config.width, dtype=np.bool_)
            row = np.full(small_config.width, -1, dtype=np.int32)
            evaluator.row(y, cap, pending, row)
            expected = [evaluator(x, y, cap) for x in range(small_config.width)]
            assert [None if v == -1 else int(v) for v in row] == expected


def test_row_kernel_skips_samples_that_are_not_pending(small_config):
    evaluator = SampleEvaluator(small_config)
    pending = np.zeros(small_config.width, dtype=np.bool_)
    pending[::2] = True
    row = np.full(small_config.width, 99, dtype=np.int32)
    evaluator.row(0, 12, pending, row)
    assert np.all(row[1::2] == 99)
    for x in range(0, small_config.width, 2):
        expected = evaluator(x, 0, 12)
        assert row[x] == (-1 if expected is None else expected)


def test_kernels_release_the_gil():
    from julia_frames.evaluator import _escape_iteration, _escape_row

    assert _escape_iteration.targetoptions["nogil"]
    assert _escape_row.targetoptions["nogil"]
