from __future__ import annotations

import numpy as np
import PIL.Image
import pytest

from julia_frames import BOUNDED, FrameWriteError, color_for, colorize, write_frame_image, write_timings


def test_bounded_and_out_of_range_results_are_black():
    assert color_for(None, 10) == (0, 0, 0)
    assert color_for(BOUNDED, 10) == (0, 0, 0)
    assert color_for(10, 10) == (0, 0, 0)
    assert color_for(3, 0) == (0, 0, 0)


def test_color_follows_hue_and_value_curve():
    # t = 0.5: hue 0.5 is cyan, value 0.5 ** 0.25 = 0.8409
    assert color_for(5, 10) == (0, 214, 214)
    # t = 0 has zero value
    assert color_for(0, 10) == (0, 0, 0)


def test_colorize_matches_color_for():
    grid = np.array([[BOUNDED, 0, 1, 2], [3, 4, 5, 9], [6, 7, 8, BOUNDED]], dtype=np.int32)
    rgb = colorize(grid, 10)
    assert rgb.shape == (3, 4, 3)
    assert rgb.dtype == np.uint8
    for (y, x), value in np.ndenumerate(grid):
        result = None if value == BOUNDED else int(value)
        assert tuple(int(c) for c in rgb[y, x]) == color_for(result, 10)


def test_write_frame_image_names_file_by_cap(tmp_path):
    rgb = colorize(np.array([[1, 2], [BOUNDED, 3]], dtype=np.int32), 4)
    path = write_frame_image(rgb, tmp_path / "out", 4, "bmp")
    assert path == tmp_path / "out" / "4.bmp"
    with PIL.Image.open(path) as image:
        assert image.mode == "RGB"
        assert image.size == (2, 2)
        assert np.array_equal(np.asarray(image), rgb)


def test_write_frame_image_wraps_os_errors(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    with pytest.raises(FrameWriteError) as info:
        write_frame_image(np.zeros((1, 1, 3), dtype=np.uint8), blocker, 7, "png")
    assert info.value.frame == 7
    assert isinstance(info.value, OSError)


def test_timings_file_format(tmp_path):
    path = tmp_path / "timings.csv"
    write_timings(path, [(3, 0.5), (1, 0.25)])
    assert path.read_text() == "frame, time\n3, 0.5\n1, 0.25"
