import numpy as np
import pytest

from mandelzoom.engine import evaluate
from mandelzoom.errors import ZeroBudgetError
from mandelzoom.renderer import (
    FrameSnapshot,
    _row_bands,
    compose_overlay,
    render_frame,
    selection_segments,
    to_intensity,
)
from mandelzoom.viewport import SurfaceExtent, SurfacePoint, Viewport


def test_budget_of_one_renders_uniformly_inside():
    snapshot = FrameSnapshot(Viewport.initial(), 1, SurfaceExtent(12, 8))
    result = render_frame(snapshot, workers=1)
    assert result.bitmap.shape == (8, 12)
    assert result.bitmap.dtype == np.uint8
    assert np.all(result.iterations == 1)
    assert np.all(result.bitmap == 0)


def test_every_pixel_matches_the_engine():
    surface = SurfaceExtent(6, 4)
    viewport = Viewport.initial()
    snapshot = FrameSnapshot(viewport, 15, surface)
    result = render_frame(snapshot, workers=1)
    for row in range(surface.height):
        for col in range(surface.width):
            expected = evaluate(viewport.map_pixel(SurfacePoint.of(col, row), surface), 15)
            assert result.iterations[row, col] == expected.iterations
            assert result.bitmap[row, col] == to_intensity(np.array([expected.iterations]), 15)[0]


def test_parallel_render_is_deterministic():
    snapshot = FrameSnapshot(Viewport.initial(), 20, SurfaceExtent(16, 10))
    serial = render_frame(snapshot, workers=1)
    parallel = render_frame(snapshot, workers=2)
    again = render_frame(snapshot, workers=2)
    assert serial.bitmap.tobytes() == parallel.bitmap.tobytes() == again.bitmap.tobytes()


def test_zero_budget_snapshot_is_rejected():
    with pytest.raises(ZeroBudgetError):
        FrameSnapshot(Viewport.initial(), 0, SurfaceExtent(4, 4))


@pytest.mark.parametrize("height, workers", [(1, 8), (10, 3), (800, 16)])
def test_row_bands_cover_every_row_once(height, workers):
    rows = [row for start, stop in _row_bands(height, workers) for row in range(start, stop)]
    assert rows == list(range(height))


def test_to_intensity_inverts_normalized_value():
    values = to_intensity(np.array([0, 5, 10]), 10)
    assert values.tolist() == [255, 127, 0]


@pytest.mark.parametrize("iterations, budget, expected", [(0, 10, 255), (1, 2, 127), (1, 3, 170), (10, 10, 0)])
def test_to_intensity_rounds_half_up(iterations, budget, expected):
    assert to_intensity(np.array([iterations]), budget)[0] == expected


def test_selection_segments_close_the_rectangle():
    segments = selection_segments(SurfacePoint.of(2, 3), SurfacePoint.of(10, -1))
    assert len(segments) == 4
    for (_, end), (start, _) in zip(segments, segments[1:] + segments[:1]):
        assert end == start
    corners = {point for segment in segments for point in segment}
    assert corners == {(2.0, 3.0), (10.0, 3.0), (10.0, -1.0), (2.0, -1.0)}


def test_overlay_does_not_touch_bitmap():
    bitmap = np.full((10, 20), 200, dtype=np.uint8)
    original = bitmap.copy()
    image = compose_overlay(bitmap, selection_segments(SurfacePoint.of(2, 2), SurfacePoint.of(10, 6)))
    assert np.array_equal(bitmap, original)
    assert image.size == (20, 10)
    assert image.getpixel((5, 2)) == (0, 255, 0)
    assert image.getpixel((15, 8)) == (200, 200, 200)


def test_overlay_with_colormap():
    import matplotlib

    bitmap = np.zeros((4, 4), dtype=np.uint8)
    image = compose_overlay(bitmap, colormap=matplotlib.colormaps["gray"])
    assert image.mode == "RGB"
    assert image.getpixel((0, 0)) == (0, 0, 0)


def test_wide_surface_renders():
    viewport = Viewport.initial()
    surface = SurfaceExtent(2560, 2)
    result = render_frame(FrameSnapshot(viewport, 1, surface), workers=1)
    assert result.bitmap.shape == (2, 2560)
    assert np.all(result.bitmap == 0)
    last = evaluate(viewport.map_pixel(SurfacePoint.of(2559, 1), surface), 3)
    assert render_frame(FrameSnapshot(viewport, 3, surface), workers=1).iterations[1, 2559] == last.iterations
