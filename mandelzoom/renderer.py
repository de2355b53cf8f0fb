"""Rendering primitives for explorer frames."""

from __future__ import annotations

import os
from concurrent.futures import Executor, ProcessPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import PIL.Image
import PIL.ImageDraw

from .engine import escape_iterations
from .errors import ZeroBudgetError
from .viewport import SurfaceExtent, SurfacePoint, Viewport

OVERLAY_COLOR = (0, 255, 0)
BANDS_PER_WORKER = 4

Segment = tuple[tuple[float, float], tuple[float, float]]


@dataclass(frozen=True)
class FrameSnapshot:
    """Everything a frame depends on, fixed before pixel evaluation starts."""

    viewport: Viewport
    budget: int
    surface: SurfaceExtent

    def __post_init__(self) -> None:
        if self.budget < 1:
            raise ZeroBudgetError(f"iteration budget must be at least 1, got {self.budget}")


@dataclass(frozen=True)
class RenderResult:
    """Container for the numerical results of a frame."""

    bitmap: np.ndarray
    iterations: np.ndarray
    snapshot: FrameSnapshot


def _column_coordinates(snapshot: FrameSnapshot) -> list[int]:
    range_x = snapshot.viewport.range_x
    width = snapshot.surface.width
    return [range_x.map_pixel(col, width).raw for col in range(width)]


def _render_rows(snapshot: FrameSnapshot, row_start: int, row_stop: int) -> np.ndarray:
    """Escape counts for rows ``[row_start, row_stop)``, shape ``(rows, width)``."""

    xs = _column_coordinates(snapshot)
    range_y = snapshot.viewport.range_y
    height = snapshot.surface.height
    budget = snapshot.budget

    band = np.empty((row_stop - row_start, len(xs)), dtype=np.int64)
    for i, row in enumerate(range(row_start, row_stop)):
        cy = range_y.map_pixel(row, height).raw
        band[i] = [escape_iterations(cx, cy, budget) for cx in xs]
    return band


def _row_bands(height: int, workers: int) -> list[tuple[int, int]]:
    bands = max(1, min(height, workers * BANDS_PER_WORKER))
    edges = np.linspace(0, height, bands + 1).round().astype(int)
    return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:]) if b > a]


def default_workers() -> int:
    return max(1, os.cpu_count() or 1)


def to_intensity(iterations: np.ndarray, budget: int) -> np.ndarray:
    """Map escape counts to ``255 - round(iterations / budget * 255)``."""

    scaled = (2 * 255 * iterations.astype(np.int64) + budget) // (2 * budget)
    return np.uint8(255 - scaled)


def render_frame(
    snapshot: FrameSnapshot,
    *,
    workers: Optional[int] = None,
    executor: Optional[Executor] = None,
) -> RenderResult:
    """Evaluate every pixel of ``snapshot`` and gather the bitmap in row order.

    Rows are split into contiguous bands. With ``workers == 1`` and no
    ``executor`` the bands run in the calling process; otherwise they are
    mapped over ``executor`` (a temporary ``ProcessPoolExecutor`` when none is
    given). ``Executor.map`` yields in submission order, so the output does
    not depend on scheduling.
    """

    if workers is None:
        workers = default_workers()
    height = snapshot.surface.height
    bands = _row_bands(height, workers)
    starts = [start for start, _ in bands]
    stops = [stop for _, stop in bands]

    if executor is not None:
        parts = list(executor.map(_render_rows, [snapshot] * len(bands), starts, stops))
    elif workers <= 1:
        parts = [_render_rows(snapshot, start, stop) for start, stop in bands]
    else:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            parts = list(pool.map(_render_rows, [snapshot] * len(bands), starts, stops))

    iterations = np.concatenate(parts, axis=0)
    return RenderResult(
        bitmap=to_intensity(iterations, snapshot.budget),
        iterations=iterations,
        snapshot=snapshot,
    )


def selection_segments(anchor: SurfacePoint, current: SurfacePoint) -> tuple[Segment, ...]:
    """The four edges of the selection rectangle in surface coordinates."""

    x0, y0 = anchor.as_floats()
    x1, y1 = current.as_floats()
    return (
        ((x0, y0), (x1, y0)),
        ((x1, y0), (x1, y1)),
        ((x1, y1), (x0, y1)),
        ((x0, y1), (x0, y0)),
    )


def colorize(bitmap: np.ndarray, colormap=None) -> PIL.Image.Image:
    """RGB image of ``bitmap``; grayscale unless a matplotlib colormap is given."""

    if colormap is None:
        return PIL.Image.fromarray(bitmap).convert("RGB")
    rgba = np.array(colormap(bitmap.astype(np.float64) / 255.0), copy=True)
    return PIL.Image.fromarray(np.uint8(np.clip(rgba[..., :3] * 255, 0, 255)))


def compose_overlay(
    bitmap: np.ndarray,
    segments: Sequence[Segment] = (),
    *,
    colormap=None,
) -> PIL.Image.Image:
    """Draw ``segments`` over a copy of ``bitmap``; ``bitmap`` itself is left untouched."""

    image = colorize(bitmap, colormap)
    if segments:
        draw = PIL.ImageDraw.Draw(image)
        for start, end in segments:
            draw.line([start, end], fill=OVERLAY_COLOR, width=1)
    return image
