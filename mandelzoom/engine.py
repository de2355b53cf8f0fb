"""Escape-time evaluation of the quadratic Mandelbrot map in fixed point."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ZeroBudgetError
from .fixed import FRAC_BITS, ONE_RAW
from .viewport import PlaneCoordinate

ESCAPE_RADIUS_SQ_RAW = 4 * ONE_RAW


@dataclass(frozen=True)
class EscapeResult:
    iterations: int
    normalized: float


def escape_iterations(cx: int, cy: int, budget: int) -> int:
    """Count iterations of ``z <- z**2 + c`` before ``|z| > 2`` or ``budget`` runs out.

    ``cx`` and ``cy`` are raw fixed-point values; every intermediate keeps the
    same ``FRAC_BITS`` scaling, floored after each product.
    """

    x = y = x2 = y2 = 0
    j = 0
    while j < budget and x2 + y2 <= ESCAPE_RADIUS_SQ_RAW:
        y = ((x * y) >> (FRAC_BITS - 1)) + cy
        x = x2 - y2 + cx
        x2 = (x * x) >> FRAC_BITS
        y2 = (y * y) >> FRAC_BITS
        j += 1
    return j


def evaluate(c: PlaneCoordinate, budget: int) -> EscapeResult:
    if budget < 1:
        raise ZeroBudgetError(f"iteration budget must be at least 1, got {budget}")
    j = escape_iterations(c.x.raw, c.y.raw, budget)
    return EscapeResult(iterations=j, normalized=j / budget)
