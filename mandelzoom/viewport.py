"""Viewport ranges and the pixel-to-plane mapping."""

from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction

from .errors import DegenerateRangeError
from .fixed import FixedScalar, Real


@dataclass(frozen=True)
class AxisRange:
    """Half-open interval ``[start, end)`` on one axis of the complex plane."""

    start: FixedScalar
    end: FixedScalar

    def __post_init__(self) -> None:
        if not self.start < self.end:
            raise DegenerateRangeError(f"axis range must satisfy start < end, got [{self.start}, {self.end})")

    @classmethod
    def from_endpoints(cls, a: FixedScalar, b: FixedScalar) -> "AxisRange":
        if a == b:
            raise DegenerateRangeError(f"axis range collapsed to a single value {a}")
        return cls(a, b) if a < b else cls(b, a)

    @classmethod
    def from_reals(cls, start: Real, end: Real) -> "AxisRange":
        return cls.from_endpoints(FixedScalar.from_real(start), FixedScalar.from_real(end))

    @property
    def width(self) -> FixedScalar:
        return self.end - self.start

    def map_pixel(self, pixel: Fraction | int, extent: int) -> FixedScalar:
        """Affine map of ``[0, extent]`` onto ``[start, end]``.

        ``pixel`` stays an exact rational so surface sizes and off-surface
        positions are not bound by the fixed-point integer range.
        """

        if extent <= 0:
            raise ValueError(f"surface extent must be positive, got {extent}")
        pixel = Fraction(pixel)
        offset = (self.width.raw * pixel.numerator) // (extent * pixel.denominator)
        return self.start + FixedScalar.from_raw(offset)


@dataclass(frozen=True)
class SurfaceExtent:
    """Pixel dimensions of the rendering surface."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"surface extent must be positive, got {self.width}x{self.height}")

    @property
    def aspect(self) -> Fraction:
        """Height over width."""
        return Fraction(self.height, self.width)

    @property
    def size(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class SurfacePoint:
    """A position on the surface in pixel units; may be fractional or off-surface."""

    x: Fraction
    y: Fraction

    @classmethod
    def of(cls, x: Real, y: Real) -> "SurfacePoint":
        return cls(_exact(x), _exact(y))

    def as_floats(self) -> tuple[float, float]:
        return float(self.x), float(self.y)


@dataclass(frozen=True)
class PlaneCoordinate:
    x: FixedScalar
    y: FixedScalar


@dataclass(frozen=True)
class ViewDefaults:
    """Ranges restored by a viewport reset."""

    range_x: AxisRange = field(default_factory=lambda: AxisRange.from_reals("-2.00", "0.47"))
    range_y: AxisRange = field(default_factory=lambda: AxisRange.from_reals("-1.12", "1.12"))


DEFAULT_VIEW = ViewDefaults()


@dataclass(frozen=True)
class Viewport:
    """The pair of axis ranges currently mapped onto the surface."""

    range_x: AxisRange
    range_y: AxisRange

    @classmethod
    def initial(cls, defaults: ViewDefaults = DEFAULT_VIEW) -> "Viewport":
        return cls(defaults.range_x, defaults.range_y)

    def map_pixel(self, point: SurfacePoint, surface: SurfaceExtent) -> PlaneCoordinate:
        return PlaneCoordinate(
            self.range_x.map_pixel(point.x, surface.width),
            self.range_y.map_pixel(point.y, surface.height),
        )

    def commit_zoom(self, corner0: SurfacePoint, corner1: SurfacePoint, surface: SurfaceExtent) -> "Viewport":
        """Viewport spanning the rectangle between two surface corners.

        Raises ``DegenerateRangeError`` when the corners map to the same
        coordinate on either axis.
        """

        p0 = self.map_pixel(corner0, surface)
        p1 = self.map_pixel(corner1, surface)
        return Viewport(
            AxisRange.from_endpoints(p0.x, p1.x),
            AxisRange.from_endpoints(p0.y, p1.y),
        )

    def reset(self, defaults: ViewDefaults = DEFAULT_VIEW) -> "Viewport":
        return Viewport.initial(defaults)


def _exact(value: Real) -> Fraction:
    if isinstance(value, str):
        value = value.strip()
    return Fraction(value)
