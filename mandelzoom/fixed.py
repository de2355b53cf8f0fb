"""Fixed-point scalar used for all complex-plane coordinates."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Union

INT_BITS = 12
FRAC_BITS = 116
TOTAL_BITS = INT_BITS + FRAC_BITS

ONE_RAW = 1 << FRAC_BITS
MIN_RAW = -(1 << (TOTAL_BITS - 1))
MAX_RAW = (1 << (TOTAL_BITS - 1)) - 1

Real = Union[int, float, str, Decimal, Fraction]


def _checked(raw: int) -> int:
    if raw < MIN_RAW or raw > MAX_RAW:
        raise OverflowError(f"fixed-point value out of range ({INT_BITS} integer bits)")
    return raw


@dataclass(frozen=True, order=True)
class FixedScalar:
    """Signed fixed-point number with ``INT_BITS.FRAC_BITS`` layout.

    ``raw`` is the value scaled by ``2 ** FRAC_BITS``. Products and quotients
    are floored to the resolution, like an arithmetic shift of ``raw``.
    """

    raw: int

    def __post_init__(self) -> None:
        _checked(self.raw)

    @classmethod
    def from_raw(cls, raw: int) -> "FixedScalar":
        return cls(int(raw))

    @classmethod
    def from_real(cls, value: Real) -> "FixedScalar":
        """Round ``value`` to the nearest representable fixed-point number."""

        if isinstance(value, FixedScalar):
            return value
        if isinstance(value, str):
            value = Fraction(value.strip())
        scaled = Fraction(value) * ONE_RAW
        return cls(round(scaled))

    @classmethod
    def from_int(cls, value: int) -> "FixedScalar":
        return cls(int(value) << FRAC_BITS)

    def to_fraction(self) -> Fraction:
        return Fraction(self.raw, ONE_RAW)

    def to_float(self) -> float:
        return self.raw / ONE_RAW

    def __float__(self) -> float:
        return self.to_float()

    def __add__(self, other: "FixedScalar | int") -> "FixedScalar":
        return FixedScalar(_checked(self.raw + _coerce(other).raw))

    __radd__ = __add__

    def __sub__(self, other: "FixedScalar | int") -> "FixedScalar":
        return FixedScalar(_checked(self.raw - _coerce(other).raw))

    def __rsub__(self, other: int) -> "FixedScalar":
        return _coerce(other) - self

    def __mul__(self, other: "FixedScalar | int") -> "FixedScalar":
        return FixedScalar(_checked((self.raw * _coerce(other).raw) >> FRAC_BITS))

    __rmul__ = __mul__

    def __truediv__(self, other: "FixedScalar | int") -> "FixedScalar":
        divisor = _coerce(other).raw
        if divisor == 0:
            raise ZeroDivisionError("fixed-point division by zero")
        return FixedScalar(_checked((self.raw << FRAC_BITS) // divisor))

    def __rtruediv__(self, other: int) -> "FixedScalar":
        return _coerce(other) / self

    def __neg__(self) -> "FixedScalar":
        return FixedScalar(_checked(-self.raw))

    def __abs__(self) -> "FixedScalar":
        return FixedScalar(_checked(abs(self.raw)))

    def mul_div(self, numerator: "FixedScalar | int", denominator: "FixedScalar | int") -> "FixedScalar":
        """Return ``self * numerator / denominator`` without an intermediate rounding step."""

        den = _coerce(denominator).raw
        if den == 0:
            raise ZeroDivisionError("fixed-point division by zero")
        return FixedScalar(_checked((self.raw * _coerce(numerator).raw) // den))

    def __str__(self) -> str:
        sign = "-" if self.raw < 0 else ""
        whole, frac = divmod(abs(self.raw), ONE_RAW)
        digits = str((frac * 10 ** 35) // ONE_RAW).rjust(35, "0").rstrip("0") or "0"
        return f"{sign}{whole}.{digits}"

    def __repr__(self) -> str:
        return f"FixedScalar({self})"


def _coerce(value: "FixedScalar | int") -> FixedScalar:
    if isinstance(value, FixedScalar):
        return value
    if isinstance(value, int):
        return FixedScalar.from_int(value)
    raise TypeError(f"unsupported operand for FixedScalar: {type(value).__name__}")


ZERO = FixedScalar(0)
ONE = FixedScalar(ONE_RAW)
