"""Unit converters and their exact composition rules.

A converter maps a value expressed in one unit to another unit. Scale
factors are kept as :class:`fractions.Fraction` (or as ``base ** exponent``
pairs) so that composing a prefix with its inverse always yields the
identity, and converting between two prefixes of the same unit is a single
exact ratio.

Composition preserves encounter order: affine shifts never commute with
multiplicative or logarithmic steps.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from numbers import Rational
from typing import TYPE_CHECKING, List, Optional, Tuple, Union

from .constants import MAX_FACTOR_BITS
from .errors import UnitConversionError

if TYPE_CHECKING:
    from .symbols import Prefix

E = math.e

NumberLike = Union[int, float, Fraction, Decimal, str]


def to_fraction(value: NumberLike) -> Fraction:
    """Convert a numeric literal to an exact Fraction.

    Floats go through their shortest ``repr`` so that ``0.1`` becomes 1/10
    rather than its binary approximation.
    """
    if isinstance(value, bool):
        raise TypeError("Booleans are not numeric factors")
    if isinstance(value, Fraction):
        return value
    if isinstance(value, int):
        return Fraction(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Non-finite factor: {value!r}")
        return Fraction(repr(value))
    if isinstance(value, (Decimal, str)):
        return Fraction(value)
    if isinstance(value, Rational):
        return Fraction(value.numerator, value.denominator)
    raise TypeError(f"Cannot use {type(value).__name__} as an exact number")


def _integer_root(value: int, n: int) -> Optional[int]:
    """Exact integer n-th root, or None when value is not a perfect power."""
    if value < 0:
        if n % 2 == 0:
            return None
        root = _integer_root(-value, n)
        return None if root is None else -root
    if value < 2:
        return value
    lo, hi = 1, 1 << (value.bit_length() // n + 1)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if mid ** n <= value:
            lo = mid
        else:
            hi = mid - 1
    return lo if lo ** n == value else None


def exact_power(value: Fraction, exponent: Fraction) -> Optional[Fraction]:
    """Raise a fraction to a rational power, or None if the result is irrational."""
    if value == 0 and exponent < 0:
        raise UnitConversionError("A zero factor has no inverse")
    if value not in (0, 1, -1):
        size = max(abs(value.numerator).bit_length(), value.denominator.bit_length())
        if size * abs(exponent.numerator) > MAX_FACTOR_BITS * exponent.denominator:
            raise UnitConversionError(f"Factor to the power {exponent} is too large")
    if exponent.denominator == 1:
        return value ** exponent.numerator
    num = _integer_root(value.numerator, exponent.denominator)
    den = _integer_root(value.denominator, exponent.denominator)
    if num is None or den is None:
        return None
    return Fraction(num, den) ** exponent.numerator


class UnitConverter(ABC):
    """Base class for all converters."""

    @abstractmethod
    def convert(self, value):
        """Convert a value from the source unit to the target unit."""

    @abstractmethod
    def inverse(self) -> "UnitConverter":
        """Return the converter undoing this one."""

    def is_identity(self) -> bool:
        return False

    def is_linear(self) -> bool:
        """True for converters that only scale (no offset, no logarithm)."""
        return True

    @property
    def steps(self) -> Tuple["UnitConverter", ...]:
        """Elementary converters in application order."""
        return (self,)

    def concatenate(self, other: "UnitConverter") -> "UnitConverter":
        """Return the converter applying ``other`` first, then this one."""
        return Chain.of(other, self)

    def pow(self, exponent: NumberLike) -> "UnitConverter":
        raise UnitConversionError(
            f"{self!r} is non-linear and cannot be raised to a power"
        )


@dataclass(frozen=True)
class Identity(UnitConverter):
    """Converter leaving values unchanged."""

    def convert(self, value):
        return value

    def inverse(self) -> "UnitConverter":
        return self

    def is_identity(self) -> bool:
        return True

    @property
    def steps(self) -> Tuple[UnitConverter, ...]:
        return ()

    def pow(self, exponent: NumberLike) -> "UnitConverter":
        return self


IDENTITY = Identity()


class MultiplyConverter(UnitConverter):
    """Common base for purely multiplicative converters."""

    @property
    @abstractmethod
    def factor(self) -> Optional[Fraction]:
        """Exact scale factor, or None when it is irrational."""


@dataclass(frozen=True)
class RationalMultiply(MultiplyConverter):
    """Multiplies by an exact rational factor."""

    value: Fraction

    def __post_init__(self) -> None:
        value = to_fraction(self.value)
        if value == 0:
            raise ValueError("A scale factor cannot be zero")
        object.__setattr__(self, "value", value)

    @property
    def factor(self) -> Fraction:
        return self.value

    def convert(self, value):
        if isinstance(value, float):
            return value * float(self.value)
        return value * self.value

    def inverse(self) -> "UnitConverter":
        return RationalMultiply(1 / self.value)

    def is_identity(self) -> bool:
        return self.value == 1

    def pow(self, exponent: NumberLike) -> UnitConverter:
        exponent = to_fraction(exponent)
        result = exact_power(self.value, exponent)
        if result is not None:
            return Chain.of(RationalMultiply(result))
        if self.value < 0:
            raise UnitConversionError(
                f"Cannot take a fractional power of negative factor {self.value}"
            )
        # Irrational result: keep the numerator and denominator as separate
        # powers so nothing is approximated.
        parts: List[UnitConverter] = []
        if self.value.numerator != 1:
            parts.append(PowerOfBase(self.value.numerator, exponent))
        if self.value.denominator != 1:
            parts.append(PowerOfBase(self.value.denominator, -exponent))
        return Chain.of(*parts)


@dataclass(frozen=True)
class PowerOfBase(MultiplyConverter):
    """Multiplies by ``base ** exponent`` (metric and binary prefixes)."""

    base: int
    exponent: Fraction

    def __post_init__(self) -> None:
        if not isinstance(self.base, int) or self.base < 2:
            raise ValueError(f"Invalid power base: {self.base!r}")
        object.__setattr__(self, "exponent", to_fraction(self.exponent))

    @classmethod
    def of_prefix(cls, prefix: "Prefix") -> "PowerOfBase":
        return cls(prefix.base, Fraction(prefix.exponent))

    @property
    def factor(self) -> Optional[Fraction]:
        return exact_power(Fraction(self.base), self.exponent)

    def convert(self, value):
        factor = self.factor
        if factor is None or isinstance(value, float):
            return value * float(self.base) ** float(self.exponent)
        return value * factor

    def inverse(self) -> "UnitConverter":
        return PowerOfBase(self.base, -self.exponent)

    def is_identity(self) -> bool:
        return self.exponent == 0

    def pow(self, exponent: NumberLike) -> UnitConverter:
        return Chain.of(PowerOfBase(self.base, self.exponent * to_fraction(exponent)))


@dataclass(frozen=True)
class Affine(UnitConverter):
    """Adds a constant offset (temperature scales)."""

    offset: Fraction

    def __post_init__(self) -> None:
        object.__setattr__(self, "offset", to_fraction(self.offset))

    def convert(self, value):
        if isinstance(value, float):
            return value + float(self.offset)
        return value + self.offset

    def inverse(self) -> "UnitConverter":
        return Affine(-self.offset)

    def is_identity(self) -> bool:
        return self.offset == 0

    def is_linear(self) -> bool:
        return False


def _normalize_base(base: NumberLike) -> Union[int, float, Fraction]:
    if isinstance(base, float) and base == E:
        return E
    base = to_fraction(base)
    if base <= 0 or base == 1:
        raise ValueError(f"Invalid logarithm base: {base}")
    return int(base) if base.denominator == 1 else base


@dataclass(frozen=True)
class Logarithmic(UnitConverter):
    """Takes the logarithm of a value in the given base."""

    base: Union[int, float, Fraction]

    def __post_init__(self) -> None:
        object.__setattr__(self, "base", _normalize_base(self.base))

    def convert(self, value):
        return math.log(value, float(self.base))

    def inverse(self) -> "UnitConverter":
        return Exponential(self.base)

    def is_linear(self) -> bool:
        return False


@dataclass(frozen=True)
class Exponential(UnitConverter):
    """Raises the base to the power of a value."""

    base: Union[int, float, Fraction]

    def __post_init__(self) -> None:
        object.__setattr__(self, "base", _normalize_base(self.base))

    def convert(self, value):
        return float(self.base) ** float(value)

    def inverse(self) -> "UnitConverter":
        return Logarithmic(self.base)

    def is_linear(self) -> bool:
        return False


@dataclass(frozen=True)
class Chain(UnitConverter):
    """Ordered composition of elementary converters.

    Build instances with :meth:`Chain.of`, which normalizes the steps.
    """

    converters: Tuple[UnitConverter, ...]

    @classmethod
    def of(cls, *converters: UnitConverter) -> UnitConverter:
        """Compose converters, the first one being applied first."""
        stack: List[UnitConverter] = []
        for converter in converters:
            for step in converter.steps:
                _push(stack, step)
        if not stack:
            return IDENTITY
        if len(stack) == 1:
            return stack[0]
        return cls(tuple(stack))

    @property
    def steps(self) -> Tuple[UnitConverter, ...]:
        return self.converters

    def convert(self, value):
        for step in self.converters:
            value = step.convert(value)
        return value

    def inverse(self) -> "UnitConverter":
        return Chain.of(*(step.inverse() for step in reversed(self.converters)))

    def is_linear(self) -> bool:
        return all(step.is_linear() for step in self.converters)

    def pow(self, exponent: NumberLike) -> UnitConverter:
        if not self.is_linear():
            return super().pow(exponent)
        return Chain.of(*(step.pow(exponent) for step in self.converters))


def _merge_multiply(
    first: MultiplyConverter, second: MultiplyConverter
) -> Optional[UnitConverter]:
    if (
        isinstance(first, PowerOfBase)
        and isinstance(second, PowerOfBase)
        and first.base == second.base
    ):
        return PowerOfBase(first.base, first.exponent + second.exponent)
    first_factor, second_factor = first.factor, second.factor
    if first_factor is None or second_factor is None:
        return None
    return RationalMultiply(first_factor * second_factor)


def _merge(first: UnitConverter, second: UnitConverter) -> Optional[UnitConverter]:
    """Merge two adjacent steps, or return None if they must stay apart."""
    if isinstance(first, Affine) and isinstance(second, Affine):
        return Affine(first.offset + second.offset)
    if (
        isinstance(first, (Logarithmic, Exponential))
        and first.inverse() == second
    ):
        return IDENTITY
    return None


def _push(stack: List[UnitConverter], step: UnitConverter) -> None:
    if step.is_identity():
        return
    if isinstance(step, MultiplyConverter):
        # Multiplicative steps commute with each other, so look through the
        # whole trailing run of them for a partner.
        i = len(stack) - 1
        while i >= 0 and isinstance(stack[i], MultiplyConverter):
            merged = _merge_multiply(stack[i], step)
            if merged is not None:
                del stack[i]
                _push(stack, merged)
                return
            i -= 1
        stack.append(step)
        return
    if stack:
        merged = _merge(stack[-1], step)
        if merged is not None:
            stack.pop()
            _push(stack, merged)
            return
    stack.append(step)
