"""Unit values and the algebra the parser builds its results with.

Units are immutable. Every operation returns a new unit; nothing here
mutates an existing one, so units can be cached and shared freely.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, Iterable, List, Mapping, Tuple

from .converters import (
    IDENTITY,
    Affine,
    Chain,
    NumberLike,
    RationalMultiply,
    UnitConverter,
    to_fraction,
)
from .errors import UnitConversionError


@dataclass(frozen=True)
class Dimension:
    """Exponents of the base quantities, e.g. L=1, T=-2 for acceleration."""

    exponents: Tuple[Tuple[str, Fraction], ...] = ()

    @classmethod
    def of(cls, mapping: Mapping[str, NumberLike]) -> "Dimension":
        items = []
        for quantity, exponent in mapping.items():
            exponent = to_fraction(exponent)
            if exponent != 0:
                items.append((quantity, exponent))
        return cls(tuple(sorted(items)))

    def as_dict(self) -> Dict[str, Fraction]:
        return dict(self.exponents)

    @property
    def is_dimensionless(self) -> bool:
        return not self.exponents

    def __mul__(self, other: "Dimension") -> "Dimension":
        merged = self.as_dict()
        for quantity, exponent in other.exponents:
            merged[quantity] = merged.get(quantity, 0) + exponent
        return Dimension.of(merged)

    def __truediv__(self, other: "Dimension") -> "Dimension":
        return self * other ** -1

    def __pow__(self, exponent: NumberLike) -> "Dimension":
        exponent = to_fraction(exponent)
        return Dimension.of({q: e * exponent for q, e in self.exponents})

    def __str__(self) -> str:
        if not self.exponents:
            return "1"
        parts = []
        for quantity, exponent in self.exponents:
            parts.append(quantity if exponent == 1 else f"{quantity}{exponent}")
        return ".".join(parts)


NONE = Dimension()
LENGTH = Dimension.of({"L": 1})
MASS = Dimension.of({"M": 1})
TIME = Dimension.of({"T": 1})
CURRENT = Dimension.of({"I": 1})
TEMPERATURE = Dimension.of({"Θ": 1})
AMOUNT_OF_SUBSTANCE = Dimension.of({"N": 1})
LUMINOUS_INTENSITY = Dimension.of({"J": 1})


class Unit:
    """Base class for unit values.

    Subclasses provide ``dimension`` and ``system_converter``, the converter
    from this unit to its coherent system unit.
    """

    metric = False

    def multiply(self, other) -> "Unit":
        if isinstance(other, Unit):
            return _product(self, other)
        return self.transform(RationalMultiply(to_fraction(other)))

    def divide(self, other) -> "Unit":
        if isinstance(other, Unit):
            return _product(self, other.inverse())
        return self.transform(RationalMultiply(1 / to_fraction(other)))

    def inverse(self) -> "Unit":
        return _power(self, Fraction(-1))

    def pow(self, n: int) -> "Unit":
        return _power(self, Fraction(n))

    def root(self, n: int) -> "Unit":
        if n == 0:
            raise ZeroDivisionError("Cannot take the zeroth root of a unit")
        return _power(self, Fraction(1, n))

    def shift(self, offset: NumberLike) -> "Unit":
        return self.transform(Affine(to_fraction(offset)))

    def transform(self, converter: UnitConverter) -> "Unit":
        if converter.is_identity():
            return self
        return TransformedUnit(self, converter)

    def annotate(self, annotation: str) -> "Unit":
        return AnnotatedUnit(self, annotation)

    def get_converter_to(self, that: "Unit") -> UnitConverter:
        if self.dimension != that.dimension:
            raise UnitConversionError(
                f"{self} ({self.dimension}) is not convertible to "
                f"{that} ({that.dimension})"
            )
        return that.system_converter.inverse().concatenate(self.system_converter)

    def is_equivalent_to(self, that: "Unit") -> bool:
        """True when converting between the two units is the identity."""
        if self == that:
            return True
        try:
            return self.get_converter_to(that).is_identity()
        except UnitConversionError:
            return False

    def __mul__(self, other) -> "Unit":
        return self.multiply(other)

    def __truediv__(self, other) -> "Unit":
        return self.divide(other)

    def __rtruediv__(self, other) -> "Unit":
        return self.inverse().multiply(other)

    def __pow__(self, n: int) -> "Unit":
        return self.pow(n)

    def __str__(self) -> str:
        from .format import format_unit

        return format_unit(self)


@dataclass(frozen=True)
class BaseUnit(Unit):
    """Coherent unit of one base quantity (m, g, s, ...)."""

    symbol: str
    dimension: Dimension
    metric: bool = True

    @property
    def system_converter(self) -> UnitConverter:
        return IDENTITY


@dataclass(frozen=True)
class NamedUnit(Unit):
    """Unit with its own symbol, defined in terms of other units (Hz, N, min)."""

    symbol: str
    definition: Unit
    metric: bool = True

    @property
    def dimension(self) -> Dimension:
        return self.definition.dimension

    @property
    def system_converter(self) -> UnitConverter:
        return self.definition.system_converter


@dataclass(frozen=True)
class TransformedUnit(Unit):
    """Unit derived from ``parent``; ``converter`` maps values to the parent."""

    parent: Unit
    converter: UnitConverter

    @property
    def dimension(self) -> Dimension:
        return self.parent.dimension

    @property
    def system_converter(self) -> UnitConverter:
        return self.parent.system_converter.concatenate(self.converter)

    def transform(self, converter: UnitConverter) -> Unit:
        if converter.is_identity():
            return self
        combined = self.converter.concatenate(converter)
        if combined.is_identity():
            return self.parent
        return TransformedUnit(self.parent, combined)


@dataclass(frozen=True)
class Element:
    """A single factor of a product unit, e.g. s with exponent -2."""

    unit: Unit
    exponent: Fraction


@dataclass(frozen=True)
class ProductUnit(Unit):
    """Product of units raised to rational exponents. ``ONE`` is empty."""

    elements: Tuple[Element, ...] = ()

    @classmethod
    def of(cls, elements: Iterable[Element]) -> Unit:
        elements = tuple(elements)
        if len(elements) == 1 and elements[0].exponent == 1:
            return elements[0].unit
        if not elements:
            return ONE
        return cls(elements)

    @property
    def dimension(self) -> Dimension:
        result = NONE
        for element in self.elements:
            result = result * element.unit.dimension ** element.exponent
        return result

    @property
    def system_converter(self) -> UnitConverter:
        converters = []
        for element in self.elements:
            converter = element.unit.system_converter
            if not converter.is_linear():
                raise UnitConversionError(
                    f"{element.unit} is non-linear and cannot be part of a product"
                )
            converters.append(converter.pow(element.exponent))
        return Chain.of(*converters)


@dataclass(frozen=True, eq=False)
class AnnotatedUnit(Unit):
    """Unit carrying free-text annotation; compares equal to the bare unit."""

    actual: Unit
    annotation: str

    @property
    def dimension(self) -> Dimension:
        return self.actual.dimension

    @property
    def system_converter(self) -> UnitConverter:
        return self.actual.system_converter

    @property
    def metric(self) -> bool:
        return self.actual.metric

    def annotate(self, annotation: str) -> Unit:
        return AnnotatedUnit(self.actual, annotation)

    def __eq__(self, other) -> bool:
        if isinstance(other, AnnotatedUnit):
            other = other.actual
        return self.actual == other

    def __hash__(self) -> int:
        return hash(self.actual)


ONE = ProductUnit()


def _is_one(unit: Unit) -> bool:
    return unit == ONE


def _is_scaled_one(unit: Unit) -> bool:
    """True for pure numbers such as ``ONE.multiply(1000)``."""
    return (
        isinstance(unit, TransformedUnit)
        and _is_one(unit.parent)
        and unit.converter.is_linear()
    )


def is_scalar(unit: Unit) -> bool:
    """True for ONE and for pure numbers derived from it."""
    return _is_one(unit) or _is_scaled_one(unit)


def _elements(unit: Unit) -> List[Element]:
    if isinstance(unit, ProductUnit):
        return list(unit.elements)
    return [Element(unit, Fraction(1))]


def _product(left: Unit, right: Unit) -> Unit:
    if _is_one(left):
        return right
    if _is_one(right):
        return left
    if _is_scaled_one(right):
        return left.transform(right.converter)
    if _is_scaled_one(left):
        return right.transform(left.converter)

    exponents: Dict[Unit, Fraction] = {}
    for element in _elements(left) + _elements(right):
        exponents[element.unit] = exponents.get(element.unit, 0) + element.exponent
    return ProductUnit.of(
        Element(unit, exponent) for unit, exponent in exponents.items() if exponent != 0
    )


def _power(unit: Unit, exponent: Fraction) -> Unit:
    if exponent == 1:
        return unit
    if exponent == 0:
        return ONE
    if _is_scaled_one(unit):
        return ONE.transform(unit.converter.pow(exponent))
    return ProductUnit.of(
        Element(element.unit, element.exponent * exponent) for element in _elements(unit)
    )
