"""Rendering of units as text for one variant.

A unit is rendered by the first provider that recognizes it:

1. annotated units, rendered as their unit plus the annotation;
2. units registered in the symbol table;
3. transformed units, as a prefixed symbol when possible, otherwise as
   explicit factors, offsets and logarithms around the parent unit;
4. products, as dot-joined factors over an optional denominator;
5. the unit's own symbol.

Output of the two code variants parses back to an equivalent unit.
"""

from __future__ import annotations

import logging
import re
from fractions import Fraction
from typing import Callable, Optional, Tuple

from .constants import DIGIT_TO_SUPERSCRIPT, MIDDLE_DOT, Variant
from .converters import (
    E,
    Affine,
    Exponential,
    Logarithmic,
    MultiplyConverter,
    PowerOfBase,
    UnitConverter,
)
from .errors import FormatContractError
from .lexer import ATOM_PATTERN
from .symbols import SymbolTable
from .units import (
    ONE,
    AnnotatedUnit,
    BaseUnit,
    NamedUnit,
    ProductUnit,
    TransformedUnit,
    Unit,
)

logger = logging.getLogger(__name__)

_ATOM = re.compile(rf"{ATOM_PATTERN}(?:\{{[^{{}}]*\}})?")
_OPERATORS = frozenset(".*·/+-")


def _to_superscript(n: int) -> str:
    """Convert an integer to Unicode superscript characters."""
    return ''.join(DIGIT_TO_SUPERSCRIPT[c] for c in str(n))


def _ratio(value: Fraction) -> str:
    if value.denominator == 1:
        return str(value.numerator)
    return f"{value.numerator}/{value.denominator}"


def _decimal(value: Fraction) -> Optional[str]:
    """Exact decimal literal for a non-negative fraction, or None."""
    den = value.denominator
    twos = fives = 0
    while den % 2 == 0:
        den //= 2
        twos += 1
    while den % 5 == 0:
        den //= 5
        fives += 1
    if den != 1:
        return None
    places = max(twos, fives)
    scaled = value.numerator * 10 ** places // value.denominator
    if places == 0:
        return str(scaled)
    digits = str(scaled).rjust(places + 1, "0")
    return f"{digits[:-places]}.{digits[-places:]}"


def _is_compound(text: str) -> bool:
    """True if ``text`` has an operator outside any brackets."""
    depth = 0
    for char in text:
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
        elif depth == 0 and char in _OPERATORS:
            return True
    return False


def _is_atom(text: str) -> bool:
    return _ATOM.fullmatch(text) is not None


def _detached(text: str) -> str:
    # A trailing exponent digit would merge with a following numeric literal
    return f"({text})" if text[-1] in "0123456789" else text


class UnitFormatter:
    """Formats units using one variant's symbols and conventions."""

    def __init__(self, symbols: SymbolTable, variant: Variant):
        self.symbols = symbols
        self.variant = Variant(variant)
        self._providers: Tuple[Callable[[Unit], Optional[str]], ...] = (
            self._annotated,
            self._from_table,
            self._transformed,
            self._product,
            self._own_symbol,
        )

    @property
    def _times(self) -> str:
        return MIDDLE_DOT if self.variant is Variant.PRINT else "."

    def _cased(self, word: str) -> str:
        if self.variant is Variant.CASE_INSENSITIVE:
            return word.upper()
        return word

    def format(self, unit: Unit) -> str:
        for provider in self._providers:
            text = provider(unit)
            if text is not None:
                return text
        raise FormatContractError(f"Cannot format unit {unit!r}")

    # Providers

    def _annotated(self, unit: Unit) -> Optional[str]:
        if not isinstance(unit, AnnotatedUnit):
            return None
        inner = "" if unit.actual == ONE else self.format(unit.actual)
        if self.variant is Variant.PRINT:
            return f"{inner}({unit.annotation})"
        return f"{inner}{{{self._cased(unit.annotation)}}}"

    def _from_table(self, unit: Unit) -> Optional[str]:
        return self.symbols.symbol_for_unit(unit)

    def _transformed(self, unit: Unit) -> Optional[str]:
        if not isinstance(unit, TransformedUnit):
            return None
        steps = unit.converter.steps
        if len(steps) == 1 and isinstance(steps[0], MultiplyConverter):
            text = self._prefixed(unit.parent, steps[0])
            if text is not None:
                return text

        text = None if unit.parent == ONE else self.format(unit.parent)
        # The step applied last sits next to the parent, so it is written
        # innermost.
        for step in reversed(steps):
            text = self._apply(step, text)
        return text

    def _product(self, unit: Unit) -> Optional[str]:
        if not isinstance(unit, ProductUnit):
            return None
        numerator = [e for e in unit.elements if e.exponent > 0]
        denominator = [e for e in unit.elements if e.exponent < 0]

        text = self._times.join(self._element(e.unit, e.exponent) for e in numerator)
        if not text:
            text = "1"
        if not denominator:
            return text

        below = self._times.join(self._element(e.unit, -e.exponent) for e in denominator)
        if len(denominator) > 1 or _is_compound(below):
            below = f"({below})"
        return f"{text}/{below}"

    def _own_symbol(self, unit: Unit) -> Optional[str]:
        if not isinstance(unit, (BaseUnit, NamedUnit)):
            return None
        if self.variant is Variant.CASE_INSENSITIVE:
            return unit.symbol.upper()
        return unit.symbol

    # Pieces

    def _element(self, unit: Unit, exponent: Fraction) -> str:
        text = self.format(unit)
        if exponent == 1:
            return text
        if not _is_atom(text):
            text = f"({text})"
        if exponent.denominator != 1:
            return f"{text}^({_ratio(exponent)})"
        if self.variant is Variant.PRINT:
            return f"{text}{_to_superscript(exponent.numerator)}"
        return f"{text}{exponent.numerator}"

    def _prefixed(self, parent: Unit, step: MultiplyConverter) -> Optional[str]:
        """Render ``parent`` scaled by ``step`` as prefix + symbol, if possible."""
        factor = step.factor
        if factor is None:
            return None
        prefix = self.symbols.prefix_for_factor(factor)
        if prefix is None:
            return None
        symbol = self.symbols.symbol_for_unit(parent)
        if symbol is None or not isinstance(parent, (BaseUnit, NamedUnit)) or not parent.metric:
            logger.debug("No prefix form for %r scaled by %s", parent, factor)
            return None
        text = self.symbols.symbol_for_prefix(prefix) + symbol
        # The concatenation must not read back as a different unit (e.g. an
        # existing symbol or another prefix split).
        if self.symbols.lookup(text) != (prefix, parent):
            logger.debug("Prefixed symbol %r is ambiguous, using a factor", text)
            return None
        return text

    def _apply(self, step: UnitConverter, text: Optional[str]) -> str:
        if isinstance(step, MultiplyConverter):
            return self._scaled(step, text)
        if isinstance(step, Affine):
            return self._shifted(step.offset, text)
        if isinstance(step, Logarithmic):
            return self._logarithm(step.base, text)
        if isinstance(step, Exponential):
            return self._exponential(step.base, text)
        raise FormatContractError(f"Cannot format converter {step!r}")

    def _scaled(self, step: MultiplyConverter, text: Optional[str]) -> str:
        factor = step.factor
        if factor is None:
            if not isinstance(step, PowerOfBase):
                raise FormatContractError(f"Cannot format converter {step!r}")
            literal = f"({step.base})^({_ratio(step.exponent)})"
            return literal if text is None else f"{text}{self._times}{literal}"

        num, den = factor.numerator, factor.denominator
        literal = str(num) if num > 0 else f"(0 - {-num})"
        if text is None:
            text = literal
        elif num != 1:
            text = f"{_detached(text)}{self._times}{literal}"
        if den != 1:
            text = f"{text}/{den}"
        return text

    def _shifted(self, offset: Fraction, text: Optional[str]) -> str:
        literal = _decimal(abs(offset))
        if literal is None:
            raise FormatContractError(f"Offset {offset} has no exact decimal form")
        if text is None:
            text = "(1)"
        elif text[0].isdigit():
            # "1000 + 5" would read as a leading offset
            text = f"({text})"
        sign = "+" if offset > 0 else "-"
        # Spaces keep "K + 5" from reading as K to the 5th
        return f"({text} {sign} {literal})"

    def _logarithm(self, base, text: Optional[str]) -> str:
        if base == E:
            name = "ln"
        elif base == 10:
            name = "log"
        elif isinstance(base, int):
            name = f"log{base}"
        else:
            raise FormatContractError(f"Cannot format logarithm base {base}")
        return f"{self._cased(name)}({text or '1'})"

    def _exponential(self, base, text: Optional[str]) -> str:
        if text is None:
            raise FormatContractError("Cannot format an exponential of a plain number")
        if base == E:
            name = self._cased("e")
        elif isinstance(base, int):
            name = str(base)
        else:
            raise FormatContractError(f"Cannot format exponential base {base}")
        operand = text if _is_atom(text) else f"({text})"
        return f"{name}^{operand}"
