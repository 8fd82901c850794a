"""Parse/format facade tying a variant to its symbol table."""

from __future__ import annotations

from typing import Dict, Optional, Union

from .catalog import default_table
from .constants import Variant
from .errors import UnsupportedOperationError
from .formatter import UnitFormatter
from .parser import UnitParser
from .symbols import SymbolTable
from .units import Unit


class UnitFormat:
    """Parses and formats units for one variant.

    Args:
        variant: Which symbol set and rendering rules to use.
        symbols: Symbol table; defaults to the built-in table of ``variant``.
    """

    def __init__(self, variant: Variant, symbols: Optional[SymbolTable] = None):
        self.variant = Variant(variant)
        self.symbols = symbols if symbols is not None else default_table(self.variant)
        self._parser = UnitParser(
            self.symbols, case_insensitive=self.variant is Variant.CASE_INSENSITIVE
        )
        self._formatter = UnitFormatter(self.symbols, self.variant)

    def parse(self, text: str, position: int = 0) -> Unit:
        """Parse a unit expression.

        Args:
            text: The text holding the expression.
            position: Index in ``text`` where the expression starts; it runs
                to the end of ``text``. Error positions count from the start
                of ``text``, not from ``position``.

        Raises:
            UnsupportedOperationError: for the print variant, whose output
                is for display only.
            LexicalError, UnitSyntaxError, UnknownUnitError: on bad input.
            ValueError: if ``position`` is negative.
        """
        if not self.variant.is_parseable:
            raise UnsupportedOperationError(
                f"The {self.variant.value} variant cannot be parsed"
            )
        return self._parser.parse(text, position)

    def parse_compound(self, text: str) -> Unit:
        """Parse a mixed-unit phrase such as "3 ft 2 in"."""
        raise UnsupportedOperationError("Compound units not supported")

    def format(self, unit: Unit) -> str:
        return self._formatter.format(unit)

    def __repr__(self) -> str:
        return f"UnitFormat({self.variant.value!r})"


_FORMATS: Dict[Variant, UnitFormat] = {}


def get_format(
    variant: Union[Variant, str] = Variant.CASE_SENSITIVE,
    symbols: Optional[SymbolTable] = None,
) -> UnitFormat:
    """Factory function to get a UnitFormat by variant.

    Args:
        variant: A Variant or its value ("case_sensitive", "case_insensitive", "print").
        symbols: Optional custom symbol table. The shared default instance is
            returned only when this is omitted.

    Returns:
        UnitFormat instance.

    Raises:
        ValueError: If variant is unknown.
    """
    variants = {v.value: v for v in Variant}

    if variant not in variants:
        raise ValueError(
            f"Unknown variant '{variant}'. "
            f"Supported variants: {list(variants.keys())}"
        )

    variant = variants[variant]
    if symbols is not None:
        return UnitFormat(variant, symbols)
    if variant not in _FORMATS:
        _FORMATS[variant] = UnitFormat(variant)
    return _FORMATS[variant]


def parse_unit(text: str, variant: Union[Variant, str] = Variant.CASE_SENSITIVE) -> Unit:
    return get_format(variant).parse(text)


def format_unit(unit: Unit, variant: Union[Variant, str] = Variant.CASE_SENSITIVE) -> str:
    return get_format(variant).format(unit)
