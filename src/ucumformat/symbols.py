"""Prefixes and symbol tables.

A :class:`SymbolTable` maps the symbols of one variant to units and
prefixes and back. Tables are immutable once built; the default ones are
created in :mod:`ucumformat.catalog` and shared by every formatter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from fractions import Fraction
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .converters import PowerOfBase, UnitConverter
from .units import Unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Prefix:
    """Scaling prefix such as kilo (10^3) or kibi (2^10)."""

    name: str
    symbol: str
    base: int
    exponent: int

    @property
    def factor(self) -> Fraction:
        return Fraction(self.base) ** self.exponent

    @property
    def converter(self) -> UnitConverter:
        return PowerOfBase.of_prefix(self)


# name, symbol, exponent
_METRIC = [
    ("quetta", "Q", 30),
    ("ronna", "R", 27),
    ("yotta", "Y", 24),
    ("zetta", "Z", 21),
    ("exa", "E", 18),
    ("peta", "P", 15),
    ("tera", "T", 12),
    ("giga", "G", 9),
    ("mega", "M", 6),
    ("kilo", "k", 3),
    ("hecto", "h", 2),
    ("deka", "da", 1),
    ("deci", "d", -1),
    ("centi", "c", -2),
    ("milli", "m", -3),
    ("micro", "u", -6),
    ("nano", "n", -9),
    ("pico", "p", -12),
    ("femto", "f", -15),
    ("atto", "a", -18),
    ("zepto", "z", -21),
    ("yocto", "y", -24),
    ("ronto", "r", -27),
    ("quecto", "q", -30),
]

_BINARY = [
    ("kibi", "Ki", 10),
    ("mebi", "Mi", 20),
    ("gibi", "Gi", 30),
    ("tebi", "Ti", 40),
    ("pebi", "Pi", 50),
    ("exbi", "Ei", 60),
    ("zebi", "Zi", 70),
    ("yobi", "Yi", 80),
]

METRIC_PREFIXES: Tuple[Prefix, ...] = tuple(
    Prefix(name, symbol, 10, exponent) for name, symbol, exponent in _METRIC
)
BINARY_PREFIXES: Tuple[Prefix, ...] = tuple(
    Prefix(name, symbol, 2, exponent) for name, symbol, exponent in _BINARY
)
PREFIXES_BY_NAME: Mapping[str, Prefix] = MappingProxyType(
    {prefix.name: prefix for prefix in METRIC_PREFIXES + BINARY_PREFIXES}
)


class SymbolTable:
    """Immutable symbol <-> unit and symbol <-> prefix maps for one variant.

    The same unit may be registered under several symbols (``l`` and ``L``);
    the first registration is the one used when formatting. Registering a
    symbol twice with different values is an error.
    """

    def __init__(
        self,
        units: Iterable[Tuple[str, Unit]] = (),
        prefixes: Iterable[Tuple[str, Prefix]] = (),
    ):
        unit_map: Dict[str, Unit] = {}
        unit_symbols: Dict[Unit, str] = {}
        for symbol, unit in units:
            _register(unit_map, symbol, unit, "unit")
            unit_symbols.setdefault(unit, symbol)

        prefix_map: Dict[str, Prefix] = {}
        prefix_symbols: Dict[Prefix, str] = {}
        for symbol, prefix in prefixes:
            _register(prefix_map, symbol, prefix, "prefix")
            prefix_symbols.setdefault(prefix, symbol)

        self._units = MappingProxyType(unit_map)
        self._unit_symbols = MappingProxyType(unit_symbols)
        self._prefixes = MappingProxyType(prefix_map)
        self._prefix_symbols = MappingProxyType(prefix_symbols)
        self._prefix_by_factor = MappingProxyType(
            {prefix.factor: prefix for prefix in prefix_symbols}
        )
        # Longest first so that "da" wins over "d" and "Ki" over "K"
        self._prefix_order: Tuple[str, ...] = tuple(
            sorted(prefix_map, key=lambda s: (-len(s), s))
        )
        logger.debug(
            "Built symbol table with %d unit and %d prefix symbols",
            len(unit_map),
            len(prefix_map),
        )

    @property
    def units(self) -> Mapping[str, Unit]:
        return self._units

    @property
    def prefixes(self) -> Mapping[str, Prefix]:
        return self._prefixes

    @property
    def prefix_symbols(self) -> Tuple[str, ...]:
        return self._prefix_order

    def get_unit(self, symbol: str) -> Optional[Unit]:
        return self._units.get(symbol)

    def get_prefix(self, symbol: str) -> Optional[Prefix]:
        return self._prefixes.get(symbol)

    def lookup(self, atom: str) -> Optional[Tuple[Optional[Prefix], Unit]]:
        """Resolve an atom as a unit symbol, or as prefix + unit symbol.

        Exact unit symbols take precedence (``cd`` is candela, not
        centi-day); otherwise the longest prefix whose remainder is a
        registered metric unit is used.
        """
        unit = self._units.get(atom)
        if unit is not None:
            return None, unit
        for symbol in self._prefix_order:
            if len(symbol) < len(atom) and atom.startswith(symbol):
                unit = self._units.get(atom[len(symbol):])
                if unit is not None and unit.metric:
                    return self._prefixes[symbol], unit
        return None

    def symbol_for_unit(self, unit: Unit) -> Optional[str]:
        return self._unit_symbols.get(unit)

    def symbol_for_prefix(self, prefix: Prefix) -> Optional[str]:
        return self._prefix_symbols.get(prefix)

    def prefix_for_factor(self, factor: Fraction) -> Optional[Prefix]:
        """Return the registered prefix with exactly this factor, if any."""
        return self._prefix_by_factor.get(factor)

    def with_units(self, units: Iterable[Tuple[str, Unit]]) -> "SymbolTable":
        """Return a new table with extra unit symbols appended."""
        return SymbolTable(
            list(self._units.items()) + list(units), self._prefixes.items()
        )

    def __repr__(self) -> str:
        return (
            f"SymbolTable(units={len(self._units)}, "
            f"prefixes={len(self._prefixes)})"
        )


def _register(mapping: Dict, symbol: str, value, kind: str) -> None:
    if not symbol:
        raise ValueError(f"Empty {kind} symbol")
    existing = mapping.get(symbol)
    if existing is not None and existing != value:
        raise ValueError(
            f"Symbol '{symbol}' is already registered for {kind} {existing!r}"
        )
    mapping[symbol] = value


def prefix_rows(symbols: Mapping[str, str]) -> List[Tuple[str, Prefix]]:
    """Pair variant-specific symbols with prefixes, keyed by prefix name."""
    return [(symbol, PREFIXES_BY_NAME[name]) for name, symbol in symbols.items()]
