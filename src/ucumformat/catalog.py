"""Built-in units and the default symbol table of each variant."""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Dict, List, Optional, Tuple

from .constants import Variant
from .converters import (
    E,
    Chain,
    Exponential,
    PowerOfBase,
    RationalMultiply,
    to_fraction,
)
from .symbols import BINARY_PREFIXES, METRIC_PREFIXES, PREFIXES_BY_NAME, SymbolTable, prefix_rows
from .units import (
    AMOUNT_OF_SUBSTANCE,
    CURRENT,
    LENGTH,
    LUMINOUS_INTENSITY,
    MASS,
    ONE,
    TEMPERATURE,
    TIME,
    BaseUnit,
    NamedUnit,
    Unit,
)


def _prefixed(unit: Unit, name: str) -> Unit:
    return unit.transform(PowerOfBase.of_prefix(PREFIXES_BY_NAME[name]))


# Base units
METER = BaseUnit("m", LENGTH)
SECOND = BaseUnit("s", TIME)
GRAM = BaseUnit("g", MASS)
AMPERE = BaseUnit("A", CURRENT)
KELVIN = BaseUnit("K", TEMPERATURE)
MOLE = BaseUnit("mol", AMOUNT_OF_SUBSTANCE)
CANDELA = BaseUnit("cd", LUMINOUS_INTENSITY)

KILOGRAM = _prefixed(GRAM, "kilo")
CENTIMETER = _prefixed(METER, "centi")

# Derived SI units
RADIAN = NamedUnit("rad", ONE)
STERADIAN = NamedUnit("sr", ONE)
HERTZ = NamedUnit("Hz", ONE / SECOND)
NEWTON = NamedUnit("N", KILOGRAM * METER / SECOND ** 2)
PASCAL = NamedUnit("Pa", NEWTON / METER ** 2)
JOULE = NamedUnit("J", NEWTON * METER)
WATT = NamedUnit("W", JOULE / SECOND)
COULOMB = NamedUnit("C", AMPERE * SECOND)
VOLT = NamedUnit("V", WATT / AMPERE)
FARAD = NamedUnit("F", COULOMB / VOLT)
OHM = NamedUnit("Ohm", VOLT / AMPERE)
SIEMENS = NamedUnit("S", ONE / OHM)
WEBER = NamedUnit("Wb", VOLT * SECOND)
TESLA = NamedUnit("T", WEBER / METER ** 2)
HENRY = NamedUnit("H", WEBER / AMPERE)
CELSIUS = NamedUnit("Cel", KELVIN.shift(Fraction("273.15")))
LUMEN = NamedUnit("lm", CANDELA * STERADIAN)
LUX = NamedUnit("lx", LUMEN / METER ** 2)
BECQUEREL = NamedUnit("Bq", ONE / SECOND)
GRAY = NamedUnit("Gy", JOULE / KILOGRAM)
SIEVERT = NamedUnit("Sv", JOULE / KILOGRAM)

# Other metric units
LITER = NamedUnit("l", _prefixed(METER, "deci") ** 3)
BAR = NamedUnit("bar", PASCAL.multiply(100000))
ELECTRONVOLT = NamedUnit("eV", JOULE.multiply(Fraction("1.602176634e-19")))
TONNE = NamedUnit("t", KILOGRAM.multiply(1000))
BIT = NamedUnit("bit", ONE)
BYTE = NamedUnit("By", BIT.multiply(8))
KAYSER = NamedUnit("Ky", ONE / CENTIMETER)
BEL = NamedUnit("B", ONE.transform(Exponential(10)))
NEPER = NamedUnit("Np", ONE.transform(Exponential(E)))
MM_HG = NamedUnit("m[Hg]", _prefixed(PASCAL, "kilo").multiply(Fraction("133.3220")))
M_H2O = NamedUnit("m[H2O]", _prefixed(PASCAL, "kilo").multiply(Fraction("9.80665")))

# Non-metric units (never prefixed when formatting)
PERCENT = NamedUnit("%", ONE.multiply(Fraction(1, 100)), metric=False)
PARTS_PER_THOUSAND = NamedUnit("[ppth]", ONE.multiply(Fraction(1, 1000)), metric=False)
PARTS_PER_MILLION = NamedUnit("[ppm]", ONE.multiply(Fraction(1, 10 ** 6)), metric=False)
# Binary approximation of pi, carried exactly from here on
PI = NamedUnit("[pi]", ONE.multiply(to_fraction(math.pi)), metric=False)
DEGREE = NamedUnit("deg", RADIAN.multiply(to_fraction(math.pi) / 180), metric=False)
MINUTE_ANGLE = NamedUnit("'", DEGREE.divide(60), metric=False)
SECOND_ANGLE = NamedUnit("''", MINUTE_ANGLE.divide(60), metric=False)
PH = NamedUnit(
    "[pH]",
    (MOLE / LITER).transform(Chain.of(RationalMultiply(-1), Exponential(10))),
    metric=False,
)

MINUTE = NamedUnit("min", SECOND.multiply(60), metric=False)
HOUR = NamedUnit("h", MINUTE.multiply(60), metric=False)
DAY = NamedUnit("d", HOUR.multiply(24), metric=False)
WEEK = NamedUnit("wk", DAY.multiply(7), metric=False)
YEAR = NamedUnit("a", DAY.multiply(Fraction("365.25")), metric=False)
MONTH = NamedUnit("mo", YEAR.divide(12), metric=False)

INCH = NamedUnit("[in_i]", CENTIMETER.multiply(Fraction("2.54")), metric=False)
FOOT = NamedUnit("[ft_i]", INCH.multiply(12), metric=False)
YARD = NamedUnit("[yd_i]", FOOT.multiply(3), metric=False)
MILE = NamedUnit("[mi_i]", FOOT.multiply(5280), metric=False)
POUND = NamedUnit("[lb_av]", GRAM.multiply(Fraction("453.59237")), metric=False)
OUNCE = NamedUnit("[oz_av]", POUND.divide(16), metric=False)
FAHRENHEIT = NamedUnit(
    "[degF]",
    KELVIN.transform(RationalMultiply(Fraction(5, 9))).shift(Fraction("459.67")),
    metric=False,
)
PRU = NamedUnit(
    "[PRU]",
    _prefixed(MM_HG, "milli") * SECOND / _prefixed(LITER, "milli"),
    metric=False,
)

# case-sensitive, case-insensitive, print (None: same as case-sensitive), unit
UNIT_ROWS: List[Tuple[str, str, Optional[str], Unit]] = [
    ("m", "M", None, METER),
    ("s", "S", None, SECOND),
    ("g", "G", None, GRAM),
    ("A", "A", None, AMPERE),
    ("K", "K", None, KELVIN),
    ("mol", "MOL", None, MOLE),
    ("cd", "CD", None, CANDELA),
    ("rad", "RAD", None, RADIAN),
    ("sr", "SR", None, STERADIAN),
    ("Hz", "HZ", None, HERTZ),
    ("N", "N", None, NEWTON),
    ("Pa", "PAL", None, PASCAL),
    ("J", "J", None, JOULE),
    ("W", "W", None, WATT),
    ("C", "C", None, COULOMB),
    ("V", "V", None, VOLT),
    ("F", "F", None, FARAD),
    ("Ohm", "OHM", "Ω", OHM),
    ("S", "SIE", None, SIEMENS),
    ("Wb", "WB", None, WEBER),
    ("T", "T", None, TESLA),
    ("H", "H", None, HENRY),
    ("Cel", "CEL", "°C", CELSIUS),
    ("lm", "LM", None, LUMEN),
    ("lx", "LX", None, LUX),
    ("Bq", "BQ", None, BECQUEREL),
    ("Gy", "GY", None, GRAY),
    ("Sv", "SV", None, SIEVERT),
    ("l", "L", None, LITER),
    ("L", "L", None, LITER),
    ("bar", "BAR", None, BAR),
    ("eV", "EV", None, ELECTRONVOLT),
    ("t", "TNE", None, TONNE),
    ("bit", "BIT", None, BIT),
    ("By", "BY", None, BYTE),
    ("Ky", "KY", None, KAYSER),
    ("B", "B", None, BEL),
    ("Np", "NEP", None, NEPER),
    ("m[Hg]", "M[HG]", "mHg", MM_HG),
    ("m[H2O]", "M[H2O]", "mH2O", M_H2O),
    ("%", "%", None, PERCENT),
    ("[ppth]", "[PPTH]", "‰", PARTS_PER_THOUSAND),
    ("[ppm]", "[PPM]", "ppm", PARTS_PER_MILLION),
    ("[pi]", "[PI]", "π", PI),
    ("deg", "DEG", "°", DEGREE),
    ("'", "'", "′", MINUTE_ANGLE),
    ("''", "''", "″", SECOND_ANGLE),
    ("[pH]", "[PH]", "pH", PH),
    ("min", "MIN", None, MINUTE),
    ("h", "HR", None, HOUR),
    ("d", "D", None, DAY),
    ("wk", "WK", None, WEEK),
    ("a", "ANN", None, YEAR),
    ("mo", "MO", None, MONTH),
    ("[in_i]", "[IN_I]", "in", INCH),
    ("[ft_i]", "[FT_I]", "ft", FOOT),
    ("[yd_i]", "[YD_I]", "yd", YARD),
    ("[mi_i]", "[MI_I]", "mi", MILE),
    ("[lb_av]", "[LB_AV]", "lb", POUND),
    ("[oz_av]", "[OZ_AV]", "oz", OUNCE),
    ("[degF]", "[DEGF]", "°F", FAHRENHEIT),
    ("[PRU]", "[PRU]", "P.R.U.", PRU),
]

_CASE_SENSITIVE_PREFIXES = {p.name: p.symbol for p in METRIC_PREFIXES + BINARY_PREFIXES}

# The case-insensitive table predates the 2022 prefixes.
_CASE_INSENSITIVE_PREFIXES = {
    "yotta": "YA", "zetta": "ZA", "exa": "EX", "peta": "PT", "tera": "TR",
    "giga": "GA", "mega": "MA", "kilo": "K", "hecto": "H", "deka": "DA",
    "deci": "D", "centi": "C", "milli": "M", "micro": "U", "nano": "N",
    "pico": "P", "femto": "F", "atto": "A", "zepto": "ZO", "yocto": "YO",
    "kibi": "KIB", "mebi": "MIB", "gibi": "GIB", "tebi": "TIB",
    "pebi": "PIB", "exbi": "EIB", "zebi": "ZIB", "yobi": "YIB",
}

_PRINT_PREFIXES = dict(_CASE_SENSITIVE_PREFIXES, micro="μ")


def build_table(variant: Variant) -> SymbolTable:
    """Build a fresh symbol table for one variant from the built-in rows."""
    variant = Variant(variant)
    if variant is Variant.CASE_SENSITIVE:
        units = [(cs, unit) for cs, _, _, unit in UNIT_ROWS]
        prefixes = _CASE_SENSITIVE_PREFIXES
    elif variant is Variant.CASE_INSENSITIVE:
        units = [(ci, unit) for _, ci, _, unit in UNIT_ROWS]
        prefixes = _CASE_INSENSITIVE_PREFIXES
    else:
        units = [(pr or cs, unit) for cs, _, pr, unit in UNIT_ROWS]
        prefixes = _PRINT_PREFIXES
    return SymbolTable(units, prefix_rows(prefixes))


_TABLES: Dict[Variant, SymbolTable] = {}


def default_table(variant: Variant) -> SymbolTable:
    """Return the shared built-in table for a variant."""
    variant = Variant(variant)
    if variant not in _TABLES:
        _TABLES[variant] = build_table(variant)
    return _TABLES[variant]
