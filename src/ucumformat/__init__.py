"""Parsing and formatting of UCUM-style unit expressions."""

from .catalog import build_table, default_table
from .constants import Variant
from .converters import (
    IDENTITY,
    Affine,
    Chain,
    Exponential,
    Logarithmic,
    PowerOfBase,
    RationalMultiply,
    UnitConverter,
)
from .errors import (
    FormatContractError,
    LexicalError,
    UnitConversionError,
    UnitFormatError,
    UnitSyntaxError,
    UnknownUnitError,
    UnsupportedOperationError,
)
from .format import UnitFormat, format_unit, get_format, parse_unit
from .formatter import UnitFormatter
from .parser import UnitParser
from .symbols import Prefix, SymbolTable
from .units import (
    ONE,
    AnnotatedUnit,
    BaseUnit,
    Dimension,
    NamedUnit,
    ProductUnit,
    TransformedUnit,
    Unit,
)

__all__ = [
    "IDENTITY",
    "ONE",
    "Affine",
    "AnnotatedUnit",
    "BaseUnit",
    "Chain",
    "Dimension",
    "Exponential",
    "FormatContractError",
    "LexicalError",
    "Logarithmic",
    "NamedUnit",
    "PowerOfBase",
    "Prefix",
    "ProductUnit",
    "RationalMultiply",
    "SymbolTable",
    "TransformedUnit",
    "Unit",
    "UnitConversionError",
    "UnitConverter",
    "UnitFormat",
    "UnitFormatError",
    "UnitFormatter",
    "UnitParser",
    "UnitSyntaxError",
    "UnknownUnitError",
    "UnsupportedOperationError",
    "Variant",
    "build_table",
    "default_table",
    "format_unit",
    "get_format",
    "parse_unit",
]
