"""Constants and enums for unit parsing and formatting."""

from enum import Enum


class Variant(str, Enum):
    """Symbol set and rendering rules used by a parse/format call."""

    CASE_SENSITIVE = "case_sensitive"
    CASE_INSENSITIVE = "case_insensitive"
    PRINT = "print"

    @property
    def is_parseable(self) -> bool:
        return self is not Variant.PRINT


# Superscript mapping (parser side): one glyph per digit
SUPERSCRIPT_DIGITS = {
    '⁰': 0, '¹': 1, '²': 2, '³': 3, '⁴': 4,
    '⁵': 5, '⁶': 6, '⁷': 7, '⁸': 8, '⁹': 9,
}
SUPERSCRIPT_MINUS = '⁻'

# Reverse mapping: digits to superscripts
DIGIT_TO_SUPERSCRIPT = {
    '0': '⁰', '1': '¹', '2': '²', '3': '³', '4': '⁴',
    '5': '⁵', '6': '⁶', '7': '⁷', '8': '⁸', '9': '⁹',
    '-': '⁻',
}

MIDDLE_DOT = '·'

# Resource limits for a single parse
MAX_DEPTH = 64
MAX_DIGITS = 64
MAX_EXPONENT = 1000
# Largest exact factor a power may produce, in bits
MAX_FACTOR_BITS = 1 << 14
