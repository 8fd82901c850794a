"""Tests for the unit expression parser."""

from fractions import Fraction

import pytest

from ucumformat.catalog import (
    BAR,
    CELSIUS,
    GRAM,
    HERTZ,
    HOUR,
    KELVIN,
    KILOGRAM,
    METER,
    MINUTE,
    SECOND,
    default_table,
)
from ucumformat.constants import Variant
from ucumformat.converters import E, Exponential, Logarithmic, PowerOfBase
from ucumformat.errors import (
    LexicalError,
    UnitFormatError,
    UnitSyntaxError,
    UnknownUnitError,
)
from ucumformat.lexer import END
from ucumformat.parser import UnitParser
from ucumformat.units import ONE, AnnotatedUnit, Element, ProductUnit


KILOMETER = METER.transform(PowerOfBase(10, 3))

PRIMARY = {"FACTOR", "ATOM", "ANNOTATION", "LPAR"}
AFTER_FACTOR = {"CARET", "SUPERSCRIPT", "DOT", "ASTERISK", "MIDDLE_DOT", "SOLIDUS", "SIGN", END}
AFTER_ATOM = AFTER_FACTOR | {"ANNOTATION", "FACTOR"}


@pytest.fixture
def parser():
    return UnitParser(default_table(Variant.CASE_SENSITIVE))


@pytest.fixture
def ci_parser():
    return UnitParser(default_table(Variant.CASE_INSENSITIVE), case_insensitive=True)


class TestProducts:
    """Tests for multiplication and division."""

    @pytest.mark.parametrize("text", ["m.s", "m*s", "m·s", "m * s"])
    def test_multiplication_operators(self, parser, text):
        assert parser.parse(text) == METER * SECOND

    def test_division(self, parser):
        assert parser.parse("m/s") == METER / SECOND

    def test_division_is_left_associative(self, parser):
        assert parser.parse("m/s/s") == METER / SECOND ** 2

    def test_grouped_denominator(self, parser):
        assert parser.parse("m/(bar.s)") == METER / (BAR * SECOND)

    def test_derived(self, parser):
        assert parser.parse("kg.m/s2") == KILOGRAM * METER / SECOND ** 2

    def test_number_factor(self, parser):
        assert parser.parse("min.1000") == MINUTE.multiply(1000)
        assert parser.parse("m.0.1") == METER.multiply(Fraction(1, 10))

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_is_one(self, parser, text):
        assert parser.parse(text) is ONE

    def test_one(self, parser):
        assert parser.parse("1") is ONE

    def test_parser_is_reusable(self, parser):
        assert parser.parse("m") == METER
        assert parser.parse("s") == SECOND

    def test_division_by_zero(self, parser):
        with pytest.raises(UnitSyntaxError, match="Zero factor") as exc_info:
            parser.parse("m/0")
        assert exc_info.value.position == 2

    def test_zero_exponent(self, parser):
        assert parser.parse("2^0") is ONE


class TestExponents:
    """Tests for the exponent forms."""

    @pytest.mark.parametrize("text", ["m^2", "m²", "m2", "m^+2", "m+2"])
    def test_square(self, parser, text):
        assert parser.parse(text) == METER ** 2

    @pytest.mark.parametrize("text", ["s-1", "s^-1", "s⁻¹", "s^(-1)"])
    def test_inverse(self, parser, text):
        assert parser.parse(text) == SECOND.inverse()

    def test_rational(self, parser):
        assert parser.parse("m^(2/3)") == ProductUnit((Element(METER, Fraction(2, 3)),))

    def test_exponent_binds_to_atom_only(self, parser):
        assert parser.parse("km/h^2") == KILOMETER / HOUR ** 2

    def test_exponent_after_parenthesis(self, parser):
        assert parser.parse("(m.s)2") == METER ** 2 * SECOND ** 2

    def test_separated_digit_is_not_an_exponent(self, parser):
        with pytest.raises(UnitSyntaxError):
            parser.parse("m 2")

    def test_zero_root(self, parser):
        with pytest.raises(UnitSyntaxError) as exc_info:
            parser.parse("m^(1/0)")
        assert exc_info.value.position == 5

    def test_fractional_exponent_rejected(self, parser):
        with pytest.raises(UnitSyntaxError, match="Expected an integer"):
            parser.parse("m^1.5")

    def test_even_root_of_negative_number(self, parser):
        """Test that arithmetic failures surface as syntax errors."""
        with pytest.raises(UnitSyntaxError, match="negative factor") as exc_info:
            parser.parse("(0 - 4)^(1/2)")
        assert isinstance(exc_info.value, UnitFormatError)
        assert exc_info.value.position == 7
        assert exc_info.value.found == "^"


class TestAtoms:
    """Tests for unit symbols, prefixes and annotations."""

    def test_prefixed(self, parser):
        assert parser.parse("km") == KILOMETER
        assert parser.parse("kg") == GRAM.transform(PowerOfBase(10, 3))

    def test_deka_prefix(self, parser):
        assert parser.parse("daHz") == HERTZ.transform(PowerOfBase(10, 1))

    def test_unknown(self, parser):
        with pytest.raises(UnknownUnitError) as exc_info:
            parser.parse("m/XYZZY")
        assert exc_info.value.symbol == "XYZZY"
        assert exc_info.value.position == 2

    def test_case_sensitive_rejects_upper_case(self, parser):
        with pytest.raises(UnknownUnitError):
            parser.parse("MIN")

    def test_annotation(self, parser):
        unit = parser.parse("m{length}")
        assert isinstance(unit, AnnotatedUnit)
        assert unit.annotation == "length"
        assert unit == METER

    def test_bare_annotation(self, parser):
        unit = parser.parse("{rbc}")
        assert unit.annotation == "rbc"
        assert unit == ONE

    def test_annotation_takes_exponent(self, parser):
        assert parser.parse("m{a}2") == METER ** 2

    def test_lexical_error(self, parser):
        with pytest.raises(LexicalError):
            parser.parse("m#s")


class TestCaseInsensitive:
    """Tests for parsing with the case-insensitive table."""

    @pytest.mark.parametrize("text", ["MIN", "min", "Min"])
    def test_any_case(self, ci_parser, text):
        assert ci_parser.parse(text) == MINUTE

    def test_prefixed(self, ci_parser):
        assert ci_parser.parse("km/hr") == KILOMETER / HOUR

    def test_log_keyword(self, ci_parser):
        assert ci_parser.parse("LOG(M)") == METER.transform(Logarithmic(10))
        assert ci_parser.parse("E^M") == METER.transform(Exponential(E))


class TestLogarithms:
    """Tests for log-scale terms and logarithm functions."""

    @pytest.mark.parametrize(
        "text,base",
        [("2^m", 2), ("10^m", 10), ("e^m", E)],
        ids=["base_2", "base_10", "natural"],
    )
    def test_log_scale(self, parser, text, base):
        assert parser.parse(text) == METER.transform(Exponential(base))

    @pytest.mark.parametrize(
        "text,base",
        [("log(m)", 10), ("log2(m)", 2), ("ln(m)", E)],
        ids=["log", "log2", "ln"],
    )
    def test_log_function(self, parser, text, base):
        assert parser.parse(text) == METER.transform(Logarithmic(base))

    @pytest.mark.parametrize("text", ["10^3", "10^(3)", "10^+3"])
    def test_number_to_a_power(self, parser, text):
        """Test that a number raised to a number is just a number."""
        assert parser.parse(text) == ONE.multiply(1000)

    def test_log_scale_operand_must_exist(self, parser):
        with pytest.raises(UnknownUnitError):
            parser.parse("2^xyz")

    def test_invalid_log_base(self, parser):
        with pytest.raises(UnitSyntaxError, match="Invalid logarithm base"):
            parser.parse("log1(m)")


class TestOffsets:
    """Tests for shifted units."""

    def test_trailing_offset(self, parser):
        assert parser.parse("K + 5") == KELVIN.shift(5)

    def test_negative_offset(self, parser):
        assert parser.parse("K - 273.15") == KELVIN.shift(Fraction("-273.15"))

    def test_adjacent_sign_is_exponent(self, parser):
        assert parser.parse("K+5") == KELVIN ** 5

    def test_leading_offset(self, parser):
        assert parser.parse("5 + K") == KELVIN.shift(5)
        assert parser.parse("5 - K") == KELVIN.multiply(-1).shift(5)

    def test_offset_unit_matches_catalog(self, parser):
        assert parser.parse("K + 273.15").is_equivalent_to(CELSIUS)


class TestSyntaxErrors:
    """Tests for error positions and expected token kinds."""

    def test_compound_phrase(self, parser):
        with pytest.raises(UnitSyntaxError) as exc_info:
            parser.parse("3 ft 2 in")
        error = exc_info.value
        assert error.found == "ft"
        assert error.position == 2
        assert error.expected == AFTER_FACTOR

    def test_missing_operand(self, parser):
        with pytest.raises(UnitSyntaxError) as exc_info:
            parser.parse("m/")
        error = exc_info.value
        assert error.found is None
        assert error.position == 2
        assert error.expected == PRIMARY

    def test_leading_operator(self, parser):
        with pytest.raises(UnitSyntaxError) as exc_info:
            parser.parse("/s")
        assert exc_info.value.found == "/"
        assert exc_info.value.position == 0
        assert exc_info.value.expected == PRIMARY

    def test_double_caret(self, parser):
        with pytest.raises(UnitSyntaxError) as exc_info:
            parser.parse("m^^2")
        assert exc_info.value.position == 2
        assert exc_info.value.expected == {"LPAR", "SIGN", "FACTOR"}

    def test_unbalanced_parenthesis(self, parser):
        with pytest.raises(UnitSyntaxError) as exc_info:
            parser.parse("m)")
        assert exc_info.value.found == ")"
        assert exc_info.value.expected == AFTER_ATOM

    def test_abandoned_log_scale_does_not_leak(self, parser):
        """Test that a failed log-scale attempt leaves no expected kinds behind."""
        with pytest.raises(UnitSyntaxError) as exc_info:
            parser.parse("2^")
        assert exc_info.value.position == 2
        assert exc_info.value.expected == {"LPAR", "SIGN", "FACTOR"}

    def test_abandoned_log_scales_in_a_long_product(self, parser):
        text = ".".join(["2^m"] * 500) + ".10^"
        with pytest.raises(UnitSyntaxError) as exc_info:
            parser.parse(text)
        assert exc_info.value.position == len(text)
        assert exc_info.value.expected == {"LPAR", "SIGN", "FACTOR"}

    def test_message_lists_expected(self, parser):
        with pytest.raises(UnitSyntaxError, match="expected one of: ANNOTATION, ATOM, FACTOR, LPAR"):
            parser.parse("m/")


class TestLimits:
    """Tests for nesting and literal length limits."""

    def test_nesting_limit(self, parser):
        assert parser.parse("(" * 64 + "m" + ")" * 64) == METER
        with pytest.raises(UnitSyntaxError, match="nested deeper"):
            parser.parse("(" * 65 + "m" + ")" * 65)

    def test_digit_limit(self, parser):
        assert parser.parse("1" * 64) == ONE.multiply(int("1" * 64))
        with pytest.raises(UnitSyntaxError):
            parser.parse("1" * 65)

    def test_exponent_limit(self, parser):
        assert parser.parse("m^1000") == METER ** 1000
        with pytest.raises(UnitSyntaxError, match="Exponent larger than 1000") as exc_info:
            parser.parse("m^1001")
        assert exc_info.value.position == 2

    @pytest.mark.parametrize(
        "text,position",
        [("10^9999999", 3), ("m¹⁰⁰¹", 1), ("m-1001", 2), ("m^(1/9999)", 5)],
        ids=["caret", "superscript", "adjacent", "root"],
    )
    def test_exponent_limit_forms(self, parser, text, position):
        with pytest.raises(UnitSyntaxError, match="Exponent larger") as exc_info:
            parser.parse(text)
        assert exc_info.value.position == position

    def test_nested_powers_are_bounded(self, parser):
        with pytest.raises(UnitSyntaxError, match="too large") as exc_info:
            parser.parse("((10^1000)^1000)")
        assert exc_info.value.position == 10


class TestStartPosition:
    """Tests for parsing from an index into a longer text."""

    def test_skips_prefix(self, parser):
        assert parser.parse("speed: m/s", 7) == METER / SECOND

    def test_skipped_prefix_is_not_lexed(self, parser):
        assert parser.parse("#? m", 3) == METER

    def test_at_end_is_one(self, parser):
        assert parser.parse("m/s", 3) is ONE
        assert parser.parse("m/s  ", 3) is ONE

    def test_error_positions_are_absolute(self, parser):
        with pytest.raises(UnitSyntaxError) as exc_info:
            parser.parse("ab m/", 3)
        assert exc_info.value.position == 5
        with pytest.raises(UnknownUnitError) as exc_info:
            parser.parse("ab XYZZY", 3)
        assert exc_info.value.position == 3
        with pytest.raises(LexicalError) as exc_info:
            parser.parse("ab m#s", 3)
        assert exc_info.value.position == 4

    def test_case_insensitive(self, ci_parser):
        assert ci_parser.parse("x min", 2) == MINUTE

    def test_negative_start(self, parser):
        with pytest.raises(ValueError, match="Negative start index"):
            parser.parse("m", -1)
