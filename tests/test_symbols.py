"""Tests for prefixes and symbol tables."""

from fractions import Fraction

import pytest

from ucumformat.catalog import (
    CANDELA,
    GRAM,
    HERTZ,
    LITER,
    METER,
    MINUTE,
    SECOND,
    UNIT_ROWS,
    build_table,
    default_table,
)
from ucumformat.constants import Variant
from ucumformat.symbols import PREFIXES_BY_NAME, SymbolTable


KILO = PREFIXES_BY_NAME["kilo"]
MILLI = PREFIXES_BY_NAME["milli"]


class TestPrefix:
    """Tests for prefix factors."""

    @pytest.mark.parametrize(
        "name,factor",
        [
            ("kilo", Fraction(1000)),
            ("deci", Fraction(1, 10)),
            ("quetta", Fraction(10) ** 30),
            ("quecto", Fraction(1, 10 ** 30)),
            ("kibi", Fraction(1024)),
            ("yobi", Fraction(2) ** 80),
        ],
    )
    def test_factor(self, name, factor):
        assert PREFIXES_BY_NAME[name].factor == factor

    def test_converter(self):
        assert KILO.converter.convert(Fraction(2)) == 2000


class TestLookup:
    """Tests for resolving atoms against the case-sensitive table."""

    @pytest.fixture
    def table(self):
        return default_table(Variant.CASE_SENSITIVE)

    def test_exact_symbol(self, table):
        assert table.lookup("m") == (None, METER)

    def test_exact_symbol_wins_over_prefix(self, table):
        """Test that cd is candela rather than centi-day."""
        assert table.lookup("cd") == (None, CANDELA)

    def test_prefixed(self, table):
        assert table.lookup("kg") == (KILO, GRAM)
        assert table.lookup("ms") == (MILLI, SECOND)

    def test_longest_prefix(self, table):
        """Test that da is preferred to d."""
        assert table.lookup("daHz") == (PREFIXES_BY_NAME["deka"], HERTZ)

    def test_non_metric_unit_is_not_prefixed(self, table):
        assert table.lookup("kmin") is None

    def test_unknown(self, table):
        assert table.lookup("XYZZY") is None
        assert table.lookup("MIN") is None

    def test_prefix_symbols_longest_first(self, table):
        lengths = [len(s) for s in table.prefix_symbols]
        assert lengths == sorted(lengths, reverse=True)


class TestTables:
    """Tests for the built-in tables."""

    def test_same_unit_under_two_symbols(self):
        """Test that the first registered symbol is used in reverse lookups."""
        table = default_table(Variant.CASE_SENSITIVE)
        assert table.get_unit("l") is LITER
        assert table.get_unit("L") is LITER
        assert table.symbol_for_unit(LITER) == "l"

    def test_case_insensitive_symbols(self):
        table = default_table(Variant.CASE_INSENSITIVE)
        assert table.get_unit("MIN") is MINUTE
        assert table.get_unit("HZ") is HERTZ
        assert table.get_prefix("DA") is PREFIXES_BY_NAME["deka"]
        assert table.symbol_for_prefix(PREFIXES_BY_NAME["deka"]) == "DA"

    def test_case_insensitive_lacks_newest_prefixes(self):
        assert default_table(Variant.CASE_INSENSITIVE).prefix_for_factor(Fraction(10) ** 30) is None
        assert default_table(Variant.CASE_SENSITIVE).prefix_for_factor(Fraction(10) ** 30) is not None

    def test_print_micro(self):
        table = default_table(Variant.PRINT)
        assert table.symbol_for_prefix(PREFIXES_BY_NAME["micro"]) == "μ"

    def test_every_row_resolves(self):
        """Test that every built-in symbol resolves to its unit in both code variants."""
        sensitive = default_table(Variant.CASE_SENSITIVE)
        insensitive = default_table(Variant.CASE_INSENSITIVE)
        for cs, ci, _, unit in UNIT_ROWS:
            assert sensitive.lookup(cs) == (None, unit)
            assert insensitive.lookup(ci) == (None, unit)

    def test_default_table_is_shared(self):
        assert default_table("print") is default_table(Variant.PRINT)
        assert build_table(Variant.PRINT) is not default_table(Variant.PRINT)

    def test_tables_are_read_only(self):
        table = default_table(Variant.CASE_SENSITIVE)
        with pytest.raises(TypeError):
            table.units["furlong"] = METER


class TestCustomTables:
    """Tests for building tables directly."""

    def test_conflicting_symbol(self):
        with pytest.raises(ValueError):
            SymbolTable([("m", METER), ("m", SECOND)])

    def test_repeated_registration_of_same_unit(self):
        table = SymbolTable([("m", METER), ("m", METER)])
        assert table.get_unit("m") is METER

    def test_empty_symbol(self):
        with pytest.raises(ValueError):
            SymbolTable([("", METER)])

    def test_with_units(self):
        base = SymbolTable([("m", METER)], [("k", KILO)])
        extended = base.with_units([("s", SECOND)])
        assert extended.lookup("ks") == (KILO, SECOND)
        assert base.get_unit("s") is None
