"""Show how unit expressions parse and render: ``python -m ucumformat EXPR...``"""

import argparse
import logging

from tabulate import tabulate

from .constants import Variant
from .errors import UnitFormatError
from .format import get_format

EXAMPLES = [
    "m",        # basic unit
    "m/s",      # division
    "m^2",      # caret exponent
    "m²",       # superscript exponent
    "s-1",      # trailing exponent
    "kg.m/s2",  # derived
    "m/(bar.s)",  # grouped denominator
    "dHz",      # prefixed
    "m^(2/3)",  # rational exponent
    "[in_i]",   # bracketed atom
    "min.1000",  # factor on a non-metric unit
    "10^3",     # plain number
    "2^m",      # log scale
    "log(m)",   # logarithm
    "K + 5",    # offset
    "{rbc}",    # annotation only
    "MIN",      # case-insensitive only
]


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(
        prog="ucumformat",
        description="Parse unit expressions and show them in every variant.",
    )
    parser.add_argument("expressions", nargs="*", help="unit expressions (default: examples)")
    parser.add_argument(
        "--variant",
        choices=[v.value for v in Variant if v.is_parseable],
        default=Variant.CASE_SENSITIVE.value,
        help="variant used for parsing",
    )
    parser.add_argument("--debug", action="store_true", help="log parser decisions")
    args = parser.parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG)

    source = get_format(args.variant)
    rows = []
    for text in args.expressions or EXAMPLES:
        try:
            unit = source.parse(text)
            rows.append((text, *(get_format(v).format(unit) for v in Variant)))
        except UnitFormatError as e:
            rows.append((text, f"ERROR: {e}", "", ""))

    print(tabulate(rows, headers=["Example", *(v.value for v in Variant)], tablefmt="rounded_grid"))


if __name__ == "__main__":
    main()
