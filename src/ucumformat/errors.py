"""Exceptions raised while parsing and formatting unit expressions."""

from __future__ import annotations

from typing import Iterable, Optional


class UnitFormatError(ValueError):
    """Base exception for unit parsing/formatting errors."""

    pass


class LexicalError(UnitFormatError):
    """Raised when the input contains a character no token can start with."""

    def __init__(self, text: str, position: int, char: str):
        self.text = text
        self.position = position
        self.char = char
        super().__init__(
            f"Unexpected character {char!r} at position {position} in {text!r}"
        )


class UnitSyntaxError(UnitFormatError):
    """Raised when a token is not accepted by any viable grammar alternative.

    ``expected`` holds the token kinds that would have been accepted at
    ``position``; ``found`` is the offending lexeme (``None`` at end of input).
    """

    def __init__(
        self,
        text: str,
        position: int,
        found: Optional[str],
        expected: Iterable[str] = (),
        reason: Optional[str] = None,
    ):
        self.text = text
        self.position = position
        self.found = found
        self.expected = frozenset(expected)

        found_part = "end of input" if found is None else repr(found)
        if reason is not None:
            message = f"{reason} at position {position} in {text!r}"
        else:
            message = f"Unexpected {found_part} at position {position} in {text!r}"
        if self.expected:
            message += f", expected one of: {', '.join(sorted(self.expected))}"
        super().__init__(message)


class UnknownUnitError(UnitFormatError):
    """Raised when an atom is neither a unit nor a prefixed unit."""

    def __init__(self, symbol: str, position: Optional[int] = None):
        self.symbol = symbol
        self.position = position
        pos_part = f" at position {position}" if position is not None else ""
        super().__init__(f"Unknown unit '{symbol}'{pos_part}")


class UnsupportedOperationError(UnitFormatError):
    """Raised for operations the active variant or grammar does not define."""

    pass


class UnitConversionError(ArithmeticError):
    """Raised when two units cannot be converted into each other."""

    pass


class FormatContractError(RuntimeError):
    """Raised when the formatter meets a unit shape it cannot render.

    Every unit the parser can build is renderable, so this signals a bug
    rather than bad input.
    """

    pass
