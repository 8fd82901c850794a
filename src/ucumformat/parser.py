"""Recursive-descent parser for unit expressions.

Grammar::

    Expr       := [ Number Sign ] MulExpr [ Sign Number ]
    MulExpr    := ExpExpr { ('.' | '*' | '·' | '/') ExpExpr }
    ExpExpr    := (Integer | 'e') '^' AtomicExpr
                | ('log' [Integer] | 'ln') '(' Expr ')'
                | AtomicExpr [ Exponent ]
    AtomicExpr := Number | Atom [Annotation] | Annotation | '(' Expr ')'
    Exponent   := '^' Sign? Integer
                | '^' '(' Sign? Integer [ '/' Sign? Integer ] ')'
                | Superscript
                | Sign? Integer      (written directly after an atom or ')')

Results are built as the input is consumed; there is no syntax tree.
"""

from __future__ import annotations

import logging
import re
from fractions import Fraction
from typing import Callable, Optional, Set, Tuple

from lark import Token

from .constants import MAX_DEPTH, MAX_EXPONENT, SUPERSCRIPT_DIGITS, SUPERSCRIPT_MINUS
from .converters import E, Logarithmic, PowerOfBase
from .errors import UnitConversionError, UnitSyntaxError, UnknownUnitError
from .lexer import END, TokenCursor, tokenize
from .symbols import SymbolTable
from .units import ONE, Unit, is_scalar

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"[0-9]+")
_MULTIPLY = ('DOT', 'ASTERISK', 'MIDDLE_DOT')
# Tokens after which a bare integer is read as an exponent (m2, s-1)
_EXPONENT_HOSTS = ('ATOM', 'RPAR', 'ANNOTATION')


def _is_integer(token: Optional[Token]) -> bool:
    return (
        token is not None
        and token.type == 'FACTOR'
        and _INTEGER.fullmatch(token) is not None
    )


def _adjacent(first: Token, second: Optional[Token]) -> bool:
    return second is not None and second.start_pos == first.end_pos


def _decode_superscript(token: Token) -> int:
    digits = str(token)
    negative = digits.startswith(SUPERSCRIPT_MINUS)
    if negative:
        digits = digits[1:]
    pow = 0
    for char in digits:
        pow = pow * 10 + SUPERSCRIPT_DIGITS[char]
    return -pow if negative else pow


class UnitParser:
    """Parses unit expressions against one symbol table.

    The parser itself holds no per-call state, so a single instance can be
    shared; every call to :meth:`parse` gets its own token cursor.
    """

    def __init__(self, symbols: SymbolTable, case_insensitive: bool = False):
        self.symbols = symbols
        self.case_insensitive = case_insensitive

    def parse(self, text: str, start: int = 0) -> Unit:
        """Parse ``text`` from index ``start`` to its end.

        Error positions are indices into the whole of ``text``.
        """
        if start < 0:
            raise ValueError(f"Negative start index {start}")
        if not text[start:].strip():
            return ONE
        if self.case_insensitive:
            text = text.upper()
        unit = _ParseSession(text, self.symbols, self.case_insensitive, start).parse()
        logger.debug("Parsed %r as %r", text, unit)
        return unit


class _ParseSession:
    """State of a single parse: cursor, nesting depth and expected kinds."""

    def __init__(
        self, text: str, symbols: SymbolTable, case_insensitive: bool, start: int = 0
    ):
        self.text = text
        self.symbols = symbols
        self.case_insensitive = case_insensitive
        self.cursor = TokenCursor(tokenize(text, start))
        self.depth = 0
        # Kinds some alternative would have accepted at token expected_index.
        # Errors only report the kinds at the cursor, so no history is kept.
        self.expected_index = -1
        self.expected: Set[str] = set()

    def parse(self) -> Unit:
        result = self.expr()
        self._note(END)
        if not self.cursor.at_end():
            raise self._error()
        return result

    # Token helpers

    def _note(self, *kinds: str) -> None:
        if self.cursor.index != self.expected_index:
            self.expected_index = self.cursor.index
            self.expected = set()
        self.expected.update(kinds)

    def _at(self, *kinds: str) -> bool:
        self._note(*kinds)
        token = self.cursor.peek()
        return token is not None and token.type in kinds

    def _expect(self, kind: str) -> Token:
        if not self._at(kind):
            raise self._error()
        return self.cursor.advance()

    def _error(self, reason: Optional[str] = None) -> UnitSyntaxError:
        token = self.cursor.peek()
        if token is None:
            position, found = len(self.text), None
        else:
            position, found = token.start_pos, str(token)
        expected = self.expected if self.expected_index == self.cursor.index else ()
        return UnitSyntaxError(self.text, position, found, expected, reason)

    def _keyword(self, token: Optional[Token]) -> Optional[str]:
        if token is None or token.type != 'ATOM':
            return None
        return token.lower() if self.case_insensitive else str(token)

    def _integer(self) -> int:
        sign = self.cursor.advance() if self._at('SIGN') else None
        if not self._at('FACTOR'):
            raise self._error()
        if not _is_integer(self.cursor.peek()):
            raise self._error(reason="Expected an integer")
        token = self.cursor.advance()
        value = self._bounded(int(token), token)
        return -value if sign == '-' else value

    def _bounded(self, value: int, token: Token) -> int:
        if abs(value) > MAX_EXPONENT:
            raise UnitSyntaxError(
                self.text,
                token.start_pos,
                str(token),
                reason=f"Exponent larger than {MAX_EXPONENT}",
            )
        return value

    def _open(self) -> Token:
        token = self._expect('LPAR')
        if self.depth >= MAX_DEPTH:
            raise UnitSyntaxError(
                self.text,
                token.start_pos,
                str(token),
                reason=f"Parentheses nested deeper than {MAX_DEPTH}",
            )
        self.depth += 1
        return token

    def _close(self) -> None:
        self._expect('RPAR')
        self.depth -= 1

    def _combine(self, token: Token, operation: Callable[..., Unit], operand) -> Unit:
        """Apply a unit operation, reporting arithmetic failures at ``token``."""
        try:
            return operation(operand)
        except UnitConversionError as e:
            raise UnitSyntaxError(self.text, token.start_pos, str(token), reason=str(e)) from e

    # Grammar rules

    def expr(self) -> Unit:
        leading: Optional[Tuple[Fraction, str]] = None
        if self._at('FACTOR'):
            sign = self.cursor.peek(1)
            if sign is not None and sign.type == 'SIGN':
                number = Fraction(str(self.cursor.advance()))
                leading = (number, str(self.cursor.advance()))

        result = self.mul_expr()

        if leading is not None:
            number, sign = leading
            if sign == '-':
                result = result.multiply(-1)
            result = result.shift(number)

        if self._at('SIGN'):
            sign = self.cursor.advance()
            offset = Fraction(str(self._expect('FACTOR')))
            result = result.shift(-offset if sign == '-' else offset)
        return result

    def mul_expr(self) -> Unit:
        result = self.exp_expr()
        while True:
            if self._at(*_MULTIPLY):
                operator = self.cursor.advance()
                result = self._combine(operator, result.multiply, self.exp_expr())
            elif self._at('SOLIDUS'):
                operator = self.cursor.advance()
                result = self._combine(operator, result.divide, self.exp_expr())
            else:
                return result

    def exp_expr(self) -> Unit:
        if self._log_scale_ahead():
            mark = self.cursor.mark()
            depth = self.depth
            expected = (self.expected_index, set(self.expected))
            try:
                return self._log_scale()
            except UnitSyntaxError:
                # Not a log-scale term after all (e.g. 10^3): reparse as
                # an ordinary number with an exponent.
                self.cursor.reset(mark)
                self.depth = depth
                self.expected_index, self.expected = expected

        keyword = self._log_keyword()
        if keyword is not None:
            return self._log_function(keyword)

        result = self.atomic_expr()
        start = self.cursor.peek()
        exponent = self._exponent()
        if exponent is not None:
            pow, root = exponent
            if pow != 1:
                result = self._combine(start, result.pow, pow)
            if root != 1:
                result = self._combine(start, result.root, root)
        return result

    def atomic_expr(self) -> Unit:
        if self._at('FACTOR'):
            token = self.cursor.advance()
            value = Fraction(str(token))
            if value == 0:
                raise UnitSyntaxError(
                    self.text, token.start_pos, str(token), reason="Zero factor"
                )
            return ONE.multiply(value)
        if self._at('ATOM'):
            result = self._resolve(self.cursor.advance())
            if self._at('ANNOTATION'):
                result = result.annotate(self.cursor.advance()[1:-1])
            return result
        if self._at('ANNOTATION'):
            return ONE.annotate(self.cursor.advance()[1:-1])
        if self._at('LPAR'):
            self._open()
            result = self.expr()
            self._close()
            return result
        raise self._error()

    # Pieces of ExpExpr

    def _log_scale_ahead(self) -> bool:
        if self.cursor.peek(1) is None or self.cursor.peek(1).type != 'CARET':
            return False
        token = self.cursor.peek()
        if _is_integer(token):
            return int(token) >= 2
        return self._keyword(token) == 'e'

    def _log_scale(self) -> Unit:
        base_token = self.cursor.advance()
        self._expect('CARET')
        operand = self.atomic_expr()
        if is_scalar(operand):
            raise self._error(reason="Numeric exponent")
        base = E if base_token.type == 'ATOM' else int(base_token)
        return operand.transform(Logarithmic(base).inverse())

    def _log_keyword(self) -> Optional[str]:
        keyword = self._keyword(self.cursor.peek())
        following = self.cursor.peek(1)
        if following is None:
            return None
        if keyword == 'ln' and following.type == 'LPAR':
            return keyword
        if keyword == 'log':
            if following.type == 'LPAR':
                return keyword
            after = self.cursor.peek(2)
            if _is_integer(following) and after is not None and after.type == 'LPAR':
                return keyword
        return None

    def _log_function(self, keyword: str) -> Unit:
        self.cursor.advance()
        base = E if keyword == 'ln' else 10
        if keyword == 'log' and self._at('FACTOR'):
            token = self.cursor.peek()
            base = int(token)
            if base < 2:
                raise self._error(reason="Invalid logarithm base")
            self.cursor.advance()
        self._open()
        result = self.expr()
        self._close()
        return result.transform(Logarithmic(base))

    def _exponent(self) -> Optional[Tuple[int, int]]:
        """Parse an optional exponent, returning (pow, root)."""
        if self._at('CARET'):
            self.cursor.advance()
            if not self._at('LPAR'):
                return self._integer(), 1
            self._open()
            pow = self._integer()
            root = 1
            if self._at('SOLIDUS'):
                self.cursor.advance()
                start = self.cursor.peek()
                root = self._integer()
                if root == 0:
                    raise UnitSyntaxError(
                        self.text, start.start_pos, str(start), reason="Zero root"
                    )
            self._close()
            return pow, root
        if self._at('SUPERSCRIPT'):
            token = self.cursor.advance()
            return self._bounded(_decode_superscript(token), token), 1
        if self._adjacent_integer_ahead():
            return self._integer(), 1
        return None

    def _adjacent_integer_ahead(self) -> bool:
        previous = self.cursor.previous
        if previous is None or previous.type not in _EXPONENT_HOSTS:
            return False
        self._note('SIGN', 'FACTOR')
        token = self.cursor.peek()
        if not _adjacent(previous, token):
            return False
        if token.type == 'SIGN':
            following = self.cursor.peek(1)
            return _adjacent(token, following) and _is_integer(following)
        return _is_integer(token)

    def _resolve(self, token: Token) -> Unit:
        found = self.symbols.lookup(str(token))
        if found is None:
            raise UnknownUnitError(str(token), token.start_pos)
        prefix, unit = found
        if prefix is None:
            return unit
        return unit.transform(PowerOfBase.of_prefix(prefix))
