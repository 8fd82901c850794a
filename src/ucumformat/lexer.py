"""Tokenizer for unit expressions.

The terminals are declared as a lark grammar and lexed with lark's basic
lexer, which yields tokens lazily. Parsing itself is done by hand in
:mod:`ucumformat.parser`, since it needs bounded backtracking and
adjacency checks that a table-driven parser can't express.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional

from lark import Lark, Token
from lark.exceptions import UnexpectedCharacters

from .constants import MAX_DIGITS
from .errors import LexicalError, UnitSyntaxError

# Letters (no digits or superscripts), a few symbol characters, and
# bracketed segments whose content belongs to the atom verbatim.
ATOM_PATTERN = r"(?:[^\W\d²³¹⁰-₟]|[%'\"°]|\[[^\[\]{}]*\])+"

END = "$END"

GRAMMAR = rf'''
start: _token*

_token: ATOM | ANNOTATION | FACTOR | SIGN
      | DOT | ASTERISK | MIDDLE_DOT | SOLIDUS | CARET
      | SUPERSCRIPT | LPAR | RPAR

ATOM: /{ATOM_PATTERN}/
ANNOTATION: /\{{[^{{}}]*\}}/
FACTOR: /[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?/
SIGN: "+" | "-"

DOT: "."
ASTERISK: "*"
MIDDLE_DOT: "·"
SOLIDUS: "/"
CARET: "^"

// Superscript digits with an optional leading superscript minus
SUPERSCRIPT: /⁻?[⁰¹²³⁴-⁹]+/

LPAR: "("
RPAR: ")"

WS: /[ \t\r\n]+/
%ignore WS
'''

_LEXER: Optional[Lark] = None


def _get_lexer() -> Lark:
    global _LEXER
    if _LEXER is None:
        _LEXER = Lark(GRAMMAR, start='start', parser='lalr', lexer='basic')
    return _LEXER


def tokenize(text: str, start: int = 0) -> Iterator[Token]:
    """Lazily split ``text`` into tokens, skipping its first ``start`` characters.

    Token positions are indices into the whole of ``text``.

    Raises:
        LexicalError: on a character no terminal can start with.
        UnitSyntaxError: on a numeric literal longer than MAX_DIGITS.
    """
    try:
        # Blanking the skipped prefix keeps positions absolute
        for token in _get_lexer().lex(" " * start + text[start:]):
            if token.type in ('FACTOR', 'SUPERSCRIPT') and len(token) > MAX_DIGITS:
                raise UnitSyntaxError(
                    text,
                    token.start_pos,
                    str(token),
                    reason=f"Numeric literal longer than {MAX_DIGITS} characters",
                )
            yield token
    except UnexpectedCharacters as e:
        raise LexicalError(text, e.pos_in_stream, text[e.pos_in_stream]) from e


class TokenCursor:
    """Position over a lazily filled token buffer.

    ``mark()`` and ``reset()`` allow bounded backtracking: tokens are kept
    in the buffer once pulled, so rewinding never re-lexes.
    """

    def __init__(self, tokens: Iterable[Token]):
        self._source = iter(tokens)
        self._buffer: List[Token] = []
        self._index = 0

    def _fill(self, size: int) -> None:
        while len(self._buffer) < size:
            token = next(self._source, None)
            if token is None:
                return
            self._buffer.append(token)

    def peek(self, offset: int = 0) -> Optional[Token]:
        """Return the token ``offset`` places ahead, or None past the end."""
        position = self._index + offset
        self._fill(position + 1)
        if position < len(self._buffer):
            return self._buffer[position]
        return None

    def advance(self) -> Token:
        token = self.peek()
        if token is None:
            raise IndexError("No more tokens")
        self._index += 1
        return token

    @property
    def index(self) -> int:
        return self._index

    @property
    def previous(self) -> Optional[Token]:
        """The most recently consumed token."""
        if self._index == 0:
            return None
        return self._buffer[self._index - 1]

    def at_end(self) -> bool:
        return self.peek() is None

    def mark(self) -> int:
        return self._index

    def reset(self, mark: int) -> None:
        self._index = mark
