"""
lexer.py - Character-Level Tokenizer

Turns a character stream into a flat sequence of tokens. The lexer knows
nothing about ledger semantics.

Lexical rules:
    - Whitespace outside a string separates tokens and is discarded
    - A backslash escapes the next character anywhere, and opens an unquoted
      string if none is open
    - Double quotes open and close quoted strings; a quote always ends an
      adjoining unquoted string
    - Parentheses are structural tokens; inside an unquoted string they end
      the string first and are emitted on the following call

Example:
    lexer = Lexer('Assets:Bank "my bank" (silence x)')
    [t.text for t in lexer]
    # ['Assets:Bank', 'my bank', '', 'silence', 'x', '']
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import io
from typing import Iterator, List, Optional, TextIO, Union

from .core import UnterminatedEscape, UnterminatedQuotedString


class TokenType(Enum):
    """Kinds of lexed tokens."""
    TEXT = "text"                 # Unquoted string (may name a function)
    QUOTED_TEXT = "quoted_text"   # Quoted string (never names a function)
    OPEN_SCOPE = "("
    CLOSE_SCOPE = ")"
    END = "end"                   # End of stream


@dataclass(frozen=True, slots=True)
class Token:
    """A lexed token. text is empty for everything but TEXT and QUOTED_TEXT."""
    kind: TokenType
    text: str = ""

    def __repr__(self) -> str:
        if self.kind in (TokenType.TEXT, TokenType.QUOTED_TEXT):
            return f"Token({self.kind.name}, {self.text!r})"
        return f"Token({self.kind.name})"


OPEN_SCOPE = Token(TokenType.OPEN_SCOPE)
CLOSE_SCOPE = Token(TokenType.CLOSE_SCOPE)
END = Token(TokenType.END)


class Lexer:
    """
    Pull-based tokenizer over a text stream.

    Call next_token() repeatedly until it returns an END token, or iterate
    over the lexer. line_number is 1-based and is the line on which the most
    recently returned token ends. A newline that terminates an unquoted
    string is counted on the following call.
    """

    def __init__(self, source: Union[str, TextIO]):
        self._reader: TextIO = io.StringIO(source) if isinstance(source, str) else source
        self.line_number = 1
        self._deferred_newline = False
        self._escaping = False
        self._in_string = False
        self._in_quoted = False  # only meaningful while _in_string
        self._buffer: List[str] = []
        self._pending: Optional[Token] = None

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            if token.kind is TokenType.END:
                return
            yield token

    def next_token(self) -> Token:
        """
        Lex the next token.

        Raises:
            UnterminatedEscape: If the stream ends right after a backslash
            UnterminatedQuotedString: If the stream ends inside a quoted string
        """
        if self._pending is not None:
            token, self._pending = self._pending, None
            return token
        if self._deferred_newline:
            self.line_number += 1
            self._deferred_newline = False
        while True:
            ch = self._reader.read(1)
            if not ch:
                return self._final_token()
            token = self._consume(ch)
            if token is not None:
                return token

    def _take(self) -> str:
        text = "".join(self._buffer)
        self._buffer.clear()
        return text

    def _consume(self, ch: str) -> Optional[Token]:
        if ch == "\n":
            if self._in_string and not self._in_quoted and not self._escaping:
                self._deferred_newline = True
            else:
                self.line_number += 1

        if self._escaping:
            self._buffer.append(ch)
            self._escaping = False
            self._in_string = True
            return None
        if ch == "\\":
            self._escaping = True
            return None

        if self._in_string and self._in_quoted:
            if ch == '"':
                self._in_string = False
                self._in_quoted = False
                return Token(TokenType.QUOTED_TEXT, self._take())
            self._buffer.append(ch)
            return None

        if self._in_string:
            if ch == '"':
                self._in_quoted = True
                return Token(TokenType.TEXT, self._take())
            if ch in "()":
                self._in_string = False
                self._pending = OPEN_SCOPE if ch == "(" else CLOSE_SCOPE
                return Token(TokenType.TEXT, self._take())
            if ch.isspace():
                self._in_string = False
                return Token(TokenType.TEXT, self._take())
            self._buffer.append(ch)
            return None

        if ch.isspace():
            return None
        if ch == '"':
            self._in_string = True
            self._in_quoted = True
            return None
        if ch == "(":
            return OPEN_SCOPE
        if ch == ")":
            return CLOSE_SCOPE
        self._buffer.append(ch)
        self._in_string = True
        return None

    def _final_token(self) -> Token:
        if self._in_string and self._in_quoted:
            raise UnterminatedQuotedString()
        if self._escaping:
            raise UnterminatedEscape()
        if not self._in_string:
            return END
        self._in_string = False
        return Token(TokenType.TEXT, self._take())
