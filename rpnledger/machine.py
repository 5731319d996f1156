"""
machine.py - Generic RPN Stack Machine

The StackMachine consumes tokens from a Lexer and treats them as a reverse
Polish notation program. It maintains two stacks:

1. The operand stack: every value pushed so far
2. The marker stack: operand-stack lengths recorded at each open parenthesis

The top marker bounds what a called function can see. Functions receive an
Operands view floored at that marker, so they can never read or pop values
pushed by an enclosing scope, and each scope must leave the stack exactly as
it found it.

The unquoted keyword "silence" disables pushing and dispatch until the scope
in which it appeared closes. It is only valid inside parentheses.

Functions return None to continue or CallResult.STOP to end the run early
without error; they raise LedgerError subclasses to fail.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from .core import (
    SILENCE_KEYWORD,
    LedgerError, ParseError,
    UnmatchedCloseScope, UnconsumedOperands, SilenceOutsideScope,
    LeftoverOperands, UnclosedScopes, SilencedAtEnd,
)
from .lexer import Lexer, TokenType


class CallResult(Enum):
    """Non-error outcome a function may return to the dispatch loop."""
    STOP = "stop"


class ParseResult(Enum):
    """
    Outcome of a run that did not fail.

    COMPLETED: The whole stream was consumed.
    STOPPED: A function returned CallResult.STOP; the context holds whatever
             state was reached.
    """
    COMPLETED = "completed"
    STOPPED = "stopped"


class Operands:
    """
    Window over the machine's operand stack.

    Exposes only the values at index >= floor. Pushes append to the shared
    stack; pops never reach below the floor.
    """

    __slots__ = ("_stack", "_floor")

    def __init__(self, stack: List[Any], floor: int = 0):
        if floor > len(stack):
            raise ValueError(f"floor {floor} beyond stack length {len(stack)}")
        self._stack = stack
        self._floor = floor

    def __len__(self) -> int:
        return len(self._stack) - self._floor

    def values(self) -> List[Any]:
        """Return a copy of the visible values, bottom to top."""
        return self._stack[self._floor:]

    def push(self, *values: Any) -> None:
        self._stack.extend(values)

    def pop(self, count: int) -> List[Any]:
        """
        Pop up to count values and return them bottom to top.

        Never pops more than len(self) values.
        """
        count = max(0, min(count, len(self)))
        if count == 0:
            return []
        popped = self._stack[-count:]
        del self._stack[-count:]
        return popped

    def __repr__(self) -> str:
        return f"Operands({self.values()!r})"


# Signature of a function callable from ledger source:
# (name as registered, operand view, machine context) -> None or CallResult.STOP
Function = Callable[[str, Operands, Any], Optional[CallResult]]


class StackMachine:
    """
    Token-driven interpreter with scoped operand visibility.

    Attributes:
        functions: Case-sensitive registry of callable names
        context: Opaque value handed to every function call

    Example:
        machine = StackMachine(context=None)
        machine.functions["drop"] = lambda name, ops, ctx: ops.pop(1) and None
        result = machine.run(Lexer("a drop (b drop)"))
        machine.finish()
    """

    def __init__(self, context: Any = None):
        self.functions: Dict[str, Function] = {}
        self.context = context
        self._operands: List[Any] = []
        self._markers: List[int] = []
        self._silence_depth = 0

    @property
    def depth(self) -> int:
        """Number of open scopes."""
        return len(self._markers)

    @property
    def stack_size(self) -> int:
        return len(self._operands)

    @property
    def silenced(self) -> bool:
        return self._silence_depth != 0

    def stack(self) -> Sequence[Any]:
        """Return a copy of the whole operand stack."""
        return tuple(self._operands)

    # ========================================================================
    # EXECUTION
    # ========================================================================

    def run(self, lexer: Lexer) -> ParseResult:
        """
        Execute every token from lexer.

        Returns:
            ParseResult.COMPLETED at end of stream
            ParseResult.STOPPED if a function returned CallResult.STOP

        Raises:
            ParseError: On the first lex, syntax or function error; the
                        underlying exception is available as .cause
        """
        while True:
            try:
                token = lexer.next_token()
                kind = token.kind
                if kind is TokenType.END:
                    return ParseResult.COMPLETED
                if kind is TokenType.TEXT:
                    if self._on_text(token.text) is CallResult.STOP:
                        return ParseResult.STOPPED
                elif kind is TokenType.QUOTED_TEXT:
                    if not self.silenced:
                        self._operands.append(token.text)
                elif kind is TokenType.OPEN_SCOPE:
                    self._markers.append(len(self._operands))
                else:
                    self._on_close_scope()
            except LedgerError as e:
                raise ParseError(lexer.line_number, e) from e

    def finish(self) -> None:
        """
        Run end-of-input checks. Call only after run() returns COMPLETED.

        Raises:
            LeftoverOperands: If values remain on the operand stack
            UnclosedScopes: If parentheses remain open
            SilencedAtEnd: If silencing was never cleared
        """
        if self._operands:
            raise LeftoverOperands(len(self._operands))
        if self._markers:
            raise UnclosedScopes(len(self._markers))
        if self.silenced:
            raise SilencedAtEnd()

    def operands(self) -> Operands:
        """Build the operand view floored at the innermost open scope."""
        floor = self._markers[-1] if self._markers else 0
        return Operands(self._operands, floor)

    def _on_text(self, text: str) -> Optional[CallResult]:
        if self.silenced:
            return None
        if text == SILENCE_KEYWORD:
            if not self._markers:
                raise SilenceOutsideScope()
            self._silence_depth = len(self._markers)
            return None
        function = self.functions.get(text)
        if function is None:
            self._operands.append(text)
            return None
        return function(text, self.operands(), self.context)

    def _on_close_scope(self) -> None:
        if not self._markers:
            raise UnmatchedCloseScope()
        if len(self._markers) == self._silence_depth:
            self._silence_depth = 0
        marker = self._markers.pop()
        if marker != len(self._operands):
            raise UnconsumedOperands(len(self._operands) - marker)
