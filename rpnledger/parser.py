"""
parser.py - Ledger Parser Facade

Wires a Lexer, a StackMachine and a fresh Context together and installs the
built-in vocabulary. Collaborators (report generators and the like) replace
entries in LedgerParser.functions before calling parse() to observe or cut
short a run; this is the only extension point.

Example:
    parser = LedgerParser(open("books.ledger"))
    parser.functions["date"] = stop_after(Date(2024, 6, 30))
    result = parser.parse()
    for account in parser.context.open_accounts():
        print(account.name, account.lots_sum("USD"))
"""

from __future__ import annotations
from typing import Any, Dict, TextIO, Union

from .core import Date, LedgerError, ParseError
from .functions import get_core_functions
from .functions.general import date as date_function
from .ledger import Context
from .lexer import Lexer
from .machine import CallResult, Function, Operands, ParseResult, StackMachine


class LedgerParser:
    """
    One parse run over one input stream.

    Attributes:
        functions: Name -> function registry; replaceable before parse()
        context: The Context the run builds

    Thread Safety:
        Not thread-safe. Use one LedgerParser per stream.
    """

    def __init__(self, stream: Union[str, TextIO], verbose: bool = False,
                 core_functions: bool = True):
        """
        Args:
            stream: Ledger source text or a readable text stream
            verbose: Print state changes as they happen (default: False)
            core_functions: Pre-install the built-in vocabulary (default: True)
        """
        self.context = Context(verbose=verbose)
        self.functions: Dict[str, Function] = get_core_functions() if core_functions else {}
        self._lexer = Lexer(stream)
        self._machine = StackMachine(self.context)

    def parse(self) -> ParseResult:
        """
        Run the ledger to completion or to an early stop.

        End-of-input checks run only when the whole stream was consumed.

        Returns:
            ParseResult.COMPLETED or ParseResult.STOPPED

        Raises:
            ParseError: On the first error; str() reads "date: line: cause"
        """
        self._machine.functions = dict(self.functions)
        try:
            result = self._machine.run(self._lexer)
        except ParseError as e:
            raise ParseError(e.line, e.cause, self.context.date) from e.cause
        if result is ParseResult.COMPLETED:
            try:
                self._machine.finish()
            except LedgerError as e:
                raise ParseError(self._lexer.line_number, e, self.context.date) from e
        if self.context.verbose:
            print(f"✓ {result.value.upper()}: {self.context!r}")
        return result


def stop_after(cutoff: Date, date_function: Function = date_function) -> Function:
    """
    Build a date replacement that ends the run once the clock passes cutoff.

    The wrapped function runs first, so the clock is validated and advanced
    as usual; the run stops at the first date strictly after cutoff.
    """
    def stopping_date(fn: str, op: Operands, ctx: Context) -> Any:
        result = date_function(fn, op, ctx)
        if result is CallResult.STOP or ctx.date > cutoff:
            return CallResult.STOP
        return result
    return stopping_date


def parse_ledger(source: Union[str, TextIO], **kwargs) -> Context:
    """Parse source with the built-in vocabulary and return the finished Context."""
    parser = LedgerParser(source, **kwargs)
    parser.parse()
    return parser.context
