"""
Core types and pure helpers for the RPN ledger interpreter.

This module provides the foundational pieces shared by every other module:
1. Constants: reserved keywords, account prefixes, the default lot name
2. Exceptions: LedgerError and the lex / syntax / function error families
3. Immutable value types: Date, Quantity, ExchangeRate
4. Parsing helpers: parse_decimal, parse_integer

Nothing in this module touches ledger state.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date as _calendar_date
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN, getcontext
import re
from typing import Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .ledger import Commodity


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Ledger amounts are summed repeatedly, so all arithmetic is exact Decimal
# arithmetic. The global context is configured once at import.
#
_LEDGER_DECIMAL_CONTEXT = getcontext()
_LEDGER_DECIMAL_CONTEXT.prec = 50
_LEDGER_DECIMAL_CONTEXT.rounding = ROUND_HALF_EVEN


# ============================================================================
# CONSTANTS
# ============================================================================

# Unquoted keyword that suppresses evaluation until the enclosing scope closes.
SILENCE_KEYWORD = "silence"

# Name of the lot that receives transfers not bound to an explicit lot.
DEFAULT_LOT = ""

# Account names must start with one of these prefixes (or equal EQUITY_ACCOUNT).
ACCOUNT_PREFIXES: Tuple[str, ...] = (
    "Assets:",
    "Liabilities:",
    "Income:",
    "Expenses:",
    "Equity:",
)
EQUITY_ACCOUNT = "Equity"

ZERO = Decimal("0")

_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


# -- Lex errors ---------------------------------------------------------------

class LexError(LedgerError):
    """Raised when the character stream cannot be tokenized."""
    pass


class UnterminatedEscape(LexError):
    """Raised when the input ends immediately after a backslash."""

    def __init__(self):
        super().__init__("unfinished escape at end of file")


class UnterminatedQuotedString(LexError):
    """Raised when the input ends inside a quoted string."""

    def __init__(self):
        super().__init__("unfinished quoted string at end of file")


# -- Syntax errors ------------------------------------------------------------

class LedgerSyntaxError(LedgerError):
    """Raised when the token stream violates the scoping rules."""
    pass


class UnmatchedCloseScope(LedgerSyntaxError):
    """Raised on a closing parenthesis with no open scope."""

    def __init__(self):
        super().__init__("closing parenthesis does not have a matching open parenthesis")


class UnconsumedOperands(LedgerSyntaxError):
    """Raised when a scope closes with operands still above its marker."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"{count} unconsumed operands at closing parenthesis")


class SilenceOutsideScope(LedgerSyntaxError):
    """Raised when "silence" appears with no open scope."""

    def __init__(self):
        super().__init__(f'found "{SILENCE_KEYWORD}" outside parentheses')


class LeftoverOperands(LedgerSyntaxError):
    """Raised by finish() when operands remain on the stack."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"{count} unconsumed tokens left on stack at EOF")


class UnclosedScopes(LedgerSyntaxError):
    """Raised by finish() when scopes remain open."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"{count} unclosed parentheses at EOF")


class SilencedAtEnd(LedgerSyntaxError):
    """Raised by finish() when silencing is still active."""

    def __init__(self):
        super().__init__("parser evaluation silenced at EOF")


# -- Function errors ----------------------------------------------------------

class FunctionError(LedgerError):
    """Base class for errors raised by ledger functions."""
    pass


class OperandError(FunctionError):
    """Raised when a function receives too few operands or one of the wrong kind."""
    pass


class InvalidAmount(FunctionError):
    """Raised when an amount is not a finite decimal number."""
    pass


class InvalidDate(FunctionError):
    """Raised when date fields are malformed or move the clock backwards."""
    pass


class InvalidAccountName(FunctionError):
    """Raised when an account name lacks a recognised prefix."""
    pass


class UnknownAccount(FunctionError):
    """Raised when referencing an account that was never opened."""
    pass


class UnknownCommodity(FunctionError):
    """Raised when referencing a commodity that was never registered."""
    pass


class UnknownLot(FunctionError):
    """Raised when referencing a lot that does not exist in an account."""
    pass


class ClosedAccount(FunctionError):
    """Raised when operating on an account that has been closed."""
    pass


class DuplicateEntity(FunctionError):
    """Raised when creating a commodity, account or lot that already exists."""
    pass


class CommodityNotAllowed(FunctionError):
    """Raised when an account's commodity allow-list excludes a transfer's commodity."""
    pass


class UnbalancedTransaction(FunctionError):
    """Raised when a transaction's transfers do not sum to zero in one commodity."""
    pass


class BalanceMismatch(FunctionError):
    """Raised when a balance assertion fails."""
    pass


class NonzeroBalance(FunctionError):
    """Raised when closing an account or lot that still holds a balance."""
    pass


# -- Run-level error ----------------------------------------------------------

class ParseError(LedgerError):
    """
    The single error a failing run produces.

    Attributes:
        line: 1-based input line at which the failure was detected
        cause: The underlying LexError, LedgerSyntaxError or FunctionError
        date: Ledger clock at the time of failure (set by LedgerParser)
    """

    def __init__(self, line: int, cause: LedgerError, date: Optional[Date] = None):
        self.line = line
        self.cause = cause
        self.date = date
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.date is not None:
            return f"{self.date}: {self.line}: {self.cause}"
        return f"{self.line}: {self.cause}"


# ============================================================================
# VALUE TYPES
# ============================================================================

@dataclass(frozen=True, slots=True, order=True)
class Date:
    """
    A calendar day on the ledger clock.

    The zero date (0000-00-00) is the clock's starting value and is not a real
    calendar day. Ordering is lexicographic on (year, month, day).
    """
    year: int = 0
    month: int = 0
    day: int = 0

    @classmethod
    def parse(cls, text: str) -> Date:
        """Parse a "YYYY-MM-DD" string, raising InvalidDate on malformed input."""
        try:
            d = _calendar_date.fromisoformat(text)
        except ValueError as e:
            raise InvalidDate(f"illegal date {text}: {e}") from e
        return cls(d.year, d.month, d.day)

    def is_zero(self) -> bool:
        return self == ZERO_DATE

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


ZERO_DATE = Date()


@dataclass(frozen=True, slots=True)
class Quantity:
    """A signed decimal amount of one commodity."""
    amount: Decimal
    commodity: 'Commodity'

    def __str__(self) -> str:
        return f"{self.amount} {self.commodity.name}"


@dataclass(frozen=True, slots=True)
class ExchangeRate:
    """
    Price recorded when a transfer converts from another commodity.

    Attributes:
        unit_price: Price of one unit of the transferred commodity
        total_price: Price of the whole transferred quantity; this is the
                     amount that takes part in transaction balancing
    """
    unit_price: Quantity
    total_price: Quantity

    def __str__(self) -> str:
        return f"@ {self.unit_price} (total {self.total_price})"


# ============================================================================
# PARSING HELPERS
# ============================================================================

def parse_decimal(text: str) -> Decimal:
    """
    Parse a bookkeeping amount.

    Thousands-separator commas are stripped first. Only finite values are
    accepted. Underscores and whitespace, which Decimal() would tolerate,
    are rejected.

    Raises:
        InvalidAmount: If the text is not a finite decimal number
    """
    cleaned = text.replace(",", "")
    if "_" in cleaned or any(ch.isspace() for ch in cleaned):
        raise InvalidAmount(f"illegal decimal value {text}")
    try:
        value = Decimal(cleaned)
    except InvalidOperation as e:
        raise InvalidAmount(f"illegal decimal value {text}") from e
    if not value.is_finite():
        raise InvalidAmount(f"illegal decimal value {text}")
    return value


def parse_integer(text: str) -> int:
    """Parse an optionally signed base-10 integer, raising ValueError otherwise."""
    if not _INTEGER_RE.match(text):
        raise ValueError(f"invalid syntax: {text!r}")
    return int(text)
