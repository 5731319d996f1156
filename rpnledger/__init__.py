"""
rpnledger - Double-Entry Bookkeeping in Reverse Polish Notation

A small interpreter for plain-text ledgers. Operands are pushed onto a stack
and built-in functions pop them to open accounts, record balanced
transactions, manage lots, tag entities and assert balances. A run either
accepts the whole document or stops at the first error.

Usage:
    from rpnledger import LedgerParser, ParseError

    source = '''
        2024 1 1 date
        USD "US Dollar" commodity
        (Assets:Bank USD open) (Equity open)
        Opening "initial deposit"
            Assets:Bank 100 USD xfer
            Equity -100 USD xfer
        xact
        (Assets:Bank 100 USD assert)
    '''
    parser = LedgerParser(source)
    parser.parse()
    bank = parser.context.accounts["Assets:Bank"]
    bank.balance("USD")   # Decimal('100')
"""

# Core types
from .core import (
    Date,
    Quantity,
    ExchangeRate,
    ZERO_DATE,
    DEFAULT_LOT,
    SILENCE_KEYWORD,
    LedgerError,
    LexError,
    UnterminatedEscape,
    UnterminatedQuotedString,
    LedgerSyntaxError,
    UnmatchedCloseScope,
    UnconsumedOperands,
    SilenceOutsideScope,
    LeftoverOperands,
    UnclosedScopes,
    SilencedAtEnd,
    FunctionError,
    OperandError,
    InvalidAmount,
    InvalidDate,
    InvalidAccountName,
    UnknownAccount,
    UnknownCommodity,
    UnknownLot,
    ClosedAccount,
    DuplicateEntity,
    CommodityNotAllowed,
    UnbalancedTransaction,
    BalanceMismatch,
    NonzeroBalance,
    ParseError,
    parse_decimal,
)

# Ledger state
from .ledger import Account, Commodity, Context, Lot

# Interpreter
from .lexer import Lexer, Token, TokenType
from .machine import CallResult, Operands, ParseResult, StackMachine

# Built-in vocabulary
from .functions import (
    CORE_FUNCTIONS,
    get_core_functions,
    Transfer,
    Transaction,
    parse_transfer,
    parse_transfer_with_exchange,
    parse_transaction,
    execute_transaction,
)

# Facade
from .parser import LedgerParser, stop_after, parse_ledger

__version__ = "0.1.0"

__all__ = [
    # Core types
    'Date', 'Quantity', 'ExchangeRate', 'ZERO_DATE', 'DEFAULT_LOT', 'SILENCE_KEYWORD',
    'parse_decimal',
    # Exceptions
    'LedgerError', 'LexError', 'UnterminatedEscape', 'UnterminatedQuotedString',
    'LedgerSyntaxError', 'UnmatchedCloseScope', 'UnconsumedOperands',
    'SilenceOutsideScope', 'LeftoverOperands', 'UnclosedScopes', 'SilencedAtEnd',
    'FunctionError', 'OperandError', 'InvalidAmount', 'InvalidDate',
    'InvalidAccountName', 'UnknownAccount', 'UnknownCommodity', 'UnknownLot',
    'ClosedAccount', 'DuplicateEntity', 'CommodityNotAllowed',
    'UnbalancedTransaction', 'BalanceMismatch', 'NonzeroBalance', 'ParseError',
    # Ledger state
    'Account', 'Commodity', 'Context', 'Lot',
    # Interpreter
    'Lexer', 'Token', 'TokenType', 'CallResult', 'Operands', 'ParseResult', 'StackMachine',
    # Built-in vocabulary
    'CORE_FUNCTIONS', 'get_core_functions', 'Transfer', 'Transaction',
    'parse_transfer', 'parse_transfer_with_exchange', 'parse_transaction',
    'execute_transaction',
    # Facade
    'LedgerParser', 'stop_after', 'parse_ledger',
]
