"""
Built-in ledger vocabulary.

Every function has the signature (fn, op, ctx): the name it was called by,
the Operands view for the innermost scope, and the ledger Context. Errors are
raised as FunctionError subclasses whose message starts with fn.
"""

from typing import Dict

from ..machine import Function
from .accounts import open_account, close_account, close_lot, add_notes
from .assertions import assert_balance, assert_lot, assert_lots_sum
from .commodities import commodity
from .general import date, comment
from .tags import tag, tag_commodity, untag
from .transaction import Transaction, parse_transaction, execute_transaction, xact
from .transfer import (
    Transfer, parse_transfer, parse_transfer_with_exchange,
    xfer, xfer_exch, lot, create_lot, set_comment,
)

CORE_FUNCTIONS: Dict[str, Function] = {
    "add-notes": add_notes,
    "assert": assert_balance,
    "assert-lot": assert_lot,
    "assert-lots-sum": assert_lots_sum,
    "close": close_account,
    "close-lot": close_lot,
    "comment": comment,
    "commodity": commodity,
    "create-lot": create_lot,
    "date": date,
    "lot": lot,
    "open": open_account,
    "set-comment": set_comment,
    "tag": tag,
    "tag-commodity": tag_commodity,
    "untag": untag,
    "xact": xact,
    "xfer": xfer,
    "xfer-exch": xfer_exch,
}


def get_core_functions() -> Dict[str, Function]:
    """Return a fresh copy of the built-in registry, safe to modify."""
    return dict(CORE_FUNCTIONS)


__all__ = [
    'CORE_FUNCTIONS',
    'get_core_functions',
    'Transfer',
    'Transaction',
    'parse_transfer',
    'parse_transfer_with_exchange',
    'parse_transaction',
    'execute_transaction',
]
