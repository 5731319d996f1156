"""
Shared operand and lookup helpers for ledger functions.

Every helper takes the calling function's name so error messages read
"<function>: <problem>", matching what the ledger author typed.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Any, List

from ..core import (
    OperandError, InvalidAmount,
    UnknownAccount, UnknownCommodity, ClosedAccount,
    parse_decimal,
)
from ..ledger import Account, Commodity, Context
from ..machine import Operands


def pop_exactly(fn: str, op: Operands, count: int, required: str) -> List[Any]:
    """
    Pop count values, failing if the view holds fewer.

    Args:
        fn: Calling function name
        op: Operand view
        count: Number of values to pop
        required: Human description of the operands, for the error message
    """
    if len(op) < count:
        raise OperandError(f"{fn}: {required} operands required, but too few given")
    return op.pop(count)


def text(fn: str, value: Any, what: str) -> str:
    """Return value if it is text, else raise OperandError naming what it should be."""
    if not isinstance(value, str):
        raise OperandError(f"{fn}: non-string {what}: {value!r}")
    return value


def trailing_text_count(op: Operands) -> int:
    """Count the run of text values at the top of the view."""
    count = 0
    for value in reversed(op.values()):
        if not isinstance(value, str):
            break
        count += 1
    return count


def amount(fn: str, value: str) -> Decimal:
    try:
        return parse_decimal(value)
    except InvalidAmount as e:
        raise InvalidAmount(f"{fn}: {e}") from e


def find_account(fn: str, ctx: Context, name: str) -> Account:
    """Look up an account that exists and is still open."""
    account = ctx.accounts.get(name)
    if account is None:
        raise UnknownAccount(f"{fn}: nonexistent account: {name}")
    if account.is_closed(ctx.date):
        raise ClosedAccount(f"{fn}: closed account: {name}")
    return account


def find_commodity(fn: str, ctx: Context, name: str, role: str = "commodity") -> Commodity:
    commodity = ctx.commodities.get(name)
    if commodity is None:
        raise UnknownCommodity(f"{fn}: nonexistent {role}: {name}")
    return commodity
