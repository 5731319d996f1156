"""
accounts.py - Account and Lot Lifecycle

Functions:
    NAME COMMODITY* open ->
    NAME close ->
    ACCOUNT LOT close-lot ->
    ACCOUNT (NOTE-NAME NOTE-VALUE)* add-notes ->

Accounts are never deleted. Closing one requires every lot entry, the default
lot included, to hold a zero balance. Lots are deleted with close-lot once
all their commodity balances are zero.
"""

from __future__ import annotations

from ..core import (
    ACCOUNT_PREFIXES, EQUITY_ACCOUNT, DEFAULT_LOT,
    OperandError, InvalidAccountName, UnknownLot, NonzeroBalance, ClosedAccount,
    DuplicateEntity,
)
from ..ledger import Context
from ..machine import Operands
from .common import pop_exactly, text, trailing_text_count, find_account, find_commodity


def is_valid_account_name(name: str) -> bool:
    return name == EQUITY_ACCOUNT or name.startswith(ACCOUNT_PREFIXES)


def open_account(fn: str, op: Operands, ctx: Context) -> None:
    """
    Open an account with an optional commodity allow-list.

    A closed account may be reopened; the result is a fresh account with an
    empty default lot.
    """
    count = trailing_text_count(op)
    if count < 1:
        raise OperandError(f"{fn}: no operands given")
    name, *commodity_names = op.pop(count)
    if not is_valid_account_name(name):
        raise InvalidAccountName(
            f'{fn}: account does not start with "Assets:", "Liabilities:", "Income:", '
            f'"Expenses:", or "Equity:", and is not named "Equity": {name}'
        )
    existing = ctx.accounts.get(name)
    if existing is not None and not existing.is_closed(ctx.date):
        raise DuplicateEntity(f"{fn}: account already exists: {name}")
    commodities = [find_commodity(fn, ctx, cn) for cn in commodity_names]
    ctx.open_account(name, commodities)


def close_account(fn: str, op: Operands, ctx: Context) -> None:
    values = pop_exactly(fn, op, 1, "account name")
    name = text(fn, values[0], "account name")
    account = ctx.accounts.get(name)
    if account is not None and account.is_closed(ctx.date):
        raise ClosedAccount(f"{fn}: account is already closed: {name}")
    account = find_account(fn, ctx, name)
    nonzero = account.nonzero_lots()
    if nonzero:
        lot = nonzero[0]
        label = f'lot "{lot.name}"' if lot.name != DEFAULT_LOT else "the default lot"
        raise NonzeroBalance(f"{fn}: cannot close account {name} because {label} has {lot.balance}")
    ctx.close_account(account)


def close_lot(fn: str, op: Operands, ctx: Context) -> None:
    """Delete a lot whose balances are all zero. The default lot cannot be closed."""
    values = pop_exactly(fn, op, 2, "account name and lot name")
    account_name = text(fn, values[0], "account name")
    lot_name = text(fn, values[1], "lot name")
    account = find_account(fn, ctx, account_name)
    if lot_name == DEFAULT_LOT:
        raise OperandError(f"{fn}: cannot close the default lot of account {account_name}")
    by_commodity = account.lots.get(lot_name)
    if by_commodity is None:
        raise UnknownLot(f'{fn}: nonexistent lot "{lot_name}" in account {account_name}')
    for lot in by_commodity.values():
        if not lot.balance.amount.is_zero():
            raise NonzeroBalance(
                f'{fn}: cannot close lot "{lot_name}" in account {account_name} '
                f"because it has {lot.balance}"
            )
    ctx.remove_lot(account, lot_name)


def add_notes(fn: str, op: Operands, ctx: Context) -> None:
    """Merge name/value notes into an account, overwriting duplicate names."""
    count = trailing_text_count(op)
    if count < 1:
        raise OperandError(f"{fn}: account name operand required, but no operands given")
    if (count - 1) % 2 != 0:
        raise OperandError(
            f"{fn}: note name and note value operand pairs required, but odd number of operands given"
        )
    name, *pairs = op.pop(count)
    account = find_account(fn, ctx, name)
    for note_name, note_value in zip(pairs[0::2], pairs[1::2]):
        account.notes[note_name] = note_value
