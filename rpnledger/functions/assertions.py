"""
assertions.py - Balance Assertions

Assertions are pure checks: they pop their operands and either do nothing or
raise BalanceMismatch. An asserted zero is satisfied by a missing entry.

Functions:
    ACCOUNT AMOUNT COMMODITY assert ->            (default lot)
    ACCOUNT LOT AMOUNT COMMODITY assert-lot ->    (one named lot)
    ACCOUNT AMOUNT COMMODITY assert-lots-sum ->   (every lot in the account)
"""

from __future__ import annotations
from decimal import Decimal
from typing import Tuple

from ..core import DEFAULT_LOT, BalanceMismatch, UnknownLot
from ..ledger import Account, Context
from ..machine import Operands
from .common import pop_exactly, text, amount, find_account, find_commodity


def _account_and_commodity(fn: str, ctx: Context, account_name: str,
                           commodity_name: str) -> Account:
    account = find_account(fn, ctx, account_name)
    find_commodity(fn, ctx, commodity_name)
    return account


def _check_lot(fn: str, account: Account, lot_name: str, expected: Decimal,
               commodity_name: str, label: str) -> None:
    by_commodity = account.lots.get(lot_name)
    if by_commodity is None:
        if expected.is_zero():
            return
        if lot_name == DEFAULT_LOT:
            raise UnknownLot(f"{fn}: account {account.name} does not have a default lot")
        raise UnknownLot(f'{fn}: account {account.name} does not have a lot named "{lot_name}"')
    lot = by_commodity.get(commodity_name)
    if lot is None:
        if not expected.is_zero():
            raise BalanceMismatch(f"{fn}: {label} in account {account.name} does not have {commodity_name}")
        return
    actual = lot.balance.amount
    if actual != expected:
        raise BalanceMismatch(
            f"{fn}: {label} in account {account.name} has {lot.balance}, "
            f"not asserted amount {expected} {commodity_name} (difference of {actual - expected})"
        )


def _pop_account_amount_commodity(fn: str, op: Operands) -> Tuple[str, Decimal, str]:
    values = pop_exactly(fn, op, 3, "account name, amount, and commodity")
    account_name = text(fn, values[0], "account name")
    expected = amount(fn, text(fn, values[1], "quantity"))
    commodity_name = text(fn, values[2], "commodity name")
    return account_name, expected, commodity_name


def assert_balance(fn: str, op: Operands, ctx: Context) -> None:
    """Check the default lot's balance of one commodity."""
    account_name, expected, commodity_name = _pop_account_amount_commodity(fn, op)
    account = _account_and_commodity(fn, ctx, account_name, commodity_name)
    _check_lot(fn, account, DEFAULT_LOT, expected, commodity_name, "default lot")


def assert_lot(fn: str, op: Operands, ctx: Context) -> None:
    """
    Check a named lot's balance of one commodity.

    Asserting zero succeeds for a lot that does not exist (e.g. after
    close-lot); any other amount requires the lot.
    """
    values = pop_exactly(fn, op, 4, "account name, lot name, amount, and commodity")
    account_name = text(fn, values[0], "account name")
    lot_name = text(fn, values[1], "lot name")
    expected = amount(fn, text(fn, values[2], "quantity"))
    commodity_name = text(fn, values[3], "commodity name")
    account = _account_and_commodity(fn, ctx, account_name, commodity_name)
    _check_lot(fn, account, lot_name, expected, commodity_name, f'lot "{lot_name}"')


def assert_lots_sum(fn: str, op: Operands, ctx: Context) -> None:
    account_name, expected, commodity_name = _pop_account_amount_commodity(fn, op)
    account = _account_and_commodity(fn, ctx, account_name, commodity_name)
    total = account.lots_sum(commodity_name)
    if total != expected:
        raise BalanceMismatch(
            f"{fn}: lots in account {account_name} have a total of {total} {commodity_name}, "
            f"not asserted amount {expected} {commodity_name} (difference of {total - expected})"
        )
