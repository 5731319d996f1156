"""
tags.py - Tagging Accounts and Commodities

Functions:
    ACCOUNT TAG+ tag ->
    COMMODITY TAG+ tag-commodity ->
    ACCOUNT TAG+ untag ->

Tagging is idempotent and untagging an absent tag is a no-op. The global tag
index lives on the Context.
"""

from __future__ import annotations
from typing import List

from ..core import OperandError, UnknownAccount, UnknownCommodity, ClosedAccount
from ..ledger import Account, Context
from ..machine import Operands
from .common import trailing_text_count


def _pop_name_and_tags(fn: str, op: Operands, entity: str) -> List[str]:
    count = trailing_text_count(op)
    if count < 2:
        raise OperandError(
            f"{fn}: {entity} name and at least one tag operand required, but too few operands given"
        )
    return op.pop(count)


def _tag_account(fn: str, ctx: Context, name: str) -> Account:
    account = ctx.accounts.get(name)
    if account is None:
        raise UnknownAccount(f"{fn}: tagging nonexistent account: {name}")
    if account.is_closed(ctx.date):
        raise ClosedAccount(f"{fn}: closed account: {name}")
    return account


def tag(fn: str, op: Operands, ctx: Context) -> None:
    name, *tags = _pop_name_and_tags(fn, op, "account")
    account = _tag_account(fn, ctx, name)
    for t in tags:
        ctx.add_tag(account, t)


def tag_commodity(fn: str, op: Operands, ctx: Context) -> None:
    name, *tags = _pop_name_and_tags(fn, op, "commodity")
    target = ctx.commodities.get(name)
    if target is None:
        raise UnknownCommodity(f"{fn}: tagging nonexistent commodity: {name}")
    for t in tags:
        ctx.add_tag(target, t)


def untag(fn: str, op: Operands, ctx: Context) -> None:
    name, *tags = _pop_name_and_tags(fn, op, "account")
    account = _tag_account(fn, ctx, name)
    for t in tags:
        ctx.remove_tag(account, t)
