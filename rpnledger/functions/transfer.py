"""
transfer.py - Transfer Values and the Functions That Build Them

A Transfer is a transient operand: xfer/xfer-exch push one onto the stack,
lot/create-lot/set-comment pop it, adjust it and push it back, and xact
finally consumes it. Transfers are never stored in the ledger.

Functions:
    ACCOUNT AMOUNT COMMODITY xfer -> Transfer
    ACCOUNT AMOUNT COMMODITY UNIT-AMOUNT UNIT-COMMODITY
        TOTAL-AMOUNT TOTAL-COMMODITY xfer-exch -> Transfer
    Transfer LOT lot -> Transfer
    Transfer LOT create-lot -> Transfer
    Transfer COMMENT set-comment -> Transfer
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional

from ..core import (
    Quantity, ExchangeRate, DEFAULT_LOT,
    OperandError, ClosedAccount, UnknownLot, DuplicateEntity, CommodityNotAllowed,
)
from ..ledger import Account, Context
from ..machine import Operands
from .common import pop_exactly, text, trailing_text_count, amount, find_account, find_commodity


@dataclass(eq=False)
class Transfer:
    """
    One signed movement of a quantity into or out of one account lot.

    Attributes:
        account: Target account
        quantity: Signed amount and commodity
        lot_name: Target lot (DEFAULT_LOT unless bound with lot/create-lot)
        create_lot: True if the target lot should be created on execution
        exchange_rate: Price information from xfer-exch, else None
        comment: Free-text comment set with set-comment
    """
    account: Account
    quantity: Quantity
    lot_name: str = DEFAULT_LOT
    create_lot: bool = False
    exchange_rate: Optional[ExchangeRate] = None
    comment: str = ""

    @property
    def transfer_quantity(self) -> Quantity:
        """Quantity that takes part in balancing: the total price if exchanged."""
        if self.exchange_rate is not None:
            return self.exchange_rate.total_price
        return self.quantity

    def execute(self, ctx: Context) -> None:
        """Apply this transfer to its account lot."""
        ctx.apply_transfer(
            self.account,
            self.lot_name,
            self.quantity,
            exchange_rate=self.exchange_rate,
            create_lot=self.create_lot,
        )

    def __repr__(self) -> str:
        lot = f" [{self.lot_name}{'+' if self.create_lot else ''}]" if self.lot_name or self.create_lot else ""
        rate = f" {self.exchange_rate}" if self.exchange_rate else ""
        return f"Transfer({self.account.name}{lot}: {self.quantity}{rate})"


def _transfer_operand(fn: str, value: Any) -> Transfer:
    if not isinstance(value, Transfer):
        raise OperandError(f"{fn}: operand is not a transfer: {value!r}")
    return value


def _check_allowed(fn: str, account: Account, commodity_name: str) -> None:
    if not account.allows(commodity_name):
        raise CommodityNotAllowed(
            f"{fn}: cannot transfer {commodity_name} to or from account {account.name}"
        )


# ============================================================================
# PARSERS (reusable by collaborator wrappers)
# ============================================================================

def parse_transfer(fn: str, op: Operands, ctx: Context) -> Transfer:
    """
    Pop ACCOUNT AMOUNT COMMODITY and build a default-lot Transfer.

    Raises:
        OperandError: Too few or non-text operands
        InvalidAmount: Malformed amount
        UnknownAccount / ClosedAccount: Account missing or closed
        UnknownCommodity: Commodity missing
        CommodityNotAllowed: Account's allow-list excludes the commodity
    """
    values = pop_exactly(fn, op, 3, "account name, quantity, and commodity name")
    account_name = text(fn, values[0], "account name")
    qty_text = text(fn, values[1], "quantity")
    commodity_name = text(fn, values[2], "commodity name")
    qty = amount(fn, qty_text)

    account = find_account(fn, ctx, account_name)
    commodity = find_commodity(fn, ctx, commodity_name)
    _check_allowed(fn, account, commodity_name)
    return Transfer(account, Quantity(qty, commodity))


def parse_transfer_with_exchange(fn: str, op: Operands, ctx: Context) -> Transfer:
    """
    Pop the seven xfer-exch operands and build a Transfer carrying an exchange rate.

    Only the trailing run of text operands is considered, so a Transfer lower
    in the view is never mistaken for an operand.
    """
    required = (
        "account name, quantity, commodity name, unit price amount, "
        "unit price commodity name, total price amount, and total price commodity name"
    )
    if trailing_text_count(op) < 7:
        raise OperandError(f"{fn}: {required} operands are required, but too few given")
    values = op.pop(7)
    account_name, qty_text, commodity_name, unit_text, unit_name, total_text, total_name = values
    qty = amount(fn, qty_text)
    unit_amount = amount(fn, unit_text)
    total_amount = amount(fn, total_text)

    account = find_account(fn, ctx, account_name)
    commodity = find_commodity(fn, ctx, commodity_name)
    _check_allowed(fn, account, commodity_name)
    unit_commodity = find_commodity(fn, ctx, unit_name, "unit price commodity")
    total_commodity = find_commodity(fn, ctx, total_name, "total price commodity")

    rate = ExchangeRate(
        unit_price=Quantity(unit_amount, unit_commodity),
        total_price=Quantity(total_amount, total_commodity),
    )
    return Transfer(account, Quantity(qty, commodity), exchange_rate=rate)


# ============================================================================
# FUNCTIONS
# ============================================================================

def xfer(fn: str, op: Operands, ctx: Context) -> None:
    """Push a Transfer targeting the default lot, with no exchange rate."""
    op.push(parse_transfer(fn, op, ctx))


def xfer_exch(fn: str, op: Operands, ctx: Context) -> None:
    """Push a Transfer with an exchange rate."""
    op.push(parse_transfer_with_exchange(fn, op, ctx))


def _pop_transfer_and_lot(fn: str, op: Operands, ctx: Context):
    values = pop_exactly(fn, op, 2, "transfer and lot name")
    transfer = _transfer_operand(fn, values[0])
    lot_name = text(fn, values[1], "lot name")
    if transfer.account.is_closed(ctx.date):
        raise ClosedAccount(f"{fn}: transfer refers to closed account: {transfer.account.name}")
    return transfer, lot_name


def lot(fn: str, op: Operands, ctx: Context) -> None:
    """Bind a Transfer to a lot that already exists in its account."""
    transfer, lot_name = _pop_transfer_and_lot(fn, op, ctx)
    if lot_name not in transfer.account.lots:
        raise UnknownLot(
            f'{fn}: account {transfer.account.name} does not have a lot named "{lot_name}"'
        )
    transfer.lot_name = lot_name
    op.push(transfer)


def create_lot(fn: str, op: Operands, ctx: Context) -> None:
    """
    Bind a Transfer to a new lot and flag it for creation.

    The lot may already exist as long as it does not yet hold the transfer's
    commodity.
    """
    transfer, lot_name = _pop_transfer_and_lot(fn, op, ctx)
    existing = transfer.account.lots.get(lot_name)
    commodity_name = transfer.quantity.commodity.name
    if existing is not None and commodity_name in existing:
        raise DuplicateEntity(f"{fn}: lot {lot_name} already contains {commodity_name}")
    transfer.lot_name = lot_name
    transfer.create_lot = True
    op.push(transfer)


def set_comment(fn: str, op: Operands, ctx: Context) -> None:
    values = pop_exactly(fn, op, 2, "transfer and comment string")
    transfer = _transfer_operand(fn, values[0])
    transfer.comment = text(fn, values[1], "comment")
    op.push(transfer)
