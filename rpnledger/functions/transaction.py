"""
transaction.py - Balanced Transactions

A transaction groups two or more Transfers that must net to exactly zero in
a single commodity (the double-entry invariant). Transfers carrying an
exchange rate take part with their total price rather than their quantity.

    ENTITY DESCRIPTION Transfer+ (NOTE-NAME NOTE-VALUE)* xact ->

Execution is all-or-nothing: the balance check, the open-account check and
every lot lookup happen before any balance changes.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from ..core import (
    DEFAULT_LOT, ZERO,
    ClosedAccount, OperandError, UnbalancedTransaction, UnknownLot,
)
from ..ledger import Account, Context
from ..machine import Operands
from .common import text
from .transfer import Transfer


@dataclass(eq=False)
class Transaction:
    """
    A parsed transaction, ready to execute.

    Attributes:
        entity: Counterparty or payee name
        description: Free-text description
        transfers: Two or more Transfers that sum to zero
        notes: Name -> value notes given after the transfers
    """
    entity: str
    description: str
    transfers: List[Transfer]
    notes: Dict[str, str] = field(default_factory=dict)

    def check_balance(self) -> None:
        """
        Verify the double-entry invariant.

        Raises:
            UnbalancedTransaction: If the transfers use different commodities
                                   or do not sum to zero
        """
        first = self.transfers[0]
        commodity = first.transfer_quantity.commodity
        total = ZERO
        for transfer in self.transfers:
            q = transfer.transfer_quantity
            if q.commodity is not commodity:
                raise UnbalancedTransaction(
                    f"transfer to {transfer.account.name} uses commodity {q.commodity.name} "
                    f"but transfer to {first.account.name} uses {commodity.name}"
                )
            total += q.amount
        if not total.is_zero():
            raise UnbalancedTransaction(f"transfers sum to {total} {commodity.name}, not zero")

    def check_accounts(self, ctx: Context) -> None:
        """
        Verify every transfer still targets the open incarnation of its account.

        Raises:
            ClosedAccount: If an account was closed, or closed and reopened,
                           after its transfer was produced
        """
        for transfer in self.transfers:
            account = transfer.account
            if account.is_closed(ctx.date) or ctx.accounts.get(account.name) is not account:
                raise ClosedAccount(f"transfer refers to closed account: {account.name}")

    def check_lots(self) -> None:
        """
        Verify every transfer's target lot exists or will be created.

        A lot flagged for creation by an earlier transfer counts as existing
        for later transfers into the same account.

        Raises:
            UnknownLot: If a target lot is missing and not flagged for creation
        """
        created: Set[Tuple[int, str]] = set()
        for transfer in self.transfers:
            account = transfer.account
            key = (id(account), transfer.lot_name)
            if transfer.lot_name in account.lots or key in created:
                continue
            if transfer.create_lot:
                created.add(key)
            elif transfer.lot_name == DEFAULT_LOT:
                raise UnknownLot(f"account {account.name} does not have a default lot")
            else:
                raise UnknownLot(
                    f'account {account.name} does not have a lot named "{transfer.lot_name}"'
                )

    def execute(self, ctx: Context) -> None:
        """
        Validate, then apply every transfer in order.

        Nothing is applied if validation fails.
        """
        self.check_balance()
        self.check_accounts(ctx)
        self.check_lots()
        for transfer in self.transfers:
            transfer.execute(ctx)
        if ctx.verbose:
            print(f'✓ APPLIED: {self.entity} "{self.description}" ({len(self.transfers)} transfers)')

    def accounts(self) -> List[Account]:
        return [t.account for t in self.transfers]


def _split_operands(values: list) -> Tuple[int, int]:
    """
    Locate the transfers and notes within the visible operands.

    Returns:
        (transfer_start, note_start) indices into values
    """
    note_start = len(values)
    while note_start > 0 and isinstance(values[note_start - 1], str):
        note_start -= 1
    transfer_start = note_start
    while transfer_start > 0 and isinstance(values[transfer_start - 1], Transfer):
        transfer_start -= 1
    return transfer_start, note_start


def parse_transaction(fn: str, op: Operands, ctx: Context) -> Transaction:
    """
    Pop a transaction's operands and check the double-entry invariant.

    The lots are not checked here; Transaction.execute() does that.

    Raises:
        OperandError: Missing entity/description, fewer than two transfers,
                      or an odd number of note operands
        UnbalancedTransaction: Transfers do not sum to zero in one commodity
    """
    values = op.values()
    transfer_start, note_start = _split_operands(values)
    if transfer_start == 0:
        raise OperandError(f"{fn}: entity and description operands are required")
    if transfer_start == 1:
        raise OperandError(f"{fn}: description operand is required")
    num_transfers = note_start - transfer_start
    if num_transfers < 2:
        raise OperandError(f"{fn}: there must be at least two transfers")
    num_notes = len(values) - note_start
    if num_notes % 2 != 0:
        raise OperandError(f"{fn}: the number of notes must be a multiple of two, got {num_notes}")

    popped = op.pop(num_transfers + num_notes + 2)
    entity = text(fn, popped[0], "entity")
    description = text(fn, popped[1], "description")
    transfers = popped[2:2 + num_transfers]
    note_values = popped[2 + num_transfers:]
    notes = dict(zip(note_values[0::2], note_values[1::2]))

    transaction = Transaction(entity, description, transfers, notes)
    try:
        transaction.check_balance()
    except UnbalancedTransaction as e:
        raise UnbalancedTransaction(f"{fn}: {e}") from e
    return transaction


def execute_transaction(fn: str, transaction: Transaction, ctx: Context) -> None:
    """Execute a parsed transaction, prefixing any failure with the function name."""
    try:
        transaction.execute(ctx)
    except (UnbalancedTransaction, ClosedAccount, UnknownLot) as e:
        raise type(e)(f"{fn}: {e}") from e


def xact(fn: str, op: Operands, ctx: Context) -> None:
    """Parse and execute a balanced transaction."""
    execute_transaction(fn, parse_transaction(fn, op, ctx), ctx)
