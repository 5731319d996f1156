"""
ledger.py - Mutable Ledger State

The Context is the single owner of everything a ledger document builds:
commodities, accounts with their lots, the global tag index, and the ledger
clock. Ledger functions receive it explicitly on every call; it is never
global state.

Key responsibilities:
    - Register commodities and open/close accounts
    - Apply individual transfers to account lots
    - Maintain the tag index (deduplicated by identity)
    - Advance the clock monotonically
    - Provide read helpers for reporting collaborators once a run finishes

Thread Safety:
    Not thread-safe. Each parse run owns its own Context.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Set, Union

from .core import (
    Date, Quantity, ExchangeRate,
    ZERO, ZERO_DATE, DEFAULT_LOT,
    InvalidDate, DuplicateEntity, UnknownLot,
)


# ============================================================================
# ENTITIES
# ============================================================================

@dataclass(eq=False)
class Commodity:
    """
    A unit of value that accounts can hold (currency, security, etc.).

    Commodities compare by identity; names are unique within a Context.

    Attributes:
        name: Unique commodity name (e.g., "USD")
        description: Human-readable description
        creation_date: Ledger date on which the commodity was registered
        tags: Tags attached with tag-commodity
    """
    name: str
    description: str
    creation_date: Date
    tags: Set[str] = field(default_factory=set)

    def add_tag(self, tag: str) -> None:
        self.tags.add(tag)

    def remove_tag(self, tag: str) -> None:
        self.tags.discard(tag)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def get_tags(self) -> List[str]:
        return sorted(self.tags)

    def __repr__(self) -> str:
        return f"Commodity({self.name})"


@dataclass(eq=False)
class Lot:
    """
    Running balance of one commodity within one named lot of an account.

    Attributes:
        name: Lot name (DEFAULT_LOT for the default lot)
        creation_date: Ledger date on which the lot entry was created
        balance: Current balance
        exchange_rate: Rate recorded when the entry was created by an
                       exchange transfer, else None
    """
    name: str
    creation_date: Date
    balance: Quantity
    exchange_rate: Optional[ExchangeRate] = None

    def add(self, amount: Decimal) -> None:
        self.balance = Quantity(self.balance.amount + amount, self.balance.commodity)

    def __repr__(self) -> str:
        label = self.name or "<default>"
        return f"Lot({label}: {self.balance})"


# Lot name -> commodity name -> Lot
LotMap = Dict[str, Dict[str, Lot]]


@dataclass(eq=False)
class Account:
    """
    A named bucket of lots.

    Accounts compare by identity: reopening a closed account creates a new
    Account object under the same name.

    Attributes:
        name: Account name ("Assets:...", "Liabilities:...", ..., or "Equity")
        creation_date: Ledger date on which the account was opened
        closing_date: Ledger date on which it was closed (None while open)
        commodities: Allow-list of commodities (empty means unrestricted)
        tags: Tags attached with tag
        notes: Free-form name -> value notes attached with add-notes
        lots: Lot name -> commodity name -> Lot; the default lot always exists
    """
    name: str
    creation_date: Date
    closing_date: Optional[Date] = None
    commodities: Dict[str, Commodity] = field(default_factory=dict)
    tags: Set[str] = field(default_factory=set)
    notes: Dict[str, str] = field(default_factory=dict)
    lots: LotMap = field(default_factory=lambda: {DEFAULT_LOT: {}})

    def is_closed(self, date: Date) -> bool:
        """Return True if the account was closed on or before date."""
        return self.closing_date is not None and date >= self.closing_date

    def allows(self, commodity_name: str) -> bool:
        """Return True if the allow-list is empty or contains commodity_name."""
        return not self.commodities or commodity_name in self.commodities

    def balance(self, commodity_name: str, lot_name: str = DEFAULT_LOT) -> Decimal:
        """
        Return the balance of a commodity within one lot.

        Raises:
            UnknownLot: If the lot does not exist
        """
        if lot_name not in self.lots:
            raise UnknownLot(f'account {self.name} does not have a lot named "{lot_name}"')
        lot = self.lots[lot_name].get(commodity_name)
        return lot.balance.amount if lot is not None else ZERO

    def lots_sum(self, commodity_name: str) -> Decimal:
        """Sum a commodity's balance across every lot in the account."""
        total = ZERO
        for by_commodity in self.lots.values():
            lot = by_commodity.get(commodity_name)
            if lot is not None:
                total += lot.balance.amount
        return total

    def nonzero_lots(self) -> List[Lot]:
        """Return every lot entry (default lot included) with a nonzero balance."""
        return [
            lot
            for by_commodity in self.lots.values()
            for lot in by_commodity.values()
            if not lot.balance.amount.is_zero()
        ]

    def add_tag(self, tag: str) -> None:
        self.tags.add(tag)

    def remove_tag(self, tag: str) -> None:
        self.tags.discard(tag)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def get_tags(self) -> List[str]:
        return sorted(self.tags)

    def __repr__(self) -> str:
        state = f"closed {self.closing_date}" if self.closing_date is not None else "open"
        return f"Account({self.name}, {state})"


# Anything that can carry tags in the global index.
TagTarget = Union[Account, Commodity]


# ============================================================================
# CONTEXT
# ============================================================================

class Context:
    """
    Process-wide ledger state for one parse run.

    Ledger functions mutate the Context; reporting collaborators read it only
    after the run has finished.

    Example:
        ctx = Context()
        ctx.advance_date(Date(2024, 1, 1))
        usd = ctx.register_commodity("USD", "US Dollar")
        ctx.open_account("Assets:Bank", [usd])
    """

    def __init__(self, verbose: bool = False):
        """
        Create an empty context.

        Args:
            verbose: Print one line per state change (default: False)
        """
        self.date: Date = ZERO_DATE
        self.accounts: Dict[str, Account] = {}
        self.commodities: Dict[str, Commodity] = {}
        self.tags: Dict[str, List[TagTarget]] = {}
        self.verbose = verbose

    # ========================================================================
    # CLOCK
    # ========================================================================

    def advance_date(self, new_date: Date) -> None:
        """
        Move the ledger clock to new_date.

        The clock never moves backwards; staying on the same date is allowed.

        Raises:
            InvalidDate: If new_date is before the current date
        """
        if new_date < self.date:
            raise InvalidDate(f"specified date {new_date} is before current date {self.date}")
        self.date = new_date

    # ========================================================================
    # REGISTRATION (Mutating)
    # ========================================================================

    def register_commodity(self, name: str, description: str) -> Commodity:
        """
        Register a new commodity at the current date.

        Raises:
            DuplicateEntity: If the name is already registered
        """
        if name in self.commodities:
            raise DuplicateEntity(f"commodity already exists: {name}")
        commodity = Commodity(name, description, self.date)
        self.commodities[name] = commodity
        if self.verbose:
            print(f"📝 Registered: {name} ({description})")
        return commodity

    def open_account(self, name: str, commodities: Optional[List[Commodity]] = None) -> Account:
        """
        Open an account, or reopen a closed one as a fresh record.

        Name validation and commodity lookup are the caller's job; this only
        enforces uniqueness among open accounts.

        Raises:
            DuplicateEntity: If an open account with this name exists
        """
        existing = self.accounts.get(name)
        if existing is not None and not existing.is_closed(self.date):
            raise DuplicateEntity(f"account already exists: {name}")
        account = Account(name, self.date)
        for commodity in commodities or ():
            account.commodities[commodity.name] = commodity
        self.accounts[name] = account
        if self.verbose:
            print(f"📝 Opened: {name}")
        return account

    def close_account(self, account: Account) -> None:
        account.closing_date = self.date
        if self.verbose:
            print(f"🔒 Closed: {account.name}")

    def remove_lot(self, account: Account, lot_name: str) -> None:
        del account.lots[lot_name]
        if self.verbose:
            print(f"🔒 Closed lot: {account.name} \"{lot_name}\"")

    # ========================================================================
    # TRANSFERS (Mutating)
    # ========================================================================

    def apply_transfer(
        self,
        account: Account,
        lot_name: str,
        quantity: Quantity,
        exchange_rate: Optional[ExchangeRate] = None,
        create_lot: bool = False,
    ) -> None:
        """
        Add a signed quantity to one lot of an account.

        If the lot is missing it is created when create_lot is set. If the lot
        exists but has no entry for the commodity, a fresh entry is created
        (stamped with the current date and exchange rate); otherwise the
        amount is added to the existing balance.

        Raises:
            UnknownLot: If the lot is missing and create_lot is not set
        """
        commodity_name = quantity.commodity.name
        by_commodity = account.lots.get(lot_name)
        if by_commodity is None:
            if not create_lot:
                if lot_name == DEFAULT_LOT:
                    raise UnknownLot(f"account {account.name} does not have a default lot")
                raise UnknownLot(f'account {account.name} does not have a lot named "{lot_name}"')
            by_commodity = account.lots[lot_name] = {}
            if self.verbose:
                print(f"📝 Created lot: {account.name} \"{lot_name}\"")
        lot = by_commodity.get(commodity_name)
        if lot is None:
            by_commodity[commodity_name] = Lot(lot_name, self.date, quantity, exchange_rate)
        else:
            lot.add(quantity.amount)

    # ========================================================================
    # TAGS (Mutating)
    # ========================================================================

    def add_tag(self, target: TagTarget, tag: str) -> None:
        """Tag an entity; tagging twice leaves a single index entry."""
        tagged = self.tags.setdefault(tag, [])
        if not any(t is target for t in tagged):
            tagged.append(target)
        target.add_tag(tag)

    def remove_tag(self, target: TagTarget, tag: str) -> None:
        """Untag an entity; removing an absent tag is a no-op."""
        tagged = self.tags.get(tag)
        if tagged is not None:
            remaining = [t for t in tagged if t is not target]
            if remaining:
                self.tags[tag] = remaining
            else:
                del self.tags[tag]
        target.remove_tag(tag)

    # ========================================================================
    # READ HELPERS (for collaborators)
    # ========================================================================

    def tagged(self, tag: str) -> List[TagTarget]:
        """Return a copy of the entities carrying tag (empty if none)."""
        return list(self.tags.get(tag, ()))

    def open_accounts(self) -> List[Account]:
        """Return the accounts still open at the current date, sorted by name."""
        return [
            self.accounts[name]
            for name in sorted(self.accounts)
            if not self.accounts[name].is_closed(self.date)
        ]

    def __repr__(self) -> str:
        return (
            f"Context(date={self.date}, {len(self.accounts)} accounts, "
            f"{len(self.commodities)} commodities, {len(self.tags)} tags)"
        )
