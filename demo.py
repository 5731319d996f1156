#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the RPN Ledger Step by Step

A walk through the ledger language. Each step runs a small piece of ledger
source and shows the resulting state. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:  Foundation   - Tokens, the operand stack, scopes
  4-6:  Bookkeeping  - Commodities and accounts, balanced transactions, rejections
  7-9:  Lots         - Exchange transfers, lot assertions, closing
  10:   Reporting    - Cut-off dates and a transfer register

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

import sys

from rpnledger import (
    Date, Lexer, LedgerParser, ParseError, StackMachine,
    parse_ledger, parse_transaction, execute_transaction, stop_after,
)


QUICK_MODE = "--quick" in sys.argv

SETUP = """
2024 1 1 date
(USD "US Dollar" commodity)
(AAPL "Apple Inc." commodity)
(Assets:Checking USD open)
(Assets:Brokerage open)
(Income:Salary USD open)
(Equity open)
Opening "opening balance"
    Assets:Checking 5000 USD xfer
    Equity -5000 USD xfer
xact
"""


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def show_source(source: str):
    for line in source.strip().splitlines():
        print(f"    | {line}")
    print()


def show_balances(ctx, commodity: str):
    for account in ctx.open_accounts():
        amount = account.lots_sum(commodity)
        if amount:
            print(f"    {account.name:<22} {amount:>10} {commodity}")


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_tokens():
    step_header(1, "Tokens", "See how source text splits into tokens.")
    source = 'Assets:Checking "my bank" (silence x) Expenses:Dining\\ Out'
    show_source(source)
    for token in Lexer(source):
        print(f"    {token!r}")
    wait_for_enter()


def step_02_stack():
    step_header(2, "The Operand Stack",
        "Words that are not functions are pushed; functions pop what they need.")
    machine = StackMachine(context=None)
    machine.functions["swap"] = lambda fn, op, ctx: op.push(*reversed(op.pop(2)))
    source = "a b c swap"
    show_source(source)
    machine.run(Lexer(source))
    print(f"    stack after run: {machine.stack()}")
    wait_for_enter()


def step_03_scopes():
    step_header(3, "Scopes",
        "Parentheses hide outer operands and must be left as they were found.")
    source = "outer (inner)"
    show_source(source)
    machine = StackMachine()
    try:
        machine.run(Lexer(source))
    except ParseError as e:
        print(f"    ✗ {e}")
    wait_for_enter()


# ============================================================================
# PHASE 2: BOOKKEEPING (Steps 4-6)
# ============================================================================

def step_04_setup():
    step_header(4, "Commodities and Accounts",
        "Register commodities, open accounts and record an opening balance.")
    show_source(SETUP)
    parser = LedgerParser(SETUP, verbose=True)
    parser.parse()
    print()
    show_balances(parser.context, "USD")
    wait_for_enter()


def step_05_transactions():
    step_header(5, "Balanced Transactions",
        "Transfers in one transaction must sum to zero.")
    source = """
2024 1 31 date
Employer "January salary"
    Assets:Checking 3000 USD xfer
    Income:Salary -3000 USD xfer
    period 2024-01
xact
(Assets:Checking 8000 USD assert)
"""
    show_source(source)
    ctx = parse_ledger(SETUP + source)
    show_balances(ctx, "USD")
    wait_for_enter()


def step_06_rejections():
    step_header(6, "Rejections",
        "The first error stops the run and reports date, line and cause.")
    for source in (
        'Shop "typo" Assets:Checking -30 USD xfer Equity 3 USD xfer xact',
        "Assets:Checking close",
        "2023 12 31 date",
    ):
        show_source(source)
        try:
            parse_ledger(SETUP + source)
        except ParseError as e:
            print(f"    ✗ {e}\n")
    wait_for_enter()


# ============================================================================
# PHASE 3: LOTS (Steps 7-9)
# ============================================================================

TRADES = """
2024 2 1 date
Broker "buy AAPL"
    Assets:Brokerage 10 AAPL 185 USD 1850 USD xfer-exch 2024-02-01 create-lot
    Assets:Checking -1850 USD xfer
xact
2024 3 1 date
Broker "buy more AAPL"
    Assets:Brokerage 5 AAPL 190 USD 950 USD xfer-exch 2024-03-01 create-lot
    Assets:Checking -950 USD xfer
xact
"""


def step_07_lots():
    step_header(7, "Lots",
        "Exchange transfers record their price on the lot they create.")
    show_source(TRADES)
    ctx = parse_ledger(SETUP + TRADES)
    brokerage = ctx.accounts["Assets:Brokerage"]
    for lot_name, by_commodity in sorted(brokerage.lots.items()):
        for lot in by_commodity.values():
            print(f"    {lot_name or '<default>':<12} {lot.balance}  {lot.exchange_rate}")
    wait_for_enter()


def step_08_assertions():
    step_header(8, "Assertions",
        "assert, assert-lot and assert-lots-sum check balances in the source.")
    source = """
(Assets:Brokerage 2024-02-01 10 AAPL assert-lot)
(Assets:Brokerage 15 AAPL assert-lots-sum)
(Assets:Brokerage 14 AAPL assert-lots-sum)
"""
    show_source(source)
    try:
        parse_ledger(SETUP + TRADES + source)
    except ParseError as e:
        print(f"    ✗ {e}")
    wait_for_enter()


def step_09_closing():
    step_header(9, "Closing Lots",
        "A lot can be closed once every commodity in it is back to zero.")
    source = """
2024 4 1 date
Broker "sell first lot"
    Assets:Brokerage -10 AAPL 200 USD -2000 USD xfer-exch 2024-02-01 lot
    Assets:Checking 2000 USD xfer
xact
(Assets:Brokerage 2024-02-01 close-lot)
"""
    show_source(source)
    ctx = parse_ledger(SETUP + TRADES + source)
    print(f"    lots left: {sorted(n for n in ctx.accounts['Assets:Brokerage'].lots if n)}")
    wait_for_enter()


# ============================================================================
# PHASE 4: REPORTING (Step 10)
# ============================================================================

def step_10_reporting():
    step_header(10, "Reporting Hooks",
        "Replace date to stop at a cut-off; wrap xact to build a register.")
    register = []

    def recording_xact(fn, op, ctx):
        transaction = parse_transaction(fn, op, ctx)
        execute_transaction(fn, transaction, ctx)
        for transfer in transaction.transfers:
            if transfer.account.name == "Assets:Checking":
                running = transfer.account.balance("USD")
                register.append((ctx.date, transaction.description, transfer.quantity.amount, running))

    parser = LedgerParser(SETUP + TRADES)
    parser.functions["date"] = stop_after(Date(2024, 2, 15))
    parser.functions["xact"] = recording_xact
    result = parser.parse()
    print(f"    run result: {result.name}\n")
    for date, description, amount, running in register:
        print(f"    {date}  {description:<18} {amount:>10} {running:>10}")
    wait_for_enter()


def main():
    step_01_tokens()
    step_02_stack()
    step_03_scopes()
    step_04_setup()
    step_05_transactions()
    step_06_rejections()
    step_07_lots()
    step_08_assertions()
    step_09_closing()
    step_10_reporting()
    print("\n✓ Tutorial complete.")


if __name__ == "__main__":
    main()
