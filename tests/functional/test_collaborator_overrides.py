"""
test_collaborator_overrides.py - Replacing built-in functions before a run

Reporting tools observe or cut short a run by swapping entries in
LedgerParser.functions. These tests exercise the patterns they rely on:
- Stopping at a cut-off date with stop_after
- Wrapping xact to record a per-account register
- Running with an empty or extended vocabulary
"""

import pytest
from decimal import Decimal

from rpnledger import (
    CallResult, Date, LedgerParser, ParseError, ParseResult,
    parse_transaction, execute_transaction, stop_after,
)


QUARTER = """
2024 1 1 date
USD "US Dollar" commodity
Assets:Bank open
Income:Salary open
Income:Salary pay tag
2024 1 31 date
Employer january Assets:Bank 100 USD xfer Income:Salary -100 USD xfer xact
2024 2 29 date
Employer february Assets:Bank 100 USD xfer Income:Salary -100 USD xfer xact
2024 3 31 date
Employer march Assets:Bank 100 USD xfer Income:Salary -100 USD xfer xact
Assets:Bank 300 USD assert
"""


class TestStopAfter:
    """Tests for cut-off dates."""

    def test_stops_after_cutoff(self):
        parser = LedgerParser(QUARTER)
        parser.functions["date"] = stop_after(Date(2024, 2, 29))
        assert parser.parse() is ParseResult.STOPPED
        ctx = parser.context
        assert ctx.accounts["Assets:Bank"].balance("USD") == Decimal("200")
        # the clock has moved to the first date past the cut-off
        assert ctx.date == Date(2024, 3, 31)

    def test_cutoff_after_last_date_completes(self):
        parser = LedgerParser(QUARTER)
        parser.functions["date"] = stop_after(Date(2030, 1, 1))
        assert parser.parse() is ParseResult.COMPLETED
        assert parser.context.accounts["Assets:Bank"].balance("USD") == Decimal("300")

    def test_stop_skips_end_of_input_checks(self):
        """A stopped run is not checked for leftovers or open scopes."""
        parser = LedgerParser("2024 1 1 date stray ( 2025 1 1 date")
        parser.functions["date"] = stop_after(Date(2024, 6, 30))
        assert parser.parse() is ParseResult.STOPPED

    def test_date_errors_still_raised(self):
        parser = LedgerParser("2024 2 1 date 2024 1 1 date")
        parser.functions["date"] = stop_after(Date(2024, 6, 30))
        with pytest.raises(ParseError):
            parser.parse()

    def test_wraps_custom_date_function(self):
        """stop_after delegates to the date function it is given."""
        seen = []

        def recording_date(fn, op, ctx):
            seen.append(op.pop(3))
            ctx.date = Date(2024, 12, 31)

        parser = LedgerParser("1 2 3 date 4 5 6 date", core_functions=False)
        parser.functions["date"] = stop_after(Date(2024, 6, 30), recording_date)
        assert parser.parse() is ParseResult.STOPPED
        assert seen == [["1", "2", "3"]]


class TestRegisterWrapper:
    """Wrapping xact to build a transfer register."""

    def test_register_for_one_account(self):
        register = []

        def recording_xact(fn, op, ctx):
            transaction = parse_transaction(fn, op, ctx)
            execute_transaction(fn, transaction, ctx)
            for transfer in transaction.transfers:
                if transfer.account.name == "Assets:Bank":
                    running = transfer.account.balance("USD")
                    register.append((str(ctx.date), transaction.description, transfer.quantity.amount, running))

        parser = LedgerParser(QUARTER)
        parser.functions["xact"] = recording_xact
        parser.parse()
        assert register == [
            ("2024-01-31", "january", Decimal("100"), Decimal("100")),
            ("2024-02-29", "february", Decimal("100"), Decimal("200")),
            ("2024-03-31", "march", Decimal("100"), Decimal("300")),
        ]

    def test_wrapper_errors_keep_function_prefix(self):
        def strict_xact(fn, op, ctx):
            execute_transaction(fn, parse_transaction(fn, op, ctx), ctx)

        parser = LedgerParser(QUARTER.replace("Income:Salary -100 USD xfer xact\n2024 3 31",
                                              "Income:Salary -90 USD xfer xact\n2024 3 31"))
        parser.functions["xact"] = strict_xact
        with pytest.raises(ParseError, match="xact: transfers sum to 10 USD, not zero"):
            parser.parse()


class TestVocabulary:
    """Tests for empty and extended function registries."""

    def test_empty_vocabulary_treats_names_as_text(self):
        """Without built-ins every word is an operand, so the run ends with leftovers."""
        parser = LedgerParser("2024 1 1 date", core_functions=False)
        with pytest.raises(ParseError, match="4 unconsumed tokens"):
            parser.parse()

    def test_custom_function(self):
        def noop(fn, op, ctx):
            op.pop(len(op))

        parser = LedgerParser("a b c noop")
        parser.functions["noop"] = noop
        assert parser.parse() is ParseResult.COMPLETED

    def test_custom_stop(self):
        parser = LedgerParser("2024 1 1 date halt USD u commodity")
        parser.functions["halt"] = lambda fn, op, ctx: CallResult.STOP
        assert parser.parse() is ParseResult.STOPPED
        assert parser.context.commodities == {}

    def test_registry_is_per_parser(self):
        """Changing one parser's registry does not affect another's."""
        first = LedgerParser("")
        first.functions.pop("xact")
        second = LedgerParser("")
        assert "xact" in second.functions
        assert len(second.functions) == 19
