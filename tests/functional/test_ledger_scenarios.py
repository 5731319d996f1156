"""
test_ledger_scenarios.py - End-to-end ledger documents

Runs complete ledger sources through LedgerParser and checks the finished
Context, and the error reporting of failing documents.
"""

import io
import pytest
from decimal import Decimal

from rpnledger import (
    Date, LedgerParser, ParseError, ParseResult, parse_ledger,
    LeftoverOperands, UnclosedScopes, NonzeroBalance, BalanceMismatch,
    UnterminatedQuotedString, UnconsumedOperands,
)


HOUSEHOLD = r"""
(silence
    Household books.  Anything in this scope is ignored, including
    "quoted text", functions like xact, and (nested (scopes)).
)

2024 1 1 date
(USD "US Dollar" commodity)
(AAPL "Apple Inc." commodity)
(USD fiat tag-commodity)

(Assets:Checking USD open)
(Assets:Brokerage open)
(Liabilities:Card USD open)
(Expenses:Groceries USD open)
(Expenses:Dining\ Out USD open)
(Income:Salary USD open)
(Equity open)
(Assets:Checking liquid tag)
(Assets:Checking bank "Example Bank" add-notes)

Opening "opening balance"
    Assets:Checking 5,000.00 USD xfer
    Equity -5,000.00 USD xfer
xact

2024 1 15 date
Employer "January salary"
    Assets:Checking 3000 USD xfer
    Income:Salary -3000 USD xfer
    period 2024-01
xact

2024 1 20 date
Grocer "weekly shop"
    Expenses:Groceries 84.12 USD xfer "eggs, bread" set-comment
    Liabilities:Card -84.12 USD xfer
xact
Bistro dinner
    Expenses:Dining\ Out 45 USD xfer
    Liabilities:Card -45 USD xfer
xact

2024 1 31 date
Card "pay statement"
    Liabilities:Card 129.12 USD xfer
    Assets:Checking -129.12 USD xfer
xact
(Liabilities:Card 0 USD assert)

2024 2 1 date
Broker "buy AAPL"
    Assets:Brokerage 10 AAPL 185 USD 1850 USD xfer-exch 2024-02-01 create-lot
    Assets:Checking -1850 USD xfer
xact
(Assets:Brokerage 2024-02-01 10 AAPL assert-lot)

2024 3 1 date
Broker "buy more AAPL"
    Assets:Brokerage 5 AAPL 190 USD 950 USD xfer-exch 2024-03-01 create-lot
    Assets:Checking -950 USD xfer
xact

2024 4 1 date
Broker "sell first lot"
    Assets:Brokerage -10 AAPL 200 USD -2000 USD xfer-exch 2024-02-01 lot
    Assets:Checking 2000 USD xfer
xact
(Assets:Brokerage 2024-02-01 close-lot)
(Assets:Brokerage 5 AAPL assert-lots-sum)
(Assets:Checking 7070.88 USD assert)
"""


class TestHouseholdLedger:
    """A realistic multi-month ledger."""

    @pytest.fixture
    def books(self):
        return parse_ledger(HOUSEHOLD)

    def test_final_date(self, books):
        assert books.date == Date(2024, 4, 1)

    def test_balances(self, books):
        checking = books.accounts["Assets:Checking"]
        assert checking.balance("USD") == Decimal("7070.88")
        assert books.accounts["Liabilities:Card"].balance("USD") == Decimal("0")
        assert books.accounts["Expenses:Dining Out"].balance("USD") == Decimal("45")

    def test_lots(self, books):
        brokerage = books.accounts["Assets:Brokerage"]
        assert sorted(brokerage.lots) == ["", "2024-03-01"]
        lot = brokerage.lots["2024-03-01"]["AAPL"]
        assert lot.balance.amount == Decimal("5")
        assert lot.creation_date == Date(2024, 3, 1)
        assert lot.exchange_rate.unit_price.amount == Decimal("190")

    def test_tags_and_notes(self, books):
        assert books.tagged("fiat") == [books.commodities["USD"]]
        assert books.tagged("liquid") == [books.accounts["Assets:Checking"]]
        assert books.accounts["Assets:Checking"].notes == {"bank": "Example Bank"}

    def test_silenced_block_left_no_trace(self, books):
        assert "Household" not in books.accounts
        assert books.tagged("scopes") == []

    def test_stream_input(self):
        parser = LedgerParser(io.StringIO(HOUSEHOLD))
        assert parser.parse() is ParseResult.COMPLETED


class TestCloseScenario:
    """Closing an account requires zero balances."""

    SOURCE = """
        2024 1 1 date
        USD "US Dollar" commodity
        Assets:A open
        Equity open
        Fund "" Assets:A 5 USD xfer Equity -5 USD xfer xact
    """

    def test_close_with_balance_fails(self):
        with pytest.raises(ParseError) as info:
            parse_ledger(self.SOURCE + "Assets:A close")
        assert isinstance(info.value.cause, NonzeroBalance)

    def test_close_after_offset_succeeds(self):
        ctx = parse_ledger(self.SOURCE + """
            Defund "" Assets:A -5 USD xfer Equity 5 USD xfer xact
            Assets:A close
        """)
        assert ctx.accounts["Assets:A"].is_closed(ctx.date)
        assert ctx.open_accounts() == [ctx.accounts["Equity"]]


class TestErrorReporting:
    """ParseError carries the ledger date and the line."""

    def test_error_message_format(self):
        source = "2024 1 1 date\nUSD x commodity\nAssets:A open\n\nAssets:A 1 USD assert\n"
        with pytest.raises(ParseError) as info:
            parse_ledger(source)
        err = info.value
        assert isinstance(err.cause, BalanceMismatch)
        assert err.line == 5
        assert err.date == Date(2024, 1, 1)
        assert str(err).startswith("2024-01-01: 5: assert: ")

    def test_error_before_any_date(self):
        with pytest.raises(ParseError) as info:
            parse_ledger('"unterminated')
        assert isinstance(info.value.cause, UnterminatedQuotedString)
        assert str(info.value).startswith("0000-00-00: 1: ")

    def test_leftover_operands_at_end(self):
        with pytest.raises(ParseError) as info:
            parse_ledger("2024 1 1 date\nstray\n")
        assert isinstance(info.value.cause, LeftoverOperands)
        assert "1 unconsumed tokens left on stack at EOF" in str(info.value)

    def test_unclosed_scope_at_end(self):
        with pytest.raises(ParseError) as info:
            parse_ledger("(")
        assert isinstance(info.value.cause, UnclosedScopes)

    def test_scope_leak_is_caught(self):
        """A transfer built inside parentheses cannot escape the scope."""
        with pytest.raises(ParseError) as info:
            parse_ledger("""
                2024 1 1 date USD u commodity Assets:A open Equity open
                a b (Assets:A 1 USD xfer) Equity -1 USD xfer xact
            """)
        assert isinstance(info.value.cause, UnconsumedOperands)

    def test_first_error_stops_run(self):
        """Nothing after the failing statement is executed."""
        parser = LedgerParser("2024 1 1 date USD u commodity USD u commodity EUR e commodity")
        with pytest.raises(ParseError):
            parser.parse()
        assert "EUR" not in parser.context.commodities

    def test_verbose_run(self, capsys):
        LedgerParser("2024 1 1 date USD u commodity", verbose=True).parse()
        out = capsys.readouterr().out
        assert "Registered: USD (u)" in out
        assert "COMPLETED" in out
