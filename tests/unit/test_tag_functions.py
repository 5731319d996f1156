"""
test_tag_functions.py - Unit tests for tag, tag-commodity and untag
"""

import pytest

from rpnledger import OperandError, UnknownAccount, UnknownCommodity, ClosedAccount

from tests.ledger_helpers import run, failure


class TestTag:
    """Tests for tagging accounts."""

    def test_multiple_tags(self):
        ctx = run("Assets:Bank liquid checking tag")
        bank = ctx.accounts["Assets:Bank"]
        assert bank.get_tags() == ["checking", "liquid"]
        assert ctx.tagged("liquid") == [bank]
        assert ctx.tagged("checking") == [bank]

    def test_index_order_follows_tagging(self):
        ctx = run("Assets:Bank liquid tag Assets:Broker liquid tag")
        assert [a.name for a in ctx.tagged("liquid")] == ["Assets:Bank", "Assets:Broker"]

    def test_idempotent(self):
        ctx = run("Assets:Bank liquid tag Assets:Bank liquid liquid tag")
        assert len(ctx.tagged("liquid")) == 1
        assert ctx.accounts["Assets:Bank"].get_tags() == ["liquid"]

    def test_requires_a_tag(self):
        err = failure("Assets:Bank tag")
        assert isinstance(err.cause, OperandError)
        assert "at least one tag" in str(err.cause)

    def test_unknown_account(self):
        err = failure("Assets:Nope t tag")
        assert isinstance(err.cause, UnknownAccount)
        assert "tagging nonexistent account: Assets:Nope" in str(err.cause)

    def test_closed_account(self):
        err = failure("Assets:Broker close Assets:Broker t tag")
        assert isinstance(err.cause, ClosedAccount)


class TestTagCommodity:
    """Tests for tagging commodities."""

    def test_tags_commodity(self):
        ctx = run("USD fiat major tag-commodity")
        usd = ctx.commodities["USD"]
        assert usd.get_tags() == ["fiat", "major"]
        assert ctx.tagged("fiat") == [usd]

    def test_shared_index_with_accounts(self):
        """Accounts and commodities share one tag index."""
        ctx = run("USD core tag-commodity Assets:Bank core tag")
        assert ctx.tagged("core") == [ctx.commodities["USD"], ctx.accounts["Assets:Bank"]]

    def test_unknown_commodity(self):
        err = failure("GBP fiat tag-commodity")
        assert isinstance(err.cause, UnknownCommodity)
        assert "tagging nonexistent commodity: GBP" in str(err.cause)


class TestUntag:
    """Tests for untagging accounts."""

    def test_removes_from_entity_and_index(self):
        ctx = run("Assets:Bank liquid checking tag Assets:Bank liquid untag")
        bank = ctx.accounts["Assets:Bank"]
        assert bank.get_tags() == ["checking"]
        assert "liquid" not in ctx.tags

    def test_keeps_other_members(self):
        ctx = run("""
            Assets:Bank liquid tag
            Assets:Broker liquid tag
            Assets:Bank liquid untag
        """)
        assert ctx.tagged("liquid") == [ctx.accounts["Assets:Broker"]]

    def test_absent_tag_is_noop(self):
        ctx = run("Assets:Bank never untag")
        assert ctx.tagged("never") == []

    def test_unknown_account(self):
        err = failure("Assets:Nope t untag")
        assert isinstance(err.cause, UnknownAccount)

    def test_closed_account(self):
        err = failure("Assets:Broker close Assets:Broker t untag")
        assert isinstance(err.cause, ClosedAccount)
