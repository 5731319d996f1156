"""
conftest.py - Shared pytest fixtures for rpnledger tests

Provides common fixtures used across unit, functional and conformance tests:
- Contexts at various stages (empty, dated, preamble applied, funded)
- A LedgerParser factory for tests that replace built-in functions
"""

import pytest

from rpnledger import Context, Date, LedgerParser

from tests.ledger_helpers import PREAMBLE, run


@pytest.fixture
def ctx():
    """Context with the standard preamble applied."""
    return run("")


@pytest.fixture
def empty_ctx():
    return Context()


@pytest.fixture
def dated_ctx():
    """Context on 2024-01-01 with nothing registered."""
    context = Context()
    context.advance_date(Date(2024, 1, 1))
    return context


@pytest.fixture
def funded_ctx():
    """Preamble plus 1000 USD moved from Equity into Assets:Bank."""
    return run("""
        Opening "initial deposit"
            Assets:Bank 1000 USD xfer
            Equity -1000 USD xfer
        xact
    """)


@pytest.fixture
def parser_factory():
    """Build a LedgerParser over the preamble followed by source."""
    def factory(source: str, **kwargs) -> LedgerParser:
        return LedgerParser(PREAMBLE + source, **kwargs)
    return factory
