"""
commodities.py - Commodity Registration

    NAME DESCRIPTION commodity ->
"""

from __future__ import annotations

from ..core import DuplicateEntity
from ..ledger import Context
from ..machine import Operands
from .common import pop_exactly, text


def commodity(fn: str, op: Operands, ctx: Context) -> None:
    """Register a commodity at the current ledger date. Names are unique."""
    values = pop_exactly(fn, op, 2, "commodity name and description")
    name = text(fn, values[0], "commodity name")
    description = text(fn, values[1], "description")
    try:
        ctx.register_commodity(name, description)
    except DuplicateEntity as e:
        raise DuplicateEntity(f"{fn}: {e}") from e
