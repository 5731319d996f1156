"""
general.py - Clock and Comments

Functions:
    YEAR MONTH DAY date ->
    STRING comment ->
"""

from __future__ import annotations
from datetime import date as _calendar_date

from ..core import Date, InvalidDate, OperandError, parse_integer
from ..ledger import Context
from ..machine import Operands
from .common import pop_exactly, text


def date(fn: str, op: Operands, ctx: Context) -> None:
    """
    Advance the ledger clock.

    Each field is a base-10 integer and together they must name a real
    calendar day. Staying on the current date is allowed; moving backwards
    is not.

    Raises:
        InvalidDate: Malformed field, impossible date, or a backwards move
    """
    values = pop_exactly(fn, op, 3, "year, month, day")
    fields = []
    for value, what in zip(values, ("year", "month", "day")):
        field_text = text(fn, value, what)
        try:
            fields.append(parse_integer(field_text))
        except ValueError as e:
            raise InvalidDate(f"{fn}: illegal {what} {field_text}: {e}") from e
    year, month, day = fields
    try:
        _calendar_date(year, month, day)
    except ValueError as e:
        raise InvalidDate(f"{fn}: illegal date {year:04d}-{month:02d}-{day:02d}: {e}") from e
    try:
        ctx.advance_date(Date(year, month, day))
    except InvalidDate as e:
        raise InvalidDate(f"{fn}: {e}") from e


def comment(fn: str, op: Operands, ctx: Context) -> None:
    """Discard exactly one text operand."""
    if len(op) == 0:
        raise OperandError(f"{fn}: no operands given")
    if len(op) > 1:
        raise OperandError(f"{fn}: exactly one operand required, but {len(op)} given")
    value = op.pop(1)[0]
    text(fn, value, "operand")
