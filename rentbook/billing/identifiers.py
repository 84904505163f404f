"""
Invoice Identifier Allocation

Invoice ids look like ``INV-001``. The next id is derived from the ids
already in the collection rather than from a stored counter, so deleting
an older invoice never frees its number for reuse and there is no
counter that can fall out of step with the data.

Callers must pass the full current collection and must save the new
invoice before anyone else allocates (see ``BillingEngine``).
"""

import re
from collections.abc import Iterable
from typing import Union

from rentbook.models.invoice import Invoice

INVOICE_PREFIX = "INV-"
MIN_DIGITS = 3

_DIGITS = re.compile(r"\d+")


def invoice_number(invoice_id: str) -> int:
    """
    Numeric part of an invoice id.

    The first run of digits is used; ids without any digits (legacy or
    hand-typed ids) count as 0.
    """
    match = _DIGITS.search(invoice_id or "")
    return int(match.group()) if match else 0


def format_invoice_id(number: int) -> str:
    """Render ``7`` as ``INV-007``; wider numbers keep all their digits."""
    return f"{INVOICE_PREFIX}{number:0{MIN_DIGITS}d}"


def next_invoice_id(invoices: Iterable[Union[Invoice, str]]) -> str:
    """
    Allocate the id for a new invoice.

    Args:
        invoices: Every existing invoice, or just their id strings

    Returns:
        ``INV-`` followed by (highest existing number + 1), zero padded
        to at least three digits. ``INV-001`` for an empty collection.
    """
    highest = 0
    for invoice in invoices:
        invoice_id = invoice if isinstance(invoice, str) else invoice.id
        highest = max(highest, invoice_number(invoice_id))
    return format_invoice_id(highest + 1)
