"""Text formatting for rendered documents and exports."""

from datetime import date
from decimal import Decimal
from typing import Optional, Union


def format_date(value: Optional[date], missing: str = "") -> str:
    """Render a date as DD-MM-YYYY, the way it is printed on invoices."""
    if value is None:
        return missing
    return value.strftime("%d-%m-%Y")


def group_indian(integer_part: int) -> str:
    """Insert separators the Indian way: 1234567 -> 12,34,567."""
    digits = str(integer_part)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_inr(amount: Union[int, Decimal], prefix: str = "Rs. ") -> str:
    """
    Format an amount for display, e.g. ``Rs. 12,34,567`` or ``Rs. 1,500.50``.

    Paise are shown only when non-zero.
    """
    value = Decimal(amount).quantize(Decimal("0.01"))
    sign = "-" if value < 0 else ""
    value = abs(value)
    rupees = int(value)
    paise = int((value - rupees) * 100)
    text = group_indian(rupees)
    if paise:
        text = f"{text}.{paise:02d}"
    return f"{sign}{prefix}{text}"


def plain_decimal(amount: Decimal) -> str:
    """Money as a spreadsheet-friendly plain decimal: ``1500.00``."""
    return str(Decimal(amount).quantize(Decimal("0.01")))
