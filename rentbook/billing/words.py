"""
Amount in Words (Indian numbering)

Cheques and rent receipts in India spell the amount out using crore
(1,00,00,000) and lakh (1,00,000) rather than million/billion:

    1234567 -> "Twelve Lakh Thirty Four Thousand Five Hundred and Sixty Seven Only"

Groups are always emitted crore -> lakh -> thousand -> hundred ->
remainder, and "and" is only ever placed before the final 0-99
remainder when some higher group was emitted.
"""

import math
from decimal import Decimal
from typing import Union

ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
TENS = [
    "", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety",
]

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000
HUNDRED = 100


def _below_hundred(n: int) -> str:
    if n < 20:
        return ONES[n]
    tens, units = divmod(n, 10)
    if units:
        return f"{TENS[tens]} {ONES[units]}"
    return TENS[tens]


def _integer_words(n: int) -> str:
    """Words for a positive integer, without the trailing "Only"."""
    parts = []

    crores, n = divmod(n, CRORE)
    lakhs, n = divmod(n, LAKH)
    thousands, n = divmod(n, THOUSAND)
    hundreds, n = divmod(n, HUNDRED)

    if crores:
        # 100 crore and beyond are counted with the same grouping
        count = _below_hundred(crores) if crores < 100 else _integer_words(crores)
        parts.append(f"{count} Crore")
    if lakhs:
        parts.append(f"{_below_hundred(lakhs)} Lakh")
    if thousands:
        parts.append(f"{_below_hundred(thousands)} Thousand")
    if hundreds:
        parts.append(f"{_below_hundred(hundreds)} Hundred")
    if n:
        prefix = "and " if parts else ""
        parts.append(f"{prefix}{_below_hundred(n)}")

    return " ".join(parts)


def amount_in_words(amount: Union[int, float, Decimal]) -> str:
    """
    Spell a rupee amount in Indian English.

    Paise are dropped (the amount is floored). Zero is returned as the
    bare word "Zero"; every other amount ends in "Only".

    Raises:
        ValueError: If the amount is negative
    """
    if amount < 0:
        raise ValueError(f"Cannot spell a negative amount: {amount}")

    n = math.floor(amount)
    if n == 0:
        return "Zero"

    words = f"{_integer_words(int(n))} Only"
    return " ".join(words.split())
