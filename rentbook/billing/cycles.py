"""
Billing Cycles and Due Dates

Rent is billed half-yearly on two fixed cycles:

    01 April YYYY   to 30 September YYYY
    01 October YYYY to 31 March YYYY+1

The October cycle crosses a calendar-year boundary, so a date in
January-March belongs to the cycle that started the previous October.

DESIGN DECISION: The due date of a new invoice is a pluggable policy.
Earlier versions of the app used three different rules (end of the
cycle's first month, today + 7 days, free entry). CycleMonthEndPolicy is
the default; the others are selectable through configuration. A due
date typed in by the user always wins over the policy.
"""

import calendar
import re
from abc import ABC, abstractmethod
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CycleStart(int, Enum):
    """Month a half-year cycle starts in."""
    APRIL = 4
    OCTOBER = 10


_LABEL = re.compile(
    r"^\s*01\s+(April|October)\s+(\d{4})\s+to\s+(30\s+September|31\s+March)\s+(\d{4})\s*$",
    re.IGNORECASE,
)


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


class BillingCycle(BaseModel):
    """One half-year billing cycle."""
    model_config = ConfigDict(frozen=True)

    start: CycleStart
    year: int = Field(..., ge=1900, le=9999, description="Year the cycle starts in")

    @property
    def start_date(self) -> date:
        return date(self.year, self.start.value, 1)

    @property
    def end_date(self) -> date:
        if self.start == CycleStart.APRIL:
            return date(self.year, 9, 30)
        return date(self.year + 1, 3, 31)

    @property
    def first_month_end(self) -> date:
        """Last day of the cycle's first month (30 April / 31 October)."""
        return _month_end(self.year, self.start.value)

    @property
    def label(self) -> str:
        """E.g. ``01 October 2026 to 31 March 2027``."""
        return (
            f"{self.start_date.strftime('%d %B %Y')} to "
            f"{self.end_date.strftime('%d %B %Y')}"
        )

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def next(self) -> "BillingCycle":
        if self.start == CycleStart.APRIL:
            return BillingCycle(start=CycleStart.OCTOBER, year=self.year)
        return BillingCycle(start=CycleStart.APRIL, year=self.year + 1)

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional["BillingCycle"]:
        """
        Parse a cycle label back into a cycle.

        Returns None for free text that is not a well-formed cycle label,
        including labels whose end year does not follow from the start.
        """
        if not label:
            return None
        match = _LABEL.match(label)
        if not match:
            return None
        start_month, start_year, end_text, end_year = match.groups()
        cycle = cls(
            start=CycleStart.APRIL if start_month.lower() == "april" else CycleStart.OCTOBER,
            year=int(start_year),
        )
        if cycle.end_date.year != int(end_year):
            return None
        if (cycle.start == CycleStart.APRIL) != end_text.lower().endswith("september"):
            return None
        return cycle


def cycle_for_date(today: date) -> BillingCycle:
    """
    The cycle a date falls in.

    April-September -> April cycle of the same year; October-December ->
    October cycle of the same year; January-March -> October cycle of the
    previous year.
    """
    if 4 <= today.month <= 9:
        return BillingCycle(start=CycleStart.APRIL, year=today.year)
    if today.month >= 10:
        return BillingCycle(start=CycleStart.OCTOBER, year=today.year)
    return BillingCycle(start=CycleStart.OCTOBER, year=today.year - 1)


def selectable_cycles(today: date) -> list[BillingCycle]:
    """The current cycle and the one after it, for pickers."""
    current = cycle_for_date(today)
    return [current, current.next()]


# =============================================================================
# DUE DATE POLICIES
# =============================================================================

class DueDatePolicy(ABC):
    """Derives the due date of a new invoice."""

    name: str = ""

    @abstractmethod
    def due_date(self, cycle: BillingCycle, today: date) -> Optional[date]:
        """
        Args:
            cycle: The cycle being billed
            today: The invoice creation date

        Returns:
            The due date, or None when the policy cannot derive one
        """


class CycleMonthEndPolicy(DueDatePolicy):
    """Due at the end of the cycle's first month (30 April / 31 October)."""

    name = "cycle_month_end"

    def due_date(self, cycle: BillingCycle, today: date) -> Optional[date]:
        return cycle.first_month_end


class NetDaysPolicy(DueDatePolicy):
    """Due a fixed number of days after the invoice is created."""

    name = "net_days"

    def __init__(self, days: int = 7):
        if days < 0:
            raise ValueError("days must not be negative")
        self.days = days

    def due_date(self, cycle: BillingCycle, today: date) -> Optional[date]:
        return today + timedelta(days=self.days)


class ManualDueDatePolicy(DueDatePolicy):
    """The user always types the due date in."""

    name = "manual"

    def due_date(self, cycle: BillingCycle, today: date) -> Optional[date]:
        return None


def get_due_date_policy(name: str, days: int = 7) -> DueDatePolicy:
    """
    Build a policy from its configured name.

    Raises:
        ValueError: For an unknown policy name
    """
    if name == CycleMonthEndPolicy.name:
        return CycleMonthEndPolicy()
    if name == NetDaysPolicy.name:
        return NetDaysPolicy(days)
    if name == ManualDueDatePolicy.name:
        return ManualDueDatePolicy()
    raise ValueError(f"Unknown due date policy: {name}")
