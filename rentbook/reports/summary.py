"""
Portfolio Summaries

DESIGN DECISION: Every figure here is computed deterministically from
the stored records. Nothing is cached or estimated; the dashboard is
rebuilt from the store on every render.
"""

from collections import Counter
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from rentbook.billing.identifiers import invoice_number
from rentbook.models.invoice import Invoice, InvoiceStatus
from rentbook.models.records import Expense, Property, PropertyType, Tenant


def _sum(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, Decimal("0"))


class DashboardSummary(BaseModel):
    """Headline figures for the dashboard."""

    total_invoiced: Decimal = Decimal("0")
    total_collected: Decimal = Field(
        default=Decimal("0"),
        description="Sum of Paid invoices"
    )
    outstanding: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    net_income: Decimal = Field(
        default=Decimal("0"),
        description="Collected minus expenses"
    )

    tenant_count: int = 0
    active_tenant_count: int = 0
    property_count: int = 0
    occupied_count: int = 0
    occupancy_rate: float = Field(
        default=0.0,
        description="Percentage of properties with an active tenant"
    )

    units_by_type: dict[str, int] = Field(default_factory=dict)
    invoices_by_status: dict[str, int] = Field(default_factory=dict)


def occupied_property_ids(tenants: Iterable[Tenant]) -> set[str]:
    """Ids of properties that have at least one active tenant."""
    return {t.property_id for t in tenants if t.is_active and t.property_id}


def build_dashboard(
    properties: list[Property],
    tenants: list[Tenant],
    invoices: list[Invoice],
    expenses: list[Expense],
) -> DashboardSummary:
    """Aggregate the portfolio into a DashboardSummary."""
    total_invoiced = _sum(inv.total_amount for inv in invoices)
    total_collected = _sum(
        inv.total_amount for inv in invoices if inv.status == InvoiceStatus.PAID
    )
    total_expenses = _sum(exp.amount for exp in expenses)

    property_ids = {p.id for p in properties}
    occupied = occupied_property_ids(tenants) & property_ids
    occupancy = (len(occupied) / len(properties) * 100) if properties else 0.0

    type_counts = Counter(p.type.value for p in properties)
    status_counts = Counter(inv.status.value for inv in invoices)

    return DashboardSummary(
        total_invoiced=total_invoiced,
        total_collected=total_collected,
        outstanding=total_invoiced - total_collected,
        total_expenses=total_expenses,
        net_income=total_collected - total_expenses,
        tenant_count=len(tenants),
        active_tenant_count=sum(1 for t in tenants if t.is_active),
        property_count=len(properties),
        occupied_count=len(occupied),
        occupancy_rate=round(occupancy, 1),
        units_by_type={t.value: type_counts.get(t.value, 0) for t in PropertyType},
        invoices_by_status={s.value: status_counts.get(s.value, 0) for s in InvoiceStatus},
    )


class TenantStatement(BaseModel):
    """One tenant's billing history."""

    tenant: Tenant
    rented_property: Optional[Property] = None
    invoices: list[Invoice] = Field(default_factory=list)

    @property
    def total_billed(self) -> Decimal:
        return _sum(inv.total_amount for inv in self.invoices)

    @property
    def total_paid(self) -> Decimal:
        return _sum(
            inv.total_amount for inv in self.invoices
            if inv.status == InvoiceStatus.PAID
        )

    @property
    def balance(self) -> Decimal:
        """Amount still owed."""
        return self.total_billed - self.total_paid


def build_tenant_statement(
    tenant: Tenant,
    invoices: list[Invoice],
    rented_property: Optional[Property] = None,
) -> TenantStatement:
    """The tenant's invoices, oldest first."""
    own = [inv for inv in invoices if inv.tenant_id == tenant.id]
    own.sort(key=lambda inv: (inv.created_date, invoice_number(inv.id)))
    return TenantStatement(tenant=tenant, rented_property=rented_property, invoices=own)
