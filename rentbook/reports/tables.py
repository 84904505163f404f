"""
Report Tables

A ReportTable is a title, a header row and string rows. The same table
feeds the CSV exporter and the PDF report renderer, so both outputs
always agree. Dates are DD-MM-YYYY and money is a plain two-decimal
number, which spreadsheets read back as numbers.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from rentbook.billing.formatting import format_date, plain_decimal
from rentbook.billing.identifiers import invoice_number
from rentbook.models.invoice import Invoice, InvoiceStatus
from rentbook.models.records import Expense, Property, Tenant
from rentbook.reports.summary import TenantStatement, occupied_property_ids


TENANT_HEADER = [
    "Name",
    "Email",
    "Phone",
    "Address",
    "Property",
    "PropertyId",
    "Status",
    "Move In Date",
]


class ReportTable(BaseModel):
    """A titled table of strings."""

    title: str
    header: list[str]
    rows: list[list[str]] = Field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def slug(self) -> str:
        """File-name friendly title."""
        return "_".join(self.title.lower().split())


def _property_names(properties: list[Property]) -> dict[str, str]:
    return {p.id: p.display_name for p in properties}


def _tenant_names(tenants: list[Tenant]) -> dict[str, str]:
    return {t.id: t.name for t in tenants}


def tenants_table(tenants: list[Tenant], properties: list[Property]) -> ReportTable:
    names = _property_names(properties)
    rows = [
        [
            t.name,
            t.email,
            t.phone,
            t.address,
            names.get(t.property_id, ""),
            t.property_id,
            t.status.value,
            format_date(t.move_in_date),
        ]
        for t in tenants
    ]
    return ReportTable(title="Tenants", header=list(TENANT_HEADER), rows=rows)


def properties_table(properties: list[Property], tenants: list[Tenant]) -> ReportTable:
    occupied = occupied_property_ids(tenants)
    rows = [
        [
            p.name,
            p.type.value,
            p.unit_number,
            p.address,
            "Occupied" if p.id in occupied else "Vacant",
        ]
        for p in properties
    ]
    return ReportTable(
        title="Properties",
        header=["Name", "Type", "Unit Number", "Address", "Occupancy"],
        rows=rows,
    )


def invoices_table(invoices: list[Invoice], tenants: list[Tenant]) -> ReportTable:
    names = _tenant_names(tenants)
    ordered = sorted(invoices, key=lambda inv: invoice_number(inv.id))
    rows = [
        [
            inv.id,
            names.get(inv.tenant_id, "Unknown"),
            inv.billing_period,
            format_date(inv.created_date),
            format_date(inv.due_date),
            format_date(inv.received_date),
            inv.status.value,
            inv.document_type.value,
            plain_decimal(inv.total_amount),
        ]
        for inv in ordered
    ]
    return ReportTable(
        title="Invoices",
        header=[
            "Invoice ID",
            "Tenant",
            "Billing Period",
            "Created",
            "Due",
            "Received",
            "Status",
            "Type",
            "Total",
        ],
        rows=rows,
    )


def expenses_table(expenses: list[Expense], properties: list[Property]) -> ReportTable:
    names = _property_names(properties)
    ordered = sorted(expenses, key=lambda exp: exp.spent_on)
    rows = [
        [
            format_date(exp.spent_on),
            names.get(exp.property_id, "General"),
            exp.category.value,
            exp.description,
            plain_decimal(exp.amount),
        ]
        for exp in ordered
    ]
    return ReportTable(
        title="Expenses",
        header=["Date", "Property", "Category", "Description", "Amount"],
        rows=rows,
    )


def ledger_table(statement: TenantStatement) -> ReportTable:
    """
    A tenant's ledger with a running balance.

    Paid invoices settle themselves, so the running balance only grows
    with unpaid ones.
    """
    rows = []
    balance = Decimal("0")
    for inv in statement.invoices:
        paid = inv.total_amount if inv.status == InvoiceStatus.PAID else None
        if paid is None:
            balance += inv.total_amount
        rows.append([
            format_date(inv.created_date),
            inv.id,
            inv.billing_period,
            inv.status.value,
            plain_decimal(inv.total_amount),
            plain_decimal(paid) if paid is not None else "",
            plain_decimal(balance),
        ])
    rows.append([
        "",
        "",
        "",
        "Total",
        plain_decimal(statement.total_billed),
        plain_decimal(statement.total_paid),
        plain_decimal(statement.balance),
    ])
    return ReportTable(
        title=f"Ledger {statement.tenant.name}",
        header=["Date", "Invoice ID", "Billing Period", "Status", "Billed", "Paid", "Balance"],
        rows=rows,
    )


REPORT_NAMES = ("tenants", "properties", "invoices", "expenses")


def build_report(
    name: str,
    properties: list[Property],
    tenants: list[Tenant],
    invoices: list[Invoice],
    expenses: list[Expense],
) -> Optional[ReportTable]:
    """Build a portfolio-wide report by name; None for an unknown name."""
    if name == "tenants":
        return tenants_table(tenants, properties)
    if name == "properties":
        return properties_table(properties, tenants)
    if name == "invoices":
        return invoices_table(invoices, tenants)
    if name == "expenses":
        return expenses_table(expenses, properties)
    return None
