"""Dashboard figures, tenant statements and exportable report tables."""

from rentbook.reports.summary import (
    DashboardSummary,
    TenantStatement,
    build_dashboard,
    build_tenant_statement,
    occupied_property_ids,
)
from rentbook.reports.tables import (
    REPORT_NAMES,
    TENANT_HEADER,
    ReportTable,
    build_report,
    expenses_table,
    invoices_table,
    ledger_table,
    properties_table,
    tenants_table,
)

__all__ = [
    "DashboardSummary",
    "REPORT_NAMES",
    "ReportTable",
    "TENANT_HEADER",
    "TenantStatement",
    "build_dashboard",
    "build_report",
    "build_tenant_statement",
    "expenses_table",
    "invoices_table",
    "ledger_table",
    "occupied_property_ids",
    "properties_table",
    "tenants_table",
]
