"""
Billing package.

Invoice numbering, billing cycles and due dates, amounts in words, and
the assembly of printable invoice documents.
"""

from rentbook.billing.cycles import (
    BillingCycle,
    CycleMonthEndPolicy,
    CycleStart,
    DueDatePolicy,
    ManualDueDatePolicy,
    NetDaysPolicy,
    cycle_for_date,
    get_due_date_policy,
    selectable_cycles,
)
from rentbook.billing.document import (
    InvoiceDocument,
    assemble_invoice_document,
    document_filename,
)
from rentbook.billing.engine import BillingEngine, InvoiceValidationError
from rentbook.billing.formatting import format_date, format_inr, plain_decimal
from rentbook.billing.identifiers import (
    format_invoice_id,
    invoice_number,
    next_invoice_id,
)
from rentbook.billing.words import amount_in_words

__all__ = [
    "BillingCycle",
    "BillingEngine",
    "CycleMonthEndPolicy",
    "CycleStart",
    "DueDatePolicy",
    "InvoiceDocument",
    "InvoiceValidationError",
    "ManualDueDatePolicy",
    "NetDaysPolicy",
    "amount_in_words",
    "assemble_invoice_document",
    "cycle_for_date",
    "document_filename",
    "format_date",
    "format_inr",
    "format_invoice_id",
    "get_due_date_policy",
    "invoice_number",
    "next_invoice_id",
    "plain_decimal",
    "selectable_cycles",
]
