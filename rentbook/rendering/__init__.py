"""PDF rendering of invoices and reports."""

from rentbook.rendering.pdf import PdfInvoiceRenderer, latin1

__all__ = ["PdfInvoiceRenderer", "latin1"]
