"""
PDF Rendering

Draws assembled invoice documents and report tables with fpdf2.

DESIGN DECISION: The renderer makes no business decisions. Every string
it prints, totals included, was prepared by the document assembler or
the report builders; this module only decides where ink goes.

The core PDF fonts only cover latin-1, so text is sanitised before it is
drawn (the rupee sign is printed as "Rs.").
"""

from typing import Optional

import structlog
from fpdf import FPDF

from rentbook.billing.document import (
    AmountInWordsBlock,
    BankDetailsBlock,
    BillToBlock,
    HeaderBlock,
    InvoiceDocument,
    LineItemTableBlock,
    NotesBlock,
    SignatureBlock,
)
from rentbook.models.records import FontFamily, HeaderLayout, InvoiceSettings
from rentbook.reports.tables import ReportTable

logger = structlog.get_logger(__name__)

_REPLACEMENTS = {
    "₹": "Rs.",
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "–": "-",
    "—": "-",
    "…": "...",
}

_FONTS = {
    FontFamily.HELVETICA: "Helvetica",
    FontFamily.TIMES: "Times",
    FontFamily.COURIER: "Courier",
}

_GREY = (100, 116, 139)
_DARK = (15, 23, 42)
_LIGHT_FILL = (248, 250, 252)


def latin1(text: Optional[str]) -> str:
    """Make text drawable with the core fonts."""
    if not text:
        return ""
    for original, replacement in _REPLACEMENTS.items():
        text = text.replace(original, replacement)
    return text.encode("latin-1", "replace").decode("latin-1")


class PdfInvoiceRenderer:
    """Renders invoice documents and report tables to PDF bytes."""

    def __init__(self, margin: float = 15):
        self._margin = margin

    def _new_pdf(self, orientation: str = "P") -> FPDF:
        pdf = FPDF(orientation=orientation, unit="mm", format="A4")
        pdf.set_margins(self._margin, self._margin, self._margin)
        pdf.set_auto_page_break(auto=True, margin=self._margin)
        pdf.add_page()
        return pdf

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    def render(self, document: InvoiceDocument) -> bytes:
        """Draw every block of the document in order."""
        style = document.style
        pdf = self._new_pdf()
        pdf.set_title(latin1(document.filename))
        font = _FONTS[style.font_family]

        for block in document.blocks:
            if isinstance(block, HeaderBlock):
                self._header(pdf, font, style, block)
            elif isinstance(block, BillToBlock):
                self._bill_to(pdf, font, block)
            elif isinstance(block, LineItemTableBlock):
                self._line_items(pdf, font, style, block)
            elif isinstance(block, AmountInWordsBlock):
                self._labelled_text(pdf, font, block.label, block.text, italic=True)
            elif isinstance(block, NotesBlock):
                self._labelled_text(pdf, font, "Notes:", block.text)
            elif isinstance(block, BankDetailsBlock):
                self._labelled_text(pdf, font, block.label, block.text)
            elif isinstance(block, SignatureBlock):
                self._signature(pdf, font, block)

        logger.debug("invoice_rendered", invoice_id=document.invoice_id, pages=pdf.page_no())
        return bytes(pdf.output())

    def _header(self, pdf: FPDF, font: str, style: InvoiceSettings, block: HeaderBlock) -> None:
        accent = style.primary_rgb
        if block.layout == HeaderLayout.MODERN:
            # Full-width colour band with the title reversed out
            pdf.set_fill_color(*accent)
            pdf.rect(0, 0, pdf.w, 38, style="F")
            pdf.set_xy(self._margin, 10)
            pdf.set_text_color(255, 255, 255)
            pdf.set_font(font, "B", 20)
            pdf.cell(0, 10, latin1(block.company_name), new_x="LMARGIN", new_y="NEXT")
            pdf.set_font(font, "", 10)
            pdf.cell(0, 5, latin1(block.company_address), new_x="LMARGIN", new_y="NEXT")
            pdf.cell(0, 5, latin1(block.company_email), new_x="LMARGIN", new_y="NEXT")
            pdf.set_xy(self._margin, 14)
            pdf.set_font(font, "B", 16)
            pdf.cell(0, 10, latin1(block.title.upper()), align="R")
            pdf.set_xy(self._margin, 44)
        else:
            pdf.set_text_color(*accent)
            pdf.set_font(font, "B", 20)
            pdf.cell(0, 10, latin1(block.company_name), new_x="LMARGIN", new_y="NEXT")
            pdf.set_text_color(*_GREY)
            pdf.set_font(font, "", 10)
            pdf.cell(0, 5, latin1(block.company_address), new_x="LMARGIN", new_y="NEXT")
            pdf.cell(0, 5, latin1(block.company_email), new_x="LMARGIN", new_y="NEXT")
            pdf.ln(4)
            pdf.set_text_color(*accent)
            pdf.set_font(font, "B", 16)
            pdf.cell(0, 10, latin1(block.title.upper()), align="C", new_x="LMARGIN", new_y="NEXT")
            pdf.set_draw_color(*accent)
            pdf.line(self._margin, pdf.get_y(), pdf.w - self._margin, pdf.get_y())
            pdf.ln(4)

        pdf.set_text_color(*_DARK)
        details = [
            ("Invoice No:", block.invoice_id),
            ("Date:", block.created_date),
            ("Due Date:", block.due_date),
        ]
        if block.received_date:
            details.append(("Date of Receipt:", block.received_date))
        details.append(("Billing Period:", block.billing_period))
        for label, value in details:
            pdf.set_font(font, "B", 10)
            pdf.cell(35, 6, latin1(label))
            pdf.set_font(font, "", 10)
            pdf.cell(0, 6, latin1(value), new_x="LMARGIN", new_y="NEXT")
        pdf.ln(4)

    def _bill_to(self, pdf: FPDF, font: str, block: BillToBlock) -> None:
        pdf.set_fill_color(*_LIGHT_FILL)
        pdf.set_font(font, "B", 11)
        pdf.cell(0, 7, "  Bill To", new_x="LMARGIN", new_y="NEXT", fill=True)
        pdf.set_font(font, "B", 10)
        pdf.cell(0, 6, latin1(f"  {block.tenant_name}"), new_x="LMARGIN", new_y="NEXT")
        pdf.set_font(font, "", 10)
        for line in block.contact_lines:
            pdf.cell(0, 5, latin1(f"  {line}"), new_x="LMARGIN", new_y="NEXT")
        pdf.cell(0, 5, latin1(f"  Rented Unit: {block.rented_unit}"), new_x="LMARGIN", new_y="NEXT")
        pdf.ln(4)

    def _line_items(
        self,
        pdf: FPDF,
        font: str,
        style: InvoiceSettings,
        block: LineItemTableBlock,
    ) -> None:
        amount_width = 50
        description_width = pdf.epw - amount_width

        pdf.set_fill_color(*style.primary_rgb)
        pdf.set_text_color(255, 255, 255)
        pdf.set_font(font, "B", 10)
        pdf.cell(description_width, 8, latin1(f"  {block.columns[0]}"), fill=True)
        pdf.cell(amount_width, 8, latin1(f"{block.columns[1]}  "), align="R", fill=True,
                 new_x="LMARGIN", new_y="NEXT")

        pdf.set_text_color(*_DARK)
        pdf.set_font(font, "", 10)
        pdf.set_draw_color(226, 232, 240)
        for description, amount in block.rows:
            pdf.cell(description_width, 7, latin1(f"  {description}"), border="B")
            pdf.cell(amount_width, 7, latin1(f"{amount}  "), border="B", align="R",
                     new_x="LMARGIN", new_y="NEXT")

        pdf.set_font(font, "B", 11)
        pdf.cell(description_width, 9, latin1(f"  {block.total_label}"), align="R")
        pdf.cell(amount_width, 9, latin1(f"{block.total_text}  "), align="R",
                 new_x="LMARGIN", new_y="NEXT")
        pdf.ln(2)

    def _labelled_text(
        self,
        pdf: FPDF,
        font: str,
        label: str,
        text: str,
        italic: bool = False,
    ) -> None:
        pdf.set_font(font, "B", 10)
        pdf.cell(0, 6, latin1(label), new_x="LMARGIN", new_y="NEXT")
        pdf.set_font(font, "I" if italic else "", 10)
        pdf.multi_cell(0, 5, latin1(text), new_x="LMARGIN", new_y="NEXT")
        pdf.ln(3)

    def _signature(self, pdf: FPDF, font: str, block: SignatureBlock) -> None:
        pdf.ln(15)
        line_width = 60
        x = pdf.w - self._margin - line_width
        pdf.set_draw_color(*_DARK)
        pdf.line(x, pdf.get_y(), x + line_width, pdf.get_y())
        pdf.set_x(x)
        pdf.set_font(font, "", 9)
        pdf.cell(line_width, 6, latin1(block.label), align="C", new_x="LMARGIN", new_y="NEXT")

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def render_report(self, table: ReportTable, subtitle: str = "") -> bytes:
        """Draw a report table, landscape when it is wide."""
        pdf = self._new_pdf("L" if len(table.header) > 6 else "P")
        pdf.set_title(latin1(table.title))

        pdf.set_font("Helvetica", "B", 16)
        pdf.cell(0, 10, latin1(table.title), new_x="LMARGIN", new_y="NEXT")
        if subtitle:
            pdf.set_font("Helvetica", "", 9)
            pdf.set_text_color(*_GREY)
            pdf.cell(0, 5, latin1(subtitle), new_x="LMARGIN", new_y="NEXT")
            pdf.set_text_color(*_DARK)
        pdf.ln(3)

        width = pdf.epw / max(len(table.header), 1)

        def draw_header() -> None:
            pdf.set_fill_color(240, 240, 240)
            pdf.set_font("Helvetica", "B", 8)
            for name in table.header:
                pdf.cell(width, 7, self._fit(pdf, name, width), border=1, fill=True)
            pdf.ln()

        draw_header()
        pdf.set_font("Helvetica", "", 8)
        for row in table.rows:
            if pdf.will_page_break(6):
                pdf.add_page()
                draw_header()
                pdf.set_font("Helvetica", "", 8)
            for value in row:
                pdf.cell(width, 6, self._fit(pdf, value, width), border=1)
            pdf.ln()

        if not table.rows:
            pdf.set_font("Helvetica", "I", 9)
            pdf.cell(0, 8, "No records.", new_x="LMARGIN", new_y="NEXT")

        return bytes(pdf.output())

    @staticmethod
    def _fit(pdf: FPDF, text: str, width: float) -> str:
        """Truncate text so it fits a cell, with a little padding."""
        text = latin1(text)
        limit = width - 2
        if pdf.get_string_width(text) <= limit:
            return text
        while text and pdf.get_string_width(text + "...") > limit:
            text = text[:-1]
        return text + "..."
