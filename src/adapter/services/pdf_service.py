"""ReportLab invoice rendering

Lays out seller letterhead, invoice details, positions, a tax row per
rate and the totals on one A4 flow.
"""

from io import BytesIO
from decimal import Decimal
from typing import List

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import (
    Flowable,
    SimpleDocTemplate,
    Table,
    TableStyle,
    Paragraph,
    Spacer,
)

from src.app.services.parties import SellerProfileDTO
from src.app.services.pdf_service import PdfService
from src.domain.invoice_aggregate import InvoiceAggregate
from src.domain.money import format_rate, round_money

PAGE_MARGIN = 18 * mm
DATE_FORMAT = "%Y-%m-%d"

INK = colors.HexColor("#1F2933")
MUTED = colors.HexColor("#616E7C")
ACCENT = colors.HexColor("#C0392B")
RULE = colors.HexColor("#CBD2D9")
STRIPE = colors.HexColor("#F5F7FA")

POSITION_COLUMNS = ["#", "Description", "Quantity", "Tax", "Unit Price", "Total"]
POSITION_WIDTHS = [10 * mm, 64 * mm, 22 * mm, 15 * mm, 31 * mm, 32 * mm]

DETAILS_STYLE = TableStyle(
    [
        ("FONT", (0, 0), (0, -1), "Helvetica-Bold", 9),
        ("FONT", (1, 0), (1, -1), "Helvetica", 9),
        ("TEXTCOLOR", (0, 0), (0, -1), MUTED),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
    ]
)

POSITIONS_STYLE = TableStyle(
    [
        ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 9),
        ("FONT", (0, 1), (-1, -1), "Helvetica", 9),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("BACKGROUND", (0, 0), (-1, 0), INK),
        ("ALIGN", (2, 0), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("LINEBELOW", (0, 1), (-1, -1), 0.25, RULE),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, STRIPE]),
        ("TOPPADDING", (0, 0), (-1, -1), 5),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
    ]
)

TOTALS_STYLE = TableStyle(
    [
        ("FONT", (0, 0), (-1, -1), "Helvetica", 9),
        ("FONT", (0, -1), (-1, -1), "Helvetica-Bold", 10),
        ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
        ("LINEABOVE", (0, -1), (-1, -1), 1, INK),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
    ]
)

PROFORMA_NOTE = (
    "<i>Proforma for preview only. This document is not an invoice and "
    "becomes binding only once the invoice is issued.</i>"
)


def _amount(currency: str, value: Decimal, places: int) -> str:
    return f"{currency} {round_money(value, places):,.{places}f}"


def _quantity(value: Decimal) -> str:
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class ReportLabPdfService(PdfService):
    """
    ReportLab implementation of PdfService

    Amounts are rounded once, here, for display; the aggregate keeps its
    exact values.
    """

    def __init__(self):
        base = getSampleStyleSheet()
        self.styles = {
            "seller": ParagraphStyle("Seller", parent=base["Heading1"], fontSize=18, textColor=INK),
            "title": ParagraphStyle(
                "Title", parent=base["Heading2"], fontSize=13, textColor=ACCENT, spaceAfter=12
            ),
            "small": ParagraphStyle("Small", parent=base["Normal"], fontSize=8, textColor=MUTED),
            "text": ParagraphStyle("Text", parent=base["Normal"], fontSize=10, leading=13),
        }

    def generate_proforma_invoice(
        self,
        aggregate: InvoiceAggregate,
        seller: SellerProfileDTO,
        decimal_places: int = 2,
    ) -> bytes:
        invoice = aggregate.invoice

        elements: List[Flowable] = []
        elements += self._letterhead(seller)
        elements.append(Paragraph("PROFORMA INVOICE", self.styles["title"]))
        elements += self._details(aggregate)
        if invoice.opening:
            elements += [Paragraph(invoice.opening, self.styles["text"]), Spacer(1, 4 * mm)]
        elements += self._positions(aggregate, decimal_places)
        elements += self._totals(aggregate, decimal_places)
        if invoice.footer:
            elements += [Paragraph(invoice.footer, self.styles["text"]), Spacer(1, 4 * mm)]
        if seller.bank_iban:
            elements.append(Paragraph(self._bank_line(seller), self.styles["small"]))
        elements.append(Paragraph(PROFORMA_NOTE, self.styles["small"]))

        with BytesIO() as buffer:
            SimpleDocTemplate(
                buffer,
                pagesize=A4,
                leftMargin=PAGE_MARGIN,
                rightMargin=PAGE_MARGIN,
                topMargin=PAGE_MARGIN,
                bottomMargin=PAGE_MARGIN,
                title=f"Proforma {invoice.number}".strip(),
            ).build(elements)
            return buffer.getvalue()

    def _letterhead(self, seller: SellerProfileDTO) -> List[Flowable]:
        address = ", ".join(
            part for part in (
                seller.address1,
                seller.address2,
                f"{seller.zip} {seller.city}".strip(),
                seller.country_code,
            ) if part
        )
        elements = [Paragraph(seller.name or "Proforma", self.styles["seller"])]
        if address:
            elements.append(Paragraph(address, self.styles["small"]))
        if seller.vat_id:
            elements.append(Paragraph(f"VAT ID: {seller.vat_id}", self.styles["small"]))
        elements.append(Spacer(1, 6 * mm))
        return elements

    def _details(self, aggregate: InvoiceAggregate) -> List[Flowable]:
        invoice = aggregate.invoice
        rows = [
            ["Invoice Number", invoice.number or "-"],
            ["Status", aggregate.status.value.upper()],
            ["Currency", invoice.currency],
        ]
        for label, value in (
            ("Invoice Date", invoice.invoice_date),
            ("Delivery Date", invoice.occurrence_date),
            ("Due Date", invoice.due_date),
        ):
            if value:
                rows.append([label, value.strftime(DATE_FORMAT)])
        if invoice.order_number:
            rows.append(["Order Number", invoice.order_number])

        table = Table(rows, colWidths=[38 * mm, 100 * mm], hAlign="LEFT")
        table.setStyle(DETAILS_STYLE)
        return [table, Spacer(1, 6 * mm)]

    def _positions(self, aggregate: InvoiceAggregate, places: int) -> List[Flowable]:
        currency = aggregate.invoice.currency
        rows = [POSITION_COLUMNS]
        for p in aggregate.positions:
            rows.append(
                [
                    str(p.position),
                    Paragraph(p.text or "", self.styles["text"]),
                    f"{_quantity(p.quantity)} {p.unit_code}".strip(),
                    f"{format_rate(p.tax_rate)} %",
                    _amount(currency, p.net_price, places),
                    _amount(currency, p.line_total, places),
                ]
            )

        table = Table(rows, colWidths=POSITION_WIDTHS, repeatRows=1)
        table.setStyle(POSITIONS_STYLE)
        return [table, Spacer(1, 4 * mm)]

    def _totals(self, aggregate: InvoiceAggregate, places: int) -> List[Flowable]:
        currency = aggregate.invoice.currency
        rows = [["Net total", _amount(currency, aggregate.net_total, places)]]
        for tax in aggregate.tax_breakdown():
            rows.append([f"Tax {format_rate(tax.rate)} %", _amount(currency, tax.amount, places)])
        rows.append(["Gross total", _amount(currency, aggregate.gross_total, places)])

        table = Table(rows, colWidths=[sum(POSITION_WIDTHS[:-1]), POSITION_WIDTHS[-1]])
        table.setStyle(TOTALS_STYLE)
        return [table, Spacer(1, 8 * mm)]

    @staticmethod
    def _bank_line(seller: SellerProfileDTO) -> str:
        parts = [f"IBAN {seller.bank_iban}"]
        if seller.bank_bic:
            parts.append(f"BIC {seller.bank_bic}")
        if seller.bank_name:
            parts.append(seller.bank_name)
        return " · ".join(parts)
