"""ExportEInvoice Use Case

Builds the e-invoice document of an invoice and hands it to an exporter.
"""

import base64
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_position_repository import InvoicePositionRepository
from src.app.services.einvoice_exporter import (
    EInvoiceDocumentDTO,
    EInvoiceExporter,
    EInvoiceLineDTO,
)
from src.app.services.parties import BuyerDTO, SellerProfileDTO
from src.domain.invoice_aggregate import InvoiceAggregate
from src.domain.money import normalize_rate
from .dtos import EInvoiceExportResponseDTO
from .support import invoice_not_found, load_invoice_aggregate

# Categories whose lines must carry an exemption reason
EXEMPT_CATEGORIES = ("AE", "K")
DEFAULT_TAX_CATEGORY = "S"
NOTE_SEPARATOR = " · "


def build_document(
    aggregate: InvoiceAggregate, seller: SellerProfileDTO, buyer: BuyerDTO
) -> EInvoiceDocumentDTO:
    """
    Map an invoice, its seller and buyer onto an e-invoice document

    The tax category of every line is the buyer's invoice tax type, falling
    back to the invoice tax type and then to standard rate (S).
    """
    invoice = aggregate.invoice
    category = buyer.invoice_tax_type or invoice.tax_type or DEFAULT_TAX_CATEGORY

    note = NOTE_SEPARATOR.join(
        text.strip() for text in (invoice.opening, invoice.footer) if text and text.strip()
    )

    exemption_reasons = {}
    if invoice.exemption_reason:
        exemption_reasons = {code: invoice.exemption_reason for code in EXEMPT_CATEGORIES}

    lines = [
        EInvoiceLineDTO(
            line_id=str(p.position),
            item_name=p.text,
            billed_quantity=p.quantity,
            billed_quantity_unit=p.unit_code,
            net_price=p.net_price,
            tax_rate_applicable_percent=normalize_rate(p.tax_rate),
            total=p.line_total,
            tax_category_code=category,
        )
        for p in aggregate.positions
    ]

    return EInvoiceDocumentDTO(
        invoice_number=invoice.number,
        invoice_date=invoice.invoice_date,
        occurrence_date=invoice.occurrence_date,
        due_date=invoice.due_date,
        currency=invoice.currency,
        note=note,
        seller=seller,
        buyer=buyer,
        buyer_contact=invoice.contact_invoice,
        lines=lines,
        exemption_reasons=exemption_reasons,
        net_total=aggregate.net_total,
        gross_total=aggregate.gross_total,
    )


class ExportEInvoice:
    """
    Use Case: Export invoice as e-invoice

    Business Rules:
    1. Invoice is loaded in the owner scope
    2. Seller comes from configuration, buyer from the caller
    3. Draft totals are recomputed, issued totals are the frozen values
    4. Serialization is done by the configured exporter
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        position_repo: InvoicePositionRepository,
        exporter: EInvoiceExporter,
        seller: SellerProfileDTO,
    ):
        self.invoice_repo = invoice_repo
        self.position_repo = position_repo
        self.exporter = exporter
        self.seller = seller

    async def execute(self, invoice_id: int, owner_id: int, buyer: BuyerDTO) -> Result[EInvoiceExportResponseDTO]:
        try:
            aggregate = await load_invoice_aggregate(
                self.invoice_repo, self.position_repo, invoice_id, owner_id
            )
            if aggregate is None:
                return Return.err(invoice_not_found(invoice_id))

            document = build_document(aggregate, self.seller, buyer)
            content = self.exporter.export(document)

            return Return.ok(
                EInvoiceExportResponseDTO(
                    invoice_id=invoice_id,
                    invoice_number=document.invoice_number,
                    document=document,
                    content_base64=base64.b64encode(content).decode("utf-8"),
                )
            )

        except Exception as e:
            return Return.err(
                Error(
                    code="EXPORT_EINVOICE_FAILED",
                    message="Failed to export e-invoice",
                    reason=str(e),
                )
            )
