"""GenerateProforma Use Case

Generates a proforma invoice PDF for preview purposes.
"""

import base64
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_position_repository import InvoicePositionRepository
from src.app.services.parties import SellerProfileDTO
from src.app.services.pdf_service import PdfService
from src.domain.money import round_money
from .dtos import InvoiceResponseDTO, ProformaInvoiceResponseDTO
from .support import invoice_not_found, load_invoice_aggregate


class GenerateProforma:
    """
    Use Case: Generate proforma invoice PDF

    Business Rules:
    1. Invoice must exist in the owner scope
    2. Invoice must have status=draft (proforma is for preview)
    3. Totals and tax buckets are recomputed from the current positions
    4. Amounts are rounded once, for presentation only
    5. Returns PDF as base64-encoded string

    Flow:
    1. Load invoice with positions (draft totals recomputed)
    2. Validate invoice status is draft
    3. Generate PDF using PDF service
    4. Return response with PDF as base64
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        position_repo: InvoicePositionRepository,
        pdf_service: PdfService,
        seller: SellerProfileDTO,
        decimal_places: int = 2,
    ):
        self.invoice_repo = invoice_repo
        self.position_repo = position_repo
        self.pdf_service = pdf_service
        self.seller = seller
        self.decimal_places = decimal_places

    async def execute(self, invoice_id: int, owner_id: int) -> Result[ProformaInvoiceResponseDTO]:
        """
        Execute proforma invoice generation

        Args:
            invoice_id: Invoice ID to generate proforma for
            owner_id: Owner scope of the caller

        Returns:
            Result[ProformaInvoiceResponseDTO]: Success with PDF or error
        """
        try:
            # Step 1: Load invoice
            aggregate = await load_invoice_aggregate(
                self.invoice_repo, self.position_repo, invoice_id, owner_id
            )
            if aggregate is None:
                return Return.err(invoice_not_found(invoice_id))

            # Step 2: Validate status is draft
            if not aggregate.is_draft:
                return Return.err(
                    Error(
                        code="INVALID_INVOICE_STATUS",
                        message=f"Proforma can only be generated for draft invoices. "
                                f"Current status: {aggregate.status.value}",
                        reason="Only draft invoices support proforma generation",
                    )
                )

            # Step 3: Generate PDF
            pdf_bytes = self.pdf_service.generate_proforma_invoice(
                aggregate=aggregate,
                seller=self.seller,
                decimal_places=self.decimal_places,
            )
            pdf_base64 = base64.b64encode(pdf_bytes).decode("utf-8")

            # Step 4: Build response
            invoice = InvoiceResponseDTO.from_aggregate(aggregate)
            places = self.decimal_places
            response = ProformaInvoiceResponseDTO(
                invoice_id=invoice.invoice_id,
                number=invoice.number,
                status=invoice.status,
                currency=invoice.currency,
                net_total=round_money(invoice.net_total, places),
                gross_total=round_money(invoice.gross_total, places),
                tax_amounts=[
                    t.model_copy(update={"amount": round_money(t.amount, places)})
                    for t in invoice.tax_amounts
                ],
                positions=invoice.positions,
                pdf_base64=pdf_base64,
                generated_at=datetime.utcnow(),
            )

            return Return.ok(response)

        except Exception as e:
            return Return.err(
                Error(
                    code="GENERATE_PROFORMA_FAILED",
                    message="Failed to generate proforma invoice",
                    reason=str(e),
                )
            )
