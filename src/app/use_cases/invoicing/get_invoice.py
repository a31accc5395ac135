"""GetInvoice Use Case

Loads one invoice with its positions inside the owner scope.
"""

from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_position_repository import InvoicePositionRepository
from .dtos import InvoiceResponseDTO
from .support import invoice_not_found, load_invoice_aggregate


class GetInvoice:
    """
    Use Case: Load invoice

    Business Rules:
    1. Invoice and positions are filtered by owner
    2. Draft totals are recomputed from the current positions on every load
    3. Issued, paid and voided invoices return their frozen totals
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        position_repo: InvoicePositionRepository,
    ):
        self.invoice_repo = invoice_repo
        self.position_repo = position_repo

    async def execute(self, invoice_id: int, owner_id: int) -> Result[InvoiceResponseDTO]:
        try:
            aggregate = await load_invoice_aggregate(
                self.invoice_repo, self.position_repo, invoice_id, owner_id
            )
            if aggregate is None:
                return Return.err(invoice_not_found(invoice_id))

            return Return.ok(InvoiceResponseDTO.from_aggregate(aggregate))

        except Exception as e:
            return Return.err(
                Error(
                    code="GET_INVOICE_FAILED",
                    message="Failed to load invoice",
                    reason=str(e),
                )
            )
