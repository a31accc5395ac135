"""RevertInvoiceToDraft Use Case

Rolls an issued invoice back to draft so its content can be edited again.
"""

import logging
from datetime import datetime
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_lifecycle import TransitionVerdict, evaluate_rollback, rollback_updates
from .dtos import InvoiceStatusResponseDTO
from .support import concurrent_change, invoice_not_found
from .transaction import run_in_transaction

logger = logging.getLogger(__name__)


class RevertInvoiceToDraft:
    """
    Use Case: Roll an issued invoice back to draft

    Business Rules:
    1. Only issued invoices are rolled back; drafts are returned unchanged
    2. Paid and voided invoices are terminal (INVALID_STATUS_TRANSITION)
    3. issued_at is cleared and the frozen totals are reset to zero, so the
       draft is recomputed from its positions again
    4. The write is guarded by the status read under the lock
    """

    def __init__(self, uow: UnitOfWork, invoice_repo: InvoiceRepository):
        self.uow = uow
        self.invoice_repo = invoice_repo

    async def execute(
        self,
        invoice_id: int,
        owner_id: int,
        at: Optional[datetime] = None,
        timeout: Optional[float] = None,
    ) -> Result[InvoiceStatusResponseDTO]:

        async def operation() -> Result[InvoiceStatusResponseDTO]:
            await self.uow.apply_lock_timeout()

            invoice = await self.invoice_repo.get_by_id(invoice_id, owner_id, for_update=True)
            if invoice is None:
                return Return.err(invoice_not_found(invoice_id))

            current = InvoiceStatus(invoice.status)
            verdict = evaluate_rollback(current)

            if verdict == TransitionVerdict.UNCHANGED:
                return Return.ok(
                    InvoiceStatusResponseDTO(
                        invoice_id=invoice_id,
                        status=current.value,
                        issued_at=invoice.issued_at,
                        paid_at=invoice.paid_at,
                        voided_at=invoice.voided_at,
                        net_total=invoice.net_total,
                        gross_total=invoice.gross_total,
                    )
                )
            if verdict != TransitionVerdict.ALLOWED:
                return Return.err(
                    Error(
                        code="INVALID_STATUS_TRANSITION",
                        message=f"Cannot change invoice status from {current.value} to draft",
                        reason="Paid and voided invoices cannot be rolled back",
                    )
                )

            updates = rollback_updates(at or datetime.utcnow())
            updated = await self.invoice_repo.update_fields(
                invoice_id, owner_id, updates, expected_status=current
            )
            if updated == 0:
                return Return.err(concurrent_change(invoice_id, current))
            logger.info(f"Invoice {invoice_id} of owner {owner_id} rolled back to draft")

            return Return.ok(
                InvoiceStatusResponseDTO(
                    invoice_id=invoice_id,
                    status=InvoiceStatus.DRAFT.value,
                    issued_at=None,
                    paid_at=invoice.paid_at,
                    voided_at=invoice.voided_at,
                    net_total=updates["net_total"],
                    gross_total=updates["gross_total"],
                )
            )

        return await run_in_transaction(
            self.uow,
            operation,
            failure_code="REVERT_INVOICE_FAILED",
            failure_message="Failed to roll invoice back to draft",
            timeout=timeout,
        )
