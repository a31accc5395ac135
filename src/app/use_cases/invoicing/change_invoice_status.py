"""ChangeInvoiceStatus Use Case

Lifecycle controller for draft -> issued -> paid | voided.
"""

import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_position_repository import InvoicePositionRepository
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_lifecycle import (
    TransitionVerdict,
    evaluate_transition,
    forbidden_reason,
    transition_updates,
)
from src.domain.tax import compute_totals
from .dtos import ChangeInvoiceStatusCommandDTO, InvoiceStatusResponseDTO
from .support import concurrent_change, invoice_not_found
from .transaction import run_in_transaction

logger = logging.getLogger(__name__)


class ChangeInvoiceStatus:
    """
    Use Case: Change invoice status

    Business Rules:
    1. The invoice row is locked before the transition is evaluated, so
       concurrent transitions on the same invoice are serialized
    2. Only pairs in the transition table are accepted; paid -> voided is
       reported as forbidden, everything else outside the table as invalid
    3. Issuing recomputes the totals from the positions read under the lock
       and persists them together with issued_at in the same write
    4. Each transition sets its own timestamp exactly once
    5. The write only applies while the row still has the status read under
       the lock; otherwise, and on lock wait timeouts or deadlocks, the
       result is CONCURRENCY_CONFLICT and nothing is retried

    Flow:
    1. Bound the lock wait for this transaction
    2. Lock the invoice row (owner scoped)
    3. Validate the transition against the status read under the lock
    4. When issuing, aggregate the positions into frozen totals
    5. Write status, timestamp and totals in one owner and status scoped update
    6. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        position_repo: InvoicePositionRepository,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.position_repo = position_repo

    async def execute(
        self, command: ChangeInvoiceStatusCommandDTO, timeout: Optional[float] = None
    ) -> Result[InvoiceStatusResponseDTO]:
        """
        Execute status transition

        Args:
            command: Invoice, owner scope, target status and timestamp
            timeout: Transaction deadline in seconds

        Returns:
            Result[InvoiceStatusResponseDTO]: New status and totals or error
        """

        async def operation() -> Result[InvoiceStatusResponseDTO]:
            # Step 1: Bound the lock wait
            await self.uow.apply_lock_timeout()

            # Step 2: Lock the row
            invoice = await self.invoice_repo.get_by_id(
                command.invoice_id, command.owner_id, for_update=True
            )
            if invoice is None:
                return Return.err(invoice_not_found(command.invoice_id))

            # Step 3: Validate under the lock
            current = InvoiceStatus(invoice.status)
            target = command.target_status
            verdict = evaluate_transition(current, target)

            if verdict == TransitionVerdict.FORBIDDEN:
                return Return.err(
                    Error(
                        code="FORBIDDEN_STATUS_TRANSITION",
                        message=f"Cannot change invoice status from {current.value} to {target.value}",
                        reason=forbidden_reason(current, target),
                    )
                )
            if verdict != TransitionVerdict.ALLOWED:
                return Return.err(
                    Error(
                        code="INVALID_STATUS_TRANSITION",
                        message=f"Cannot change invoice status from {current.value} to {target.value}",
                        reason="Status pair is not in the transition table",
                    )
                )

            # Step 4: Freeze totals when issuing
            totals = None
            if target == InvoiceStatus.ISSUED:
                positions = await self.position_repo.get_by_invoice_id(
                    command.invoice_id, command.owner_id
                )
                totals = compute_totals(positions)

            # Step 5: Persist
            updates = transition_updates(current, target, command.at, totals)
            updated = await self.invoice_repo.update_fields(
                command.invoice_id, command.owner_id, updates, expected_status=current
            )
            if updated == 0:
                logger.warning(
                    f"Invoice {command.invoice_id} left status {current.value} before "
                    f"the transition to {target.value} was written"
                )
                return Return.err(concurrent_change(command.invoice_id, current))

            logger.info(
                f"Invoice {command.invoice_id} of owner {command.owner_id}: "
                f"{current.value} -> {target.value}"
            )

            return Return.ok(
                InvoiceStatusResponseDTO(
                    invoice_id=command.invoice_id,
                    status=target.value,
                    issued_at=updates.get("issued_at", invoice.issued_at),
                    paid_at=updates.get("paid_at", invoice.paid_at),
                    voided_at=updates.get("voided_at", invoice.voided_at),
                    net_total=updates.get("net_total", invoice.net_total),
                    gross_total=updates.get("gross_total", invoice.gross_total),
                )
            )

        return await run_in_transaction(
            self.uow,
            operation,
            failure_code="CHANGE_INVOICE_STATUS_FAILED",
            failure_message="Failed to change invoice status",
            timeout=timeout,
        )
