"""Invoice lifecycle state machine

The transition table is checked before any side effect runs.

    draft  -> issued | voided
    issued -> paid   | voided
    issued -> draft  (rollback operation only)
    paid, voided     (terminal)
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional
from src.domain.invoice import InvoiceStatus
from src.domain.tax import InvoiceTotals


class TransitionVerdict(str, Enum):
    ALLOWED = "allowed"
    UNCHANGED = "unchanged"
    INVALID = "invalid"
    FORBIDDEN = "forbidden"


# (from, to) -> timestamp column set by the transition
TRANSITIONS: Dict[tuple, str] = {
    (InvoiceStatus.DRAFT, InvoiceStatus.ISSUED): "issued_at",
    (InvoiceStatus.ISSUED, InvoiceStatus.PAID): "paid_at",
    (InvoiceStatus.DRAFT, InvoiceStatus.VOIDED): "voided_at",
    (InvoiceStatus.ISSUED, InvoiceStatus.VOIDED): "voided_at",
}

# Reported separately from invalid transitions so callers can explain them
FORBIDDEN_TRANSITIONS: Dict[tuple, str] = {
    (InvoiceStatus.PAID, InvoiceStatus.VOIDED): "paid invoices cannot be voided",
}


def evaluate_transition(current: InvoiceStatus, target: InvoiceStatus) -> TransitionVerdict:
    """Classify a status change requested through the generic transition path"""
    key = (InvoiceStatus(current), InvoiceStatus(target))
    if key in FORBIDDEN_TRANSITIONS:
        return TransitionVerdict.FORBIDDEN
    if key in TRANSITIONS:
        return TransitionVerdict.ALLOWED
    return TransitionVerdict.INVALID


def evaluate_rollback(current: InvoiceStatus) -> TransitionVerdict:
    """Classify an issued -> draft rollback; draft -> draft is a no-op"""
    current = InvoiceStatus(current)
    if current == InvoiceStatus.ISSUED:
        return TransitionVerdict.ALLOWED
    if current == InvoiceStatus.DRAFT:
        return TransitionVerdict.UNCHANGED
    return TransitionVerdict.INVALID


def forbidden_reason(current: InvoiceStatus, target: InvoiceStatus) -> Optional[str]:
    return FORBIDDEN_TRANSITIONS.get((InvoiceStatus(current), InvoiceStatus(target)))


def transition_updates(
    current: InvoiceStatus,
    target: InvoiceStatus,
    at: datetime,
    totals: Optional[InvoiceTotals] = None,
) -> Dict[str, Any]:
    """
    Column values written together with an allowed transition

    Args:
        current: Status read under the row lock
        target: Requested status
        at: Transition timestamp
        totals: Fresh aggregation of the positions, required when issuing

    Raises:
        ValueError: transition not in the table, or issuing without totals
    """
    key = (InvoiceStatus(current), InvoiceStatus(target))
    if key not in TRANSITIONS:
        raise ValueError(f"invalid status transition {key[0].value!r} -> {key[1].value!r}")

    updates: Dict[str, Any] = {"status": key[1], TRANSITIONS[key]: at, "updated_at": at}
    if key[1] == InvoiceStatus.ISSUED:
        if totals is None:
            raise ValueError("issuing an invoice requires freshly computed totals")
        updates["net_total"] = totals.net_total
        updates["gross_total"] = totals.gross_total
    return updates


def rollback_updates(at: datetime) -> Dict[str, Any]:
    """Column values written when an issued invoice returns to draft"""
    return {
        "status": InvoiceStatus.DRAFT,
        "issued_at": None,
        "net_total": Decimal("0"),
        "gross_total": Decimal("0"),
        "updated_at": at,
    }
