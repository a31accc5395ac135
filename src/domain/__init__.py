from .base import BaseModel
from .invoice import Invoice, InvoiceStatus
from .invoice_position import InvoicePosition
from .invoice_aggregate import InvoiceAggregate
from .tax import TaxAmount, InvoiceTotals, compute_totals
from .invoice_lifecycle import TransitionVerdict, evaluate_transition, evaluate_rollback
from .invoice_number import InvoiceNumbering, format_invoice_number

__all__ = [
    "BaseModel",
    "Invoice",
    "InvoiceStatus",
    "InvoicePosition",
    "InvoiceAggregate",
    "TaxAmount",
    "InvoiceTotals",
    "compute_totals",
    "TransitionVerdict",
    "evaluate_transition",
    "evaluate_rollback",
    "InvoiceNumbering",
    "format_invoice_number",
]
