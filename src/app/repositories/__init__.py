from .invoice_repository import InvoiceRepository, InvoiceFilter
from .invoice_position_repository import InvoicePositionRepository

__all__ = [
    "InvoiceRepository",
    "InvoiceFilter",
    "InvoicePositionRepository",
]
