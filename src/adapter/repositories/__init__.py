from .invoice_repository import SqlAlchemyInvoiceRepository
from .invoice_position_repository import SqlAlchemyInvoicePositionRepository

__all__ = [
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyInvoicePositionRepository",
]
