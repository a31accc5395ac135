from .unit_of_work import UnitOfWork
from .parties import SellerProfileDTO, BuyerDTO
from .pdf_service import PdfService
from .einvoice_exporter import EInvoiceExporter, EInvoiceDocumentDTO, EInvoiceLineDTO

__all__ = [
    "UnitOfWork",
    "SellerProfileDTO",
    "BuyerDTO",
    "PdfService",
    "EInvoiceExporter",
    "EInvoiceDocumentDTO",
    "EInvoiceLineDTO",
]
