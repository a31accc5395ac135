from .unit_of_work import SqlAlchemyUnitOfWork
from .pdf_service import ReportLabPdfService
from .einvoice_exporter import JsonEInvoiceExporter

__all__ = [
    "SqlAlchemyUnitOfWork",
    "ReportLabPdfService",
    "JsonEInvoiceExporter",
]
