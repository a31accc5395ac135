"""Invoicing use cases"""
from .save_invoice import SaveInvoice
from .get_invoice import GetInvoice
from .list_invoices import ListInvoices
from .delete_invoice import DeleteInvoice
from .change_invoice_status import ChangeInvoiceStatus
from .revert_invoice_to_draft import RevertInvoiceToDraft
from .duplicate_invoice import DuplicateInvoice
from .verify_invoice import VerifyInvoice
from .generate_proforma import GenerateProforma
from .export_einvoice import ExportEInvoice
from .dtos import (
    InvoicePositionDTO,
    InvoiceContentDTO,
    TaxAmountDTO,
    InvoicePositionResponseDTO,
    InvoiceResponseDTO,
    InvoiceSummaryDTO,
    ListInvoicesQueryDTO,
    InvoiceListResponseDTO,
    ChangeInvoiceStatusCommandDTO,
    InvoiceStatusResponseDTO,
    InvoiceProblemDTO,
    VerifyInvoiceResponseDTO,
    ProformaInvoiceResponseDTO,
    EInvoiceExportResponseDTO,
)

__all__ = [
    "SaveInvoice",
    "GetInvoice",
    "ListInvoices",
    "DeleteInvoice",
    "ChangeInvoiceStatus",
    "RevertInvoiceToDraft",
    "DuplicateInvoice",
    "VerifyInvoice",
    "GenerateProforma",
    "ExportEInvoice",
    "InvoicePositionDTO",
    "InvoiceContentDTO",
    "TaxAmountDTO",
    "InvoicePositionResponseDTO",
    "InvoiceResponseDTO",
    "InvoiceSummaryDTO",
    "ListInvoicesQueryDTO",
    "InvoiceListResponseDTO",
    "ChangeInvoiceStatusCommandDTO",
    "InvoiceStatusResponseDTO",
    "InvoiceProblemDTO",
    "VerifyInvoiceResponseDTO",
    "ProformaInvoiceResponseDTO",
    "EInvoiceExportResponseDTO",
]
