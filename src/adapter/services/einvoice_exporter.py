"""JSON E-Invoice Exporter

Writes the e-invoice document as JSON. Used where no standards serializer
is wired in, and as an inspection format for the values handed over.
"""

from src.app.services.einvoice_exporter import EInvoiceDocumentDTO, EInvoiceExporter


class JsonEInvoiceExporter(EInvoiceExporter):

    def export(self, document: EInvoiceDocumentDTO) -> bytes:
        return document.model_dump_json(indent=2).encode("utf-8")
