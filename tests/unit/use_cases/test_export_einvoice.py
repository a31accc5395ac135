"""Unit tests for ExportEInvoice use case"""

import base64
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.services.parties import BuyerDTO, SellerProfileDTO
from src.app.use_cases.invoicing.export_einvoice import ExportEInvoice, build_document
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_aggregate import InvoiceAggregate


@pytest.fixture
def seller():
    return SellerProfileDTO(name="Muster GmbH", country_code="DE", vat_id="DE123456789")


class TestBuildDocument:

    def test_lines_and_totals(self, make_invoice, make_position, seller):
        aggregate = InvoiceAggregate(
            make_invoice(), [make_position(1, "100", "19.00"), make_position(2, "100", "7")]
        )
        aggregate.refresh_after_load()

        document = build_document(aggregate, seller, BuyerDTO(name="Client"))

        assert document.invoice_number == "2024-0001"
        assert document.invoice_type_code == 380
        assert document.payment_means_code == 30
        assert [line.line_id for line in document.lines] == ["1", "2"]
        assert str(document.lines[0].tax_rate_applicable_percent) == "19"
        assert all(line.tax_category_code == "S" for line in document.lines)
        assert document.net_total == Decimal("200")
        assert document.gross_total == Decimal("226")

    def test_note_joins_opening_and_footer(self, make_invoice, seller):
        aggregate = InvoiceAggregate(make_invoice(opening="Hello", footer="Thanks"), [])

        assert build_document(aggregate, seller, BuyerDTO()).note == "Hello · Thanks"

    def test_note_skips_blank_texts(self, make_invoice, seller):
        aggregate = InvoiceAggregate(make_invoice(opening="  ", footer="Thanks"), [])

        assert build_document(aggregate, seller, BuyerDTO()).note == "Thanks"

    def test_buyer_tax_type_wins(self, make_invoice, make_position, seller):
        aggregate = InvoiceAggregate(
            make_invoice(tax_type="S", exemption_reason="Reverse charge"),
            [make_position(1, "100", "0")],
        )

        document = build_document(aggregate, seller, BuyerDTO(invoice_tax_type="AE"))

        assert document.lines[0].tax_category_code == "AE"
        assert document.exemption_reasons == {"AE": "Reverse charge", "K": "Reverse charge"}

    def test_issued_invoice_exports_frozen_totals(self, make_invoice, make_position, seller):
        aggregate = InvoiceAggregate(
            make_invoice(status=InvoiceStatus.ISSUED, net="100", gross="119"),
            [make_position(1, "150", "19")],
        )
        aggregate.refresh_after_load()

        document = build_document(aggregate, seller, BuyerDTO())

        assert document.net_total == Decimal("100")
        assert document.gross_total == Decimal("119")


@pytest.mark.asyncio
class TestExportEInvoice:

    async def test_export(self, make_invoice, make_position, seller):
        invoice_repo = MagicMock()
        invoice_repo.get_by_id = AsyncMock(return_value=make_invoice())
        position_repo = MagicMock()
        position_repo.get_by_invoice_id = AsyncMock(return_value=[make_position(1, "10", "19")])
        exporter = MagicMock()
        exporter.export.return_value = b"<xml/>"

        result = await ExportEInvoice(invoice_repo, position_repo, exporter, seller).execute(
            1, 7, BuyerDTO(name="Client")
        )

        assert result.is_ok()
        assert base64.b64decode(result.value.content_base64) == b"<xml/>"
        document = exporter.export.call_args[0][0]
        assert document.seller.name == "Muster GmbH"
        assert document.buyer.name == "Client"

    async def test_exporter_failure(self, make_invoice, seller):
        invoice_repo = MagicMock()
        invoice_repo.get_by_id = AsyncMock(return_value=make_invoice())
        position_repo = MagicMock()
        position_repo.get_by_invoice_id = AsyncMock(return_value=[])
        exporter = MagicMock()
        exporter.export.side_effect = ValueError("missing seller address")

        result = await ExportEInvoice(invoice_repo, position_repo, exporter, seller).execute(
            1, 7, BuyerDTO()
        )

        assert result.is_err()
        assert result.error.code == "EXPORT_EINVOICE_FAILED"
