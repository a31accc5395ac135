"""Unit tests for SaveInvoice use case

Tests cover:
- New invoices are inserted as drafts with counter and number
- Ownership violations are rejected before any write
- Whitelisted update with wholesale position replacement
- Paid, voided and (by default) issued invoices are not editable
- Issued invoices keep their positions; stale status writes conflict
- Failures roll back the whole transaction
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.invoicing.dtos import InvoiceContentDTO, InvoicePositionDTO
from src.app.use_cases.invoicing.save_invoice import SaveInvoice
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_aggregate import InvoiceAggregate
from src.domain.invoice_number import InvoiceNumbering


@pytest.fixture
def mock_invoice_repo():
    """Mock invoice repository; create assigns ID 1"""
    async def create(invoice):
        invoice.id = 1
        return invoice

    repo = MagicMock()
    repo.create = AsyncMock(side_effect=create)
    return repo


@pytest.fixture
def mock_position_repo():
    """Mock position repository; create_many returns what it gets"""
    repo = MagicMock()
    repo.create_many = AsyncMock(side_effect=lambda positions: positions)
    repo.delete_by_invoice_id = AsyncMock(return_value=2)
    return repo


@pytest.fixture
def save_use_case(mock_uow, mock_invoice_repo, mock_position_repo):
    return SaveInvoice(
        uow=mock_uow,
        invoice_repo=mock_invoice_repo,
        position_repo=mock_position_repo,
        numbering=InvoiceNumbering(template="%YYYY%-%04C%"),
    )


@pytest.fixture
def content():
    return InvoiceContentDTO(
        company_id=12,
        currency="eur",
        opening="Thank you for your order",
        positions=[
            InvoicePositionDTO(text="Consulting", quantity="1", tax_rate="19", net_price="100"),
            InvoicePositionDTO(text="Book", quantity="2", tax_rate="7", net_price="50"),
        ],
    )


@pytest.mark.asyncio
class TestSaveNewInvoice:

    async def test_insert_assigns_counter_and_number(
        self, save_use_case, mock_invoice_repo, mock_position_repo, mock_uow, content
    ):
        """
        Given: A new invoice without number and counter
        When: SaveInvoice is executed
        Then: Draft is created with max counter + 1, formatted number and positions
        """
        # Arrange
        mock_invoice_repo.get_max_counter = AsyncMock(return_value=41)

        # Act
        result = await save_use_case.execute(
            content.to_aggregate(owner_id=7), owner_id=7, today=date(2024, 3, 5)
        )

        # Assert
        assert result.is_ok()
        response = result.value
        assert response.invoice_id == 1
        assert response.counter == 42
        assert response.number == "2024-0042"
        assert response.status == "draft"
        assert response.currency == "EUR"
        assert response.net_total == Decimal("200")
        assert response.gross_total == Decimal("226")
        assert [(t.rate, t.amount) for t in response.tax_amounts] == [
            (Decimal("7"), Decimal("7")),
            (Decimal("19"), Decimal("19")),
        ]

        mock_invoice_repo.get_max_counter.assert_awaited_once_with(7, None)
        created = mock_invoice_repo.create.call_args[0][0]
        assert created.net_total == Decimal("0")
        assert created.gross_total == Decimal("0")

        positions = mock_position_repo.create_many.call_args[0][0]
        assert [p.position for p in positions] == [1, 2]
        assert all(p.invoice_id == 1 and p.owner_id == 7 for p in positions)
        mock_uow.commit.assert_awaited_once()

    async def test_insert_keeps_given_number(
        self, save_use_case, mock_invoice_repo, mock_uow
    ):
        mock_invoice_repo.get_max_counter = AsyncMock(return_value=0)
        aggregate = InvoiceContentDTO(number="X-1", counter=5).to_aggregate(owner_id=7)

        result = await save_use_case.execute(aggregate, owner_id=7)

        assert result.is_ok()
        assert result.value.number == "X-1"
        assert result.value.counter == 5
        mock_invoice_repo.get_max_counter.assert_not_called()

    async def test_insert_ignores_status_from_caller(
        self, save_use_case, mock_invoice_repo, content
    ):
        mock_invoice_repo.get_max_counter = AsyncMock(return_value=0)
        aggregate = content.to_aggregate(owner_id=7)
        aggregate.invoice.status = InvoiceStatus.PAID

        await save_use_case.execute(aggregate, owner_id=7)

        created = mock_invoice_repo.create.call_args[0][0]
        assert created.status == InvoiceStatus.DRAFT
        assert created.paid_at is None


@pytest.mark.asyncio
class TestSaveOwnership:

    async def test_foreign_owner_is_rejected(
        self, save_use_case, mock_invoice_repo, mock_position_repo, mock_uow, content
    ):
        """
        Given: Aggregate of owner 7
        When: Saved in the scope of owner 8
        Then: OWNERSHIP_VIOLATION and nothing is written
        """
        mock_invoice_repo.get_by_id = AsyncMock()

        result = await save_use_case.execute(content.to_aggregate(owner_id=7, invoice_id=1), owner_id=8)

        assert result.is_err()
        assert result.error.code == "OWNERSHIP_VIOLATION"
        mock_invoice_repo.get_by_id.assert_not_called()
        mock_position_repo.create_many.assert_not_called()
        mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
class TestSaveExistingInvoice:

    async def test_update_draft_replaces_positions(
        self, save_use_case, mock_invoice_repo, mock_position_repo, mock_uow, content, make_invoice
    ):
        # Arrange
        current = make_invoice()
        mock_invoice_repo.get_by_id = AsyncMock(side_effect=[current, current])
        mock_invoice_repo.update_fields = AsyncMock(return_value=1)

        # Act
        result = await save_use_case.execute(content.to_aggregate(owner_id=7, invoice_id=1), owner_id=7)

        # Assert
        assert result.is_ok()
        mock_invoice_repo.get_by_id.assert_any_await(1, 7, for_update=True)

        invoice_id, owner_id, fields = mock_invoice_repo.update_fields.call_args[0]
        assert (invoice_id, owner_id) == (1, 7)
        assert fields["company_id"] == 12
        assert fields["opening"] == "Thank you for your order"
        assert fields["net_total"] == Decimal("0")
        assert fields["gross_total"] == Decimal("0")
        assert "status" not in fields
        assert "owner_id" not in fields
        assert "issued_at" not in fields

        mock_position_repo.delete_by_invoice_id.assert_awaited_once_with(1, 7)
        positions = mock_position_repo.create_many.call_args[0][0]
        assert len(positions) == 2
        assert all(p.id is None for p in positions)

        assert result.value.net_total == Decimal("200")
        assert result.value.gross_total == Decimal("226")
        mock_uow.commit.assert_awaited_once()

    async def test_update_with_no_positions_deletes_all(
        self, save_use_case, mock_invoice_repo, mock_position_repo, make_invoice
    ):
        current = make_invoice()
        mock_invoice_repo.get_by_id = AsyncMock(side_effect=[current, current])
        mock_invoice_repo.update_fields = AsyncMock(return_value=1)

        result = await save_use_case.execute(
            InvoiceContentDTO().to_aggregate(owner_id=7, invoice_id=1), owner_id=7
        )

        assert result.is_ok()
        mock_position_repo.delete_by_invoice_id.assert_awaited_once_with(1, 7)
        assert mock_position_repo.create_many.call_args[0][0] == []
        assert result.value.net_total == Decimal("0")
        assert result.value.tax_amounts == []

    async def test_draft_update_without_number_keeps_numbering(
        self, save_use_case, mock_invoice_repo, make_invoice
    ):
        current = make_invoice()
        mock_invoice_repo.get_by_id = AsyncMock(return_value=current)
        mock_invoice_repo.update_fields = AsyncMock(return_value=1)

        await save_use_case.execute(InvoiceContentDTO().to_aggregate(owner_id=7, invoice_id=1), owner_id=7)
        fields = mock_invoice_repo.update_fields.call_args[0][2]
        assert "number" not in fields
        assert "counter" not in fields

        await save_use_case.execute(
            InvoiceContentDTO(number="R-9", counter=9).to_aggregate(owner_id=7, invoice_id=1), owner_id=7
        )
        fields = mock_invoice_repo.update_fields.call_args[0][2]
        assert fields["number"] == "R-9"
        assert fields["counter"] == 9

    async def test_missing_invoice_is_not_found(
        self, save_use_case, mock_invoice_repo, mock_uow, content
    ):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=None)
        mock_invoice_repo.update_fields = AsyncMock()

        result = await save_use_case.execute(content.to_aggregate(owner_id=7, invoice_id=99), owner_id=7)

        assert result.is_err()
        assert result.error.code == "INVOICE_NOT_FOUND"
        mock_invoice_repo.update_fields.assert_not_called()
        mock_uow.rollback.assert_awaited()

    @pytest.mark.parametrize("status", [InvoiceStatus.ISSUED, InvoiceStatus.PAID, InvoiceStatus.VOIDED])
    async def test_non_draft_is_not_editable(
        self, save_use_case, mock_invoice_repo, mock_position_repo, mock_uow, content, make_invoice, status
    ):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice(status=status))
        mock_invoice_repo.update_fields = AsyncMock()

        result = await save_use_case.execute(content.to_aggregate(owner_id=7, invoice_id=1), owner_id=7)

        assert result.is_err()
        assert result.error.code == "INVOICE_NOT_EDITABLE"
        mock_invoice_repo.update_fields.assert_not_called()
        mock_position_repo.delete_by_invoice_id.assert_not_called()
        mock_uow.commit.assert_not_called()

    async def test_issued_update_persists_in_memory_totals(
        self, save_use_case, mock_invoice_repo, mock_position_repo, make_invoice, make_position
    ):
        """
        Given: An issued invoice and require_draft=False
        When: Saved
        Then: The aggregate totals are written as they are; number stays
        """
        current = make_invoice(status=InvoiceStatus.ISSUED, net="100", gross="119")
        mock_invoice_repo.get_by_id = AsyncMock(side_effect=[current, current])
        mock_invoice_repo.update_fields = AsyncMock(return_value=1)
        mock_position_repo.get_by_invoice_id = AsyncMock(return_value=[make_position(1, "100", "19")])

        aggregate = InvoiceAggregate(
            make_invoice(status=InvoiceStatus.ISSUED, net="100", gross="119", number="changed"),
            [make_position(1, "100", "19")],
        )

        result = await save_use_case.execute(aggregate, owner_id=7, require_draft=False)

        assert result.is_ok()
        fields = mock_invoice_repo.update_fields.call_args[0][2]
        assert fields["net_total"] == Decimal("100")
        assert fields["gross_total"] == Decimal("119")
        assert "number" not in fields
        assert mock_invoice_repo.update_fields.call_args.kwargs["expected_status"] == InvoiceStatus.ISSUED
        mock_position_repo.delete_by_invoice_id.assert_not_called()
        mock_position_repo.create_many.assert_not_called()
        assert result.value.gross_total == Decimal("119")

    async def test_issued_positions_cannot_change(
        self, save_use_case, mock_invoice_repo, mock_position_repo, mock_uow, make_invoice, make_position
    ):
        """
        Given: An issued invoice whose stored positions back its frozen totals
        When: Saved with require_draft=False and a different position set
        Then: INVOICE_POSITIONS_FROZEN; no row and no position is written
        """
        current = make_invoice(status=InvoiceStatus.ISSUED, net="100", gross="119")
        mock_invoice_repo.get_by_id = AsyncMock(return_value=current)
        mock_invoice_repo.update_fields = AsyncMock(return_value=1)
        mock_position_repo.get_by_invoice_id = AsyncMock(return_value=[make_position(1, "100", "19")])

        aggregate = InvoiceAggregate(
            make_invoice(status=InvoiceStatus.ISSUED, net="100", gross="119"),
            [make_position(1, "500", "7")],
        )

        result = await save_use_case.execute(aggregate, owner_id=7, require_draft=False)

        assert result.is_err()
        assert result.error.code == "INVOICE_POSITIONS_FROZEN"
        mock_position_repo.get_by_invoice_id.assert_awaited_once_with(1, 7)
        mock_invoice_repo.update_fields.assert_not_called()
        mock_position_repo.delete_by_invoice_id.assert_not_called()
        mock_position_repo.create_many.assert_not_called()
        mock_uow.rollback.assert_awaited()
        mock_uow.commit.assert_not_called()

    async def test_status_changed_before_write_is_a_conflict(
        self, save_use_case, mock_invoice_repo, mock_position_repo, mock_uow, content, make_invoice
    ):
        """
        Given: A draft that is issued between the read and the guarded update
        When: SaveInvoice is executed
        Then: CONCURRENCY_CONFLICT and the positions are left alone
        """
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice())
        mock_invoice_repo.update_fields = AsyncMock(return_value=0)

        result = await save_use_case.execute(content.to_aggregate(owner_id=7, invoice_id=1), owner_id=7)

        assert result.is_err()
        assert result.error.code == "CONCURRENCY_CONFLICT"
        assert mock_invoice_repo.update_fields.call_args.kwargs["expected_status"] == InvoiceStatus.DRAFT
        mock_position_repo.delete_by_invoice_id.assert_not_called()
        mock_position_repo.create_many.assert_not_called()
        mock_uow.rollback.assert_awaited()
        mock_uow.commit.assert_not_called()

    async def test_failure_rolls_back(
        self, save_use_case, mock_invoice_repo, mock_position_repo, mock_uow, content, make_invoice
    ):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=make_invoice())
        mock_invoice_repo.update_fields = AsyncMock(return_value=1)
        mock_position_repo.create_many = AsyncMock(side_effect=Exception("disk full"))

        result = await save_use_case.execute(content.to_aggregate(owner_id=7, invoice_id=1), owner_id=7)

        assert result.is_err()
        assert result.error.code == "SAVE_INVOICE_FAILED"
        assert "disk full" in result.error.reason
        mock_uow.rollback.assert_awaited()
        mock_uow.commit.assert_not_called()


class TestPositionLineTotal:

    def test_line_total_is_exact_for_long_amounts(self):
        """
        Given: Quantity and price whose product needs more than 28 digits
        When: The position is built without an explicit line total
        Then: The line total keeps every digit
        """
        dto = InvoicePositionDTO(
            text="Metered usage", quantity="1.000000000000001", tax_rate="19", net_price="1.000000000000001"
        )

        position = dto.to_position(owner_id=7, position=1)

        assert position.line_total == Decimal("1.000000000000002000000000000001")

    def test_explicit_line_total_wins(self):
        dto = InvoicePositionDTO(quantity="3", net_price="10", tax_rate="19", line_total="25")

        assert dto.to_position(owner_id=7, position=1).line_total == Decimal("25")
