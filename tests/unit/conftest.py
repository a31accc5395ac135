import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_position import InvoicePosition


@pytest.fixture
def mock_uow():
    """Unit of work whose commit and rollback can be asserted"""
    uow = MagicMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    uow.apply_lock_timeout = AsyncMock()
    return uow


@pytest.fixture
def make_invoice():
    """Factory for invoice rows of owner 7"""

    def _make(invoice_id=1, status=InvoiceStatus.DRAFT, net="0", gross="0", owner_id=7, **fields):
        fields.setdefault("number", "2024-0001")
        fields.setdefault("counter", 1)
        fields.setdefault("currency", "EUR")
        return Invoice(
            id=invoice_id,
            owner_id=owner_id,
            status=status,
            net_total=Decimal(net),
            gross_total=Decimal(gross),
            created_at=datetime(2024, 1, 31, 12, 0, 0),
            updated_at=datetime(2024, 1, 31, 12, 0, 0),
            **fields,
        )

    return _make


@pytest.fixture
def make_position():
    """Factory for positions of invoice 1, owner 7"""

    def _make(index, line_total, tax_rate, invoice_id=1, owner_id=7, text=None):
        return InvoicePosition(
            id=100 + index,
            owner_id=owner_id,
            invoice_id=invoice_id,
            position=index,
            text=f"Item {index}" if text is None else text,
            unit_code="C62",
            quantity=Decimal("1"),
            net_price=Decimal(line_total),
            gross_price=Decimal(line_total),
            line_total=Decimal(line_total),
            tax_rate=Decimal(tax_rate),
        )

    return _make
