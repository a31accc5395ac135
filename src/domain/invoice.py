"""Invoice Domain Entity

One billing document of an owner (tenant). Line items live in
``InvoicePosition`` and are owned exclusively by their invoice.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, CheckConstraint, Date, DateTime, Enum as SAEnum, Integer, String, Text
from src.domain.base import BaseModel, ID_TYPE
from src.domain.money import money_type, ZERO


class InvoiceStatus(str, Enum):
    """Invoice status types"""
    DRAFT = "draft"
    ISSUED = "issued"
    PAID = "paid"
    VOIDED = "voided"

    @property
    def is_final(self) -> bool:
        """Paid and voided invoices accept no further transitions"""
        return self in (InvoiceStatus.PAID, InvoiceStatus.VOIDED)


class Invoice(BaseModel, table=True):
    """
    Invoice - Billing document of one owner

    Domain Rules:
    - Every read and write is scoped by owner_id
    - Status transitions: draft -> issued -> paid | voided, draft -> voided
    - net_total/gross_total are persisted only once issued (zero while draft)
    - issued_at, paid_at and voided_at are set only by their transition
    - number, counter and the frozen totals are immutable once issued
    """

    __tablename__ = "invoices"
    __table_args__ = (
        Index('ix_invoices_owner_id', 'owner_id'),
        Index('ix_invoices_owner_status', 'owner_id', 'status'),
        Index('ix_invoices_owner_company', 'owner_id', 'company_id'),
        CheckConstraint(
            "status IN ('draft', 'issued', 'paid', 'voided')",
            name='invoice_status_valid',
        ),
        {"sqlite_autoincrement": True},
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(ID_TYPE, primary_key=True, autoincrement=True),
        description="Unique invoice identifier (auto-increment)"
    )

    owner_id: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Owner (tenant) the invoice belongs to"
    )

    company_id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, nullable=True),
        description="Buyer company reference"
    )

    template_id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, nullable=True),
        description="Optional letterhead template reference"
    )

    number: str = Field(
        default="",
        sa_column=Column(String(100), nullable=False, default=""),
        description="Invoice number as printed (e.g., 2024-0042)"
    )

    counter: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Sequence value the number was derived from"
    )

    status: InvoiceStatus = Field(
        default=InvoiceStatus.DRAFT,
        sa_column=Column(
            SAEnum(
                InvoiceStatus,
                name="invoice_status",
                values_callable=lambda statuses: [s.value for s in statuses],
                native_enum=False,
                length=16,
            ),
            nullable=False,
            default=InvoiceStatus.DRAFT,
        ),
        description="Invoice status (draft, issued, paid, voided)"
    )

    currency: str = Field(
        default="EUR",
        sa_column=Column(String(3), nullable=False),
        description="Currency code (ISO 4217)"
    )

    invoice_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Issue date printed on the invoice"
    )

    due_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Payment due date"
    )

    occurrence_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Date of delivery / performance"
    )

    tax_type: str = Field(
        default="",
        sa_column=Column(String(10), nullable=False, default=""),
        description="Tax category (e.g., S, AE reverse charge, K intra-community)"
    )

    exemption_reason: str = Field(
        default="",
        sa_column=Column(Text, nullable=False, default=""),
        description="Tax exemption reason, required for AE and K"
    )

    opening: str = Field(
        default="",
        sa_column=Column(Text, nullable=False, default=""),
        description="Free text printed before the positions"
    )

    footer: str = Field(
        default="",
        sa_column=Column(Text, nullable=False, default=""),
        description="Free text printed after the positions"
    )

    contact_invoice: str = Field(
        default="",
        sa_column=Column(String(255), nullable=False, default=""),
        description="Contact person at the buyer"
    )

    order_number: str = Field(
        default="",
        sa_column=Column(String(100), nullable=False, default=""),
        description="Buyer order reference"
    )

    supplier_number: str = Field(
        default="",
        sa_column=Column(String(100), nullable=False, default=""),
        description="Our supplier number at the buyer"
    )

    tax_number: str = Field(
        default="",
        sa_column=Column(String(100), nullable=False, default=""),
        description="Buyer VAT identification number"
    )

    net_total: Decimal = Field(
        default=ZERO,
        sa_column=Column(money_type(38, 18), nullable=False, default=0),
        description="Frozen net total (zero while draft)"
    )

    gross_total: Decimal = Field(
        default=ZERO,
        sa_column=Column(money_type(38, 18), nullable=False, default=0),
        description="Frozen gross total (zero while draft)"
    )

    issued_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="Timestamp when invoice was issued"
    )

    paid_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="Timestamp when invoice was paid"
    )

    voided_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="Timestamp when invoice was voided"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Invoice creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "owner_id": 7,
                "company_id": 3,
                "number": "2024-0042",
                "counter": 42,
                "status": "issued",
                "currency": "EUR",
                "invoice_date": "2024-02-01",
                "due_date": "2024-02-15",
                "net_total": "200.00",
                "gross_total": "226.00",
                "issued_at": "2024-02-01T09:30:00Z",
                "paid_at": None,
                "voided_at": None,
            }
        }
