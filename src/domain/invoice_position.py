"""Invoice Position Domain Entity

One billed line of an invoice.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, ForeignKey, Integer, String, Text
from src.domain.base import BaseModel, ID_TYPE
from src.domain.money import money_type, ZERO


class InvoicePosition(BaseModel, table=True):
    """
    Invoice Position - Line item within an invoice

    Domain Rules:
    - Belongs to exactly one invoice and carries the same owner_id
    - line_total is the net extended amount of the line, independent of tax
    - tax_rate is a percentage (19.00 means 19 %)
    - Positions are replaced wholesale on every save; ids are not stable
    """

    __tablename__ = "invoice_positions"
    __table_args__ = (
        Index('ix_invoice_positions_invoice_owner', 'invoice_id', 'owner_id'),
        # Never reuse ids of replaced positions
        {"sqlite_autoincrement": True},
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(ID_TYPE, primary_key=True, autoincrement=True),
        description="Unique position identifier (auto-increment)"
    )

    owner_id: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Owner (tenant); always equal to the invoice owner"
    )

    invoice_id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Invoice"
    )

    position: int = Field(
        default=1,
        sa_column=Column(Integer, nullable=False),
        description="1-based ordinal within the invoice"
    )

    text: str = Field(
        default="",
        sa_column=Column(Text, nullable=False, default=""),
        description="Item description"
    )

    unit_code: str = Field(
        default="",
        sa_column=Column(String(10), nullable=False, default=""),
        description="UN/ECE unit code (e.g., HUR, C62)"
    )

    quantity: Decimal = Field(
        default=ZERO,
        sa_column=Column(money_type(), nullable=False),
        description="Billed quantity"
    )

    tax_rate: Decimal = Field(
        default=ZERO,
        sa_column=Column(money_type(), nullable=False),
        description="Tax rate in percent"
    )

    net_price: Decimal = Field(
        default=ZERO,
        sa_column=Column(money_type(), nullable=False),
        description="Net price per unit"
    )

    gross_price: Decimal = Field(
        default=ZERO,
        sa_column=Column(money_type(), nullable=False),
        description="Gross price per unit"
    )

    line_total: Decimal = Field(
        default=ZERO,
        sa_column=Column(money_type(), nullable=False),
        description="Net extended amount of the line"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Position creation timestamp"
    )

    def copy_for(self, invoice_id: Optional[int], owner_id: int, position: int) -> "InvoicePosition":
        """Fresh, unsaved copy stamped with the given invoice, owner and ordinal"""
        return InvoicePosition(
            owner_id=owner_id,
            invoice_id=invoice_id,
            position=position,
            text=self.text,
            unit_code=self.unit_code,
            quantity=self.quantity,
            tax_rate=self.tax_rate,
            net_price=self.net_price,
            gross_price=self.gross_price,
            line_total=self.line_total,
        )

    def content_key(self) -> tuple:
        """Everything that is printed on the invoice; ids are not part of it"""
        return (
            self.position,
            self.text or "",
            self.unit_code or "",
            self.quantity,
            self.tax_rate,
            self.net_price,
            self.gross_price,
            self.line_total,
        )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "owner_id": 7,
                "invoice_id": 1,
                "position": 1,
                "text": "Consulting",
                "unit_code": "HUR",
                "quantity": "8",
                "tax_rate": "19.00",
                "net_price": "120.00",
                "gross_price": "120.00",
                "line_total": "960.00",
            }
        }


def same_position_content(left: Iterable[InvoicePosition], right: Iterable[InvoicePosition]) -> bool:
    """True when both sets print identically, regardless of row ids"""
    def keys(positions):
        return [p.content_key() for p in sorted(positions, key=lambda p: p.position)]

    return keys(left) == keys(right)
