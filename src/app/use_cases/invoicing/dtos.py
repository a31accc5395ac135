"""Data Transfer Objects for Invoicing Use Cases

Pydantic models for command inputs and response outputs. Amounts are
``Decimal`` end to end; they are accepted as strings or integers, never
as binary floats.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from src.app.services.einvoice_exporter import EInvoiceDocumentDTO
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_aggregate import InvoiceAggregate
from src.domain.invoice_position import InvoicePosition
from src.domain.money import exact_product, to_decimal


class InvoicePositionDTO(BaseModel):
    """
    Command DTO for one invoice line

    line_total defaults to quantity * net_price, gross_price to net_price.
    """

    text: str = Field(
        default="",
        description="Item description"
    )

    quantity: Decimal = Field(
        ...,
        description="Billed quantity"
    )

    unit_code: str = Field(
        default="",
        max_length=10,
        description="UN/ECE unit code (e.g., HUR, C62)"
    )

    tax_rate: Decimal = Field(
        ...,
        ge=0,
        description="Tax rate in percent (19 means 19 %)"
    )

    net_price: Decimal = Field(
        ...,
        description="Net price per unit"
    )

    gross_price: Optional[Decimal] = Field(
        default=None,
        description="Gross price per unit (defaults to net_price)"
    )

    line_total: Optional[Decimal] = Field(
        default=None,
        description="Net line total (defaults to quantity * net_price)"
    )

    @field_validator("quantity", "tax_rate", "net_price", "gross_price", "line_total", mode="before")
    @classmethod
    def parse_decimal(cls, v):
        """Accept "19,5" and reject floats"""
        if v is None:
            return v
        return to_decimal(v)

    def to_position(self, owner_id: int, position: int) -> InvoicePosition:
        line_total = self.line_total
        if line_total is None:
            line_total = exact_product(self.quantity, self.net_price)
        return InvoicePosition(
            owner_id=owner_id,
            position=position,
            text=self.text,
            unit_code=self.unit_code,
            quantity=self.quantity,
            tax_rate=self.tax_rate,
            net_price=self.net_price,
            gross_price=self.gross_price if self.gross_price is not None else self.net_price,
            line_total=line_total,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "text": "Consulting",
                "quantity": "8",
                "unit_code": "HUR",
                "tax_rate": "19",
                "net_price": "120.00",
            }
        }


class InvoiceContentDTO(BaseModel):
    """
    Command DTO with the editable content of an invoice

    Used to create a new draft or replace the content of an existing one.
    Status, transition timestamps and totals are not part of it.
    """

    company_id: Optional[int] = Field(default=None, description="Buyer company")
    template_id: Optional[int] = Field(default=None, description="Letterhead template")
    customer_number: str = Field(
        default="",
        description="Buyer customer number, used for %CN% in number templates"
    )
    number: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Invoice number (generated from the template when omitted)"
    )
    counter: Optional[int] = Field(
        default=None,
        ge=1,
        description="Sequence value (next free value when omitted)"
    )
    currency: str = Field(default="EUR", min_length=3, max_length=3, description="ISO 4217 code")
    invoice_date: Optional[date] = Field(default=None, description="Issue date")
    due_date: Optional[date] = Field(default=None, description="Payment due date")
    occurrence_date: Optional[date] = Field(default=None, description="Delivery date")
    tax_type: str = Field(default="", max_length=10, description="Tax category (S, AE, K, ...)")
    exemption_reason: str = Field(default="", description="Tax exemption reason")
    opening: str = Field(default="", description="Text before the positions")
    footer: str = Field(default="", description="Text after the positions")
    contact_invoice: str = Field(default="", description="Contact person at the buyer")
    order_number: str = Field(default="", description="Buyer order reference")
    supplier_number: str = Field(default="", description="Our supplier number at the buyer")
    tax_number: str = Field(default="", description="Buyer VAT id")
    positions: List[InvoicePositionDTO] = Field(default_factory=list)

    def to_aggregate(self, owner_id: int, invoice_id: Optional[int] = None) -> InvoiceAggregate:
        """Build an (unsaved) aggregate in the given owner scope"""
        invoice = Invoice(
            id=invoice_id,
            owner_id=owner_id,
            company_id=self.company_id,
            template_id=self.template_id,
            number=self.number or "",
            counter=self.counter or 0,
            currency=self.currency.upper(),
            invoice_date=self.invoice_date,
            due_date=self.due_date,
            occurrence_date=self.occurrence_date,
            tax_type=self.tax_type,
            exemption_reason=self.exemption_reason,
            opening=self.opening,
            footer=self.footer,
            contact_invoice=self.contact_invoice,
            order_number=self.order_number,
            supplier_number=self.supplier_number,
            tax_number=self.tax_number,
        )
        positions = [
            p.to_position(owner_id=owner_id, position=index)
            for index, p in enumerate(self.positions, start=1)
        ]
        return InvoiceAggregate(invoice, positions)


class TaxAmountDTO(BaseModel):
    rate: Decimal
    amount: Decimal


class InvoicePositionResponseDTO(BaseModel):
    id: Optional[int] = None
    position: int
    text: str
    unit_code: str
    quantity: Decimal
    tax_rate: Decimal
    net_price: Decimal
    gross_price: Decimal
    line_total: Decimal


class InvoiceResponseDTO(BaseModel):
    """
    Response DTO for a single invoice with positions

    Totals are exact; draft totals are recomputed on every load, totals of
    issued invoices are the frozen values.
    """

    invoice_id: int
    owner_id: int
    company_id: Optional[int] = None
    template_id: Optional[int] = None
    number: str
    counter: int
    status: str
    currency: str
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    occurrence_date: Optional[date] = None
    tax_type: str = ""
    exemption_reason: str = ""
    opening: str = ""
    footer: str = ""
    contact_invoice: str = ""
    order_number: str = ""
    supplier_number: str = ""
    tax_number: str = ""
    net_total: Decimal
    gross_total: Decimal
    tax_amounts: List[TaxAmountDTO] = Field(default_factory=list)
    positions: List[InvoicePositionResponseDTO] = Field(default_factory=list)
    issued_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    voided_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_aggregate(cls, aggregate: InvoiceAggregate) -> "InvoiceResponseDTO":
        invoice = aggregate.invoice
        return cls(
            invoice_id=invoice.id,
            owner_id=invoice.owner_id,
            company_id=invoice.company_id,
            template_id=invoice.template_id,
            number=invoice.number,
            counter=invoice.counter,
            status=InvoiceStatus(invoice.status).value,
            currency=invoice.currency,
            invoice_date=invoice.invoice_date,
            due_date=invoice.due_date,
            occurrence_date=invoice.occurrence_date,
            tax_type=invoice.tax_type,
            exemption_reason=invoice.exemption_reason,
            opening=invoice.opening,
            footer=invoice.footer,
            contact_invoice=invoice.contact_invoice,
            order_number=invoice.order_number,
            supplier_number=invoice.supplier_number,
            tax_number=invoice.tax_number,
            net_total=aggregate.net_total,
            gross_total=aggregate.gross_total,
            tax_amounts=[
                TaxAmountDTO(rate=t.rate, amount=t.amount) for t in aggregate.tax_breakdown()
            ],
            positions=[
                InvoicePositionResponseDTO(
                    id=p.id,
                    position=p.position,
                    text=p.text,
                    unit_code=p.unit_code,
                    quantity=p.quantity,
                    tax_rate=p.tax_rate,
                    net_price=p.net_price,
                    gross_price=p.gross_price,
                    line_total=p.line_total,
                )
                for p in aggregate.positions
            ],
            issued_at=invoice.issued_at,
            paid_at=invoice.paid_at,
            voided_at=invoice.voided_at,
            created_at=invoice.created_at,
            updated_at=invoice.updated_at,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "invoice_id": 1,
                "owner_id": 7,
                "number": "2024-0001",
                "counter": 1,
                "status": "draft",
                "currency": "EUR",
                "net_total": "200.00",
                "gross_total": "226.00",
                "tax_amounts": [
                    {"rate": "7", "amount": "7.00"},
                    {"rate": "19", "amount": "19.00"},
                ],
            }
        }


class InvoiceSummaryDTO(BaseModel):
    """List entry; totals are the persisted columns (zero for drafts)"""

    invoice_id: int
    number: str
    status: str
    currency: str
    company_id: Optional[int] = None
    net_total: Decimal
    gross_total: Decimal
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    occurrence_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "InvoiceSummaryDTO":
        return cls(
            invoice_id=invoice.id,
            number=invoice.number,
            status=InvoiceStatus(invoice.status).value,
            currency=invoice.currency,
            company_id=invoice.company_id,
            net_total=invoice.net_total,
            gross_total=invoice.gross_total,
            invoice_date=invoice.invoice_date,
            due_date=invoice.due_date,
            occurrence_date=invoice.occurrence_date,
            created_at=invoice.created_at,
            updated_at=invoice.updated_at,
        )


class ListInvoicesQueryDTO(BaseModel):
    """Query DTO for listing invoices of one owner"""

    owner_id: int
    status: Optional[InvoiceStatus] = None
    statuses: List[InvoiceStatus] = Field(
        default_factory=list,
        description="Match any of these statuses (combined with status)"
    )
    company_id: Optional[int] = None
    date_field: str = Field(default="invoice", description="invoice or due")
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    limit: int = 0
    cursor: Optional[str] = None
    sort: str = "date_desc"


class InvoiceListResponseDTO(BaseModel):
    items: List[InvoiceSummaryDTO]
    total: int = Field(..., description="Number of matching invoices over all pages")
    next_cursor: Optional[str] = Field(
        default=None,
        description="Cursor of the next page, None on the last page"
    )


class ChangeInvoiceStatusCommandDTO(BaseModel):
    """Command DTO for a lifecycle transition"""

    invoice_id: int
    owner_id: int
    target_status: InvoiceStatus
    at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Transition timestamp"
    )


class InvoiceStatusResponseDTO(BaseModel):
    """Response DTO for lifecycle transitions"""

    invoice_id: int
    status: str
    issued_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    voided_at: Optional[datetime] = None
    net_total: Decimal
    gross_total: Decimal

    class Config:
        json_schema_extra = {
            "example": {
                "invoice_id": 1,
                "status": "issued",
                "issued_at": "2024-02-01T09:30:00Z",
                "paid_at": None,
                "voided_at": None,
                "net_total": "200.00",
                "gross_total": "226.00",
            }
        }


class InvoiceProblemDTO(BaseModel):
    level: str = Field(..., description="error, warning or info")
    message: str


class VerifyInvoiceResponseDTO(BaseModel):
    invoice_id: int
    problems: List[InvoiceProblemDTO]

    @property
    def has_errors(self) -> bool:
        return any(p.level == "error" for p in self.problems)


class ProformaInvoiceResponseDTO(BaseModel):
    """Response DTO for proforma generation"""

    invoice_id: int
    number: str
    status: str
    currency: str
    net_total: Decimal
    gross_total: Decimal
    tax_amounts: List[TaxAmountDTO]
    positions: List[InvoicePositionResponseDTO]
    pdf_base64: str
    generated_at: datetime


class EInvoiceExportResponseDTO(BaseModel):
    invoice_id: int
    invoice_number: str
    document: EInvoiceDocumentDTO
    content_base64: str
