"""Request schemas for Invoice API

Pydantic models for validating incoming HTTP requests. Amounts must be sent
as strings or integers ("120.00", "19,5", 7); JSON floats are rejected.
"""

from pydantic import BaseModel, Field
from src.app.services.parties import BuyerDTO
from src.app.use_cases.invoicing.dtos import InvoiceContentDTO
from src.domain.invoice import InvoiceStatus


class InvoiceRequestSchema(InvoiceContentDTO):
    """
    Request schema for creating or saving an invoice

    Used for POST /invoices and PUT /invoices/{invoice_id}. The positions
    replace all existing positions of the invoice.
    """

    class Config:
        json_schema_extra = {
            "example": {
                "company_id": 12,
                "currency": "EUR",
                "invoice_date": "2024-02-01",
                "due_date": "2024-02-15",
                "tax_type": "S",
                "positions": [
                    {"text": "Consulting", "quantity": "8", "unit_code": "HUR",
                     "tax_rate": "19", "net_price": "120.00"},
                    {"text": "Book", "quantity": "1", "unit_code": "C62",
                     "tax_rate": "7", "net_price": "40.00"},
                ],
            }
        }


class StatusChangeRequestSchema(BaseModel):
    """
    Request schema for lifecycle transitions

    "draft" rolls an issued invoice back; every other status goes through
    the transition table.
    """

    status: InvoiceStatus = Field(..., description="Target status")


class DuplicateRequestSchema(BaseModel):
    customer_number: str = Field(
        default="",
        description="Buyer customer number for %CN% in the new invoice number"
    )


class BuyerRequestSchema(BuyerDTO):
    """Buyer details used by verification and e-invoice export"""
