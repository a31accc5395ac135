"""E-Invoice Exporter Interface

The exporter turns a fully populated invoice document into a standards
compliant file (e.g. ZUGFeRD / XRechnung XML). Serialization is delegated
to an external standards library; this core only supplies the values.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from src.app.services.parties import BuyerDTO, SellerProfileDTO

COMMERCIAL_INVOICE_TYPE_CODE = 380
CREDIT_TRANSFER_MEANS_CODE = 30


class EInvoiceLineDTO(BaseModel):
    """One invoice line in the units the exporter expects"""

    line_id: str
    item_name: str
    billed_quantity: Decimal
    billed_quantity_unit: str
    net_price: Decimal
    tax_rate_applicable_percent: Decimal = Field(
        ..., description="Plain percentage, e.g. 19 (not 0.19)"
    )
    total: Decimal = Field(..., description="Net line total")
    tax_type_code: str = "VAT"
    tax_category_code: str = "S"


class EInvoiceDocumentDTO(BaseModel):
    """Everything an e-invoice serializer needs for one invoice"""

    invoice_number: str
    invoice_type_code: int = COMMERCIAL_INVOICE_TYPE_CODE
    invoice_date: Optional[date] = None
    occurrence_date: Optional[date] = None
    due_date: Optional[date] = None
    currency: str
    note: str = ""
    seller: SellerProfileDTO
    buyer: BuyerDTO
    buyer_contact: str = ""
    payment_means_code: int = CREDIT_TRANSFER_MEANS_CODE
    lines: List[EInvoiceLineDTO]
    exemption_reasons: Dict[str, str] = Field(
        default_factory=dict,
        description="Tax category code -> exemption reason text"
    )
    net_total: Decimal
    gross_total: Decimal


class EInvoiceExporter(ABC):

    @abstractmethod
    def export(self, document: EInvoiceDocumentDTO) -> bytes:
        """
        Serialize an e-invoice document

        Args:
            document: Seller, buyer, lines and tax values of one invoice

        Returns:
            Exported document as bytes
        """
        pass
