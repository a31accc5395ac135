"""Seller and buyer details handed to document generators

Both come from outside this core: the seller profile from configuration,
the buyer from the company directory of the surrounding application.
"""

from typing import Optional
from pydantic import BaseModel, Field


class SellerProfileDTO(BaseModel):
    """Issuing company as printed on invoices"""

    name: str = Field(default="", description="Company name")
    address1: str = Field(default="", description="Address line 1")
    address2: str = Field(default="", description="Address line 2")
    zip: str = Field(default="", description="Postcode")
    city: str = Field(default="", description="City")
    country_code: str = Field(default="", description="ISO 3166-1 alpha-2 country code")
    vat_id: str = Field(default="", description="VAT identification number")
    contact: str = Field(default="", description="Invoice contact person")
    email: str = Field(default="", description="Invoice contact e-mail")
    bank_iban: str = Field(default="", description="IBAN for payments")
    bank_bic: str = Field(default="", description="BIC for payments")
    bank_name: str = Field(default="", description="Account holder / bank name")

    @classmethod
    def from_config(cls, config) -> "SellerProfileDTO":
        return cls(
            name=config.SELLER_NAME,
            address1=config.SELLER_ADDRESS1,
            address2=config.SELLER_ADDRESS2,
            zip=config.SELLER_ZIP,
            city=config.SELLER_CITY,
            country_code=config.SELLER_COUNTRY_CODE,
            vat_id=config.SELLER_VAT_ID,
            contact=config.SELLER_CONTACT,
            email=config.SELLER_EMAIL,
            bank_iban=config.SELLER_BANK_IBAN,
            bank_bic=config.SELLER_BANK_BIC,
            bank_name=config.SELLER_BANK_NAME,
        )


class BuyerDTO(BaseModel):
    """Buyer company of an invoice"""

    name: str = Field(default="", description="Company name")
    address1: str = Field(default="", description="Address line 1")
    address2: str = Field(default="", description="Address line 2")
    zip: str = Field(default="", description="Postcode")
    city: str = Field(default="", description="City")
    country_code: str = Field(default="", description="ISO 3166-1 alpha-2 country code")
    vat_id: str = Field(default="", description="VAT identification number")
    customer_number: str = Field(default="", description="Our customer number for the buyer")
    invoice_tax_type: Optional[str] = Field(
        default=None,
        description="Tax category code applied to the buyer's lines (S, AE, K, Z, ...)"
    )
