"""VerifyInvoice Use Case

Checks an invoice for problems that would make it invalid as a tax
document or as an e-invoice.
"""

from typing import List
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_position_repository import InvoicePositionRepository
from src.app.services.parties import BuyerDTO, SellerProfileDTO
from src.domain.invoice_aggregate import InvoiceAggregate
from .dtos import InvoiceProblemDTO, VerifyInvoiceResponseDTO
from .support import invoice_not_found, load_invoice_aggregate

REVERSE_CHARGE = "AE"
INTRA_COMMUNITY = "K"


def find_problems(
    aggregate: InvoiceAggregate, seller: SellerProfileDTO, buyer: BuyerDTO
) -> List[InvoiceProblemDTO]:
    """Run all checks; an empty list means the invoice is fine"""
    invoice = aggregate.invoice
    problems: List[InvoiceProblemDTO] = []

    def error(message: str):
        problems.append(InvoiceProblemDTO(level="error", message=message))

    intra_community = invoice.tax_type == INTRA_COMMUNITY
    reverse_charge = invoice.tax_type == REVERSE_CHARGE

    if (intra_community or reverse_charge) and not invoice.exemption_reason:
        error(
            "An exemption reason is required for intra-community supplies "
            "and reverse charge invoices."
        )

    if intra_community:
        if not buyer.vat_id:
            error("The buyer's VAT ID is required for an intra-community supply.")
        if not seller.vat_id:
            error("No VAT ID is configured for the seller. It is required for an intra-community supply.")
        if buyer.country_code == seller.country_code:
            error(
                "The buyer's country is the seller's country. Intra-community supplies "
                "are only possible to companies in other EU countries."
            )
        if not buyer.country_code:
            error("The buyer's country is required for an intra-community supply.")

    # Every e-invoice line needs an item name
    if any(not p.text.strip() for p in aggregate.positions):
        problems.append(
            InvoiceProblemDTO(
                level="warning",
                message="One or more positions have no text. Every position should have a text.",
            )
        )

    # The buyer must be able to identify the seller
    if not seller.name:
        error("No company name is configured for the seller.")
    if not seller.address1 and not seller.address2:
        error("No address is configured for the seller.")
    if not seller.city:
        error("No city is configured for the seller.")
    if not seller.zip:
        error("No postcode is configured for the seller.")
    if not seller.country_code:
        error("No country is configured for the seller.")

    return problems


class VerifyInvoice:
    """
    Use Case: Verify invoice

    Business Rules:
    1. Read only; the invoice is loaded in the owner scope
    2. Reverse charge (AE) and intra-community (K) invoices need an
       exemption reason
    3. Intra-community invoices need both VAT IDs and a buyer country that
       is set and differs from the seller's
    4. Positions without text produce a warning
    5. Seller name, address, city, postcode and country must be configured
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        position_repo: InvoicePositionRepository,
        seller: SellerProfileDTO,
    ):
        self.invoice_repo = invoice_repo
        self.position_repo = position_repo
        self.seller = seller

    async def execute(
        self, invoice_id: int, owner_id: int, buyer: BuyerDTO
    ) -> Result[VerifyInvoiceResponseDTO]:
        try:
            aggregate = await load_invoice_aggregate(
                self.invoice_repo, self.position_repo, invoice_id, owner_id
            )
            if aggregate is None:
                return Return.err(invoice_not_found(invoice_id))

            return Return.ok(
                VerifyInvoiceResponseDTO(
                    invoice_id=invoice_id,
                    problems=find_problems(aggregate, self.seller, buyer),
                )
            )

        except Exception as e:
            return Return.err(
                Error(
                    code="VERIFY_INVOICE_FAILED",
                    message="Failed to verify invoice",
                    reason=str(e),
                )
            )
