"""Invoice PDF rendering interface

Rendering happens on already computed values; implementations only round
amounts for display and never change totals.
"""

from abc import ABC, abstractmethod
from src.app.services.parties import SellerProfileDTO
from src.domain.invoice_aggregate import InvoiceAggregate


class PdfService(ABC):
    """Renders invoice documents for the seller's letterhead"""

    @abstractmethod
    def generate_proforma_invoice(
        self,
        aggregate: InvoiceAggregate,
        seller: SellerProfileDTO,
        decimal_places: int = 2,
    ) -> bytes:
        """
        Render a proforma (preview) of a draft invoice

        Args:
            aggregate: Draft invoice with positions and recomputed totals
            seller: Seller name and address for the header
            decimal_places: Presentation rounding of amounts

        Returns:
            Raw PDF bytes
        """
        pass
