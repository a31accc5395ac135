"""Invoice Aggregate

An invoice together with the positions it exclusively owns.
"""

from decimal import Decimal
from typing import Iterable, List, Optional
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_position import InvoicePosition
from src.domain.tax import InvoiceTotals, TaxAmount, compute_totals


class InvoiceAggregate:
    """
    Invoice plus its positions

    Domain Rules:
    - Positions share the invoice owner; they are re-stamped on every write
    - Draft totals are live projections of the positions and only kept in
      memory on the aggregate, never written back to the invoice row
    - Totals of issued, paid and voided invoices are the frozen columns and
      are never recomputed from positions
    """

    def __init__(self, invoice: Invoice, positions: Optional[Iterable[InvoicePosition]] = None):
        self.invoice = invoice
        self.positions: List[InvoicePosition] = sorted(positions or [], key=lambda p: p.position)
        self.net_total: Decimal = invoice.net_total
        self.gross_total: Decimal = invoice.gross_total
        self.tax_amounts: List[TaxAmount] = []

    @property
    def owner_id(self) -> int:
        return self.invoice.owner_id

    @property
    def status(self) -> InvoiceStatus:
        return InvoiceStatus(self.invoice.status)

    @property
    def is_draft(self) -> bool:
        return self.status == InvoiceStatus.DRAFT

    def belongs_to(self, owner_id: int) -> bool:
        """True when the invoice and every position are in the owner scope"""
        if self.invoice.owner_id != owner_id:
            return False
        return all(p.owner_id in (None, owner_id) for p in self.positions)

    def recompute_totals(self) -> InvoiceTotals:
        """Overwrite the in-memory totals with a fresh aggregation"""
        totals = compute_totals(self.positions)
        self.net_total = totals.net_total
        self.gross_total = totals.gross_total
        self.tax_amounts = list(totals.tax_amounts)
        return totals

    def refresh_after_load(self) -> None:
        """Drafts are recomputed on every load; frozen totals stay untouched"""
        if self.is_draft:
            self.recompute_totals()

    def tax_breakdown(self) -> List[TaxAmount]:
        """Per-rate tax of the current positions, for presentation only"""
        if self.tax_amounts or not self.positions:
            return list(self.tax_amounts)
        return list(compute_totals(self.positions).tax_amounts)

    def fresh_positions(self, invoice_id: Optional[int]) -> List[InvoicePosition]:
        """
        New, unsaved position rows for a wholesale replacement

        Ordinals are renumbered from 1 in the current order and every row is
        stamped with this invoice and its owner.
        """
        return [
            p.copy_for(invoice_id=invoice_id, owner_id=self.invoice.owner_id, position=index)
            for index, p in enumerate(self.positions, start=1)
        ]
