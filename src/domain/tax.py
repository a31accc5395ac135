"""Tax bucket aggregation

Derives net total, gross total and the per-rate tax breakdown of an invoice
from its positions. Pure: the same positions always yield identical results,
so totals are recomputed from scratch instead of being patched.
"""

from decimal import Decimal, localcontext
from typing import Dict, Iterable, List
from pydantic import BaseModel, ConfigDict
from src.domain.money import ACCUMULATION_PRECISION, HUNDRED, ZERO, normalize_rate


class TaxAmount(BaseModel):
    """Accumulated tax for one distinct rate"""

    model_config = ConfigDict(frozen=True)

    rate: Decimal
    amount: Decimal


class InvoiceTotals(BaseModel):
    """Result of aggregating the positions of one invoice"""

    model_config = ConfigDict(frozen=True)

    net_total: Decimal
    gross_total: Decimal
    tax_amounts: List[TaxAmount]

    @property
    def tax_total(self) -> Decimal:
        return self.gross_total - self.net_total


def compute_totals(positions: Iterable) -> InvoiceTotals:
    """
    Aggregate positions into totals and tax buckets

    Each position needs ``line_total`` and ``tax_rate`` (percent). The tax of
    a position is ``line_total * tax_rate / 100``; gross is net plus the sum
    of those per-position taxes, so mixed-rate invoices stay exact.

    Buckets are keyed by the numeric rate (19 and 19.00 share a bucket) and
    returned ascending by rate. A zero rate still produces a bucket.

    Args:
        positions: Positions of one invoice, in any order

    Returns:
        InvoiceTotals with unrounded values
    """
    net_total = ZERO
    tax_total = ZERO
    buckets: Dict[Decimal, Decimal] = {}

    with localcontext() as ctx:
        ctx.prec = ACCUMULATION_PRECISION
        for position in positions:
            rate = position.tax_rate
            tax = position.line_total * (rate / HUNDRED)
            net_total += position.line_total
            tax_total += tax
            buckets[rate] = buckets.get(rate, ZERO) + tax
        gross_total = net_total + tax_total

    tax_amounts = [
        TaxAmount(rate=normalize_rate(rate), amount=buckets[rate])
        for rate in sorted(buckets)
    ]
    return InvoiceTotals(net_total=net_total, gross_total=gross_total, tax_amounts=tax_amounts)
