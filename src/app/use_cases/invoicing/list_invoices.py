"""ListInvoices Use Case

Returns one page of an owner's invoices with an offset cursor.
"""

from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import DATE_FIELDS, InvoiceFilter, InvoiceRepository
from .dtos import InvoiceListResponseDTO, InvoiceSummaryDTO, ListInvoicesQueryDTO

SORT_MODES = (
    "date_desc",
    "date_asc",
    "due_asc",
    "due_desc",
    "total_asc",
    "total_desc",
    "created_desc",
)


class ListInvoices:
    """
    Use Case: List invoices of one owner

    Business Rules:
    1. Always owner scoped; optional filters by one or more statuses, buyer
       company and an inclusive date range on the invoice or due date
    2. limit outside 1..max_limit falls back to default_limit
    3. The cursor is the offset encoded as a string; invalid cursors start
       at the beginning
    4. Unknown sort modes and date fields fall back to date_desc and the
       invoice date
    5. One extra row is fetched to decide whether a next page exists; total
       counts all matches regardless of the page
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        default_limit: int = 50,
        max_limit: int = 200,
    ):
        self.invoice_repo = invoice_repo
        self.default_limit = default_limit
        self.max_limit = max_limit

    async def execute(self, query: ListInvoicesQueryDTO) -> Result[InvoiceListResponseDTO]:
        try:
            limit = query.limit
            if limit <= 0 or limit > self.max_limit:
                limit = self.default_limit

            offset = 0
            if query.cursor and query.cursor.isdigit():
                offset = int(query.cursor)

            sort = query.sort if query.sort in SORT_MODES else "date_desc"

            statuses = list(query.statuses)
            if query.status is not None and query.status not in statuses:
                statuses.append(query.status)

            filters = InvoiceFilter(
                owner_id=query.owner_id,
                statuses=statuses,
                company_id=query.company_id,
                date_field=query.date_field if query.date_field in DATE_FIELDS else "invoice",
                date_from=query.date_from,
                date_to=query.date_to,
            )

            invoices = await self.invoice_repo.list_by_owner(
                filters, limit=limit + 1, offset=offset, sort=sort
            )
            total = await self.invoice_repo.count_by_owner(filters)

            next_cursor = None
            if len(invoices) > limit:
                invoices = invoices[:limit]
                next_cursor = str(offset + limit)

            return Return.ok(
                InvoiceListResponseDTO(
                    items=[InvoiceSummaryDTO.from_invoice(i) for i in invoices],
                    total=total,
                    next_cursor=next_cursor,
                )
            )

        except Exception as e:
            return Return.err(
                Error(
                    code="LIST_INVOICES_FAILED",
                    message="Failed to list invoices",
                    reason=str(e),
                )
            )
