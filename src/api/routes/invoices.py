"""Invoice API Routes

FastAPI routes for invoice editing, lifecycle transitions and documents.
"""

import base64
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError
from src.api.schemas.invoice_request import (
    BuyerRequestSchema,
    DuplicateRequestSchema,
    InvoiceRequestSchema,
    StatusChangeRequestSchema,
)
from src.app.services.parties import SellerProfileDTO
from src.app.use_cases.invoicing import (
    ChangeInvoiceStatus,
    DeleteInvoice,
    DuplicateInvoice,
    ExportEInvoice,
    GenerateProforma,
    GetInvoice,
    ListInvoices,
    RevertInvoiceToDraft,
    SaveInvoice,
    VerifyInvoice,
)
from src.app.use_cases.invoicing.dtos import (
    ChangeInvoiceStatusCommandDTO,
    EInvoiceExportResponseDTO,
    InvoiceListResponseDTO,
    InvoiceResponseDTO,
    InvoiceStatusResponseDTO,
    ListInvoicesQueryDTO,
    VerifyInvoiceResponseDTO,
)
from src.app.use_cases.invoicing.support import invoice_not_found
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.invoice_position_repository import SqlAlchemyInvoicePositionRepository
from src.adapter.services.einvoice_exporter import JsonEInvoiceExporter
from src.adapter.services.pdf_service import ReportLabPdfService
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_owner_id, get_session
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_number import InvoiceNumbering

router = APIRouter(prefix="/invoices", tags=["Invoices"])

CONFLICT_CODES = {
    "INVALID_STATUS_TRANSITION",
    "FORBIDDEN_STATUS_TRANSITION",
    "CONCURRENCY_CONFLICT",
}

NOT_FOUND_RESPONSE = {
    404: {
        "description": "Invoice not found",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INVOICE_NOT_FOUND",
                        "message": "Invoice with ID 123 not found"
                    }
                }
            }
        }
    }
}


def raise_client_error(error: Error, invoice_id: Optional[int] = None):
    """Map a use case error to its HTTP status"""
    # Never reveal whether an invoice exists outside the caller's scope
    if error.code in ("INVOICE_NOT_FOUND", "OWNERSHIP_VIOLATION"):
        if invoice_id is not None:
            error = invoice_not_found(invoice_id)
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    if error.code in CONFLICT_CODES:
        raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
    if error.code == "TRANSACTION_TIMEOUT":
        raise ClientError(error, status_code=status.HTTP_504_GATEWAY_TIMEOUT)
    raise ClientError(error)


def _numbering() -> InvoiceNumbering:
    return InvoiceNumbering(
        template=ApplicationConfig.INVOICE_NUMBER_TEMPLATE,
        use_local_counter=ApplicationConfig.USE_LOCAL_COUNTER,
    )


def _unit_of_work(session: AsyncSession) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(session, ApplicationConfig.LOCK_TIMEOUT_MS)


@router.get("", response_model=InvoiceListResponseDTO)
async def list_invoices(
    statuses: Optional[List[InvoiceStatus]] = Query(
        default=None, alias="status", description="Repeat to match several statuses"
    ),
    company_id: Optional[int] = Query(default=None),
    date_field: str = Query(default="invoice", description="Date the range applies to: invoice or due"),
    date_from: Optional[date] = Query(default=None, description="Inclusive, YYYY-MM-DD"),
    date_to: Optional[date] = Query(default=None, description="Inclusive, YYYY-MM-DD"),
    limit: int = Query(default=0, description="Page size, default when 0 or too large"),
    cursor: Optional[str] = Query(default=None, description="next_cursor of the previous page"),
    sort: str = Query(
        default="date_desc",
        description="date_desc, date_asc, due_asc, due_desc, total_asc, total_desc or created_desc",
    ),
    owner_id: int = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    """
    List the caller's invoices, newest invoice date first.

    `total` counts all matching invoices, `next_cursor` fetches the next page.

    Totals in the list are the persisted columns, which are zero for drafts.
    """
    use_case = ListInvoices(
        SqlAlchemyInvoiceRepository(session),
        default_limit=ApplicationConfig.INVOICE_LIST_DEFAULT_LIMIT,
        max_limit=ApplicationConfig.INVOICE_LIST_MAX_LIMIT,
    )
    result = await use_case.execute(
        ListInvoicesQueryDTO(
            owner_id=owner_id,
            statuses=statuses or [],
            company_id=company_id,
            date_field=date_field,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            cursor=cursor,
            sort=sort,
        )
    )
    if result.is_err():
        raise_client_error(result.error)
    return result.value


@router.post("", response_model=InvoiceResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    request: InvoiceRequestSchema,
    owner_id: int = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Create a draft invoice.

    Counter and number are assigned from the configured template when they
    are not given.
    """
    if "currency" not in request.model_fields_set:
        request.currency = ApplicationConfig.DEFAULT_CURRENCY
    use_case = SaveInvoice(
        _unit_of_work(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoicePositionRepository(session),
        numbering=_numbering(),
    )
    result = await use_case.execute(
        request.to_aggregate(owner_id),
        owner_id,
        customer_number=request.customer_number,
        timeout=ApplicationConfig.TRANSACTION_TIMEOUT_SECONDS,
    )
    if result.is_err():
        raise_client_error(result.error)
    return result.value


@router.get("/{invoice_id}", response_model=InvoiceResponseDTO, responses=NOT_FOUND_RESPONSE)
async def get_invoice(
    invoice_id: int,
    owner_id: int = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = GetInvoice(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoicePositionRepository(session),
    )
    result = await use_case.execute(invoice_id, owner_id)
    if result.is_err():
        raise_client_error(result.error, invoice_id)
    return result.value


@router.put("/{invoice_id}", response_model=InvoiceResponseDTO, responses=NOT_FOUND_RESPONSE)
async def save_invoice(
    invoice_id: int,
    request: InvoiceRequestSchema,
    owner_id: int = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Replace the content and all positions of a draft invoice.
    """
    use_case = SaveInvoice(
        _unit_of_work(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoicePositionRepository(session),
        numbering=_numbering(),
    )
    result = await use_case.execute(
        request.to_aggregate(owner_id, invoice_id=invoice_id),
        owner_id,
        timeout=ApplicationConfig.TRANSACTION_TIMEOUT_SECONDS,
    )
    if result.is_err():
        raise_client_error(result.error, invoice_id)
    return result.value


@router.delete(
    "/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND_RESPONSE,
)
async def delete_invoice(
    invoice_id: int,
    owner_id: int = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = DeleteInvoice(
        _unit_of_work(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoicePositionRepository(session),
    )
    result = await use_case.execute(
        invoice_id, owner_id, timeout=ApplicationConfig.TRANSACTION_TIMEOUT_SECONDS
    )
    if result.is_err():
        raise_client_error(result.error, invoice_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{invoice_id}/status",
    response_model=InvoiceStatusResponseDTO,
    responses={
        **NOT_FOUND_RESPONSE,
        409: {
            "description": "Transition not allowed or invoice locked by another request",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "FORBIDDEN_STATUS_TRANSITION",
                            "message": "Cannot change invoice status from paid to voided"
                        }
                    }
                }
            }
        },
    },
)
async def change_invoice_status(
    invoice_id: int,
    request: StatusChangeRequestSchema,
    owner_id: int = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Move an invoice through its lifecycle.

    - `issued` freezes net and gross totals
    - `paid` and `voided` are terminal
    - `draft` rolls an issued invoice back and clears issued_at
    """
    uow = _unit_of_work(session)
    invoice_repo = SqlAlchemyInvoiceRepository(session)
    timeout = ApplicationConfig.TRANSACTION_TIMEOUT_SECONDS

    if request.status == InvoiceStatus.DRAFT:
        result = await RevertInvoiceToDraft(uow, invoice_repo).execute(
            invoice_id, owner_id, timeout=timeout
        )
    else:
        use_case = ChangeInvoiceStatus(uow, invoice_repo, SqlAlchemyInvoicePositionRepository(session))
        result = await use_case.execute(
            ChangeInvoiceStatusCommandDTO(
                invoice_id=invoice_id,
                owner_id=owner_id,
                target_status=request.status,
            ),
            timeout=timeout,
        )

    if result.is_err():
        raise_client_error(result.error, invoice_id)
    return result.value


@router.post(
    "/{invoice_id}/duplicate",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses=NOT_FOUND_RESPONSE,
)
async def duplicate_invoice(
    invoice_id: int,
    request: Optional[DuplicateRequestSchema] = None,
    owner_id: int = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = DuplicateInvoice(
        _unit_of_work(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoicePositionRepository(session),
        numbering=_numbering(),
        payment_days=ApplicationConfig.DEFAULT_PAYMENT_DAYS,
    )
    result = await use_case.execute(
        invoice_id,
        owner_id,
        customer_number=request.customer_number if request else "",
        timeout=ApplicationConfig.TRANSACTION_TIMEOUT_SECONDS,
    )
    if result.is_err():
        raise_client_error(result.error, invoice_id)
    return result.value


@router.post(
    "/{invoice_id}/verify",
    response_model=VerifyInvoiceResponseDTO,
    responses=NOT_FOUND_RESPONSE,
)
async def verify_invoice(
    invoice_id: int,
    buyer: BuyerRequestSchema,
    owner_id: int = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Check the invoice for tax and e-invoice problems.

    Returns a list of problems with level `error`, `warning` or `info`.
    """
    use_case = VerifyInvoice(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoicePositionRepository(session),
        SellerProfileDTO.from_config(ApplicationConfig),
    )
    result = await use_case.execute(invoice_id, owner_id, buyer)
    if result.is_err():
        raise_client_error(result.error, invoice_id)
    return result.value


@router.post(
    "/{invoice_id}/einvoice",
    response_model=EInvoiceExportResponseDTO,
    responses=NOT_FOUND_RESPONSE,
)
async def export_einvoice(
    invoice_id: int,
    buyer: BuyerRequestSchema,
    owner_id: int = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = ExportEInvoice(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoicePositionRepository(session),
        JsonEInvoiceExporter(),
        SellerProfileDTO.from_config(ApplicationConfig),
    )
    result = await use_case.execute(invoice_id, owner_id, buyer)
    if result.is_err():
        raise_client_error(result.error, invoice_id)
    return result.value


@router.get(
    "/{invoice_id}/proforma/pdf",
    responses={
        200: {
            "content": {"application/pdf": {}},
            "description": "PDF document"
        },
        **NOT_FOUND_RESPONSE,
        400: {
            "description": "Invalid invoice status",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVALID_INVOICE_STATUS",
                            "message": "Proforma can only be generated for draft invoices"
                        }
                    }
                }
            }
        }
    }
)
async def download_proforma_invoice_pdf(
    invoice_id: int,
    owner_id: int = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Download a proforma (preview) PDF of a draft invoice.

    **Returns:**
    - 200: PDF file as binary response
    - 400: Invoice is not in draft status
    - 404: Invoice not found
    """
    use_case = GenerateProforma(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoicePositionRepository(session),
        ReportLabPdfService(),
        SellerProfileDTO.from_config(ApplicationConfig),
        decimal_places=ApplicationConfig.MONEY_DECIMAL_PLACES,
    )
    result = await use_case.execute(invoice_id, owner_id)
    if result.is_err():
        raise_client_error(result.error, invoice_id)

    pdf_bytes = base64.b64decode(result.value.pdf_base64)
    filename = result.value.number or str(invoice_id)

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=proforma_{filename}.pdf"
        }
    )
