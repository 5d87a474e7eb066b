from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.utils.check_roles import require_permission
from app.utils.response import success_response, APIResponse
from app.utils.pdf_generators.quotation_pdf import render_quotation_pdf
from app.utils.logger import get_logger

from app.schemas.quotations.quotation_schemas import (
    QuotationCreate,
    QuotationUpdate,
    QuotationStatusUpdate,
    QuotationOut,
    QuotationListData,
)

from app.services.quotations.quotation_service import (
    create_quotation,
    update_quotation,
    update_quotation_status,
    delete_quotation,
    get_quotation,
    get_quotation_model,
    list_quotations,
)
from app.services.settings.company_service import get_company_profile

router = APIRouter(
    prefix="/quotations",
    tags=["Quotations"],
)
logger = get_logger(__name__)


@router.post(
    "",
    response_model=APIResponse[QuotationOut],
)
async def create_quotation_api(
    payload: QuotationCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("manage_quotations")),
):
    quotation = await create_quotation(db, payload, user)
    return success_response(
        "Quotation created successfully",
        quotation,
    )


@router.get(
    "",
    response_model=APIResponse[QuotationListData],
)
async def list_quotations_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("access_quotations")),
    search: str | None = Query(None, description="Number, client, origin or destination"),
    status: str | None = Query(None, description="Any casing; unknown values match CREATED"),
    page: int = Query(1, ge=1),
    page_size: int = Query(15, ge=1, le=100),
    sort_by: str = Query("created_at"),
    order: str = Query("desc"),
):
    data = await list_quotations(
        db=db,
        user=user,
        search=search,
        status=status,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        order=order,
    )
    return success_response(
        "Quotations retrieved successfully",
        data,
    )


@router.get(
    "/{quotation_id}",
    response_model=APIResponse[QuotationOut],
)
async def get_quotation_api(
    quotation_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("access_quotations")),
):
    quotation = await get_quotation(db=db, quotation_id=quotation_id, user=user)
    return success_response(
        "Quotation retrieved successfully",
        quotation,
    )


@router.get("/{quotation_id}/print")
async def print_quotation_api(
    quotation_id: int,
    locale: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("access_quotations")),
):
    quotation = await get_quotation_model(db, quotation_id, user)
    company = await get_company_profile(db)

    pdf = render_quotation_pdf(quotation, company, locale)
    logger.info("Quotation printed", extra={"quotation_id": quotation.id, "bytes": len(pdf)})

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'inline; filename="{quotation.quotation_number}.pdf"',
        },
    )


@router.patch(
    "/{quotation_id}",
    response_model=APIResponse[QuotationOut],
)
async def update_quotation_api(
    quotation_id: int,
    payload: QuotationUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("manage_quotations")),
):
    quotation = await update_quotation(
        db=db,
        quotation_id=quotation_id,
        payload=payload,
        user=user,
    )
    return success_response(
        "Quotation updated successfully",
        quotation,
    )


@router.patch(
    "/{quotation_id}/status",
    response_model=APIResponse[QuotationOut],
)
async def update_quotation_status_api(
    quotation_id: int,
    payload: QuotationStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("manage_quotations")),
):
    quotation = await update_quotation_status(
        db=db,
        quotation_id=quotation_id,
        payload=payload,
        user=user,
    )
    return success_response(
        "Quotation status updated successfully",
        quotation,
    )


@router.delete(
    "/{quotation_id}",
    response_model=APIResponse[QuotationOut],
)
async def delete_quotation_api(
    quotation_id: int,
    version: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("manage_quotations")),
):
    quotation = await delete_quotation(
        db=db,
        quotation_id=quotation_id,
        version=version,
        user=user,
    )
    return success_response(
        "Quotation deleted successfully",
        quotation,
    )
