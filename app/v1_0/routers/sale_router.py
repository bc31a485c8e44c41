from typing import Dict, List, Literal, Optional
from fastapi import APIRouter, HTTPException, Depends, Body, Query, status
from dependency_injector.wiring import inject, Provide

from app.app_containers import ApplicationContainer
from app.core.errors import StallError
from app.core.http_errors import to_http_exception
from app.core.logger import logger

from app.v1_0.schemas import SaleDraft, SalePatch
from app.v1_0.entities import SaleViewDTO
from app.v1_0.services import StallService

router = APIRouter(prefix="/sales", tags=["Sales"])

SaleKind = Literal["all", "reservations", "direct"]


@router.post(
    "",
    response_model=SaleViewDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Create a sale or reservation (decrements stock)",
)
@inject
async def create_sale(
    request: SaleDraft,
    service: StallService = Depends(
        Provide[ApplicationContainer.api_container.stall_service]
    ),
):
    logger.info(
        "[SaleRouter] create_sale reservation=%s promotion=%s items_len=%s",
        request.is_reservation,
        request.is_promotion,
        len(request.items),
    )
    try:
        sale = service.create_sale(request)
        return service.describe_sale(sale)
    except StallError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[SaleRouter] create_sale error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create sale")


@router.get(
    "",
    response_model=List[SaleViewDTO],
    summary="List sales, most recent first",
)
@inject
async def list_sales(
    kind: SaleKind = Query("all"),
    service: StallService = Depends(Provide[ApplicationContainer.api_container.stall_service]),
):
    logger.debug(f"[SaleRouter] list_sales kind={kind}")
    if kind == "reservations":
        sales = service.reservations()
    elif kind == "direct":
        sales = service.direct_sales()
    else:
        sales = service.list_sales()
    return service.describe_sales(sales)


@router.get(
    "/{sale_id}",
    response_model=SaleViewDTO,
    summary="Get a sale by ID",
)
@inject
async def get_sale(
    sale_id: str,
    service: StallService = Depends(Provide[ApplicationContainer.api_container.stall_service]),
):
    try:
        return service.describe_sale(service.get_sale(sale_id))
    except StallError as e:
        raise to_http_exception(e)


@router.patch(
    "/{sale_id}",
    response_model=SaleViewDTO,
    summary="Update the paid/collected flags of a sale",
)
@inject
async def update_sale(
    sale_id: str,
    request: SalePatch = Body(...),
    service: StallService = Depends(Provide[ApplicationContainer.api_container.stall_service]),
):
    logger.info("[SaleRouter] update_sale id=%s patch=%s", sale_id, request.model_dump(exclude_unset=True))
    try:
        return service.describe_sale(service.update_sale(sale_id, request))
    except StallError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[SaleRouter] update_sale error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update sale")


@router.post(
    "/{sale_id}/collect",
    response_model=SaleViewDTO,
    summary="Mark a sale as collected (idempotent)",
)
@inject
async def mark_collected(
    sale_id: str,
    service: StallService = Depends(Provide[ApplicationContainer.api_container.stall_service]),
):
    try:
        return service.describe_sale(service.mark_collected(sale_id))
    except StallError as e:
        raise to_http_exception(e)


@router.delete(
    "/{sale_id}",
    response_model=Dict[str, str],
    summary="Delete a sale (restores stock)",
)
@inject
async def delete_sale(
    sale_id: str,
    service: StallService = Depends(Provide[ApplicationContainer.api_container.stall_service]),
):
    logger.info("[SaleRouter] delete_sale id=%s", sale_id)
    try:
        service.delete_sale(sale_id)
    except StallError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[SaleRouter] delete_sale error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete sale")
    return {"message": "Sale deleted", "id": sale_id}
