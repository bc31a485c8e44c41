from typing import List
from fastapi import APIRouter, HTTPException, Depends, Body, status
from dependency_injector.wiring import inject, Provide

from app.app_containers import ApplicationContainer
from app.core.errors import StallError
from app.core.http_errors import to_http_exception
from app.core.logger import logger

from app.v1_0.schemas import StockUpdate
from app.v1_0.entities import ProductDTO, StockOverviewDTO
from app.v1_0.services import StallService

router = APIRouter(prefix="/products", tags=["Products"])

@router.get(
    "",
    response_model=List[ProductDTO],
    summary="List products with their current stock",
)
@inject
async def list_products(
    service: StallService = Depends(
        Provide[ApplicationContainer.api_container.stall_service]
    ),
) -> List[ProductDTO]:
    logger.debug("[ProductRouter] list")
    return service.list_products()

@router.get(
    "/stock",
    response_model=StockOverviewDTO,
    summary="Stock overview (products, total stock, whether a sale can be made)",
)
@inject
async def stock_overview(
    service: StallService = Depends(
        Provide[ApplicationContainer.api_container.stall_service]
    ),
) -> StockOverviewDTO:
    return service.stock_overview()

@router.get(
    "/total-stock",
    response_model=int,
    summary="Sum of stock across all products",
)
@inject
async def total_stock(
    service: StallService = Depends(
        Provide[ApplicationContainer.api_container.stall_service]
    ),
) -> int:
    return service.total_stock_across_products()

@router.put(
    "/{product_id}/stock",
    response_model=ProductDTO,
    status_code=status.HTTP_200_OK,
    summary="Set the stock of a product",
)
@inject
async def set_stock(
    product_id: str,
    request: StockUpdate = Body(...),
    service: StallService = Depends(
        Provide[ApplicationContainer.api_container.stall_service]
    ),
) -> ProductDTO:
    logger.info(
        "[ProductRouter] set_stock product_id=%s quantity=%s",
        product_id,
        request.quantity,
    )
    try:
        return service.set_stock(product_id, request.quantity)
    except StallError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            "[ProductRouter] set_stock error: %s",
            e,
            exc_info=True,
        )
        raise HTTPException(
            status_code=500,
            detail="Failed to set stock",
        )
