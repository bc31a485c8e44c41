from .product_DTO import ProductDTO, StockOverviewDTO
from .sale_itemDTO import SaleItemDTO, SaleItemViewDTO
from .sale_DTO import SaleDTO, SaleViewDTO
from .sync_DTO import SyncStatusDTO


__all__ = [
    "ProductDTO", "StockOverviewDTO",
    "SaleItemDTO", "SaleItemViewDTO",
    "SaleDTO", "SaleViewDTO",
    "SyncStatusDTO",
]
