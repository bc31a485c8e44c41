from .base_repository import BaseRepository
from .product_repository import ProductRepository
from .sale_repository import SaleRepository

__all__ = [
    "BaseRepository",
    "ProductRepository",
    "SaleRepository",
]
