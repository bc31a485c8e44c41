from decimal import Decimal
from typing import List

from app.v1_0.entities import ProductDTO

# Products seeded on first run, when the remote catalog is empty.
DEFAULT_CATALOG: List[ProductDTO] = [
    ProductDTO(id="1", name="Frango", price=Decimal("50"), stock=0),
    ProductDTO(id="2", name="Sobrecoxa", price=Decimal("5"), stock=0),
    ProductDTO(id="3", name="Linguiça", price=Decimal("4"), stock=0),
    ProductDTO(id="4", name="Carne", price=Decimal("60"), stock=0),
    ProductDTO(id="5", name="Costela", price=Decimal("55"), stock=0),
    ProductDTO(id="6", name="Maionese", price=Decimal("7"), stock=0),
]
