from typing import Any, Optional


class StallError(Exception):
    """Base class for every error raised by the inventory/sale core."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(StallError):
    """A draft or patch was rejected before any state was touched."""


class InsufficientStock(ValidationError):
    def __init__(self, product_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Insufficient stock for product {product_id}: requested {requested}, available {available}",
            product_id=product_id,
            requested=requested,
            available=available,
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class NotFound(StallError):
    def __init__(self, resource: str, resource_id: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"{resource.capitalize()} {resource_id} not found", resource=resource, id=resource_id)
        self.resource = resource
        self.resource_id = resource_id


class UnknownProduct(NotFound):
    def __init__(self, product_id: str) -> None:
        super().__init__("product", product_id)
        self.product_id = product_id


class SyncError(StallError):
    """Remote read/write failure. Never unwinds local state."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None) -> None:
        detail = f"{operation} failed" + (f": {cause}" if cause else "")
        super().__init__(detail, operation=operation)
        self.operation = operation
        self.__cause__ = cause
