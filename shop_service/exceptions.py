"""Domain errors raised by the service layer.

None of these are retryable: they follow deterministically from the input
and the current state of the store. ``main.py`` maps each family to an HTTP
status code.
"""

from __future__ import annotations

from typing import Any, Dict


class ShopError(Exception):
    """Base class for every error surfaced to the caller."""

    code = "shop_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message}


class NotFoundError(ShopError):
    code = "not_found"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} not found with id: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id

    def to_detail(self) -> Dict[str, Any]:
        detail = super().to_detail()
        detail.update({"entity": self.entity, "id": self.entity_id})
        return detail


class ConflictError(ShopError):
    code = "conflict"


class InsufficientStockError(ShopError):
    code = "insufficient_stock"

    def __init__(self, product_id: int, available: int, requested: int, product_name: str | None = None):
        label = f"'{product_name}' (ID: {product_id})" if product_name else f"ID: {product_id}"
        super().__init__(
            f"Insufficient stock for product {label}. Available: {available}, Requested: {requested}"
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested

    def to_detail(self) -> Dict[str, Any]:
        detail = super().to_detail()
        detail.update(
            {
                "product_id": self.product_id,
                "available": self.available,
                "requested": self.requested,
            }
        )
        return detail


class ValidationError(ShopError):
    code = "validation_error"
