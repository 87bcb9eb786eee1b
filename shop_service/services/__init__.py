from .catalog import CategoryService, ProductService
from .orders import OrderService

__all__ = ["CategoryService", "ProductService", "OrderService"]
