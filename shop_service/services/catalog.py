from __future__ import annotations

import datetime as dt
import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..models import Category, Product
from ..repositories import CategoryRepository, ProductRepository

logger = logging.getLogger(__name__)

CATEGORY_FIELDS = ("name", "description", "image_url", "active")
PRODUCT_FIELDS = ("name", "description", "image_url", "price", "sku", "active", "featured")


@contextmanager
def _unit_of_work(db: Session, conflict_message: str):
    """Commit the writes made in the block; constraint violations become conflicts."""
    try:
        yield
        db.commit()
    except IntegrityError:
        # DB-level constraint (race conditions, referenced rows)
        db.rollback()
        raise ConflictError(conflict_message)


def _normalized_name(data: Dict[str, Any]) -> str:
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("name is required")
    return name


class CategoryService:
    def __init__(self, db: Session, categories: CategoryRepository, products: ProductRepository):
        self.db = db
        self.categories = categories
        self.products = products

    def list_categories(self) -> List[Category]:
        return self.categories.list()

    def list_active_categories(self) -> List[Category]:
        return self.categories.list_active()

    def get_category(self, category_id: int) -> Category:
        category = self.categories.get(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def create_category(self, data: Dict[str, Any]) -> Category:
        # Unique name, case-insensitive, across active and inactive categories
        name = _normalized_name(data)
        if self.categories.find_by_name(name) is not None:
            raise ConflictError(f"Category name already exists: {name}")

        category = Category(**{k: data[k] for k in CATEGORY_FIELDS if k in data})
        category.name = name
        with _unit_of_work(self.db, f"Category name already exists: {name}"):
            self.categories.add(category)
        self.db.refresh(category)
        logger.info("Created category %s (%r)", category.id, category.name)
        return category

    def update_category(self, category_id: int, data: Dict[str, Any]) -> Category:
        category = self.get_category(category_id)
        name = _normalized_name(data)
        if self.categories.find_by_name(name, exclude_id=category_id) is not None:
            raise ConflictError(f"Category name already exists: {name}")

        with _unit_of_work(self.db, f"Category name already exists: {name}"):
            category.name = name
            category.description = data.get("description")
            category.image_url = data.get("image_url")
            category.active = bool(data.get("active", True))
            category.updated_at = dt.datetime.now(dt.timezone.utc)
        self.db.refresh(category)
        logger.info("Updated category %s", category_id)
        return category

    def delete_category(self, category_id: int) -> None:
        """Delete a category that no product references any more.

        Products are never cascaded away with their category; callers must
        move or delete them first.
        """
        category = self.get_category(category_id)
        in_use = self.products.count_by_category(category_id)
        if in_use:
            raise ConflictError(
                f"Category {category_id} is still referenced by {in_use} product(s)"
            )
        with _unit_of_work(self.db, f"Category {category_id} is still referenced"):
            self.categories.delete(category)
        logger.info("Deleted category %s", category_id)


class ProductService:
    def __init__(self, db: Session, products: ProductRepository, categories: CategoryRepository):
        self.db = db
        self.products = products
        self.categories = categories

    def list_products(self) -> List[Product]:
        return self.products.list()

    def list_active_products(self) -> List[Product]:
        return self.products.list_active()

    def list_featured_products(self) -> List[Product]:
        return self.products.list_featured()

    def get_product(self, product_id: int) -> Product:
        product = self.products.get(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def list_products_by_category(self, category_id: int, skip: int = 0, limit: int = 100) -> List[Product]:
        return self.products.list_by_category(category_id, skip=skip, limit=limit)

    def search_products(self, keyword: str, skip: int = 0, limit: int = 100) -> List[Product]:
        keyword = (keyword or "").strip()
        if not keyword:
            raise ValidationError("keyword is required")
        return self.products.search(keyword, skip=skip, limit=limit)

    def list_products_by_price_range(
        self, min_price: Decimal, max_price: Decimal, skip: int = 0, limit: int = 100
    ) -> List[Product]:
        if min_price > max_price:
            raise ValidationError("min_price must not exceed max_price")
        return self.products.list_by_price_range(min_price, max_price, skip=skip, limit=limit)

    def _resolve_category(self, category_id: int) -> Category:
        category = self.categories.get(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def create_product(self, data: Dict[str, Any], category_id: int) -> Product:
        category = self._resolve_category(category_id)
        name = _normalized_name(data)

        product = Product(**{k: data[k] for k in PRODUCT_FIELDS if k in data})
        product.name = name
        product.stock = int(data.get("stock") or 0)
        if product.stock < 0:
            raise ValidationError("stock must be >= 0")
        product.category = category

        with _unit_of_work(self.db, "Product could not be created"):
            self.products.add(product)
        self.db.refresh(product)
        logger.info("Created product %s in category %s", product.id, category.id)
        return product

    def update_product(self, product_id: int, data: Dict[str, Any]) -> Product:
        product = self.get_product(product_id)
        name = _normalized_name(data)

        # Resolve before touching the product so a bad id leaves it unchanged
        new_category = None
        if data.get("category_id") is not None:
            new_category = self._resolve_category(data["category_id"])

        with _unit_of_work(self.db, "Product could not be updated"):
            product.name = name
            product.description = data.get("description")
            product.image_url = data.get("image_url")
            product.price = data["price"]
            product.sku = data.get("sku")
            product.active = bool(data.get("active", True))
            product.featured = bool(data.get("featured", False))
            product.updated_at = dt.datetime.now(dt.timezone.utc)
            if new_category is not None:
                product.category = new_category
        self.db.refresh(product)
        logger.info("Updated product %s", product_id)
        return product

    def delete_product(self, product_id: int) -> None:
        product = self.get_product(product_id)
        with _unit_of_work(self.db, f"Product {product_id} is referenced by existing orders"):
            self.products.delete(product)
        logger.info("Deleted product %s", product_id)
