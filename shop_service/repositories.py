"""Store-access objects.

Each repository wraps the request's ``Session`` and is handed to the services
that need it. Repositories flush but never commit; transaction boundaries
belong to the services.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, or_, update
from sqlalchemy.orm import Session

from .models import Category, Order, OrderStatus, Product


class CategoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, category_id: int) -> Optional[Category]:
        return self.db.query(Category).filter(Category.id == category_id).first()

    def list(self) -> List[Category]:
        return self.db.query(Category).order_by(Category.id).all()

    def list_active(self) -> List[Category]:
        return self.db.query(Category).filter(Category.active.is_(True)).order_by(Category.id).all()

    def find_by_name(self, name: str, exclude_id: int | None = None) -> Optional[Category]:
        q = self.db.query(Category).filter(func.lower(Category.name) == name.lower())
        if exclude_id is not None:
            q = q.filter(Category.id != exclude_id)
        return q.first()

    def add(self, category: Category) -> Category:
        self.db.add(category)
        self.db.flush()
        return category

    def delete(self, category: Category) -> None:
        self.db.delete(category)
        self.db.flush()


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_for_update(self, product_id: int) -> Optional[Product]:
        # Row lock on backends that support it; SQLite ignores FOR UPDATE
        return (
            self.db.query(Product)
            .filter(Product.id == product_id)
            .with_for_update()
            .first()
        )

    def list(self) -> List[Product]:
        return self.db.query(Product).order_by(Product.id).all()

    def list_active(self) -> List[Product]:
        return self.db.query(Product).filter(Product.active.is_(True)).order_by(Product.id).all()

    def list_featured(self) -> List[Product]:
        return self.db.query(Product).filter(Product.featured.is_(True)).order_by(Product.id).all()

    def list_by_category(self, category_id: int, skip: int = 0, limit: int = 100) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.category_id == category_id)
            .order_by(Product.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_category(self, category_id: int) -> int:
        return self.db.query(Product).filter(Product.category_id == category_id).count()

    def search(self, keyword: str, skip: int = 0, limit: int = 100) -> List[Product]:
        search_pattern = f"%{keyword}%"
        return (
            self.db.query(Product)
            .filter(Product.active.is_(True))
            .filter(
                or_(
                    Product.name.ilike(search_pattern),
                    Product.description.ilike(search_pattern),
                )
            )
            .order_by(Product.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_by_price_range(
        self, min_price: Decimal, max_price: Decimal, skip: int = 0, limit: int = 100
    ) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.price.between(min_price, max_price))
            .order_by(Product.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def add(self, product: Product) -> Product:
        self.db.add(product)
        self.db.flush()
        return product

    def delete(self, product: Product) -> None:
        self.db.delete(product)
        self.db.flush()

    def current_stock(self, product_id: int) -> int:
        # Column query, bypasses the identity map
        stock = self.db.query(Product.stock).filter(Product.id == product_id).scalar()
        return int(stock or 0)

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """Atomically take ``quantity`` units if at least that many remain.

        Returns False when the row no longer holds enough stock, which means a
        concurrent order got there first.
        """
        result = self.db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity, updated_at=dt.datetime.now(dt.timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class OrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, order_id: int) -> Optional[Order]:
        return self.db.query(Order).filter(Order.id == order_id).first()

    def list(self) -> List[Order]:
        return self.db.query(Order).order_by(Order.id).all()

    def list_by_customer_email(self, email: str) -> List[Order]:
        return self.db.query(Order).filter(Order.customer_email == email).order_by(Order.id).all()

    def list_by_status(self, status: OrderStatus) -> List[Order]:
        return self.db.query(Order).filter(Order.status == status).order_by(Order.id).all()

    def list_by_created_between(self, start: dt.datetime, end: dt.datetime) -> List[Order]:
        return (
            self.db.query(Order)
            .filter(Order.created_at >= start, Order.created_at <= end)
            .order_by(Order.id)
            .all()
        )

    def add(self, order: Order) -> Order:
        self.db.add(order)
        self.db.flush()  # Get order ID without committing
        return order
