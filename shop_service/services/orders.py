from __future__ import annotations

import datetime as dt
import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Sequence

from sqlalchemy.orm import Session

from ..exceptions import InsufficientStockError, NotFoundError, ValidationError
from ..models import Order, OrderItem, OrderStatus, Product
from ..repositories import OrderRepository, ProductRepository

logger = logging.getLogger(__name__)

DRAFT_FIELDS = ("customer_name", "customer_email", "phone_number", "shipping_address")


def _merge_quantities(items: Sequence[Mapping[str, Any]]) -> Dict[int, int]:
    merged: Dict[int, int] = {}
    for item in items:
        pid = int(item["product_id"])
        qty = int(item["quantity"])
        if qty <= 0:
            raise ValidationError(f"quantity must be > 0 (product {pid})")
        merged[pid] = merged.get(pid, 0) + qty
    return merged


def _as_utc(value: dt.datetime) -> dt.datetime:
    # Naive bounds are taken to be UTC, like the stored timestamps
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


class OrderService:
    def __init__(self, db: Session, orders: OrderRepository, products: ProductRepository):
        self.db = db
        self.orders = orders
        self.products = products

    def list_orders(self) -> List[Order]:
        return self.orders.list()

    def get_order(self, order_id: int) -> Order:
        order = self.orders.get(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def list_orders_by_customer_email(self, email: str) -> List[Order]:
        return self.orders.list_by_customer_email(email)

    def list_orders_by_status(self, status: OrderStatus) -> List[Order]:
        return self.orders.list_by_status(status)

    def list_orders_by_date_range(self, start: dt.datetime, end: dt.datetime) -> List[Order]:
        start, end = _as_utc(start), _as_utc(end)
        if start > end:
            raise ValidationError("start_date must not be after end_date")
        return self.orders.list_by_created_between(start, end)

    def place_order(self, draft: Mapping[str, Any], items: Sequence[Mapping[str, Any]]) -> Order:
        """Create an order, taking stock for every line item.

        draft: customer_name, customer_email, phone_number, shipping_address
        items: [{"product_id": int, "quantity": int}, ...]

        Every line is validated before any stock moves, and the whole
        placement is one transaction: on any error nothing is written.
        """
        if not items:
            raise ValidationError("an order needs at least one item")
        merged = _merge_quantities(items)

        try:
            # Lock rows in a stable order to avoid deadlocks
            products: Dict[int, Product] = {}
            for pid in sorted(merged):
                product = self.products.get_for_update(pid)
                if product is None:
                    raise NotFoundError("Product", pid)
                if product.stock < merged[pid]:
                    raise InsufficientStockError(pid, product.stock, merged[pid], product.name)
                products[pid] = product

            total_amount = Decimal("0")
            order_items: List[OrderItem] = []
            for item in items:
                product = products[int(item["product_id"])]
                quantity = int(item["quantity"])
                price = Decimal(product.price)
                order_items.append(
                    OrderItem(product_id=product.id, quantity=quantity, price_at_purchase=price)
                )
                total_amount += price * quantity

            for pid, qty in merged.items():
                if not self.products.decrement_stock(pid, qty):
                    # Lost a race with another placement since the check above
                    available = self.products.current_stock(pid)
                    raise InsufficientStockError(pid, available, qty, products[pid].name)

            order = Order(
                **{k: draft.get(k) for k in DRAFT_FIELDS},
                status=OrderStatus.CREATED,
                total_amount=total_amount,
            )
            self.orders.add(order)

            # Items become part of the order only once it has an id
            order.items.extend(order_items)
            self.db.commit()
        except InsufficientStockError as e:
            self.db.rollback()
            logger.warning(
                "Order rejected: product %s has %s in stock, %s requested",
                e.product_id, e.available, e.requested,
            )
            raise
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(order)
        logger.info(
            "Placed order %s for %s: %d item(s), total %s",
            order.id, order.customer_email, len(order.items), order.total_amount,
        )
        return order

    def set_order_status(self, order_id: int, status: OrderStatus) -> Order:
        # Any status may follow any status
        order = self.get_order(order_id)
        previous = order.status
        order.status = OrderStatus(status)
        order.updated_at = dt.datetime.now(dt.timezone.utc)
        self.db.commit()
        self.db.refresh(order)
        logger.info("Order %s status %s -> %s", order_id, previous.value, order.status.value)
        return order
