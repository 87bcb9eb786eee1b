from fastapi import Depends
from sqlalchemy.orm import Session

from .database import get_db
from .repositories import CategoryRepository, OrderRepository, ProductRepository
from .services import CategoryService, OrderService, ProductService


def get_category_service(db: Session = Depends(get_db)) -> CategoryService:
    return CategoryService(db, CategoryRepository(db), ProductRepository(db))


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(db, ProductRepository(db), CategoryRepository(db))


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db, OrderRepository(db), ProductRepository(db))
