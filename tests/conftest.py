import os

# Must be set before shop_service.database builds its engine
os.environ["DATABASE_URL"] = "sqlite://"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from shop_service.database import SessionLocal, engine
from shop_service.models import Base, Category, Product
from shop_service.repositories import CategoryRepository, OrderRepository, ProductRepository
from shop_service.services import CategoryService, OrderService, ProductService


@pytest.fixture(autouse=True)
def _fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def category_service(db):
    return CategoryService(db, CategoryRepository(db), ProductRepository(db))


@pytest.fixture
def product_service(db):
    return ProductService(db, ProductRepository(db), CategoryRepository(db))


@pytest.fixture
def order_service(db):
    return OrderService(db, OrderRepository(db), ProductRepository(db))


@pytest.fixture
def category(db):
    cat = Category(name="Gadgets", description="Small electronics")
    db.add(cat)
    db.commit()
    db.refresh(cat)
    return cat


@pytest.fixture
def make_product(db, category):
    def _make(name="Widget", price="10.00", stock=5, **extra):
        product = Product(
            name=name,
            price=Decimal(price),
            stock=stock,
            category_id=extra.pop("category_id", category.id),
            **extra,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def draft():
    return {
        "customer_name": "Ada Lovelace",
        "customer_email": "ada@example.com",
        "phone_number": "+44 20 7946 0000",
        "shipping_address": "12 Analytical Row, London",
    }


@pytest.fixture
def client():
    from shop_service.main import app

    with TestClient(app) as c:
        yield c
