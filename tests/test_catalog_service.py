from decimal import Decimal

import pytest

from shop_service.exceptions import ConflictError, NotFoundError, ValidationError
from shop_service.models import Category, Product


def _product_data(**overrides):
    data = {
        "name": "Kettle",
        "description": "1.7l, stainless",
        "image_url": None,
        "price": Decimal("24.90"),
        "stock": 8,
        "sku": "KT-17",
        "active": True,
        "featured": False,
    }
    data.update(overrides)
    return data


class TestCategories:
    def test_create_and_fetch(self, category_service):
        created = category_service.create_category({"name": "Books", "description": "Paper"})

        fetched = category_service.get_category(created.id)
        assert fetched.name == "Books"
        assert fetched.active is True
        assert fetched.created_at is not None

    def test_duplicate_name_conflicts(self, category_service):
        category_service.create_category({"name": "Books"})

        with pytest.raises(ConflictError):
            category_service.create_category({"name": "  books "})

    def test_duplicate_of_inactive_category_conflicts(self, category_service):
        category_service.create_category({"name": "Archive", "active": False})

        with pytest.raises(ConflictError):
            category_service.create_category({"name": "Archive"})

    def test_name_taken_after_precheck_conflicts(self, category_service, monkeypatch):
        category_service.create_category({"name": "Books"})
        # Another request commits the same name between the lookup and the insert
        monkeypatch.setattr(category_service.categories, "find_by_name", lambda name, exclude_id=None: None)

        with pytest.raises(ConflictError):
            category_service.create_category({"name": "Books"})

        assert [c.name for c in category_service.list_categories()] == ["Books"]

    def test_rename_onto_name_taken_after_precheck_conflicts(self, category_service, monkeypatch):
        category_service.create_category({"name": "Garden"})
        other = category_service.create_category({"name": "Kitchen"})
        monkeypatch.setattr(category_service.categories, "find_by_name", lambda name, exclude_id=None: None)

        with pytest.raises(ConflictError):
            category_service.update_category(other.id, {"name": "Garden"})

        assert category_service.get_category(other.id).name == "Kitchen"

    def test_blank_name_is_rejected(self, category_service):
        with pytest.raises(ValidationError):
            category_service.create_category({"name": "   "})

    def test_list_active_only(self, category_service):
        category_service.create_category({"name": "Visible"})
        category_service.create_category({"name": "Hidden", "active": False})

        assert [c.name for c in category_service.list_active_categories()] == ["Visible"]
        assert len(category_service.list_categories()) == 2

    def test_get_missing(self, category_service):
        with pytest.raises(NotFoundError):
            category_service.get_category(404)

    def test_update_overwrites_all_fields(self, category_service):
        created = category_service.create_category(
            {"name": "Toys", "description": "old", "image_url": "http://img/old.png"}
        )
        before = created.updated_at

        updated = category_service.update_category(
            created.id, {"name": "Games", "description": None, "image_url": None, "active": False}
        )

        assert updated.name == "Games"
        assert updated.description is None
        assert updated.image_url is None
        assert updated.active is False
        assert updated.updated_at >= before

    def test_rename_onto_existing_name_conflicts(self, category_service):
        category_service.create_category({"name": "Garden"})
        other = category_service.create_category({"name": "Kitchen"})

        with pytest.raises(ConflictError):
            category_service.update_category(other.id, {"name": "garden"})

    def test_update_keeping_own_name(self, category_service):
        created = category_service.create_category({"name": "Garden"})

        updated = category_service.update_category(created.id, {"name": "Garden", "description": "outdoor"})

        assert updated.description == "outdoor"

    def test_delete(self, db, category_service):
        created = category_service.create_category({"name": "Temporary"})

        category_service.delete_category(created.id)

        assert db.get(Category, created.id) is None

    def test_delete_missing(self, category_service):
        with pytest.raises(NotFoundError):
            category_service.delete_category(12)

    def test_delete_in_use_is_rejected(self, db, category_service, category, make_product):
        make_product()

        with pytest.raises(ConflictError):
            category_service.delete_category(category.id)

        assert db.get(Category, category.id) is not None


class TestProducts:
    def test_create_requires_existing_category(self, product_service):
        with pytest.raises(NotFoundError):
            product_service.create_product(_product_data(), category_id=99)

    def test_create(self, product_service, category):
        product = product_service.create_product(_product_data(), category_id=category.id)

        assert product.id is not None
        assert product.category_id == category.id
        assert product.stock == 8
        assert product.price == Decimal("24.90")

    def test_get_missing(self, product_service):
        with pytest.raises(NotFoundError):
            product_service.get_product(1)

    def test_update_overwrites_fields_but_not_stock(self, product_service, make_product):
        product = make_product(stock=5, sku="OLD", featured=True)

        updated = product_service.update_product(
            product.id,
            _product_data(name="Renamed", price=Decimal("12.00"), sku=None, featured=False, stock=100),
        )

        assert updated.name == "Renamed"
        assert updated.price == Decimal("12.00")
        assert updated.sku is None
        assert updated.featured is False
        assert updated.stock == 5

    def test_update_moves_category(self, db, product_service, make_product):
        target = Category(name="Outdoor")
        db.add(target)
        db.commit()
        product = make_product()

        updated = product_service.update_product(product.id, _product_data(category_id=target.id))

        assert updated.category_id == target.id

    def test_update_to_missing_category_leaves_product_unchanged(self, db, product_service, category, make_product):
        product = make_product(name="Original")

        with pytest.raises(NotFoundError):
            product_service.update_product(product.id, _product_data(name="Changed", category_id=555))

        db.expire_all()
        stored = db.get(Product, product.id)
        assert stored.category_id == category.id
        assert stored.name == "Original"

    def test_delete(self, db, product_service, make_product):
        product = make_product()

        product_service.delete_product(product.id)

        assert db.get(Product, product.id) is None

    def test_delete_missing(self, product_service):
        with pytest.raises(NotFoundError):
            product_service.delete_product(3)

    def test_active_and_featured_listings(self, product_service, make_product):
        make_product(name="Plain")
        make_product(name="Retired", active=False)
        make_product(name="Star", featured=True)

        assert [p.name for p in product_service.list_active_products()] == ["Plain", "Star"]
        assert [p.name for p in product_service.list_featured_products()] == ["Star"]
        assert len(product_service.list_products()) == 3

    def test_search_matches_name_or_description_of_active_products(self, product_service, make_product):
        make_product(name="Blue Kettle")
        make_product(name="Teapot", description="pairs with a kettle")
        make_product(name="Old Kettle", active=False)
        make_product(name="Toaster")

        found = product_service.search_products("KETTLE")

        assert [p.name for p in found] == ["Blue Kettle", "Teapot"]

    def test_search_requires_keyword(self, product_service):
        with pytest.raises(ValidationError):
            product_service.search_products("  ")

    def test_price_range_is_inclusive(self, product_service, make_product):
        make_product(name="Cheap", price="5.00")
        make_product(name="Mid", price="10.00")
        make_product(name="Dear", price="50.00")

        found = product_service.list_products_by_price_range(Decimal("5.00"), Decimal("10.00"))

        assert [p.name for p in found] == ["Cheap", "Mid"]

    def test_price_range_bounds_must_be_ordered(self, product_service):
        with pytest.raises(ValidationError):
            product_service.list_products_by_price_range(Decimal("10"), Decimal("1"))

    def test_list_by_category_pages(self, db, product_service, category, make_product):
        other = Category(name="Elsewhere")
        db.add(other)
        db.commit()
        for i in range(3):
            make_product(name=f"P{i}")
        make_product(name="Foreign", category_id=other.id)

        page = product_service.list_products_by_category(category.id, skip=1, limit=1)

        assert [p.name for p in page] == ["P1"]
        assert len(product_service.list_products_by_category(category.id)) == 3
