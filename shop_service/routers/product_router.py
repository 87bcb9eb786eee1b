from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from .. import schemas
from ..dependencies import get_product_service
from ..services import ProductService

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("/", response_model=list[schemas.ProductOut])
def list_products(
    active_only: bool = Query(False, description="Only return active products"),
    featured_only: bool = Query(False, description="Only return featured products"),
    service: ProductService = Depends(get_product_service),
):
    if featured_only:
        products = service.list_featured_products()
        if active_only:
            products = [p for p in products if p.active]
        return products
    if active_only:
        return service.list_active_products()
    return service.list_products()


@router.get("/search", response_model=list[schemas.ProductOut])
def search_products(
    keyword: str = Query(..., min_length=1, description="Matched against name and description"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    service: ProductService = Depends(get_product_service),
):
    return service.search_products(keyword, skip=skip, limit=limit)


@router.get("/price-range", response_model=list[schemas.ProductOut])
def list_products_by_price_range(
    min_price: Decimal = Query(..., ge=0),
    max_price: Decimal = Query(..., ge=0),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    service: ProductService = Depends(get_product_service),
):
    return service.list_products_by_price_range(min_price, max_price, skip=skip, limit=limit)


@router.get("/category/{category_id}", response_model=list[schemas.ProductOut])
def list_products_by_category(
    category_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    service: ProductService = Depends(get_product_service),
):
    return service.list_products_by_category(category_id, skip=skip, limit=limit)


@router.get("/{product_id}", response_model=schemas.ProductOut)
def get_product(product_id: int, service: ProductService = Depends(get_product_service)):
    return service.get_product(product_id)


@router.post("/", response_model=schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    body: schemas.ProductCreate,
    category_id: int = Query(..., gt=0, description="Category the product belongs to"),
    service: ProductService = Depends(get_product_service),
):
    return service.create_product(body.model_dump(), category_id)


@router.put("/{product_id}", response_model=schemas.ProductOut)
def update_product(
    product_id: int,
    body: schemas.ProductUpdate,
    service: ProductService = Depends(get_product_service),
):
    return service.update_product(product_id, body.model_dump())


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: int, service: ProductService = Depends(get_product_service)):
    service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
