from pydantic import BaseModel, EmailStr, Field
from decimal import Decimal
from typing import Optional, List
from datetime import datetime

from .models import OrderStatus


# Categories
class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    active: bool = True

class CategoryCreate(CategoryBase):
    pass

class CategoryUpdate(CategoryBase):
    """Full replacement of the mutable category fields."""

class CategoryOut(CategoryBase):
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# Products
class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    sku: Optional[str] = Field(None, max_length=64)
    active: bool = True
    featured: bool = False

class ProductCreate(ProductBase):
    stock: int = Field(..., ge=0)

class ProductUpdate(ProductBase):
    # Stock is only changed by order placement
    category_id: Optional[int] = Field(None, gt=0, description="Move the product to this category")

class ProductOut(ProductBase):
    id: int
    stock: int
    category_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# Orders
class OrderItemCreate(BaseModel):
    product_id: int = Field(..., gt=0, description="Product ID")
    quantity: int = Field(..., gt=0, description="Product quantity")

class OrderItemOut(BaseModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    price_at_purchase: Decimal

    model_config = {"from_attributes": True}

class OrderDraft(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=100)
    customer_email: EmailStr
    phone_number: Optional[str] = Field(None, max_length=32)
    shipping_address: str = Field(..., min_length=1)

class OrderCreate(OrderDraft):
    items: List[OrderItemCreate] = Field(..., min_length=1, description="List of order items")

class OrderStatusUpdate(BaseModel):
    status: OrderStatus

class OrderOut(OrderDraft):
    id: int
    status: OrderStatus
    total_amount: Decimal
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[OrderItemOut] = []

    model_config = {"from_attributes": True}
