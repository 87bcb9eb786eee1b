import datetime as dt

from fastapi import APIRouter, Depends, Query, status

from .. import schemas
from ..dependencies import get_order_service
from ..models import OrderStatus
from ..services import OrderService

router = APIRouter(
    prefix="/orders",
    tags=["Orders"]
)


@router.get("/", response_model=list[schemas.OrderOut])
def get_orders(service: OrderService = Depends(get_order_service)):
    return service.list_orders()


@router.get("/customer", response_model=list[schemas.OrderOut])
def get_orders_by_customer_email(
    email: str = Query(..., min_length=3),
    service: OrderService = Depends(get_order_service),
):
    return service.list_orders_by_customer_email(email)


@router.get("/status/{order_status}", response_model=list[schemas.OrderOut])
def get_orders_by_status(order_status: OrderStatus, service: OrderService = Depends(get_order_service)):
    return service.list_orders_by_status(order_status)


@router.get("/date-range", response_model=list[schemas.OrderOut])
def get_orders_by_date_range(
    start_date: dt.datetime = Query(..., description="ISO-8601 date-time, inclusive"),
    end_date: dt.datetime = Query(..., description="ISO-8601 date-time, inclusive"),
    service: OrderService = Depends(get_order_service),
):
    return service.list_orders_by_date_range(start_date, end_date)


@router.get("/{order_id}", response_model=schemas.OrderOut)
def get_order(order_id: int, service: OrderService = Depends(get_order_service)):
    return service.get_order(order_id)


@router.post("/", response_model=schemas.OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(body: schemas.OrderCreate, service: OrderService = Depends(get_order_service)):
    """Place an order: prices are snapshotted and stock is taken for every item."""
    draft = body.model_dump(exclude={"items"})
    items = [i.model_dump() for i in body.items]
    return service.place_order(draft, items)


@router.patch("/{order_id}/status", response_model=schemas.OrderOut)
def update_order_status(
    order_id: int,
    body: schemas.OrderStatusUpdate,
    service: OrderService = Depends(get_order_service),
):
    return service.set_order_status(order_id, body.status)
