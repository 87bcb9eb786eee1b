from fastapi import APIRouter, Depends, Query, Response, status

from .. import schemas
from ..dependencies import get_category_service
from ..services import CategoryService

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("/", response_model=list[schemas.CategoryOut])
def list_categories(
    active_only: bool = Query(False, description="Only return active categories"),
    service: CategoryService = Depends(get_category_service),
):
    if active_only:
        return service.list_active_categories()
    return service.list_categories()


@router.get("/{category_id}", response_model=schemas.CategoryOut)
def get_category(category_id: int, service: CategoryService = Depends(get_category_service)):
    return service.get_category(category_id)


@router.post("/", response_model=schemas.CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    body: schemas.CategoryCreate,
    service: CategoryService = Depends(get_category_service),
):
    return service.create_category(body.model_dump())


@router.put("/{category_id}", response_model=schemas.CategoryOut)
def update_category(
    category_id: int,
    body: schemas.CategoryUpdate,
    service: CategoryService = Depends(get_category_service),
):
    return service.update_category(category_id, body.model_dump())


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: int, service: CategoryService = Depends(get_category_service)):
    service.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
