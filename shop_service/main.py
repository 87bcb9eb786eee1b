import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import CORS_ORIGINS, LOG_LEVEL
from .database import engine
from .exceptions import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    ShopError,
    ValidationError,
)
from .models import Base
from .routers import category_router, order_router, product_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Shop Service",
    description="Catalog and order placement for a small e-commerce backend",
    version=__version__,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create database tables
Base.metadata.create_all(bind=engine)

# Include routers
app.include_router(category_router.router)
app.include_router(product_router.router)
app.include_router(order_router.router)


_STATUS_BY_ERROR = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    InsufficientStockError: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_400_BAD_REQUEST,
}


@app.exception_handler(ShopError)
async def handle_shop_error(request: Request, exc: ShopError) -> JSONResponse:
    status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.debug("%s %s -> %s: %s", request.method, request.url.path, status_code, exc.message)
    return JSONResponse(status_code=status_code, content={"detail": exc.to_detail()})


@app.get("/")
def root():
    return {
        "service": "Shop Service",
        "status": "running",
        "version": __version__,
    }


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "service": "shop-service"
    }
