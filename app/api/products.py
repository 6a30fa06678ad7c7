"""
Product API endpoints
Public reads, admin-gated writes
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.errors import ErrorResponseModel
from app.dependencies.auth import role_gated_route
from app.dependencies.product import get_product_service
from app.models.product import Product
from app.schemas.product import ProductCreate, ProductListResponse, ProductUpdate
from app.services.product import ProductService

router = APIRouter()

# Writes are authorized before the request body is read
admin_router = APIRouter(route_class=role_gated_route())

AUTH_RESPONSES = {
    401: {"model": ErrorResponseModel},
    403: {"model": ErrorResponseModel},
}


@router.get(
    "",
    response_model=ProductListResponse,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorResponseModel}},
)
async def list_products(
    limit: Optional[str] = Query(None, description="Page size, 1-100 (default 20)"),
    offset: Optional[str] = Query(None, description="Items to skip (default 0)"),
    category: Optional[str] = Query(None, description="Exact category match"),
    service: ProductService = Depends(get_product_service),
):
    """
    List products newest first.
    Out-of-range or non-numeric limit/offset fall back to their defaults.
    """
    return await service.list_products(limit=limit, offset=offset, category=category)


@router.get(
    "/{product_id}",
    response_model=Product,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponseModel}},
)
async def get_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
):
    """
    Get a product by its ID.
    """
    return await service.get_product(product_id)


@admin_router.post(
    "",
    response_model=Product,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponseModel}, **AUTH_RESPONSES},
)
async def create_product(
    product: ProductCreate,
    service: ProductService = Depends(get_product_service),
):
    """
    Create a new product. Requires the admin role.
    """
    return await service.create_product(product)


@admin_router.put(
    "/{product_id}",
    response_model=Product,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponseModel}, 404: {"model": ErrorResponseModel}, **AUTH_RESPONSES},
)
async def update_product(
    product_id: str,
    product: ProductUpdate,
    service: ProductService = Depends(get_product_service),
):
    """
    Partially update a product. Only fields present in the body change.
    Requires the admin role.
    """
    return await service.update_product(product_id, product)


@admin_router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponseModel}, **AUTH_RESPONSES},
)
async def delete_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
):
    """
    Delete a product. Requires the admin role.
    """
    await service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
