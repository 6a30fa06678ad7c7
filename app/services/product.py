"""
Product service containing business logic layer
"""

from typing import Optional, Union

from app.core.errors import DatabaseError, ErrorResponse
from app.core.logger import logger
from app.models.product import Product
from app.repositories.product import ProductRepository
from app.schemas.product import ProductCreate, ProductListResponse, ProductUpdate
from app.utils.pagination import clamp_limit, clamp_offset


class ProductService:
    """Service layer translating API requests into repository calls"""

    def __init__(self, repository: ProductRepository):
        self.repository = repository

    async def list_products(
        self,
        limit: Optional[Union[int, str]] = None,
        offset: Optional[Union[int, str]] = None,
        category: Optional[str] = None,
    ) -> ProductListResponse:
        """
        List products newest first with pagination metadata.

        The total is computed with the same category rule as the page. If
        counting fails, the page size stands in for the total.
        """
        limit = clamp_limit(limit)
        offset = clamp_offset(offset)
        category = category or ""

        products = await self.repository.list_products(limit, offset, category)

        try:
            total = await self.repository.count(category)
        except DatabaseError as e:
            logger.warning(
                "Product count failed, using page size as total",
                metadata={"event": "count_products_degraded", "operation": e.operation}
            )
            total = len(products)

        logger.debug(
            f"Fetched {len(products)} products",
            metadata={
                "event": "list_products",
                "count": len(products),
                "total": total,
                "limit": limit,
                "offset": offset,
                "category": category or None,
            }
        )

        return ProductListResponse(products=products, total=total, limit=limit, offset=offset)

    async def get_product(self, product_id: str) -> Product:
        """Get product by ID"""
        product = await self.repository.get_by_id(product_id)
        if product is None:
            raise ErrorResponse("product not found", status_code=404)
        return product

    async def create_product(self, product_data: ProductCreate) -> Product:
        """Create a new product"""
        product = await self.repository.create(product_data)

        logger.info(
            f"Created product {product.id}",
            metadata={"event": "create_product", "product_id": product.id, "sku": product.sku}
        )
        return product

    async def update_product(self, product_id: str, product_data: ProductUpdate) -> Product:
        """Apply a partial update; an empty update only refreshes updated_at"""
        product = await self.repository.update(product_id, product_data)
        if product is None:
            raise ErrorResponse("product not found", status_code=404)

        logger.info(
            f"Updated product {product_id}",
            metadata={
                "event": "update_product",
                "product_id": product_id,
                "fields": sorted(product_data.provided_fields()),
            }
        )
        return product

    async def delete_product(self, product_id: str) -> None:
        """Delete a product permanently"""
        deleted = await self.repository.delete(product_id)
        if not deleted:
            raise ErrorResponse("product not found", status_code=404)

        logger.info(
            f"Deleted product {product_id}",
            metadata={"event": "delete_product", "product_id": product_id}
        )
