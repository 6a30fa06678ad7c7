"""
Dependency injection for the catalog: pool -> repository -> service
"""

import asyncpg
from fastapi import Depends

from app.core.config import config
from app.db.postgres import get_pool
from app.repositories.product import ProductRepository
from app.services.product import ProductService


def get_db_pool() -> asyncpg.Pool:
    """Connection pool opened by the application lifespan"""
    return get_pool()


async def get_product_repository(
    pool: asyncpg.Pool = Depends(get_db_pool)
) -> ProductRepository:
    """Repository whose statements share the configured command timeout"""
    return ProductRepository(pool, timeout=config.db_command_timeout)


async def get_product_service(
    repository: ProductRepository = Depends(get_product_repository)
) -> ProductService:
    return ProductService(repository)
