"""
Product repository for data access layer following Repository pattern

All SQL for catalog.products is built here. User-supplied values are always
bound as positional parameters; only the statement shape varies.
"""

import asyncio
import uuid
from typing import Any, Dict, List, Optional, Tuple

import asyncpg

from app.core.config import config
from app.core.errors import DatabaseError
from app.core.logger import logger
from app.models.product import Product
from app.schemas.product import ProductCreate, ProductUpdate

TABLE = "catalog.products"

SELECT_COLUMNS = """
    id, name, description, price, primary_image_url,
    COALESCE(images, '{}'::text[]) AS images,
    category, sku, stock_count,
    COALESCE(tags, '{}'::text[]) AS tags,
    rating, review_count, created_at, updated_at
"""

# Order in which partial-update clauses are emitted
UPDATABLE_COLUMNS = (
    "name",
    "description",
    "price",
    "primary_image_url",
    "images",
    "category",
    "sku",
    "stock_count",
    "tags",
)

STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class QueryParams:
    """Positional parameter list that hands out the next free $N placeholder"""

    def __init__(self):
        self.values: List[Any] = []

    def add(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"

    def __len__(self) -> int:
        return len(self.values)


def category_predicate(category: str, params: QueryParams) -> str:
    """WHERE clause for the category filter; empty string means no filter"""
    if not category:
        return ""
    return f" WHERE category = {params.add(category)}"


def build_list_query(limit: int, offset: int, category: str = "") -> Tuple[str, List[Any]]:
    params = QueryParams()
    query = f"SELECT {SELECT_COLUMNS} FROM {TABLE}"
    query += category_predicate(category, params)
    query += " ORDER BY created_at DESC"
    query += f" LIMIT {params.add(limit)}"
    query += f" OFFSET {params.add(offset)}"
    return query, params.values


def build_count_query(category: str = "") -> Tuple[str, List[Any]]:
    params = QueryParams()
    query = f"SELECT COUNT(*) FROM {TABLE}"
    query += category_predicate(category, params)
    return query, params.values


def build_update_query(product_id: uuid.UUID, fields: Dict[str, Any]) -> Tuple[str, List[Any]]:
    """
    Build a single UPDATE touching only the provided columns.

    updated_at is always refreshed, so an empty field set is still a
    valid statement. The identity predicate takes the last ordinal.
    """
    params = QueryParams()
    assignments = ["updated_at = now()"]
    for column in UPDATABLE_COLUMNS:
        if column in fields:
            assignments.append(f"{column} = {params.add(fields[column])}")

    query = (
        f"UPDATE {TABLE} SET {', '.join(assignments)}"
        f" WHERE id = {params.add(product_id)}"
        f" RETURNING {SELECT_COLUMNS}"
    )
    return query, params.values


def parse_product_id(product_id: str) -> Optional[uuid.UUID]:
    """Return the UUID for a path identifier, or None if it is malformed"""
    try:
        return uuid.UUID(str(product_id))
    except (ValueError, AttributeError, TypeError):
        return None


def rows_affected(status: str) -> int:
    """Row count from an asyncpg command status such as 'DELETE 1'"""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, AttributeError):
        return 0


class ProductRepository:
    """Repository for product data access operations"""

    def __init__(self, pool: asyncpg.Pool, timeout: Optional[float] = None):
        self.pool = pool
        self.timeout = timeout if timeout is not None else config.db_command_timeout

    @staticmethod
    def _record_to_product(record) -> Product:
        """Convert a result row to a Product, coalescing NULL arrays and rating"""
        data = dict(record)
        data["id"] = str(data["id"])
        data["images"] = list(data.get("images") or [])
        data["tags"] = list(data.get("tags") or [])
        rating = data.get("rating")
        data["rating"] = float(rating) if rating is not None else None
        return Product(**data)

    def _fail(self, operation: str, error: Exception) -> DatabaseError:
        logger.error(
            f"PostgreSQL error during {operation}: {error}",
            error=error,
            metadata={"event": "db_error", "operation": operation}
        )
        return DatabaseError(operation, error)

    async def list_products(self, limit: int, offset: int, category: str = "") -> List[Product]:
        """List products newest first, optionally filtered by exact category"""
        query, args = build_list_query(limit, offset, category)
        try:
            records = await self.pool.fetch(query, *args, timeout=self.timeout)
        except STORE_ERRORS as e:
            raise self._fail("list_products", e)
        return [self._record_to_product(r) for r in records]

    async def count(self, category: str = "") -> int:
        """Count products matching the same category rule as list_products"""
        query, args = build_count_query(category)
        try:
            total = await self.pool.fetchval(query, *args, timeout=self.timeout)
        except STORE_ERRORS as e:
            raise self._fail("count", e)
        return int(total or 0)

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        """Get product by ID; None means not found"""
        pid = parse_product_id(product_id)
        if pid is None:
            return None

        query = f"SELECT {SELECT_COLUMNS} FROM {TABLE} WHERE id = $1"
        try:
            record = await self.pool.fetchrow(query, pid, timeout=self.timeout)
        except STORE_ERRORS as e:
            raise self._fail("get_by_id", e)
        return self._record_to_product(record) if record is not None else None

    async def create(self, product_data: ProductCreate) -> Product:
        """Insert a new product and return the row as stored"""
        query = f"""
            INSERT INTO {TABLE} (
                id, name, description, price, primary_image_url, images,
                category, sku, stock_count, tags
            ) VALUES (
                $1, $2, $3, $4, $5, $6, $7, $8, $9, $10
            )
            RETURNING {SELECT_COLUMNS}
        """
        try:
            record = await self.pool.fetchrow(
                query,
                uuid.uuid4(),
                product_data.name,
                product_data.description,
                product_data.price,
                product_data.primary_image_url,
                list(product_data.images),
                product_data.category,
                product_data.sku,
                product_data.stock_count,
                list(product_data.tags),
                timeout=self.timeout,
            )
        except STORE_ERRORS as e:
            raise self._fail("create", e)
        return self._record_to_product(record)

    async def update(self, product_id: str, product_data: ProductUpdate) -> Optional[Product]:
        """Apply a partial update; None means no row matched"""
        pid = parse_product_id(product_id)
        if pid is None:
            return None

        fields = product_data.provided_fields()
        for column in ("images", "tags"):
            if column in fields:
                fields[column] = list(fields[column])

        query, args = build_update_query(pid, fields)
        try:
            record = await self.pool.fetchrow(query, *args, timeout=self.timeout)
        except STORE_ERRORS as e:
            raise self._fail("update", e)
        return self._record_to_product(record) if record is not None else None

    async def delete(self, product_id: str) -> bool:
        """Delete by ID; False means no row matched"""
        pid = parse_product_id(product_id)
        if pid is None:
            return False

        try:
            status = await self.pool.execute(
                f"DELETE FROM {TABLE} WHERE id = $1", pid, timeout=self.timeout
            )
        except STORE_ERRORS as e:
            raise self._fail("delete", e)
        return rows_affected(status) > 0
