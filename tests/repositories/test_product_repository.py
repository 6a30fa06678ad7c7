"""Unit tests for ProductRepository query construction and row decoding"""
import uuid
from unittest.mock import AsyncMock

import asyncpg
import pytest

from app.core.errors import DatabaseError
from app.repositories.product import (
    UPDATABLE_COLUMNS,
    ProductRepository,
    build_count_query,
    build_list_query,
    build_update_query,
    parse_product_id,
    rows_affected,
)
from app.schemas.product import ProductUpdate


def normalize(query: str) -> str:
    return " ".join(query.split())


class TestQueryBuilders:
    """Statement shape and parameter ordinals"""

    def test_list_without_category(self):
        query, args = build_list_query(20, 0, "")
        sql = normalize(query)

        assert "WHERE" not in sql
        assert sql.endswith("ORDER BY created_at DESC LIMIT $1 OFFSET $2")
        assert args == [20, 0]

    def test_list_with_category(self):
        query, args = build_list_query(10, 30, "shoes")
        sql = normalize(query)

        assert "WHERE category = $1 ORDER BY created_at DESC LIMIT $2 OFFSET $3" in sql
        assert args == ["shoes", 10, 30]

    def test_list_never_interpolates_values(self):
        hostile = "x'; DROP TABLE catalog.products; --"
        query, args = build_list_query(5, 0, hostile)

        assert hostile not in query
        assert args[0] == hostile

    def test_list_coalesces_array_columns(self):
        query, _ = build_list_query(1, 0)
        sql = normalize(query)

        assert "COALESCE(images, '{}'::text[]) AS images" in sql
        assert "COALESCE(tags, '{}'::text[]) AS tags" in sql

    def test_count_uses_same_category_rule(self):
        list_sql, _ = build_list_query(20, 0, "shoes")
        count_sql, count_args = build_count_query("shoes")

        assert normalize(count_sql) == "SELECT COUNT(*) FROM catalog.products WHERE category = $1"
        assert "WHERE category = $1" in normalize(list_sql)
        assert count_args == ["shoes"]

    def test_count_without_category(self):
        query, args = build_count_query("")
        assert normalize(query) == "SELECT COUNT(*) FROM catalog.products"
        assert args == []

    def test_update_with_no_fields_only_touches_updated_at(self):
        pid = uuid.uuid4()
        query, args = build_update_query(pid, {})
        sql = normalize(query)

        assert sql.startswith("UPDATE catalog.products SET updated_at = now() WHERE id = $1 RETURNING")
        assert args == [pid]

    def test_update_id_takes_last_ordinal(self):
        pid = uuid.uuid4()
        query, args = build_update_query(pid, {"tags": ["a"], "name": "Renamed"})
        sql = normalize(query)

        # emitted in fixed column order, not request order
        assert "SET updated_at = now(), name = $1, tags = $2 WHERE id = $3" in sql
        assert args == ["Renamed", ["a"], pid]

    def test_update_all_fields(self):
        pid = uuid.uuid4()
        fields = {column: f"value-{column}" for column in UPDATABLE_COLUMNS}
        query, args = build_update_query(pid, fields)
        sql = normalize(query)

        for ordinal, column in enumerate(UPDATABLE_COLUMNS, start=1):
            assert f"{column} = ${ordinal}" in sql
        assert f"WHERE id = ${len(UPDATABLE_COLUMNS) + 1}" in sql
        assert args[-1] == pid
        assert len(args) == len(UPDATABLE_COLUMNS) + 1

    def test_update_ignores_unknown_columns(self):
        pid = uuid.uuid4()
        query, args = build_update_query(pid, {"id": "other", "created_at": "now", "price": 5.0})
        sql = normalize(query)

        assert "created_at =" not in sql
        assert "SET updated_at = now(), price = $1 WHERE id = $2" in sql
        assert args == [5.0, pid]


class TestHelpers:

    def test_parse_product_id(self, product_id):
        assert parse_product_id(product_id) == uuid.UUID(product_id)
        assert parse_product_id("not-a-uuid") is None
        assert parse_product_id("") is None

    @pytest.mark.parametrize("status,expected", [
        ("DELETE 1", 1),
        ("DELETE 0", 0),
        ("UPDATE 3", 3),
        ("", 0),
        (None, 0),
    ])
    def test_rows_affected(self, status, expected):
        assert rows_affected(status) == expected


class TestProductRepository:

    @pytest.fixture
    def repository(self, mock_pool):
        return ProductRepository(mock_pool, timeout=3.0)

    @pytest.mark.asyncio
    async def test_list_products_binds_parameters(self, repository, mock_pool, product_record):
        mock_pool.fetch.return_value = [product_record]

        products = await repository.list_products(20, 40, "electronics")

        args, kwargs = mock_pool.fetch.call_args
        assert args[1:] == ("electronics", 20, 40)
        assert kwargs == {"timeout": 3.0}
        assert len(products) == 1
        assert products[0].id == str(product_record["id"])

    @pytest.mark.asyncio
    async def test_list_products_empty(self, repository, mock_pool):
        mock_pool.fetch.return_value = []
        assert await repository.list_products(20, 0) == []

    @pytest.mark.asyncio
    async def test_decodes_null_arrays_and_rating(self, repository, mock_pool, product_record, product_id):
        product_record.update({"images": None, "tags": None, "rating": None})
        mock_pool.fetchrow.return_value = product_record

        product = await repository.get_by_id(product_id)

        assert product.images == []
        assert product.tags == []
        assert product.rating is None

    @pytest.mark.asyncio
    async def test_decodes_rating_value(self, repository, mock_pool, product_record, product_id):
        product_record.update({"rating": 4.5, "review_count": 12})
        mock_pool.fetchrow.return_value = product_record

        product = await repository.get_by_id(product_id)

        assert product.rating == 4.5
        assert product.review_count == 12

    @pytest.mark.asyncio
    async def test_get_by_id_not_found(self, repository, mock_pool, product_id):
        mock_pool.fetchrow.return_value = None

        assert await repository.get_by_id(product_id) is None
        args, _ = mock_pool.fetchrow.call_args
        assert args[1] == uuid.UUID(product_id)

    @pytest.mark.asyncio
    async def test_get_by_id_malformed_id_skips_query(self, repository, mock_pool):
        assert await repository.get_by_id("12345") is None
        mock_pool.fetchrow.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_returns_stored_row(self, repository, mock_pool, product_record, sample_product_create):
        product_record.update({"rating": None, "review_count": 0})
        mock_pool.fetchrow.return_value = product_record

        product = await repository.create(sample_product_create)

        args, _ = mock_pool.fetchrow.call_args
        bound = args[1:]
        assert isinstance(bound[0], uuid.UUID)
        assert bound[1:] == (
            "New Product",
            "New Description",
            39.99,
            "https://cdn.example.com/new.jpg",
            ["https://cdn.example.com/new-1.jpg"],
            "electronics",
            "NEW-001",
            10,
            ["new", "test"],
        )
        assert "RETURNING" in args[0]
        # the result is the stored row, not the request echoed back
        assert product.name == product_record["name"]
        assert product.review_count == 0

    @pytest.mark.asyncio
    async def test_create_generates_distinct_ids(self, repository, mock_pool, product_record, sample_product_create):
        mock_pool.fetchrow.return_value = product_record

        await repository.create(sample_product_create)
        await repository.create(sample_product_create)

        first = mock_pool.fetchrow.call_args_list[0][0][1]
        second = mock_pool.fetchrow.call_args_list[1][0][1]
        assert first != second

    @pytest.mark.asyncio
    async def test_update_explicit_empty_images(self, repository, mock_pool, product_record, product_id):
        product_record["images"] = []
        mock_pool.fetchrow.return_value = product_record

        product = await repository.update(product_id, ProductUpdate(images=[]))

        args, _ = mock_pool.fetchrow.call_args
        sql = normalize(args[0])
        assert "images = $1 WHERE id = $2" in sql
        assert args[1:] == ([], uuid.UUID(product_id))
        assert product.images == []

    @pytest.mark.asyncio
    async def test_update_omitted_fields_untouched(self, repository, mock_pool, product_record, product_id):
        mock_pool.fetchrow.return_value = product_record

        await repository.update(product_id, ProductUpdate(price=12.5))

        sql = normalize(mock_pool.fetchrow.call_args[0][0])
        assert "price = $1" in sql
        for column in ("name", "images", "tags", "sku", "description"):
            assert f"{column} = $" not in sql

    @pytest.mark.asyncio
    async def test_update_explicit_null_is_not_provided(self, repository, mock_pool, product_record, product_id):
        mock_pool.fetchrow.return_value = product_record

        await repository.update(product_id, ProductUpdate.model_validate({"tags": None}))

        sql = normalize(mock_pool.fetchrow.call_args[0][0])
        assert "tags = $" not in sql
        assert "SET updated_at = now() WHERE id = $1" in sql

    @pytest.mark.asyncio
    async def test_update_not_found(self, repository, mock_pool, product_id):
        mock_pool.fetchrow.return_value = None
        assert await repository.update(product_id, ProductUpdate(name="x")) is None

    @pytest.mark.asyncio
    async def test_update_malformed_id(self, repository, mock_pool):
        assert await repository.update("nope", ProductUpdate(name="x")) is None
        mock_pool.fetchrow.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_existing(self, repository, mock_pool, product_id):
        mock_pool.execute.return_value = "DELETE 1"

        assert await repository.delete(product_id) is True
        args, _ = mock_pool.execute.call_args
        assert normalize(args[0]) == "DELETE FROM catalog.products WHERE id = $1"
        assert args[1] == uuid.UUID(product_id)

    @pytest.mark.asyncio
    async def test_delete_missing(self, repository, mock_pool, product_id):
        mock_pool.execute.return_value = "DELETE 0"
        assert await repository.delete(product_id) is False

    @pytest.mark.asyncio
    async def test_count(self, repository, mock_pool):
        mock_pool.fetchval.return_value = 7

        assert await repository.count("shoes") == 7
        args, _ = mock_pool.fetchval.call_args
        assert args[1:] == ("shoes",)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,call", [
        ("fetch", lambda repo, pid: repo.list_products(20, 0)),
        ("fetchval", lambda repo, pid: repo.count()),
        ("fetchrow", lambda repo, pid: repo.get_by_id(pid)),
        ("fetchrow", lambda repo, pid: repo.update(pid, ProductUpdate())),
        ("execute", lambda repo, pid: repo.delete(pid)),
    ])
    async def test_store_errors_become_database_error(self, repository, mock_pool, product_id, method, call):
        getattr(mock_pool, method).side_effect = asyncpg.PostgresError("boom")

        with pytest.raises(DatabaseError) as exc_info:
            await call(repository, product_id)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Internal server error"
        assert "boom" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connection_errors_become_database_error(self, repository, mock_pool, product_id):
        mock_pool.fetchrow.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(DatabaseError):
            await repository.get_by_id(product_id)

    @pytest.mark.asyncio
    async def test_uses_configured_timeout_by_default(self, mock_pool):
        from app.core.config import config

        repository = ProductRepository(mock_pool)
        await repository.count()

        assert mock_pool.fetchval.call_args.kwargs["timeout"] == config.db_command_timeout
