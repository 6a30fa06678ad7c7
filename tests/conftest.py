"""Shared test fixtures"""
import os

# Settings are read when app.core.config is first imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("FLAGS_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "INFO")

import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import jwt
import pytest

from app.core.config import config
from app.models.product import Product
from app.schemas.product import ProductCreate, ProductUpdate


TEST_SECRET = config.jwt_secret


class InMemoryProductRepository:
    """Repository double with the same contract as ProductRepository"""

    def __init__(self):
        self.rows: Dict[str, Product] = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    async def list_products(self, limit: int, offset: int, category: str = "") -> List[Product]:
        rows = [p for p in self.rows.values() if not category or p.category == category]
        rows.sort(key=lambda p: p.created_at, reverse=True)
        return rows[offset:offset + limit]

    async def count(self, category: str = "") -> int:
        return len([p for p in self.rows.values() if not category or p.category == category])

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        return self.rows.get(product_id)

    async def create(self, product_data: ProductCreate) -> Product:
        now = self._tick()
        product = Product(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            **product_data.model_dump(),
        )
        self.rows[product.id] = product
        return product

    async def update(self, product_id: str, product_data: ProductUpdate) -> Optional[Product]:
        current = self.rows.get(product_id)
        if current is None:
            return None
        changes = dict(product_data.provided_fields())
        changes["updated_at"] = self._tick()
        updated = current.model_copy(update=changes)
        self.rows[product_id] = updated
        return updated

    async def delete(self, product_id: str) -> bool:
        return self.rows.pop(product_id, None) is not None


@pytest.fixture
def memory_repository():
    """Empty in-memory repository"""
    return InMemoryProductRepository()


@pytest.fixture
def mock_pool():
    """Mock asyncpg pool"""
    pool = AsyncMock()
    pool.fetch.return_value = []
    pool.fetchrow.return_value = None
    pool.fetchval.return_value = 0
    pool.execute.return_value = "DELETE 0"
    return pool


@pytest.fixture
def product_id():
    """Sample product ID for testing"""
    return "5f0c8a3e-6b1d-4c2a-9a51-0d6f1f3b2c7e"


@pytest.fixture
def product_record(product_id):
    """Row as returned by asyncpg for catalog.products"""
    created = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    return {
        "id": uuid.UUID(product_id),
        "name": "Test Product",
        "description": "A product for tests",
        "price": 29.99,
        "primary_image_url": "https://cdn.example.com/p.jpg",
        "images": ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"],
        "category": "electronics",
        "sku": "TEST-001",
        "stock_count": 5,
        "tags": ["new", "sale"],
        "rating": None,
        "review_count": 0,
        "created_at": created,
        "updated_at": created,
    }


@pytest.fixture
def sample_product_create():
    """Sample ProductCreate payload"""
    return ProductCreate(
        name="New Product",
        description="New Description",
        price=39.99,
        primary_image_url="https://cdn.example.com/new.jpg",
        images=["https://cdn.example.com/new-1.jpg"],
        category="electronics",
        sku="NEW-001",
        stock_count=10,
        tags=["new", "test"],
    )


@pytest.fixture
def make_token():
    """Factory for signed tokens"""
    def _make(
        roles=("admin",),
        secret: str = TEST_SECRET,
        algorithm: str = "HS256",
        expires_in: int = 300,
        **claims,
    ) -> str:
        now = int(time.time())
        payload = {"sub": "user-123", "iat": now, "exp": now + expires_in}
        if roles is not None:
            payload["roles"] = list(roles)
        payload.update(claims)
        return jwt.encode(payload, secret, algorithm=algorithm)

    return _make


@pytest.fixture
def admin_token(make_token):
    return make_token(roles=("admin",))


@pytest.fixture
def customer_token(make_token):
    return make_token(roles=("customer",))
