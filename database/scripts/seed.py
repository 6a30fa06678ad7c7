#!/usr/bin/env python3

import asyncio
import json
import os
import sys
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import asyncpg
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from app.repositories.product import ProductRepository
from app.schemas.product import ProductCreate

SAMPLE_PRODUCTS = [
    {
        "name": "Trail Running Shoe",
        "description": "Lightweight shoe with a rock plate for technical trails",
        "price": 129.99,
        "primary_image_url": "https://cdn.example.com/img/trail-shoe.jpg",
        "images": ["https://cdn.example.com/img/trail-shoe-side.jpg"],
        "category": "footwear",
        "sku": "FW-TRAIL-001",
        "stock_count": 40,
        "tags": ["running", "trail"],
    },
    {
        "name": "Merino Base Layer",
        "description": "Long sleeve merino wool top",
        "price": 79.5,
        "primary_image_url": "https://cdn.example.com/img/merino.jpg",
        "images": [],
        "category": "apparel",
        "sku": "AP-MERINO-002",
        "stock_count": 120,
        "tags": ["wool", "layering"],
    },
    {
        "name": "Insulated Bottle",
        "description": "750 ml stainless steel bottle",
        "price": 24.0,
        "category": "accessories",
        "sku": "AC-BOTTLE-003",
        "stock_count": 300,
        "tags": [],
    },
]


class ProductDatabaseSeeder:
    def __init__(self):
        self.database_url = os.getenv("DATABASE_URL")
        if not self.database_url:
            raise ValueError("DATABASE_URL must be set in environment or .env file")
        self.pool = None

    async def connect(self):
        """Open a small pool and verify connectivity"""
        print("Connecting to PostgreSQL...")
        self.pool = await asyncpg.create_pool(dsn=self.database_url, min_size=1, max_size=2)
        await self.pool.fetchval("SELECT 1")
        print("Successfully connected to PostgreSQL!")

    async def clear_data(self):
        """Remove existing products"""
        print("Clearing existing product data...")
        status = await self.pool.execute("DELETE FROM catalog.products")
        print(f"Cleared products ({status})")

    def load_products(self):
        """Products from database/data/products.json if present, else built-in samples"""
        data_path = Path(__file__).parent.parent / "data" / "products.json"
        if data_path.exists():
            print(f"Loading products from: {data_path}")
            with open(data_path, "r") as f:
                return json.load(f)
        print("No products data file found, using sample products")
        return SAMPLE_PRODUCTS

    async def seed_products(self):
        repository = ProductRepository(self.pool)
        created = 0
        for item in self.load_products():
            product = await repository.create(ProductCreate(**item))
            print(f"  + {product.sku} ({product.id})")
            created += 1
        print(f"Successfully seeded {created} products")

    async def seed_data(self):
        """Main seeding method"""
        print("Seeding product catalog data...")
        try:
            await self.clear_data()
            await self.seed_products()
            print("Product catalog data seeding completed successfully!")
        except Exception as error:
            print(f"Error seeding product data: {error}")
            raise error

    async def close(self):
        if self.pool is not None:
            await self.pool.close()
            print("Database connection closed")


async def main():
    seeder = ProductDatabaseSeeder()
    try:
        await seeder.connect()
        await seeder.seed_data()
    finally:
        await seeder.close()


if __name__ == "__main__":
    asyncio.run(main())
