#!/usr/bin/env python3
"""
MongoDB Database Seed Script.

Creates sample users and pools for development.

Usage:
    python scripts/seed_data.py

Test Accounts (after seeding):
    - anna@example.com / Anna123!
    - marco@example.com / Marco123!

Half of the seeded pools are published so the public listing is not empty.
"""
import asyncio
from datetime import timedelta

from motor.motor_asyncio import AsyncIOMotorClient

from poolrent.config import settings
from poolrent.core.security import PasswordHasher
from poolrent.db.mongodb import create_indexes
from poolrent.models.base import utcnow
from poolrent.models.pool import PoolDocument, PoolFilters
from poolrent.models.user import UserDocument


async def seed_users(db, hasher: PasswordHasher):
    """Create sample users."""
    users_data = [
        {
            "first_name": "Anna",
            "last_name": "Rossi",
            "email": "anna@example.com",
            "mobile_number": "393401234567",
            "password": "Anna123!",
        },
        {
            "first_name": "Marco",
            "last_name": "Bianchi",
            "email": "marco@example.com",
            "mobile_number": "393409876543",
            "password": "Marco123!",
        },
    ]

    created_users = []
    for user_data in users_data:
        # Check if user exists
        existing = await db.users.find_one({"email": user_data["email"]})
        if existing:
            print(f"User {user_data['email']} already exists, skipping...")
            created_users.append(existing)
            continue

        user_doc = UserDocument(
            first_name=user_data["first_name"],
            last_name=user_data["last_name"],
            email=user_data["email"],
            mobile_number=user_data["mobile_number"],
            hashed_password=await hasher.hash_async(user_data["password"]),
        ).to_insert()

        result = await db.users.insert_one(user_doc)
        user_doc["_id"] = result.inserted_id
        created_users.append(user_doc)
        print(f"Created user: {user_data['email']}")

    return created_users


async def seed_pools(db, users):
    """Create sample pools, alternating published and hidden."""
    if not users:
        print("No users available for pool ownership")
        return

    pools_data = [
        {
            "title": "Garden pool with a view",
            "city": "Rome",
            "capacity": 8,
            "images": ["https://ik.imagekit.io/demo/pools/rome_1.jpg"],
            "price_per_day": 120.0,
            "description": "Saltwater pool surrounded by olive trees.",
            "filters": PoolFilters(heated=False, pets_allowed=True),
        },
        {
            "title": "Heated rooftop pool",
            "city": "Milan",
            "capacity": 4,
            "images": [
                "https://ik.imagekit.io/demo/pools/milan_1.jpg",
                "https://ik.imagekit.io/demo/pools/milan_2.jpg",
            ],
            "price_per_day": 250.0,
            "filters": PoolFilters(heated=True, pets_allowed=False),
        },
        {
            "title": "Family pool near the beach",
            "city": "Bari",
            "capacity": 12,
            "images": ["https://ik.imagekit.io/demo/pools/bari_1.jpg"],
            "busy_days": ["2025-08-15"],
        },
        {
            "title": "Quiet countryside pool",
            "city": "Florence",
            "capacity": 6,
            "images": ["https://ik.imagekit.io/demo/pools/florence_1.jpg"],
            "price_per_day": 90.0,
        },
    ]

    # Distribute pools among users
    for i, pool_data in enumerate(pools_data):
        owner = users[i % len(users)]

        # Check if pool exists
        existing = await db.pools.find_one({"title": pool_data["title"]})
        if existing:
            print(f"Pool '{pool_data['title']}' already exists, skipping...")
            continue

        published = i % 2 == 0
        pool_doc = PoolDocument(
            user_id=str(owner["_id"]),
            is_visible=published,
            visible_until=utcnow() + timedelta(days=30) if published else None,
            **pool_data,
        ).to_insert()

        await db.pools.insert_one(pool_doc)
        state = "published" if published else "hidden"
        print(f"Created pool: {pool_data['title']} ({state}, owner: {owner['email']})")


async def main():
    """Run the seed script."""
    print("=" * 50)
    print("Starting MongoDB seed...")
    print("=" * 50)

    # Connect to MongoDB
    client = AsyncIOMotorClient(settings.MONGODB_URL)
    db = client[settings.MONGODB_DB_NAME]
    hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)

    try:
        # Verify connection
        await client.admin.command('ping')
        print(f"\nConnected to MongoDB: {settings.MONGODB_DB_NAME}")

        await create_indexes(db)

        # Seed users
        print("\n--- Seeding Users ---")
        users = await seed_users(db, hasher)

        # Seed pools
        print("\n--- Seeding Pools ---")
        await seed_pools(db, users)

        print("\n" + "=" * 50)
        print("MongoDB seeding completed successfully!")
        print("=" * 50)
        print("\nTest credentials:")
        print("  anna@example.com / Anna123!")
        print("  marco@example.com / Marco123!")

    except Exception as e:
        print(f"\nError during seeding: {e}")
        raise
    finally:
        client.close()


if __name__ == "__main__":
    asyncio.run(main())
