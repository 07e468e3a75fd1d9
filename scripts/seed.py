"""Database seeder: recreate the tables and fill them with demo users and articles."""
import argparse
import asyncio
import random
import time

from articles_api.database import Base, Database
from articles_api.models import Article, User
from articles_api.security import hash_password

DEMO_PASSWORD = "password123"

SENTENCES = [
    "Shipped the first version of the API today.",
    "Pagination is harder than it looks.",
    "Remember to rotate the signing secret.",
    "Short posts, fewer words, more ideas.",
    "Async all the way down.",
    "Testing against SQLite in memory keeps CI fast.",
]


async def seed(small: bool = False):
    num_users = 5 if small else 50
    num_articles = 50 if small else 5000

    print(f"Seeding: {num_users} users, {num_articles} articles")
    start = time.perf_counter()

    database = Database()
    await database.connect()
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    # One hash reused for every demo user; bcrypt is deliberately slow.
    password_hash = hash_password(DEMO_PASSWORD)

    async with database.session() as session:
        users = []
        for i in range(num_users):
            user = User(
                email=f"user_{i:04d}@example.com",
                first_name="User",
                last_name=f"{i:04d}",
                password=password_hash,
            )
            session.add(user)
            users.append(user)
        await session.flush()
        print(f"  Created {len(users)} users (password: {DEMO_PASSWORD})")

        for i in range(num_articles):
            session.add(Article(
                content=f"{random.choice(SENTENCES)} #{i}",
                user_id=random.choice(users).id,
            ))
            if i and i % 1000 == 0:
                await session.flush()
        await session.commit()
        print(f"  Created {num_articles} articles")

    await database.disconnect()
    print(f"Done in {time.perf_counter() - start:.1f}s")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the articles database")
    parser.add_argument("--small", action="store_true", help="Seed a small dataset")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))
