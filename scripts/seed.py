"""
Database Seed Script

Loads the sample menu and creates the first admin account.
Self-registration never grants the admin role, so this is how the first
administrator comes into existence.

Run from project root:
    python scripts/seed.py --admin-username admin --admin-email admin@example.com
"""

import argparse
import asyncio
import getpass
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import delete, select

from food_ordering.core.config import get_settings, setup_logging
from food_ordering.database import create_engine, create_session_maker, init_db
from food_ordering.models import Food, User
from food_ordering.security import PasswordHasher, Role
from food_ordering.validation import CatalogItemValidator, registration_validator

SAMPLE_FOODS = [
    {
        "name": "Margherita Pizza",
        "description": "Classic pizza with fresh tomato sauce, mozzarella cheese, and basil leaves",
        "price": 12.99,
        "category": "Pizza",
        "preparationTime": 20,
    },
    {
        "name": "Chicken Burger",
        "description": "Grilled chicken breast with lettuce, tomato, onion, and special sauce",
        "price": 8.99,
        "category": "Burger",
        "preparationTime": 15,
    },
    {
        "name": "Caesar Salad",
        "description": "Fresh romaine lettuce with parmesan cheese, croutons, and caesar dressing",
        "price": 7.49,
        "category": "Salad",
        "preparationTime": 10,
    },
    {
        "name": "Spaghetti Carbonara",
        "description": "Traditional Italian pasta with eggs, cheese, pancetta, and black pepper",
        "price": 11.99,
        "category": "Pasta",
        "preparationTime": 25,
    },
    {
        "name": "Chocolate Cake",
        "description": "Rich chocolate cake with creamy chocolate frosting",
        "price": 5.99,
        "category": "Dessert",
        "preparationTime": 5,
    },
    {
        "name": "Fresh Orange Juice",
        "description": "Freshly squeezed orange juice",
        "price": 3.99,
        "category": "Beverage",
        "preparationTime": 5,
    },
]


async def seed(args: argparse.Namespace, password: str) -> bool:
    settings = get_settings()
    setup_logging(settings)

    # Admin credentials go through the same rules as self-registration
    registration = {
        "username": args.admin_username,
        "email": args.admin_email,
        "password": password,
        "fullName": args.admin_name,
    }
    result = registration_validator(settings.registration_mode).validate(registration)
    if not result.is_valid:
        print("\n❌ Admin account rejected:")
        for error in result.errors:
            print(f"   - {error}")
        return False

    validator = CatalogItemValidator()
    for item in SAMPLE_FOODS:
        validator.ensure_valid(item)

    engine = create_engine(settings)
    session_maker = create_session_maker(engine)
    try:
        await init_db(engine)

        async with session_maker() as db:
            if args.reset_menu:
                await db.execute(delete(Food))
                print("🧹 Cleared existing food data")

            existing = (await db.execute(select(Food.name))).scalars().all()
            added = 0
            for item in SAMPLE_FOODS:
                if item["name"] in existing:
                    continue
                db.add(Food(
                    name=item["name"],
                    description=item["description"],
                    price=item["price"],
                    category=item["category"],
                    preparation_time=item["preparationTime"],
                    available=True,
                ))
                added += 1
            print(f"🍕 Added {added} sample food item(s)")

            admin = (
                await db.execute(select(User).where(User.username == args.admin_username))
            ).scalar_one_or_none()
            if admin is None:
                hasher = PasswordHasher(rounds=settings.password_hash_rounds)
                db.add(User(
                    username=args.admin_username,
                    email=args.admin_email.lower(),
                    password_digest=hasher.hash(password),
                    full_name=args.admin_name,
                    role=Role.ADMIN,
                ))
                print(f"👤 Created admin user '{args.admin_username}'")
            else:
                print(f"👤 Admin user '{args.admin_username}' already exists, left unchanged")

            await db.commit()
    finally:
        await engine.dispose()

    print("✅ Seed complete")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the sample menu and the first admin")
    parser.add_argument("--admin-username", default="admin", help="Admin username")
    parser.add_argument("--admin-email", required=True, help="Admin email")
    parser.add_argument("--admin-name", default="System Administrator", help="Admin full name")
    parser.add_argument("--reset-menu", action="store_true", help="Delete existing food items first")
    args = parser.parse_args()

    password = getpass.getpass("Admin password: ")
    if not asyncio.run(seed(args, password)):
        sys.exit(1)
