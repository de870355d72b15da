import sys
import os
import asyncio
from pymongo import ASCENDING

# Add parent directory to path to import database
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import push_subscriptions_collection, profiles_collection, equipments_collection, inventory_collection
from constants import AlertPrefs
from logging_config import get_logger

logger = get_logger("setup_indexes")

async def create_indexes():
    print("🚀 Starting Index Creation...")

    # --- Push Subscriptions ---
    print("\n📦 Push Subscriptions Collection:")
    # One subscription per user: upserts key on user_id
    await push_subscriptions_collection.create_index([("user_id", ASCENDING)], unique=True)
    print("✅ Created index: (user_id UNIQUE)")

    # Pruning expired subscriptions: delete_one({id: X})
    await push_subscriptions_collection.create_index([("id", ASCENDING)], unique=True, sparse=True)
    print("✅ Created index: (id UNIQUE)")

    # --- Profiles ---
    print("\n📦 Profiles Collection:")
    await profiles_collection.create_index([("id", ASCENDING)], unique=True)
    print("✅ Created index: (id UNIQUE)")

    # Alert recipients: find({<alert flag>: True})
    await profiles_collection.create_index([(AlertPrefs.LOW_STOCK, ASCENDING)])
    await profiles_collection.create_index([(AlertPrefs.OVERDUE_MAINTENANCE, ASCENDING)])
    print("✅ Created index: (alert opt-in flags)")

    # --- Equipments ---
    print("\n📦 Equipments Collection:")
    # Overdue scan: find({status: operacional})
    await equipments_collection.create_index([("status", ASCENDING), ("next_cleaning", ASCENDING)])
    print("✅ Created index: (status, next_cleaning)")

    # --- Inventory ---
    print("\n📦 Inventory Collection:")
    await inventory_collection.create_index([("status", ASCENDING)])
    print("✅ Created index: (status)")

    print("\n✨ All indexes created successfully!")

if __name__ == "__main__":
    # Ensure event loop for async driver
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    loop.run_until_complete(create_indexes())
