import asyncio
from database import profiles_collection, equipments_collection, inventory_collection
from models.profile import ProfileModel
from constants import EquipmentStatus, InventoryStatus
import uuid
from datetime import date, datetime, timedelta
from dotenv import load_dotenv

# Load environment variables (for DB connection string)
load_dotenv()

async def seed_profiles():
    print("🌱 Seeding Test Profiles...")

    # One profile per role
    test_profiles = [
        {"name": "Admin (Test)", "email": "admin@test.com", "role": "admin"},
        {"name": "Manager (Test)", "email": "manager@test.com", "role": "manager"},
        {"name": "Technician (Test)", "email": "tech@test.com", "role": "user", "low_stock_alerts_enabled": False},
        {"name": "Newcomer (Test)", "email": "pending@test.com", "role": "pending"},
    ]

    count = 0
    for profile_data in test_profiles:
        # Check if profile already exists to avoid duplicates
        existing = await profiles_collection.find_one({"email": profile_data["email"]})
        if not existing:
            profile = ProfileModel(id=str(uuid.uuid4()), created_at=datetime.now(), **profile_data)
            await profiles_collection.insert_one(profile.model_dump())
            print(f"✅ Added: {profile_data['name']}")
            count += 1
        else:
            print(f"⚠️ Skipped (Exists): {profile_data['name']}")

    print(f"\n🎉 Added {count} new profiles.")

async def seed_equipment_and_stock():
    print("🌱 Seeding Equipment and Inventory...")
    today = date.today()

    equipments = [
        ("Autoclave 21L", EquipmentStatus.OPERATIONAL, today - timedelta(days=3)),
        ("Centrífuga", EquipmentStatus.OPERATIONAL, today + timedelta(days=10)),
        ("Estufa de Secagem", EquipmentStatus.MAINTENANCE, today - timedelta(days=30)),
    ]
    for name, status, next_cleaning in equipments:
        await equipments_collection.update_one(
            {"name": name},
            {"$setOnInsert": {"id": str(uuid.uuid4())},
             "$set": {"status": status, "next_cleaning": next_cleaning.isoformat(), "cleaning_frequency_days": 30}},
            upsert=True
        )

    inventory = [
        ("Luvas de Procedimento", 4, 20, InventoryStatus.CRITICAL),
        ("Máscaras N95", 15, 20, InventoryStatus.LOW),
        ("Álcool 70%", 40, 10, InventoryStatus.NORMAL),
    ]
    for name, current, minimum, status in inventory:
        await inventory_collection.update_one(
            {"name": name},
            {"$setOnInsert": {"id": str(uuid.uuid4())},
             "$set": {"current_quantity": current, "minimum_quantity": minimum, "status": status, "unit": "un"}},
            upsert=True
        )

    print(f"🎉 Seeded {len(equipments)} equipments and {len(inventory)} inventory items.")

async def main():
    await seed_profiles()
    await seed_equipment_and_stock()

if __name__ == "__main__":
    asyncio.run(main())
