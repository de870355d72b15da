import asyncio
from database import profiles_collection
from routes.deps import create_access_token
from logging_config import setup_logging

setup_logging()

async def get_token():
    profile = await profiles_collection.find_one({"role": {"$in": ["admin", "manager"]}})
    if profile:
        token = create_access_token({"sub": profile["id"], "role": "authenticated"})
        print(f"TOKEN={token}")
        print(f"USER_ID={profile['id']}")
        print(f"ROLE={profile['role']}")
    else:
        print("No admin or manager profiles found")

if __name__ == "__main__":
    asyncio.run(get_token())
