from datetime import datetime
from typing import List, Optional

from database import profiles_collection
from models.profile import ProfileModel


class ProfileStore:
    def __init__(self, collection=None):
        self._collection = collection if collection is not None else profiles_collection

    async def get(self, user_id: str) -> Optional[ProfileModel]:
        doc = await self._collection.find_one({"id": user_id}, {"_id": 0})
        return ProfileModel(**doc) if doc else None

    async def ids_with_alert_enabled(self, field: str) -> List[str]:
        """Ids of users who opted in to the given alert flag."""
        docs = await self._collection.find({field: True}, {"_id": 0, "id": 1}).to_list(None)
        return [doc["id"] for doc in docs]

    async def update_alert_preferences(self, user_id: str, updates: dict) -> Optional[ProfileModel]:
        if updates:
            await self._collection.update_one(
                {"id": user_id},
                {"$set": {**updates, "updated_at": datetime.now()}}
            )
        return await self.get(user_id)

    async def add_read_notifications(self, user_id: str, ids: List[str]) -> List[str]:
        """Merge `ids` into the user's read list, keeping order and dropping duplicates."""
        profile = await self.get(user_id)
        if profile is None:
            return []
        merged = list(dict.fromkeys([*profile.read_notification_ids, *ids]))
        await self._collection.update_one(
            {"id": user_id},
            {"$set": {"read_notification_ids": merged, "updated_at": datetime.now()}}
        )
        return merged
