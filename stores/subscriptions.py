"""
Push subscription storage.

Routes and the delivery fan-out only talk to the narrow interface below; the
hosted table is an external collaborator. One row per user, enforced by the
unique `user_id` index created in scripts/setup_indexes.py.
"""
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from pymongo.errors import DuplicateKeyError

from database import push_subscriptions_collection
from logging_config import get_logger
from models.push_subscription import PushSubscriptionModel, SubscriptionData

logger = get_logger("subscription_store")


class SubscriptionStore:
    def __init__(self, collection=None):
        self._collection = collection if collection is not None else push_subscriptions_collection

    async def _to_model(self, doc: dict) -> PushSubscriptionModel:
        object_id = doc.pop("_id", None)
        if not doc.get("id"):
            # Rows written straight to the table may lack an id; persist one so the row can be pruned later
            doc["id"] = str(uuid.uuid4())
            await self._collection.update_one({"_id": object_id}, {"$set": {"id": doc["id"]}})
            logger.info("Assigned id to stored push subscription", extra={"data": {"user_id": doc.get("user_id")}})
        return PushSubscriptionModel(**doc)

    async def find_subscriptions(self, user_ids: Optional[List[str]] = None) -> List[PushSubscriptionModel]:
        """All subscriptions, or only those owned by `user_ids` (an empty list matches nothing)."""
        query = {}
        if user_ids is not None:
            if not user_ids:
                return []
            query["user_id"] = {"$in": list(user_ids)}
        docs = await self._collection.find(query).to_list(None)
        return [await self._to_model(doc) for doc in docs]

    async def get_for_user(self, user_id: str) -> Optional[PushSubscriptionModel]:
        doc = await self._collection.find_one({"user_id": user_id})
        return await self._to_model(doc) if doc else None

    async def upsert_subscription(self, user_id: str, data: SubscriptionData) -> Tuple[PushSubscriptionModel, bool]:
        """Store or replace the user's single subscription in one write. Returns (subscription, created)."""
        now = datetime.now()
        update = {
            "$set": {
                "subscription_data": data.model_dump(exclude_none=True),
                "updated_at": now,
            },
            "$setOnInsert": {
                "id": str(uuid.uuid4()),
                "created_at": now,
            },
        }
        try:
            result = await self._collection.update_one({"user_id": user_id}, update, upsert=True)
        except DuplicateKeyError:
            # A concurrent registration inserted the row first; this write now updates it
            result = await self._collection.update_one({"user_id": user_id}, update, upsert=True)

        created = result.upserted_id is not None
        subscription = await self.get_for_user(user_id)
        return subscription, created

    async def delete_subscription(self, subscription_id: str) -> bool:
        result = await self._collection.delete_one({"id": subscription_id})
        return result.deleted_count > 0

    async def delete_for_user(self, user_id: str) -> int:
        result = await self._collection.delete_many({"user_id": user_id})
        return result.deleted_count
