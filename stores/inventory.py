from typing import List

from database import inventory_collection


class InventoryStore:
    def __init__(self, collection=None):
        self._collection = collection if collection is not None else inventory_collection

    async def find_low_stock(self) -> List[dict]:
        """Items at or below their minimum quantity."""
        return await self._collection.find(
            {"$expr": {"$lte": ["$current_quantity", "$minimum_quantity"]}},
            {"_id": 0, "id": 1, "name": 1, "current_quantity": 1, "minimum_quantity": 1, "status": 1}
        ).to_list(None)
