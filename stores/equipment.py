from datetime import date, datetime
from typing import List, Optional, Union

from database import equipments_collection
from logging_config import get_logger

logger = get_logger("equipment_store")


def parse_date(value: Union[date, datetime, str, None]) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        if "T" in value:
            return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        logger.warning(f"Could not parse date string: {value}")
        return None


class EquipmentStore:
    def __init__(self, collection=None):
        self._collection = collection if collection is not None else equipments_collection

    async def find_overdue(self, today: date, status: Optional[str] = None) -> List[dict]:
        """Equipment whose next cleaning date is before `today`, optionally only with `status`."""
        query = {"status": status} if status else {}
        docs = await self._collection.find(
            query,
            {"_id": 0, "id": 1, "name": 1, "status": 1, "next_cleaning": 1}
        ).to_list(None)

        overdue = []
        for doc in docs:
            # next_cleaning is stored as an ISO date string or a datetime
            next_cleaning = parse_date(doc.get("next_cleaning"))
            if next_cleaning and next_cleaning < today:
                overdue.append({**doc, "next_cleaning": next_cleaning})
        return overdue
