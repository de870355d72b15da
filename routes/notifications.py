from fastapi import APIRouter, Depends, HTTPException, Body
from typing import List
from automations.alerts import find_equipment_alerts, find_inventory_alerts
from models.profile import ProfileModel
from routes.deps import require_approved_user, get_equipment_store, get_inventory_store, get_profile_store
from stores.equipment import EquipmentStore
from stores.inventory import InventoryStore
from stores.profiles import ProfileStore
from logging_config import get_logger

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])
logger = get_logger("notifications")


@router.get("/alerts")
async def get_alerts(
    unread_only: bool = False,
    current_user: ProfileModel = Depends(require_approved_user),
    equipment: EquipmentStore = Depends(get_equipment_store),
    inventory: InventoryStore = Depends(get_inventory_store)
):
    """Overdue maintenance and low stock alerts, flagged with the current user's read state."""
    read_ids = set(current_user.read_notification_ids)

    equipment_alerts = await find_equipment_alerts(equipment)
    inventory_alerts = await find_inventory_alerts(inventory)
    for alert in [*equipment_alerts, *inventory_alerts]:
        alert.read = alert.id in read_ids

    if unread_only:
        equipment_alerts = [a for a in equipment_alerts if not a.read]
        inventory_alerts = [a for a in inventory_alerts if not a.read]

    return {
        "equipment": [a.model_dump(mode="json") for a in equipment_alerts],
        "inventory": [a.model_dump(mode="json") for a in inventory_alerts],
    }


@router.get("/unread-count")
async def get_unread_count(
    current_user: ProfileModel = Depends(require_approved_user),
    equipment: EquipmentStore = Depends(get_equipment_store),
    inventory: InventoryStore = Depends(get_inventory_store)
):
    """Count of alerts the current user has not dismissed yet."""
    read_ids = set(current_user.read_notification_ids)
    alerts = [*await find_equipment_alerts(equipment), *await find_inventory_alerts(inventory)]
    return {"count": sum(1 for a in alerts if a.id not in read_ids)}


@router.post("/read")
async def mark_as_read(
    ids: List[str] = Body(..., embed=True),
    current_user: ProfileModel = Depends(require_approved_user),
    profiles: ProfileStore = Depends(get_profile_store)
):
    """Mark alerts as read. Already-read ids are kept."""
    if not ids:
        raise HTTPException(status_code=400, detail="No notification ids given")

    read_ids = await profiles.add_read_notifications(current_user.id, ids)
    logger.info("Alerts marked as read", extra={"data": {"count": len(ids)}})
    return {"message": "Marked as read", "read_notification_ids": read_ids}
