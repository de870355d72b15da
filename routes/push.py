from fastapi import APIRouter, Depends, HTTPException, Body
from pydantic import ValidationError
from automations.alerts import check_alerts
from models.notification import NotificationRequest, DeliverySummary
from models.profile import ProfileModel
from models.push_subscription import SubscriptionData
from routes.deps import (
    get_current_user,
    get_equipment_store,
    get_inventory_store,
    get_profile_store,
    get_subscription_store,
    require_sender,
)
from stores.equipment import EquipmentStore
from stores.inventory import InventoryStore
from stores.profiles import ProfileStore
from stores.subscriptions import SubscriptionStore
from utils.push import PushConfigError, send_notification
from config import config
from logging_config import get_logger

router = APIRouter(prefix="/api/push", tags=["Push Notifications"])
logger = get_logger("push")


@router.get("/vapid-public-key")
async def get_vapid_public_key():
    """Return the VAPID public key for the frontend to use when subscribing."""
    public_key = config.VAPID_PUBLIC_KEY
    if not public_key:
        raise HTTPException(status_code=500, detail="VAPID_PUBLIC_KEY is not configured on the server")
    return {"public_key": public_key}


@router.get("/status")
async def get_push_status(
    current_user: ProfileModel = Depends(get_current_user),
    store: SubscriptionStore = Depends(get_subscription_store)
):
    """Whether the current user has a stored subscription."""
    subscription = await store.get_for_user(current_user.id)
    return {"has_subscription": subscription is not None}


@router.post("/subscribe")
async def subscribe_push(
    subscription: dict = Body(...),
    current_user: ProfileModel = Depends(get_current_user),
    store: SubscriptionStore = Depends(get_subscription_store)
):
    """
    Save the current user's push subscription.

    Accepts a browser PushSubscription ({endpoint, keys: {p256dh, auth}}) or a
    bare device token ({token}). A user keeps a single subscription: registering
    again replaces the stored one.
    """
    try:
        data = SubscriptionData.model_validate(subscription)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid push subscription payload")
    if not data.is_valid:
        raise HTTPException(status_code=400, detail="Invalid push subscription payload")

    saved, created = await store.upsert_subscription(current_user.id, data)

    logger.info(
        "Push subscription saved",
        extra={"data": {"user_id": current_user.id, "created": created, "web_push": data.is_web_push}}
    )
    return {"message": "Subscription saved", "id": saved.id, "created": created}


@router.delete("/subscribe")
async def unsubscribe_push(
    current_user: ProfileModel = Depends(get_current_user),
    store: SubscriptionStore = Depends(get_subscription_store)
):
    """Remove the current user's push subscription."""
    deleted = await store.delete_for_user(current_user.id)

    if deleted > 0:
        logger.info("Push subscription removed", extra={"data": {"user_id": current_user.id}})

    return {"message": "Subscription removed", "deleted": deleted}


@router.post("/send", response_model=DeliverySummary)
async def send_push(
    request: NotificationRequest,
    sender: str = Depends(require_sender),
    store: SubscriptionStore = Depends(get_subscription_store)
):
    """Deliver a notification to every subscriber, or to the listed `userIds` only."""
    logger.info(
        f"Push send requested: {request.title}",
        extra={"data": {"sender": sender, "user_ids": request.user_ids}}
    )
    try:
        return await send_notification(store, request)
    except PushConfigError as e:
        logger.error(f"Push send aborted: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.api_route("/check-alerts", methods=["GET", "POST"], response_model=DeliverySummary)
async def run_alert_check(
    sender: str = Depends(require_sender),
    subscriptions: SubscriptionStore = Depends(get_subscription_store),
    profiles: ProfileStore = Depends(get_profile_store),
    equipment: EquipmentStore = Depends(get_equipment_store),
    inventory: InventoryStore = Depends(get_inventory_store)
):
    """Push overdue-maintenance and low-stock alerts. Meant for a scheduler using the service role key."""
    logger.info("Alert check triggered", extra={"data": {"sender": sender}})
    try:
        return await check_alerts(subscriptions, profiles, equipment, inventory)
    except PushConfigError as e:
        logger.error(f"Alert check aborted: {e}")
        raise HTTPException(status_code=500, detail=str(e))
