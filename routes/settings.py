from fastapi import APIRouter, Depends, HTTPException
from models.profile import ProfileModel, AlertPreferencesUpdate
from routes.deps import require_approved_user, get_profile_store
from stores.profiles import ProfileStore
from logging_config import get_logger

router = APIRouter(prefix="/api/settings", tags=["Settings"])
logger = get_logger("settings")


def _alert_preferences(profile: ProfileModel) -> dict:
    return {
        "low_stock_alerts_enabled": profile.low_stock_alerts_enabled,
        "overdue_maintenance_alerts_enabled": profile.overdue_maintenance_alerts_enabled,
    }


# ─── NOTIFICATION PREFERENCES ───────────────────────────────────────────────

@router.get("/notifications")
async def get_notification_prefs(current_user: ProfileModel = Depends(require_approved_user)):
    """Which push alerts the current user receives."""
    return _alert_preferences(current_user)


@router.patch("/notifications")
async def update_notification_prefs(
    updates: AlertPreferencesUpdate,
    current_user: ProfileModel = Depends(require_approved_user),
    profiles: ProfileStore = Depends(get_profile_store)
):
    filtered = updates.model_dump(exclude_none=True)
    if not filtered:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    profile = await profiles.update_alert_preferences(current_user.id, filtered)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")

    logger.info("Notification preferences updated", extra={"data": {"fields": list(filtered.keys())}})
    return _alert_preferences(profile)
