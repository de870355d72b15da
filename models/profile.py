from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, Literal, List
from datetime import datetime


class ProfileModel(BaseModel):
    """Row of the hosted `profiles` table; `id` is the auth user id."""
    id: str
    email: str
    name: str = ""
    avatar_url: Optional[str] = None
    role: Literal['admin', 'manager', 'user', 'pending'] = "pending"

    # Push alert opt-ins
    low_stock_alerts_enabled: bool = True
    overdue_maintenance_alerts_enabled: bool = True

    # In-app alerts already dismissed by this user
    read_notification_ids: List[str] = Field(default_factory=list)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore"
    )

    @field_validator("read_notification_ids", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value or []


class AlertPreferencesUpdate(BaseModel):
    low_stock_alerts_enabled: Optional[bool] = None
    overdue_maintenance_alerts_enabled: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")
