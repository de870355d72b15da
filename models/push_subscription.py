from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime
import json
import uuid


class PushSubscriptionKeys(BaseModel):
    p256dh: str
    auth: str


class SubscriptionData(BaseModel):
    """Either a browser Web Push subscription (endpoint + keys) or a bare device token."""
    endpoint: Optional[str] = None
    keys: Optional[PushSubscriptionKeys] = None
    expirationTime: Optional[float] = None
    token: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def is_web_push(self) -> bool:
        return bool(self.endpoint and self.keys)

    @property
    def is_valid(self) -> bool:
        return self.is_web_push or bool(self.token)

    def to_subscription_info(self) -> dict:
        """Shape expected by pywebpush."""
        return {
            "endpoint": self.endpoint,
            "keys": self.keys.model_dump(),
        }


class PushSubscriptionModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    subscription_data: SubscriptionData = Field(default_factory=SubscriptionData)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("subscription_data", mode="before")
    @classmethod
    def parse_serialized(cls, value):
        # Rows written by older clients hold the subscription as a JSON string
        if isinstance(value, (str, bytes)):
            try:
                value = json.loads(value)
            except ValueError:
                return {}
        if not isinstance(value, dict) and not isinstance(value, SubscriptionData):
            return {}
        return value
