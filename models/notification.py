from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from constants import DEFAULT_ICON, DEFAULT_BADGE


class NotificationRequest(BaseModel):
    """A push notification to fan out. Not persisted."""
    title: str = Field(..., min_length=1)
    body: str
    url: str = "/"
    user_ids: Optional[List[str]] = Field(default=None, alias="userIds")  # None = every subscriber
    icon: str = DEFAULT_ICON
    badge: str = DEFAULT_BADGE

    model_config = ConfigDict(populate_by_name=True)

    def payload(self) -> dict:
        """JSON body read by the service worker's push handler."""
        return {
            "title": self.title,
            "body": self.body,
            "url": self.url,
            "icon": self.icon,
            "badge": self.badge,
        }


class DeliveryResult(BaseModel):
    subscription_id: str = Field(alias="subscriptionId")
    success: bool
    status: Optional[int] = None
    error: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class DeliverySummary(BaseModel):
    message: str
    successful: int = 0
    failed: int = 0
    results: List[DeliveryResult] = Field(default_factory=list)

    @classmethod
    def from_results(cls, message: str, results: List[DeliveryResult]) -> "DeliverySummary":
        successful = sum(1 for r in results if r.success)
        return cls(
            message=message,
            successful=successful,
            failed=len(results) - successful,
            results=results,
        )
