import asyncio
import json
from typing import List

from pywebpush import webpush, WebPushException
from config import config
from constants import NO_SUBSCRIPTIONS_MESSAGE, PROCESSED_MESSAGE
from logging_config import get_logger
from models.notification import NotificationRequest, DeliveryResult, DeliverySummary
from models.push_subscription import PushSubscriptionModel
from stores.subscriptions import SubscriptionStore

logger = get_logger("push_utils")

HTTP_GONE = 410


class PushConfigError(Exception):
    """VAPID keys are missing or unusable; nothing can be delivered."""


def load_vapid_private_key() -> str:
    """
    Return the VAPID private key in a form pywebpush accepts.
    Raises PushConfigError when the key is not configured.
    """
    raw_key = config.VAPID_PRIVATE_KEY
    if not raw_key:
        raise PushConfigError("VAPID_PRIVATE_KEY not configured")

    # .env may store PEM with literal \n or real newlines depending on quoting
    if "\\n" in raw_key:
        raw_key = raw_key.replace("\\n", "\n")

    # pywebpush takes a raw base64url key or a base64 DER body, not PEM armor
    if "BEGIN" in raw_key:
        lines = [line.strip() for line in raw_key.strip().splitlines()
                 if line.strip() and not line.strip().startswith("-----")]
        raw_key = "".join(lines)
    return raw_key


def vapid_claims() -> dict:
    subject = config.VAPID_CLAIM_EMAIL
    if not subject.startswith(("mailto:", "https:")):
        subject = f"mailto:{subject}"
    return {"sub": subject}


def _post_to_endpoint(subscription_info: dict, data: str, private_key: str) -> int:
    # pywebpush fills in "aud" per endpoint origin, so every call needs its own claims dict
    response = webpush(
        subscription_info=subscription_info,
        data=data,
        vapid_private_key=private_key,
        vapid_claims=vapid_claims(),
        ttl=config.PUSH_TTL,
        timeout=config.PUSH_TIMEOUT,
    )
    return response.status_code


async def deliver_to_subscription(
    store: SubscriptionStore,
    subscription: PushSubscriptionModel,
    data: str,
    private_key: str,
) -> DeliveryResult:
    """
    Deliver one payload to one subscription.
    Never raises: every failure is logged and returned as an unsuccessful result.
    A 410 (Gone) from the push service removes the subscription.
    """
    sub_data = subscription.subscription_data
    if not sub_data.is_web_push:
        logger.warning(
            f"Subscription {subscription.id} has no Web Push endpoint, skipping",
            extra={"data": {"user_id": subscription.user_id}}
        )
        return DeliveryResult(subscription_id=subscription.id, success=False, error="unsupported subscription")

    try:
        status = await asyncio.to_thread(_post_to_endpoint, sub_data.to_subscription_info(), data, private_key)
        return DeliveryResult(subscription_id=subscription.id, success=True, status=status)
    except WebPushException as ex:
        status = ex.response.status_code if ex.response is not None else None
        logger.error(
            f"Push failed for subscription {subscription.id}: {ex.message}",
            extra={"data": {"status": status, "endpoint": sub_data.endpoint[:60]}}
        )
        if status == HTTP_GONE:
            await _prune(store, subscription)
        return DeliveryResult(subscription_id=subscription.id, success=False, status=status, error=ex.message)
    except Exception as e:
        logger.error(f"Error sending to subscription {subscription.id}: {e}")
        return DeliveryResult(subscription_id=subscription.id, success=False, error=str(e))


async def _prune(store: SubscriptionStore, subscription: PushSubscriptionModel):
    try:
        removed = await store.delete_subscription(subscription.id)
    except Exception as e:
        logger.error(f"Could not remove expired subscription {subscription.id}: {e}", exc_info=True)
        return
    if removed:
        logger.info(
            f"Removed expired push subscription {subscription.id}",
            extra={"data": {"user_id": subscription.user_id}}
        )


async def send_notification(store: SubscriptionStore, request: NotificationRequest) -> DeliverySummary:
    """
    Fan a notification out to every matching subscription concurrently.

    Targets every stored subscription when `request.user_ids` is None, otherwise
    only those owned by the listed users. Raises PushConfigError when VAPID is not
    configured; storage errors propagate to the caller.
    """
    private_key = load_vapid_private_key()

    subscriptions = await store.find_subscriptions(request.user_ids)
    if not subscriptions:
        logger.info("No subscriptions found for notification", extra={"data": {"user_ids": request.user_ids}})
        return DeliverySummary(message=NO_SUBSCRIPTIONS_MESSAGE)

    data = json.dumps(request.payload(), ensure_ascii=False)
    outcomes = await asyncio.gather(
        *(deliver_to_subscription(store, sub, data, private_key) for sub in subscriptions),
        return_exceptions=True,
    )

    results: List[DeliveryResult] = []
    for sub, outcome in zip(subscriptions, outcomes):
        if isinstance(outcome, BaseException):
            logger.error(f"Delivery task for subscription {sub.id} crashed: {outcome!r}")
            outcome = DeliveryResult(subscription_id=sub.id, success=False, error="delivery task failed")
        results.append(outcome)

    summary = DeliverySummary.from_results(PROCESSED_MESSAGE, results)
    logger.info(
        f"Push notifications sent: {summary.successful} successful, {summary.failed} failed",
        extra={"data": {"title": request.title, "attempted": len(results)}}
    )
    return summary
