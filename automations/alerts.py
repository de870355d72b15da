from datetime import date
from typing import List, Optional

from constants import AlertPrefs, EquipmentStatus, NO_ALERTS_MESSAGE, NO_SUBSCRIPTIONS_MESSAGE, PROCESSED_MESSAGE
from logging_config import get_logger
from models.alerts import EquipmentAlert, InventoryAlert
from models.notification import NotificationRequest, DeliverySummary
from stores.equipment import EquipmentStore
from stores.inventory import InventoryStore
from stores.profiles import ProfileStore
from stores.subscriptions import SubscriptionStore
from utils.push import send_notification

logger = get_logger("alerts_automation")

CRITICAL_STOCK_PERCENT = 50


def classify_stock(current_quantity: float, minimum_quantity: float) -> Optional[str]:
    """'critical' at or below half the minimum, 'low' up to the minimum, None otherwise."""
    if minimum_quantity is None or minimum_quantity <= 0:
        return None
    percent = (current_quantity / minimum_quantity) * 100
    if percent > 100:
        return None
    return "critical" if percent <= CRITICAL_STOCK_PERCENT else "low"


async def find_equipment_alerts(
    store: EquipmentStore,
    today: Optional[date] = None,
    operational_only: bool = False,
) -> List[EquipmentAlert]:
    """Overdue equipment. The push check only counts equipment that is in service."""
    today = today or date.today()
    status = EquipmentStatus.OPERATIONAL if operational_only else None
    alerts = []
    for item in await store.find_overdue(today, status):
        alerts.append(EquipmentAlert(
            id=item["id"],
            name=item["name"],
            next_cleaning=item["next_cleaning"],
            days_until_due=(item["next_cleaning"] - today).days,
            type="overdue",
        ))
    return alerts


async def find_inventory_alerts(store: InventoryStore) -> List[InventoryAlert]:
    alerts = []
    for item in await store.find_low_stock():
        current = item.get("current_quantity") or 0
        kind = classify_stock(current, item.get("minimum_quantity"))
        if kind is None:
            continue
        alerts.append(InventoryAlert(
            id=item["id"],
            name=item["name"],
            current_quantity=current,
            minimum_quantity=item["minimum_quantity"],
            type=kind,
        ))
    return alerts


async def build_alert_notifications(
    profiles: ProfileStore,
    equipment: EquipmentStore,
    inventory: InventoryStore,
    today: Optional[date] = None,
) -> List[NotificationRequest]:
    """One notification per alert kind, addressed to the users who opted in to it."""
    notifications = []

    equipment_alerts = await find_equipment_alerts(equipment, today, operational_only=True)
    if equipment_alerts:
        user_ids = await profiles.ids_with_alert_enabled(AlertPrefs.OVERDUE_MAINTENANCE)
        if user_ids:
            notifications.append(NotificationRequest(
                title="Manutenção Atrasada!",
                body=f"Você tem {len(equipment_alerts)} equipamento(s) com manutenção em atraso.",
                url="/equipments",
                user_ids=user_ids,
            ))

    inventory_alerts = await find_inventory_alerts(inventory)
    if inventory_alerts:
        user_ids = await profiles.ids_with_alert_enabled(AlertPrefs.LOW_STOCK)
        if user_ids:
            notifications.append(NotificationRequest(
                title="Estoque Crítico!",
                body=f"Você tem {len(inventory_alerts)} item(s) com estoque baixo.",
                url="/inventory",
                user_ids=user_ids,
            ))

    return notifications


async def check_alerts(
    subscriptions: SubscriptionStore,
    profiles: ProfileStore,
    equipment: EquipmentStore,
    inventory: InventoryStore,
    today: Optional[date] = None,
) -> DeliverySummary:
    """Scan for overdue maintenance and low stock and push the alerts to opted-in users."""
    notifications = await build_alert_notifications(profiles, equipment, inventory, today)
    if not notifications:
        logger.info("Alert check found nothing to send")
        return DeliverySummary(message=NO_ALERTS_MESSAGE)

    results = []
    for notification in notifications:
        summary = await send_notification(subscriptions, notification)
        results.extend(summary.results)

    message = PROCESSED_MESSAGE if results else NO_SUBSCRIPTIONS_MESSAGE
    summary = DeliverySummary.from_results(message, results)
    logger.info(
        f"Alert check delivered {len(notifications)} notification(s)",
        extra={"data": {"successful": summary.successful, "failed": summary.failed}}
    )
    return summary
