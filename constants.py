# Global Constants

class Roles:
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"
    PENDING = "pending"  # Signed up, waiting for approval


class EquipmentStatus:
    OPERATIONAL = "operacional"
    MAINTENANCE = "manutencao"
    STOPPED = "parado"


class InventoryStatus:
    NORMAL = "normal"
    LOW = "baixo"
    CRITICAL = "critico"


class AlertPrefs:
    LOW_STOCK = "low_stock_alerts_enabled"
    OVERDUE_MAINTENANCE = "overdue_maintenance_alerts_enabled"


NO_SUBSCRIPTIONS_MESSAGE = "No subscriptions found"
PROCESSED_MESSAGE = "Push notifications processed"
NO_ALERTS_MESSAGE = "Nenhum alerta para enviar."

DEFAULT_ICON = "/appstore.png"
DEFAULT_BADGE = "/196.png"
