from pydantic import BaseModel, ConfigDict
from typing import Literal
from datetime import date


class EquipmentAlert(BaseModel):
    id: str
    name: str
    next_cleaning: date
    days_until_due: int
    type: Literal['overdue', 'warning'] = 'overdue'
    read: bool = False


class InventoryAlert(BaseModel):
    id: str
    name: str
    current_quantity: float
    minimum_quantity: float
    type: Literal['low', 'critical']
    read: bool = False

    model_config = ConfigDict(extra="ignore")
