from pydantic import BaseModel
from typing import Optional


class StockValuation(BaseModel):
    item_id: int
    name: str
    brand: Optional[str] = None
    category: Optional[str] = None
    lots: int
    total_available: int
    cost_value: float
    retail_value: float

class PurchaseSummary(BaseModel):
    supplier: str
    month: str
    purchases: int
    quantity: int
    total_cost: float

class PartsConsumption(BaseModel):
    item_id: int
    name: str
    services: int
    quantity_used: int
    revenue: float
