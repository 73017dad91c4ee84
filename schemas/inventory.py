from pydantic import BaseModel, Field, condecimal
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal

class InventoryItemBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    unit: Optional[str] = None
    restock_level: int = Field(0, ge=0)

class InventoryItemCreate(InventoryItemBase):
    pass

class InventoryItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    unit: Optional[str] = None
    restock_level: Optional[int] = Field(None, ge=0)

class InventoryItem(InventoryItemBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StockLotCreate(BaseModel):
    item_id: int
    available_qty: int = Field(ge=0)
    selling_price: condecimal(max_digits=15, decimal_places=2, ge=0)
    purchase_id: Optional[int] = None
    purchase_date: Optional[date] = None
    buying_price: Optional[condecimal(max_digits=15, decimal_places=2, ge=0)] = None

class StockPriceUpdate(BaseModel):
    selling_price: condecimal(max_digits=15, decimal_places=2, ge=0)

class StockLot(BaseModel):
    id: int
    item_id: int
    purchase_id: Optional[int] = None
    available_qty: int
    selling_price: Decimal
    buying_price: Optional[Decimal] = None
    purchase_date: date

    class Config:
        from_attributes = True


class LotStatus(BaseModel):
    stock_id: int
    purchase_id: Optional[int] = None
    available_qty: int
    buying_price: Optional[Decimal] = None
    selling_price: Decimal
    purchase_date: date

class StockStatus(BaseModel):
    item_id: int
    item: InventoryItem
    total_available: int
    lots: List[LotStatus]


class LowStockItem(BaseModel):
    item_id: int
    name: str
    brand: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    restock_level: int
    total_available: int

class StockUsage(BaseModel):
    service_id: int
    quantity_used: int
    service_date: date
    service_description: Optional[str] = None
    vehicle_number: str
