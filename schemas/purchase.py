from pydantic import BaseModel, Field, condecimal
from typing import Optional
from datetime import date
from decimal import Decimal


class PurchaseCreate(BaseModel):
    item_id: int
    purchase_date: date
    quantity: int = Field(gt=0)
    buying_price: condecimal(max_digits=15, decimal_places=2, ge=0)
    supplier: Optional[str] = None
    selling_price: condecimal(max_digits=15, decimal_places=2, ge=0)

class PurchaseUpdate(BaseModel):
    purchase_date: Optional[date] = None
    quantity: Optional[int] = Field(None, gt=0)
    buying_price: Optional[condecimal(max_digits=15, decimal_places=2, ge=0)] = None
    supplier: Optional[str] = None
    selling_price: Optional[condecimal(max_digits=15, decimal_places=2, ge=0)] = None

class Purchase(BaseModel):
    id: int
    item_id: int
    purchase_date: date
    quantity: int
    buying_price: Decimal
    supplier: Optional[str] = None
    stock_id: Optional[int] = None
    available_qty: Optional[int] = None
    selling_price: Optional[Decimal] = None

    class Config:
        from_attributes = True
