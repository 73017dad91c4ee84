from pydantic import BaseModel, condecimal
from typing import List, Optional
from datetime import date
from decimal import Decimal
from schemas.service import ServicePartLine


class InvoiceGenerate(BaseModel):
    service_charge: condecimal(max_digits=15, decimal_places=2, ge=0)

class Invoice(BaseModel):
    id: str
    service_id: int
    description: Optional[str] = None
    service_charge: Decimal
    parts_total_price: Decimal
    total_price: Decimal
    created_date: Optional[date] = None

    class Config:
        from_attributes = True

class InvoiceDetail(Invoice):
    vehicle_number: Optional[str] = None
    service_date: Optional[date] = None
    parts_used: List[ServicePartLine]
