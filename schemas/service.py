from pydantic import BaseModel, Field, condecimal
from typing import List, Optional
from datetime import date
from decimal import Decimal


class ServicePartRequest(BaseModel):
    stock_id: int
    quantity_used: int = Field(gt=0)

class ServicePartFIFORequest(BaseModel):
    item_id: int
    quantity: int = Field(gt=0)

class ServicePartsPayload(BaseModel):
    parts: List[ServicePartRequest]

class ServicePartsFIFOPayload(BaseModel):
    parts: List[ServicePartFIFORequest] = Field(min_length=1)

class ServicePartUsage(BaseModel):
    service_id: int
    stock_id: int
    item_id: int
    quantity_used: int

    class Config:
        from_attributes = True

class ServicePartLine(BaseModel):
    stock_id: int
    item_id: int
    item_name: str
    brand: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    quantity_used: int
    buying_price: Optional[Decimal] = None
    selling_price: Decimal
    line_total: Decimal


class ServiceRecordBase(BaseModel):
    vehicle_number: str = Field(min_length=1)
    service_description: Optional[str] = None
    service_date: date
    mileage: Optional[int] = Field(None, ge=0)
    next_service_date: Optional[date] = None

class ServiceRecordCreate(ServiceRecordBase):
    parts: List[ServicePartRequest] = []
    service_charge: Optional[condecimal(max_digits=15, decimal_places=2, ge=0)] = None

class ServiceRecord(ServiceRecordBase):
    id: int
    parts_count: int = 0

    class Config:
        from_attributes = True

class ServiceRecordDetail(ServiceRecord):
    parts_used: List[ServicePartLine]
