from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from database import get_db
from schemas.service import (
    ServiceRecord, ServiceRecordCreate, ServiceRecordDetail,
    ServicePartsPayload, ServicePartsFIFOPayload, ServicePartUsage
)
from crud import service

router = APIRouter()

@router.post("/", response_model=ServiceRecordDetail, status_code=201)
def create_service_record(record: ServiceRecordCreate, db: Session = Depends(get_db)):
    db_record = service.create_service_record(db, record)
    return service.get_service_record_detail(db, db_record.id)

@router.get("/", response_model=List[ServiceRecord])
def list_service_records(
    skip: int = 0,
    limit: int = 100,
    vehicle_number: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db)
):
    return service.get_service_records(db, skip, limit, vehicle_number, start_date, end_date)

@router.get("/{service_id}", response_model=ServiceRecordDetail)
def get_service_record(service_id: int, db: Session = Depends(get_db)):
    return service.get_service_record_detail(db, service_id)

@router.delete("/{service_id}")
def delete_service_record(service_id: int, db: Session = Depends(get_db)):
    service.delete_service_record(db, service_id)
    return {"status": "success"}

@router.get("/{service_id}/parts", response_model=List[ServicePartUsage])
def list_service_parts(service_id: int, db: Session = Depends(get_db)):
    service.require_service_record(db, service_id)
    return service.get_service_parts(db, service_id)

@router.post("/{service_id}/parts", response_model=List[ServicePartUsage])
def attach_service_parts(service_id: int, payload: ServicePartsPayload, db: Session = Depends(get_db)):
    return service.attach_service_parts(db, service_id, payload.parts)

@router.post("/{service_id}/parts/fifo", response_model=List[ServicePartUsage])
def attach_service_parts_fifo(service_id: int, payload: ServicePartsFIFOPayload, db: Session = Depends(get_db)):
    return service.attach_service_parts_fifo(db, service_id, payload.parts)

@router.put("/{service_id}/parts", response_model=List[ServicePartUsage])
def replace_service_parts(service_id: int, payload: ServicePartsPayload, db: Session = Depends(get_db)):
    return service.replace_service_parts(db, service_id, payload.parts)

@router.delete("/{service_id}/parts")
def delete_service_parts(service_id: int, db: Session = Depends(get_db)):
    service.delete_service_parts(db, service_id)
    return {"status": "success"}

@router.delete("/{service_id}/parts/{stock_id}")
def remove_service_part(service_id: int, stock_id: int, db: Session = Depends(get_db)):
    service.remove_service_part(db, service_id, stock_id)
    return {"status": "success"}
