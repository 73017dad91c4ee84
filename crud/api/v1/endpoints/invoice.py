from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from schemas.invoice import Invoice, InvoiceDetail, InvoiceGenerate
from crud import invoice

router = APIRouter()

@router.post("/service/{service_id}", response_model=InvoiceDetail)
def generate_invoice(service_id: int, payload: InvoiceGenerate, db: Session = Depends(get_db)):
    return invoice.generate_invoice(db, service_id, payload.service_charge)

@router.get("/service/{service_id}", response_model=InvoiceDetail)
def get_invoice_by_service(service_id: int, db: Session = Depends(get_db)):
    return invoice.get_invoice_by_service(db, service_id)

@router.get("/invoices/", response_model=List[Invoice])
def list_invoices(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return invoice.get_invoices(db, skip, limit)

@router.get("/invoices/{invoice_id}", response_model=InvoiceDetail)
def get_invoice(invoice_id: str, db: Session = Depends(get_db)):
    return invoice.get_invoice(db, invoice_id)
