from sqlalchemy import Column, Integer, String, Numeric, Date, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from database import Base

class Invoice(Base):
    __tablename__ = "invoices"

    # INVOICE_PREFIX + zero padded service record id, e.g. INV000042
    id = Column(String, primary_key=True, index=True)
    service_id = Column(Integer, ForeignKey("service_records.id"), unique=True, nullable=False)
    description = Column(String, nullable=True)
    service_charge = Column(Numeric(15, 2), nullable=False, default=0)
    parts_total_price = Column(Numeric(15, 2), nullable=False, default=0)
    total_price = Column(Numeric(15, 2), nullable=False, default=0)
    created_date = Column(Date, server_default=func.current_date())

    service_record = relationship("ServiceRecord", back_populates="invoice")
