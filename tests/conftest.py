"""Shared fixtures: a fresh in-memory database per test and small factories."""

import os

os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import models  # noqa: F401
from crud import inventory, purchase, service
from database import Base, create_db_engine, get_db
from schemas.inventory import InventoryItemCreate
from schemas.purchase import PurchaseCreate
from schemas.service import ServiceRecordCreate


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def client(db):
    from main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_item(db):
    counter = {"n": 0}

    def _make(name=None, brand="Bosch", category="Filters", restock_level=0, unit="pcs"):
        counter["n"] += 1
        return inventory.create_inventory_item(db, InventoryItemCreate(
            name=name or f"Oil Filter {counter['n']}",
            brand=brand,
            category=category,
            unit=unit,
            restock_level=restock_level,
        ))

    return _make


@pytest.fixture
def make_purchase(db):
    def _make(item, quantity, purchase_date=date(2024, 1, 1),
              buying_price="5.00", selling_price="8.00", supplier="Acme Parts"):
        return purchase.record_purchase(db, PurchaseCreate(
            item_id=item.id,
            purchase_date=purchase_date,
            quantity=quantity,
            buying_price=Decimal(buying_price),
            selling_price=Decimal(selling_price),
            supplier=supplier,
        ))

    return _make


@pytest.fixture
def make_service(db):
    def _make(vehicle_number="CAB-1234", service_date=date(2024, 3, 1), parts=(), service_charge=None):
        return service.create_service_record(db, ServiceRecordCreate(
            vehicle_number=vehicle_number,
            service_description="Full service",
            service_date=service_date,
            parts=list(parts),
            service_charge=service_charge,
        ))

    return _make
