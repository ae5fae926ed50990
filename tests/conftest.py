from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from hospital_billing.config import Settings
from hospital_billing.database import Database
from hospital_billing.main import create_app
from hospital_billing.services.storage import DatabaseStorage


@pytest.fixture()
def app_settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'billing.db'}",
        SEED_DEMO_DATA=False,
        DEFAULT_TAX_RATE="0",
        FRONTEND_DIR=str(tmp_path / "no-frontend"),
        LOG_LEVEL="WARNING",
    )


@pytest.fixture()
def database(app_settings):
    db = Database(app_settings.DATABASE_URL)
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture()
def storage(database):
    session = database.session()
    yield DatabaseStorage(session)
    session.close()


@pytest.fixture()
def client(app_settings):
    app = create_app(app_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def seeded_client(app_settings):
    app = create_app(app_settings.model_copy(update={"SEED_DEMO_DATA": True}))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def patient(storage):
    return storage.create_patient({
        "name": "Sarah Johnson",
        "email": "sarah.johnson@email.com",
        "phone": "+91-9876543210",
        "address": "123 Main Street, Mumbai",
        "date_of_birth": "1985-06-15",
    })


@pytest.fixture()
def consultation(storage):
    return storage.create_service({
        "name": "General Consultation",
        "category": "consultation",
        "price": "150.00",
    })


@pytest.fixture()
def blood_test(storage):
    return storage.create_service({
        "name": "Blood Test",
        "category": "diagnostic",
        "price": "85.00",
    })
