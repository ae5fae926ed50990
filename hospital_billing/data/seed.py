from datetime import date, timedelta
from hospital_billing.config import Settings
from hospital_billing.database import Database
from hospital_billing.logger import logger
from hospital_billing.models import HospitalSettings, Invoice, Patient, Service
from hospital_billing.schemas import InvoiceCreate
from hospital_billing.services.invoicing import compose_invoice
from hospital_billing.services.storage import DatabaseStorage


SAMPLE_PATIENTS = [
    {
        "name": "Sarah Johnson",
        "email": "sarah.johnson@email.com",
        "phone": "+91-9876543210",
        "address": "123 Main Street, Mumbai, Maharashtra, India",
        "date_of_birth": "1985-06-15",
        "status": "active",
    },
    {
        "name": "Michael Davis",
        "email": "michael.davis@email.com",
        "phone": "+91-9876543211",
        "address": "456 Oak Avenue, Delhi, India",
        "date_of_birth": "1978-03-22",
        "status": "active",
    },
    {
        "name": "John Smith",
        "email": "john.smith@email.com",
        "phone": "+91-9876543212",
        "address": "789 Pine Road, Bangalore, Karnataka, India",
        "date_of_birth": "1992-11-08",
        "status": "active",
    },
]

SAMPLE_SERVICES = [
    {
        "name": "General Consultation",
        "description": "Standard medical consultation with primary care physician",
        "category": "consultation",
        "price": "150.00",
    },
    {
        "name": "Blood Test",
        "description": "Complete blood count and basic metabolic panel",
        "category": "diagnostic",
        "price": "85.00",
    },
    {
        "name": "X-Ray Chest",
        "description": "Chest X-ray imaging",
        "category": "diagnostic",
        "price": "120.00",
    },
    {
        "name": "Physical Therapy Session",
        "description": "One hour physical therapy session",
        "category": "treatment",
        "price": "95.00",
    },
]

DEFAULT_HOSPITAL = {
    "name": "City General Hospital",
    "address": "123 Medical Street, Mumbai, Maharashtra 400001, India",
    "phone": "+91-22-12345678",
    "email": "info@citygeneralhospital.com",
    "logo_url": None,
    "currency": "INR",
    "tax_rate": "18.00",
}


def seed_database(database: Database, settings: Settings) -> None:
    """Populate empty tables with demo data. Tables that already hold rows are left alone."""
    database.init_db()
    db = database.session()
    storage = DatabaseStorage(db)

    try:
        if not storage.get_user_by_username(settings.ADMIN_USERNAME):
            storage.create_user({
                "username": settings.ADMIN_USERNAME,
                "password": settings.ADMIN_PASSWORD,
                "name": "Administrator",
                "role": "admin",
            })
            logger.info(f"✅ Admin user created: {settings.ADMIN_USERNAME}")

        if not db.query(HospitalSettings).first():
            storage.upsert_settings(dict(DEFAULT_HOSPITAL))
            logger.info("✅ Hospital settings created")

        if not db.query(Patient).first():
            for fields in SAMPLE_PATIENTS:
                storage.create_patient(dict(fields))
            logger.info(f"✅ {len(SAMPLE_PATIENTS)} sample patients created")

        if not db.query(Service).first():
            for fields in SAMPLE_SERVICES:
                storage.create_service(dict(fields))
            logger.info(f"✅ {len(SAMPLE_SERVICES)} sample services created")

        if not db.query(Invoice).first():
            _seed_invoices(storage, settings)
    finally:
        db.close()


def _seed_invoices(storage: DatabaseStorage, settings: Settings) -> None:
    patients = storage.list_patients()
    services = {s.name: s for s in storage.list_services()}
    consultation = services.get("General Consultation")
    blood_test = services.get("Blood Test")
    if len(patients) < 2 or not consultation or not blood_test:
        logger.info("Skipping sample invoices: sample patients/services are missing")
        return

    invoice_date = date.today() - timedelta(days=3)
    first = compose_invoice(
        storage,
        InvoiceCreate(
            patient_id=patients[0].id,
            invoice_date=invoice_date,
            items=[
                {"service_id": consultation.id, "quantity": 1},
                {"service_id": blood_test.id, "quantity": 1},
            ],
        ),
        settings,
    )
    second = compose_invoice(
        storage,
        InvoiceCreate(
            patient_id=patients[1].id,
            invoice_date=invoice_date,
            items=[{"service_id": consultation.id, "quantity": 1}],
        ),
        settings,
    )
    storage.update_invoice_status(second.id, "paid")
    logger.info(f"✅ Sample invoices created: {first.invoice_number}, {second.invoice_number}")
