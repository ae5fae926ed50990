from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Numeric, cast, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from hospital_billing.exceptions import ConflictError, PersistenceError
from hospital_billing.logger import logger
from hospital_billing.models import (
    HospitalSettings,
    Invoice,
    InvoiceItem,
    Patient,
    Service,
    User,
)
from hospital_billing.money import quantize


def month_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Half-open [first day of month, first day of next month) around ``now``."""
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


class DatabaseStorage:
    """Entity-scoped CRUD and the two read aggregates, over one Session.

    "Not found" is a return value here (``None`` / ``False``); only store
    failures raise.
    """

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}") from e

    def _commit_bulk(self, action: str) -> None:
        """Commit a query-level write and drop cached rows the database may have changed.

        Every loaded instance is expired, so one whose row was deleted here
        raises ``ObjectDeletedError`` on the next attribute access. Keep ids,
        not instances, across a bulk delete.
        """
        self._commit(action)
        self.db.expire_all()

    # ── Users ──

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def create_user(self, fields: dict) -> User:
        user = User(**fields)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(f"Username '{fields.get('username')}' is already taken") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create user: {e}")
            raise PersistenceError("Failed to create user") from e
        self.db.refresh(user)
        return user

    # ── Patients ──

    def list_patients(self) -> List[Patient]:
        return self.db.query(Patient).order_by(Patient.created_at, Patient.id).all()

    def get_patient(self, patient_id: str) -> Optional[Patient]:
        return self.db.get(Patient, patient_id)

    def create_patient(self, fields: dict) -> Patient:
        patient = Patient(**fields)
        self.db.add(patient)
        self._commit("create patient")
        self.db.refresh(patient)
        return patient

    def update_patient(self, patient_id: str, fields: dict) -> Optional[Patient]:
        patient = self.get_patient(patient_id)
        if not patient:
            return None
        for key, value in fields.items():
            setattr(patient, key, value)
        self._commit("update patient")
        self.db.refresh(patient)
        return patient

    def delete_patient(self, patient_id: str) -> bool:
        # Invoices keep their snapshot; patient_id is nulled by the FK rule.
        deleted = self.db.query(Patient).filter(Patient.id == patient_id).delete(
            synchronize_session=False
        )
        self._commit_bulk("delete patient")
        return deleted > 0

    # ── Services ──

    def list_services(self) -> List[Service]:
        return self.db.query(Service).order_by(Service.created_at, Service.id).all()

    def get_service(self, service_id: str) -> Optional[Service]:
        return self.db.get(Service, service_id)

    def create_service(self, fields: dict) -> Service:
        service = Service(**fields)
        self.db.add(service)
        self._commit("create service")
        self.db.refresh(service)
        return service

    def update_service(self, service_id: str, fields: dict) -> Optional[Service]:
        service = self.get_service(service_id)
        if not service:
            return None
        for key, value in fields.items():
            setattr(service, key, value)
        self._commit("update service")
        self.db.refresh(service)
        return service

    def delete_service(self, service_id: str) -> bool:
        deleted = self.db.query(Service).filter(Service.id == service_id).delete(
            synchronize_session=False
        )
        self._commit_bulk("delete service")
        return deleted > 0

    # ── Invoices ──

    def _invoice_query(self):
        return self.db.query(Invoice).options(
            joinedload(Invoice.patient),
            selectinload(Invoice.items),
        )

    def list_invoices_with_details(self) -> List[Invoice]:
        return self._invoice_query().order_by(Invoice.created_at, Invoice.id).all()

    def get_invoice_with_details(self, invoice_id: str) -> Optional[Invoice]:
        return self._invoice_query().filter(Invoice.id == invoice_id).first()

    def invoice_number_exists(self, invoice_number: str) -> bool:
        return self.db.query(Invoice.id).filter(
            Invoice.invoice_number == invoice_number
        ).first() is not None

    def next_invoice_sequence(self, prefix: str) -> int:
        """Highest numeric suffix already issued under ``prefix``, plus one."""
        numbers = self.db.query(Invoice.invoice_number).filter(
            Invoice.invoice_number.like(f"{prefix}%")
        ).all()
        highest = 0
        for (number,) in numbers:
            suffix = number[len(prefix):]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return highest + 1

    def create_invoice_with_items(self, invoice_fields: dict, items: List[dict]) -> Invoice:
        """Insert the invoice and its items in one transaction."""
        try:
            invoice = Invoice(**invoice_fields)
            self.db.add(invoice)
            self.db.flush()  # assigns invoice.id for the items

            for position, item in enumerate(items):
                self.db.add(InvoiceItem(invoice_id=invoice.id, position=position, **item))

            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            number = invoice_fields.get("invoice_number")
            if number and self.invoice_number_exists(number):
                raise ConflictError(f"Invoice number {number} already exists") from e
            logger.error(f"❌ Failed to create invoice: {e}")
            raise PersistenceError("Failed to create invoice") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create invoice: {e}")
            raise PersistenceError("Failed to create invoice") from e

        invoice_id = invoice.id
        self.db.expire_all()
        return self.get_invoice_with_details(invoice_id)

    def update_invoice_status(self, invoice_id: str, status: str) -> bool:
        updated = self.db.query(Invoice).filter(Invoice.id == invoice_id).update(
            {Invoice.status: status}, synchronize_session=False
        )
        self._commit_bulk("update invoice status")
        return updated > 0

    def delete_invoice(self, invoice_id: str) -> bool:
        """Delete the items, then the invoice, as one unit."""
        self.db.query(InvoiceItem).filter(InvoiceItem.invoice_id == invoice_id).delete(
            synchronize_session=False
        )
        deleted = self.db.query(Invoice).filter(Invoice.id == invoice_id).delete(
            synchronize_session=False
        )
        self._commit_bulk("delete invoice")
        return deleted > 0

    # ── Hospital settings ──

    def get_settings(self) -> Optional[HospitalSettings]:
        return self.db.query(HospitalSettings).order_by(HospitalSettings.updated_at).first()

    def upsert_settings(self, fields: dict) -> HospitalSettings:
        settings_row = self.get_settings()
        if settings_row:
            for key, value in fields.items():
                setattr(settings_row, key, value)
            settings_row.updated_at = datetime.now()
        else:
            settings_row = HospitalSettings(**fields)
            self.db.add(settings_row)
        self._commit("save hospital settings")
        self.db.refresh(settings_row)
        return settings_row

    # ── Dashboard ──

    def get_dashboard_stats(self, now: Optional[datetime] = None) -> dict:
        start, end = month_bounds(now or datetime.now())

        total_patients = self.db.query(func.count(Patient.id)).scalar()
        total_invoices = self.db.query(func.count(Invoice.id)).scalar()
        revenue = self.db.query(
            func.coalesce(func.sum(cast(Invoice.total, Numeric(12, 2))), 0)
        ).filter(
            Invoice.created_at >= start,
            Invoice.created_at < end,
        ).scalar()
        pending_bills = self.db.query(func.count(Invoice.id)).filter(
            Invoice.status == "pending"
        ).scalar()

        return {
            "total_patients": total_patients or 0,
            "total_invoices": total_invoices or 0,
            "monthly_revenue": quantize(Decimal(str(revenue or 0))),
            "pending_bills": pending_bills or 0,
        }
