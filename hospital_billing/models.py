import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from hospital_billing.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password = Column(String(200), nullable=False)  # plaintext, see DESIGN.md
    name = Column(String(100), nullable=False)
    role = Column(String(50), nullable=False, default="user")
    created_at = Column(DateTime, nullable=False, default=datetime.now)


class Patient(Base):
    __tablename__ = "patients"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    email = Column(String(200))
    phone = Column(String(30), nullable=False)
    address = Column(Text)
    date_of_birth = Column(String(10))  # YYYY-MM-DD
    status = Column(String(20), nullable=False, default="active")  # active, inactive
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)

    invoices = relationship("Invoice", back_populates="patient", passive_deletes=True)


class Service(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    category = Column(String(100), nullable=False)
    price = Column(String(20), nullable=False)  # "150.00"
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(String(36), primary_key=True, default=new_id)
    invoice_number = Column(String(50), unique=True, nullable=False)
    # Nulled when the patient is deleted; the invoice itself is kept.
    patient_id = Column(String(36), ForeignKey("patients.id", ondelete="SET NULL"), index=True)
    invoice_date = Column(String(10), nullable=False)  # YYYY-MM-DD
    due_date = Column(String(10), nullable=False)  # YYYY-MM-DD
    subtotal = Column(String(20), nullable=False)
    tax_rate = Column(String(20), nullable=False)
    tax_amount = Column(String(20), nullable=False)
    total = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending, paid
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)

    patient = relationship("Patient", back_populates="invoices")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        order_by="InvoiceItem.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(String(36), primary_key=True, default=new_id)
    invoice_id = Column(String(36), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(String(36), ForeignKey("services.id", ondelete="SET NULL"))
    service_name = Column(String(200), nullable=False)  # snapshot at billing time
    quantity = Column(Integer, nullable=False)
    unit_price = Column(String(20), nullable=False)
    total = Column(String(20), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    invoice = relationship("Invoice", back_populates="items")


class HospitalSettings(Base):
    __tablename__ = "hospital_settings"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    address = Column(Text)
    phone = Column(String(30))
    email = Column(String(200))
    logo_url = Column(Text)
    currency = Column(String(10), nullable=False, default="INR")
    tax_rate = Column(String(20), nullable=False, default="0.00")
    updated_at = Column(DateTime, nullable=False, default=datetime.now)
