from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from hospital_billing.money import MAX_PRICE, MAX_QUANTITY, format_money, to_decimal


PatientStatus = Literal["active", "inactive"]
InvoiceStatus = Literal["pending", "paid"]


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python, readable from ORM rows."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _positive_price(value) -> str:
    price = to_decimal(value)
    if price <= 0:
        raise ValueError("Price must be a valid positive number")
    if price > MAX_PRICE:
        raise ValueError(f"Price cannot exceed {MAX_PRICE}")
    return format_money(price)


def _unit_price(value) -> str:
    price = to_decimal(value)
    if price < 0 or price > MAX_PRICE:
        raise ValueError(f"Unit price must be between 0 and {MAX_PRICE}")
    return format_money(price)


def _percentage(value) -> str:
    rate = to_decimal(value)
    if rate < 0 or rate > 100:
        raise ValueError("Tax rate must be between 0 and 100")
    return format_money(rate)


class MessageResponse(ApiModel):
    message: str


# ── Auth ──────────────────────────────────────────────

class LoginRequest(ApiModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserOut(ApiModel):
    id: str
    username: str
    name: str
    role: str


class LoginResponse(ApiModel):
    user: UserOut


# ── Patients ──────────────────────────────────────────

class PatientCreate(ApiModel):
    name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    phone: str = Field(min_length=1)
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    status: PatientStatus = "active"

    blank_to_none = field_validator("email", "date_of_birth", mode="before")(_blank_to_none)


class PatientUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    status: Optional[PatientStatus] = None

    blank_to_none = field_validator("email", "date_of_birth", mode="before")(_blank_to_none)

    @field_validator("name", "phone", "status")
    @classmethod
    def required_columns_not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class PatientOut(ApiModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[str] = None
    status: str
    created_at: datetime


# ── Services ──────────────────────────────────────────

class ServiceCreate(ApiModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category: str = Field(min_length=1)
    price: str
    is_active: bool = True

    @field_validator("price", mode="before")
    @classmethod
    def normalise_price(cls, value):
        return _positive_price(value)


class ServiceUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1)
    price: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("price", mode="before")
    @classmethod
    def normalise_price(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return _positive_price(value)

    @field_validator("name", "category", "is_active")
    @classmethod
    def required_columns_not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class ServiceOut(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    category: str
    price: str
    is_active: bool
    created_at: datetime


# ── Invoices ──────────────────────────────────────────

class InvoiceItemCreate(ApiModel):
    service_id: str = Field(min_length=1)
    quantity: int = Field(ge=1, le=MAX_QUANTITY)
    unit_price: Optional[str] = None

    @field_validator("unit_price", mode="before")
    @classmethod
    def normalise_unit_price(cls, value):
        return None if value is None else _unit_price(value)


class InvoiceCreate(ApiModel):
    patient_id: str = Field(min_length=1)
    items: List[InvoiceItemCreate] = Field(min_length=1)
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    tax_rate: Optional[str] = None
    invoice_number: Optional[str] = Field(default=None, min_length=1)
    status: InvoiceStatus = "pending"

    @field_validator("tax_rate", mode="before")
    @classmethod
    def normalise_tax_rate(cls, value):
        return None if value is None else _percentage(value)

    @model_validator(mode="before")
    @classmethod
    def flatten_legacy_payload(cls, data):
        # Older clients post {"invoice": {...}, "items": [...]}
        if isinstance(data, dict) and isinstance(data.get("invoice"), dict):
            flattened = dict(data["invoice"])
            flattened["items"] = data.get("items")
            return flattened
        return data

    @model_validator(mode="after")
    def due_after_invoice_date(self):
        if self.invoice_date and self.due_date and self.due_date < self.invoice_date:
            raise ValueError("dueDate cannot be before invoiceDate")
        return self


class InvoiceStatusUpdate(ApiModel):
    status: InvoiceStatus


class InvoiceItemOut(ApiModel):
    id: str
    invoice_id: str
    service_id: Optional[str] = None
    service_name: str
    quantity: int
    unit_price: str
    total: str


class InvoiceOut(ApiModel):
    id: str
    invoice_number: str
    patient_id: Optional[str] = None
    invoice_date: str
    due_date: str
    subtotal: str
    tax_rate: str
    tax_amount: str
    total: str
    status: str
    created_at: datetime


class InvoiceWithDetails(InvoiceOut):
    patient: Optional[PatientOut] = None
    items: List[InvoiceItemOut] = []


# ── Hospital settings ─────────────────────────────────

class HospitalSettingsUpdate(ApiModel):
    name: str = Field(min_length=1)
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    logo_url: Optional[str] = None
    currency: str = Field(default="INR", min_length=1)
    tax_rate: str = "0.00"

    blank_to_none = field_validator("email", mode="before")(_blank_to_none)

    @field_validator("tax_rate", mode="before")
    @classmethod
    def normalise_tax_rate(cls, value):
        return _percentage(value)


class HospitalSettingsOut(ApiModel):
    id: str
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    logo_url: Optional[str] = None
    currency: str
    tax_rate: str
    updated_at: Optional[datetime] = None


# ── Dashboard & audit ─────────────────────────────────

class DashboardStats(ApiModel):
    total_patients: int
    total_invoices: int
    monthly_revenue: float
    pending_bills: int


class AuditLogOut(ApiModel):
    id: int
    timestamp: str
    action: str
    entity: str
    entity_id: Optional[str] = None
    details: Optional[str] = None
