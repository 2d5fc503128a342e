from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from config import (
    DEFAULT_MONTHLY_FEE, DEFAULT_SOCIETY_ADDRESS, DEFAULT_SOCIETY_NAME, DEFAULT_START_MONTH,
    STATUS_PAID, STATUS_PENDING, STATUS_PENDING_VALIDATION, STATUS_REJECTED,
)
from helpers import (
    format_start_month, iter_months, month_key, month_label, normalize_flat,
    parse_datetime, parse_month_label, safe_string, to_float, to_month_key,
)


class SheetRow(BaseModel):
    """Base for records built from loosely-typed spreadsheet rows."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PaymentStatus(str, Enum):
    PAID = STATUS_PAID
    PENDING_VALIDATION = STATUS_PENDING_VALIDATION
    PENDING = STATUS_PENDING
    REJECTED = STATUS_REJECTED
    OTHER = "Other"

    @classmethod
    def parse(cls, text: Any) -> "PaymentStatus":
        """Case-insensitive; unknown text maps to OTHER."""
        s = safe_string(text).lower()
        for member in cls:
            if member is not cls.OTHER and member.value.lower() == s:
                return member
        return cls.OTHER


class Settings(SheetRow):
    society_name: str = DEFAULT_SOCIETY_NAME
    society_address: str = DEFAULT_SOCIETY_ADDRESS
    monthly_fee: float = DEFAULT_MONTHLY_FEE
    start_month: str = DEFAULT_START_MONTH

    @field_validator("society_name", "society_address", "start_month", mode="before")
    @classmethod
    def _text_or_default(cls, v, info):
        s = format_start_month(v) if info.field_name == "start_month" else safe_string(v)
        return s or cls.model_fields[info.field_name].default

    @field_validator("monthly_fee", mode="before")
    @classmethod
    def _fee(cls, v):
        return to_float(v, DEFAULT_MONTHLY_FEE)

    @classmethod
    def from_api(cls, data: Any) -> "Settings":
        """
        Build settings from either a {Key: Value} mapping or a list of
        key/value rows. Keys are matched case-insensitively.
        """
        config: Dict[str, Any] = {}
        if isinstance(data, list):
            for row in data:
                if not isinstance(row, dict):
                    continue
                key = safe_string(row.get("Key") or row.get("key") or row.get("Name") or row.get("name"))
                if key:
                    config[key] = row.get("Value", row.get("value"))
                    config[key.lower()] = config[key]
        elif isinstance(data, dict):
            for key, val in data.items():
                clean = safe_string(key)
                config[clean] = val
                config[clean.lower()] = val

        def pick(key: str) -> Any:
            return config.get(key) or config.get(key.lower())

        return cls(
            society_name=pick("SocietyName"),
            society_address=pick("SocietyAddress"),
            monthly_fee=pick("MonthlyMaintainenceAmount"),
            start_month=pick("MonthlyMaintainenceStartFrom"),
        )


class Payment(SheetRow):
    id: str = Field(default_factory=lambda: str(uuid4()), validation_alias=AliasChoices("PaymentID", "id"))
    amount: float = Field(0.0, validation_alias=AliasChoices("Amount", "amount"))
    status: str = Field(STATUS_PENDING, validation_alias=AliasChoices("Status", "status"))
    category: str = Field("Maintenance", validation_alias=AliasChoices("Category", "category"))
    type: str = Field("", validation_alias=AliasChoices("Type", "type"))
    title: str = Field("", validation_alias=AliasChoices("Title", "title"))
    remarks: str = Field("", validation_alias=AliasChoices("Remarks", "remarks"))
    method: str = Field("UPI", validation_alias=AliasChoices("PaymentMethod", "method"))
    flat_no: str = Field("", validation_alias=AliasChoices("FlatNo", "flat", "flat_no"))
    raw_date: str = Field("", validation_alias=AliasChoices("PaymentDate", "date", "raw_date"))
    raw_month: str = Field("", validation_alias=AliasChoices("Month", "month", "raw_month"))
    validated_by: str = Field("", validation_alias=AliasChoices("ValidatedBy", "validated_by"))
    validation_time: str = Field("", validation_alias=AliasChoices("ValidationTime", "validation_time"))
    validation_comments: str = Field("", validation_alias=AliasChoices("ValidationComments", "validation_comments"))

    @field_validator("id", mode="before")
    @classmethod
    def _id(cls, v):
        return safe_string(v) or str(uuid4())

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v):
        return to_float(v)

    @field_validator("flat_no", mode="before")
    @classmethod
    def _flat(cls, v):
        return normalize_flat(v)

    @field_validator(
        "status", "category", "type", "title", "remarks", "method", "raw_date", "raw_month",
        "validated_by", "validation_time", "validation_comments", mode="before",
    )
    @classmethod
    def _text(cls, v, info):
        s = safe_string(v)
        if s:
            return s
        default = cls.model_fields[info.field_name].default
        return default if isinstance(default, str) else ""

    @model_validator(mode="after")
    def _derive_type(self):
        if not self.type:
            self.type = "Monthly" if self.category.lower() == "monthly" else self.category
        return self

    @property
    def status_kind(self) -> PaymentStatus:
        return PaymentStatus.parse(self.status)

    @property
    def month_key(self) -> str:
        return to_month_key(self.raw_month)

    @property
    def paid_at(self) -> Optional[datetime]:
        return parse_datetime(self.raw_date)

    @property
    def is_paid_strict(self) -> bool:
        return self.status_kind is PaymentStatus.PAID

    @property
    def is_pending_validation(self) -> bool:
        return self.status_kind is PaymentStatus.PENDING_VALIDATION

    @property
    def is_in_review(self) -> bool:
        return self.status_kind not in (PaymentStatus.PAID, PaymentStatus.REJECTED)

    @property
    def is_paid_or_pending_validation(self) -> bool:
        return self.status_kind in (PaymentStatus.PAID, PaymentStatus.PENDING_VALIDATION)

    @property
    def is_monthly(self) -> bool:
        return self.type.lower() == "monthly" or self.category.lower() == "monthly"


class Expense(SheetRow):
    id: str = Field(default_factory=lambda: str(uuid4()), validation_alias=AliasChoices("ExpenseID", "id"))
    title: str = Field("", validation_alias=AliasChoices("Title", "title", "Item"))
    type: str = Field("Adhoc", validation_alias=AliasChoices("Type", "type", "Category"))
    amount: float = Field(0.0, validation_alias=AliasChoices("Amount", "amount"))
    raw_date: str = Field("", validation_alias=AliasChoices("Date", "ExpenseDate", "date", "raw_date"))

    @field_validator("id", mode="before")
    @classmethod
    def _id(cls, v):
        return safe_string(v) or str(uuid4())

    @field_validator("title", "raw_date", mode="before")
    @classmethod
    def _text(cls, v):
        return safe_string(v)

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, v):
        return safe_string(v) or "Adhoc"

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v):
        return to_float(v)

    @property
    def spent_at(self) -> Optional[datetime]:
        return parse_datetime(self.raw_date)

    @property
    def is_monthly(self) -> bool:
        return self.type.lower() == "monthly"


class Admin(SheetRow):
    username: str = Field("", validation_alias=AliasChoices("AdminUserName", "adminusername", "username"))
    password: str = Field("", validation_alias=AliasChoices("AdminPassword", "adminpassword", "password"))

    @field_validator("username", "password", mode="before")
    @classmethod
    def _text(cls, v):
        # Numeric passwords arrive as numbers from the sheet
        return "" if v is None else str(v)


class Flat(SheetRow):
    flat: str = Field(validation_alias=AliasChoices("FlatNo", "flat"))
    due: float = Field(0.0, validation_alias=AliasChoices("Due", "Pending", "due"))

    @field_validator("flat", mode="before")
    @classmethod
    def _flat(cls, v):
        return normalize_flat(v)

    @field_validator("due", mode="before")
    @classmethod
    def _due(cls, v):
        return to_float(v)


class Occupant(SheetRow):
    flat_no: str = Field("", validation_alias=AliasChoices("FlatNo", "flat", "flat_no"))
    name: str = Field("Unknown", validation_alias=AliasChoices("Name", "name"))
    phone: str = Field("", validation_alias=AliasChoices("Phone", "Mobile", "phone"))
    email: str = Field("", validation_alias=AliasChoices("Email", "email"))
    type: str = Field("Owner", validation_alias=AliasChoices("ResidentType", "Type", "type"))

    @field_validator("flat_no", mode="before")
    @classmethod
    def _flat(cls, v):
        return normalize_flat(v)

    @field_validator("name", "phone", "email", "type", mode="before")
    @classmethod
    def _text(cls, v, info):
        return safe_string(v) or cls.model_fields[info.field_name].default

    @property
    def is_owner(self) -> bool:
        return self.type.lower() == "owner"

    @property
    def is_tenant(self) -> bool:
        return self.type.lower() == "tenant"


class PendingMonth(BaseModel):
    label: str
    value: str
    amount: float


class ResidentStats(BaseModel):
    total_paid: float = 0.0
    pending_validation: float = 0.0
    current_due: float = 0.0


def pending_months_list(start_label: str, monthly_fee: float, history: Sequence[Payment],
                        today: Optional[date] = None) -> List[PendingMonth]:
    """
    Months from `start_label` through the current month that no monthly
    payment covers, newest first. A month is covered by a monthly payment in
    Paid or Pending Validation whose month key matches. An unparseable start
    label yields no pending months.
    """
    start = parse_month_label(start_label)
    if start is None:
        return []
    start_month0, start_year = start
    today = today or date.today()

    covered = {p.month_key for p in history if p.is_monthly and p.is_paid_or_pending_validation}
    pending = [
        PendingMonth(label=month_label(y, m), value=month_key(y, m), amount=monthly_fee)
        for y, m in iter_months((start_year, start_month0), (today.year, today.month - 1))
        if month_key(y, m) not in covered
    ]
    pending.reverse()
    return pending


def payment_sort_key(p: Payment):
    paid_at = p.paid_at
    return (paid_at is not None, paid_at or datetime.min)


class Resident(BaseModel):
    id: int = 0
    flat: str
    due: float = 0.0
    occupants: List[Occupant] = Field(default_factory=list)
    history: List[Payment] = Field(default_factory=list)
    pending_months: List[PendingMonth] = Field(default_factory=list)
    total_pending_due: float = 0.0
    is_paid: bool = True

    @classmethod
    def build(cls, flat: Flat, occupants: Sequence[Occupant], payments: Sequence[Payment],
              settings: Settings, index: int = 0, today: Optional[date] = None) -> "Resident":
        """Join one flat with its occupants & payments and derive its dues."""
        history = sorted(
            (p for p in payments if p.flat_no == flat.flat),
            key=payment_sort_key, reverse=True,
        )
        resident = cls(
            id=index,
            flat=flat.flat,
            due=flat.due,
            occupants=[o for o in occupants if o.flat_no == flat.flat],
            history=history,
        )
        resident.pending_months = resident.get_pending_months(settings, today)
        resident.total_pending_due = sum(m.amount for m in resident.pending_months)
        resident.is_paid = resident.total_pending_due <= 0
        return resident

    def get_pending_months(self, settings: Settings, today: Optional[date] = None) -> List[PendingMonth]:
        return pending_months_list(settings.start_month, settings.monthly_fee, self.history, today)

    @property
    def last_payment(self) -> Optional[Payment]:
        return self.history[0] if self.history else None

    @property
    def search_str(self) -> str:
        names = " ".join(o.name for o in self.occupants)
        return f"{self.flat} {names}".lower()

    @property
    def has_pending_validation(self) -> bool:
        return any(p.is_pending_validation for p in self.history)

    def stats(self) -> ResidentStats:
        return ResidentStats(
            total_paid=sum(p.amount for p in self.history if p.is_paid_strict),
            pending_validation=sum(p.amount for p in self.history if p.is_in_review),
            current_due=self.total_pending_due,
        )
