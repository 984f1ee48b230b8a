'''
API and accounting models for payments, expenses and the weekly summary.
'''
import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..common.config import settings
from ..common.dates import business_today
from ..common.formatting import format_date_id

# shown wherever a payment's student can no longer be resolved
UNKNOWN_STUDENT_NAME = "Student unknown"
FALLBACK_EXPENSE_CATEGORY = "Lainnya"

# --- 1. API Input Models (for POST/PATCH) ---

class PaymentCreate(BaseModel):
    """
    Validates the request body for recording a payment.
    """
    student_id: UUID
    date: datetime.date = Field(default_factory=business_today)
    amount: int = Field(..., gt=0)
    note: Optional[str] = None

class PaymentUpdate(BaseModel):
    date: Optional[datetime.date] = None
    amount: Optional[int] = Field(None, gt=0)
    note: Optional[str] = None

class ExpenseCreate(BaseModel):
    """
    Validates the request body for recording an expense.
    """
    date: datetime.date = Field(default_factory=business_today)
    category: Optional[str] = settings.DEFAULT_EXPENSE_CATEGORY
    amount: int = Field(..., gt=0)
    note: Optional[str] = None

class ExpenseUpdate(BaseModel):
    date: Optional[datetime.date] = None
    category: Optional[str] = None
    amount: Optional[int] = Field(None, gt=0)
    note: Optional[str] = None


# --- 2. API Output Models (for GET) ---

class PaymentRead(BaseModel):
    """
    The API model for a payment, with the student's display name resolved.
    """
    id: UUID
    student_id: UUID
    student_name: str = UNKNOWN_STUDENT_NAME
    date: datetime.date
    amount: int
    note: Optional[str] = None
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)

class ExpenseRead(BaseModel):
    id: UUID
    date: datetime.date
    category: Optional[str] = None
    amount: int
    note: Optional[str] = None
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def category_label(self) -> str:
        return self.category or FALLBACK_EXPENSE_CATEGORY


# --- 3. Weekly Accounting Models ---

class WeekPeriod(BaseModel):
    """
    The Monday-to-Sunday week around a reference date.
    start is Monday 00:00:00.000 and end is Sunday 23:59:59.999, both local.
    """
    start: datetime.datetime
    end: datetime.datetime

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def label(self) -> str:
        return f"{format_date_id(self.start)} – {format_date_id(self.end)}"

    @computed_field
    @property
    def key(self) -> str:
        return f"{self.start.date().isoformat()}_{self.end.date().isoformat()}"

class WeeklySummary(BaseModel):
    """
    Aggregates for one week. All amounts are integer Rupiah.
    weekly_expected only counts active students, weekly_payments counts every
    payment dated inside the week regardless of the student's status.
    """
    period: WeekPeriod
    weekly_expected: int
    weekly_payments: int
    weekly_expenses: int
    weekly_net: int

    model_config = ConfigDict(frozen=True)

class StudentBilling(BaseModel):
    """What one student owes for one week."""
    student_id: UUID
    student_name: str
    fee_per_week: int
    mukafaah_per_week: int
    active: bool
    due: int
    paid: int
    outstanding: int
    period: WeekPeriod

    model_config = ConfigDict(frozen=True)
