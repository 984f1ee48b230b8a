'''
The weekly accounting engine.

Pure functions only: a reference date resolves to a Monday-Sunday WeekPeriod,
payments and expenses are filtered to that period, and the weekly figures are
aggregated from whatever snapshot of records the caller hands in.
Records are duck-typed, so ORM rows and the API read models both work:

    student : id, name, fee_per_week, mukafaah_per_week, active
    payment : student_id, date, amount
    expense : date, amount

All money is integer Rupiah. Missing amounts count as 0.
'''
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Iterable, Optional
from uuid import UUID

from ..common.dates import business_today, parse_calendar_date, parse_instant
from ..models.finance import StudentBilling, WeekPeriod, WeeklySummary, UNKNOWN_STUDENT_NAME

# Sunday 23:59:59.999, the inclusive upper bound of a week
END_OF_DAY = time(23, 59, 59, 999000)


# --- 1. Period Resolver ---

def resolve_week(reference_date: Any = None, today: Optional[Callable[[], date]] = None) -> WeekPeriod:
    """
    Returns the Monday-to-Sunday week containing reference_date.

    reference_date may be a date, a datetime or an ISO string. When it is
    missing, cannot be parsed, or falls in the unfinished last week of year
    9999, today's date is used instead; this never raises.
    """
    day = parse_calendar_date(reference_date)
    if day is None:
        day = (today or business_today)()

    try:
        return _week_of(day)
    except OverflowError:
        # the week of 9999-12-27 .. 9999-12-31 would end after date.max
        return _week_of((today or business_today)())

def _week_of(day: date) -> WeekPeriod:
    # weekday(): Monday=0 ... Sunday=6, so Sunday already belongs to the week that began 6 days earlier
    monday = day - timedelta(days=day.weekday())
    sunday = monday + timedelta(days=6)
    return WeekPeriod(
        start=datetime.combine(monday, time.min),
        end=datetime.combine(sunday, END_OF_DAY),
    )


# --- 2. Record Filter ---

def in_period(record_date: Any, period: WeekPeriod) -> bool:
    """
    Inclusive on both ends. A plain date counts from its 00:00, which is why
    a record dated on the Sunday is still inside (end carries 23:59:59.999).
    """
    instant = parse_instant(record_date)
    if instant is None:
        return False
    return period.start <= instant <= period.end


# --- 3. Aggregator ---

def _amount(record: Any) -> int:
    return int(getattr(record, "amount", 0) or 0)

def due_for_student(student: Any) -> int:
    """Weekly fee minus mukafaah, never below zero."""
    fee = int(getattr(student, "fee_per_week", 0) or 0)
    mukafaah = int(getattr(student, "mukafaah_per_week", 0) or 0)
    return max(0, fee - mukafaah)

def paid_by_student(student_id: UUID, payments: Iterable[Any], period: WeekPeriod) -> int:
    return sum(
        _amount(p) for p in payments
        if p.student_id == student_id and in_period(p.date, period)
    )

def outstanding_for_student(student: Any, payments: Iterable[Any], period: WeekPeriod) -> int:
    """
    Unpaid remainder of this week's due. Overpayment is not a credit and
    nothing rolls over into another week.
    """
    return max(0, due_for_student(student) - paid_by_student(student.id, payments, period))

def weekly_expected(students: Iterable[Any]) -> int:
    return sum(due_for_student(s) for s in students if s.active)

def weekly_payments(payments: Iterable[Any], period: WeekPeriod) -> int:
    # every student counts here, active or not, resolvable or not
    return sum(_amount(p) for p in payments if in_period(p.date, period))

def weekly_expenses(expenses: Iterable[Any], period: WeekPeriod) -> int:
    return sum(_amount(e) for e in expenses if in_period(e.date, period))

def summarize_week(
    students: Iterable[Any],
    payments: Iterable[Any],
    expenses: Iterable[Any],
    period: WeekPeriod
) -> WeeklySummary:
    """
    Computes the four weekly totals for a snapshot of records.
    """
    collected = weekly_payments(payments, period)
    spent = weekly_expenses(expenses, period)
    return WeeklySummary(
        period=period,
        weekly_expected=weekly_expected(students),
        weekly_payments=collected,
        weekly_expenses=spent,
        weekly_net=collected - spent,
    )

def bill_student(student: Any, payments: Iterable[Any], period: WeekPeriod) -> StudentBilling:
    due = due_for_student(student)
    paid = paid_by_student(student.id, payments, period)
    return StudentBilling(
        student_id=student.id,
        student_name=getattr(student, "name", None) or UNKNOWN_STUDENT_NAME,
        fee_per_week=int(student.fee_per_week or 0),
        mukafaah_per_week=int(student.mukafaah_per_week or 0),
        active=bool(student.active),
        due=due,
        paid=paid,
        outstanding=max(0, due - paid),
        period=period,
    )

def bill_students(
    students: Iterable[Any],
    payments: Iterable[Any],
    period: WeekPeriod,
    active_only: bool = False
) -> list[StudentBilling]:
    """One StudentBilling per student, in the order the students were given."""
    payments = list(payments)
    return [
        bill_student(s, payments, period)
        for s in students
        if s.active or not active_only
    ]
