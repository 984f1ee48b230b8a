'''
Services for payments, expenses and the weekly summary.
'''
from typing import Optional, Annotated, Any
from uuid import UUID
from pydantic import ValidationError
from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core import accounting
from ..database.engine import get_db_session, mark_changed, CHANGED_KINDS_KEY
from ..database import models as db_models
from ..database.db_enums import EntityKind
from ..models import finance as finance_models
from ..common.logger import log
from .ledger_snapshot import LedgerSnapshot, get_ledger_snapshot
from .roster_service import reject_nulls


def _week_bounds(reference_date: Any):
    """
    Calendar-date bounds of the week around reference_date. For Date columns,
    'date BETWEEN monday AND sunday' selects exactly what accounting.in_period accepts.
    """
    period = accounting.resolve_week(reference_date)
    return period.start.date(), period.end.date()


# --- Service 1: Payments ---

class PaymentService:
    """Service for recording, reading, and managing payments."""

    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def _get_payment_by_id_internal(self, payment_id: UUID) -> db_models.Payments:
        """
        Internal helper to fetch a payment (with its student) by ID.
        Raises 404 if not found.
        """
        log.info(f"Internal fetch for payment by ID: {payment_id}")
        try:
            stmt = select(db_models.Payments).options(
                selectinload(db_models.Payments.student)
            ).filter(db_models.Payments.id == payment_id)
            result = await self.db.execute(stmt)
            payment = result.scalars().first()
            if not payment:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found.")
            return payment
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Database error fetching payment by ID {payment_id}: {e}", exc_info=True)
            raise

    async def get_all_payments(
        self,
        student_id: Optional[UUID] = None,
        reference_date: Optional[str] = None
    ) -> list[db_models.Payments]:
        """
        Fetches payments in creation order.
        With reference_date, only payments dated inside that Monday-Sunday week.
        """
        log.info(f"Fetching payments (student_id={student_id}, reference_date={reference_date}).")
        try:
            stmt = select(db_models.Payments).options(
                selectinload(db_models.Payments.student)
            )
            if student_id:
                stmt = stmt.filter(db_models.Payments.student_id == student_id)
            if reference_date is not None:
                monday, sunday = _week_bounds(reference_date)
                stmt = stmt.filter(db_models.Payments.date.between(monday, sunday))

            stmt = stmt.order_by(db_models.Payments.created_at.asc())
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
        except Exception as e:
            log.error(f"Database error fetching payments: {e}", exc_info=True)
            raise

    async def get_all_payments_for_api(
        self,
        student_id: Optional[UUID] = None,
        reference_date: Optional[str] = None
    ) -> list[finance_models.PaymentRead]:
        payments = await self.get_all_payments(student_id=student_id, reference_date=reference_date)
        return [self._format_payment_for_api(p) for p in payments]

    async def get_payment_by_id_for_api(self, payment_id: UUID) -> finance_models.PaymentRead:
        return self._format_payment_for_api(await self._get_payment_by_id_internal(payment_id))

    async def create_payment(self, payment_data: dict) -> finance_models.PaymentRead:
        log.info(f"Attempting to record payment for student {payment_data.get('student_id')}")
        try:
            input_model = finance_models.PaymentCreate.model_validate(payment_data)

            student = await self.db.get(db_models.Students, input_model.student_id)
            if not student:
                log.warning(f"Attempted to record payment for non-existent student {input_model.student_id}")
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found.")

            new_payment = db_models.Payments(
                student_id=input_model.student_id,
                date=input_model.date,
                amount=input_model.amount,
                note=input_model.note or None
            )
            self.db.add(new_payment)
            await self.db.flush()
            await self.db.refresh(new_payment, ['student'])
            mark_changed(self.db, EntityKind.PAYMENTS)

            return self._format_payment_for_api(new_payment)
        except (ValidationError, ValueError) as e:
            log.error(f"Pydantic validation failed for creating payment. Data: {payment_data}, Error: {e}")
            raise
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in create_payment: {e}", exc_info=True)
            raise

    async def update_payment(self, payment_id: UUID, update_data: dict) -> finance_models.PaymentRead:
        log.info(f"Attempting to update payment {payment_id}")
        try:
            changes = finance_models.PaymentUpdate.model_validate(update_data).model_dump(exclude_unset=True)
            reject_nulls(changes, {"date", "amount"})

            payment = await self._get_payment_by_id_internal(payment_id)
            for field, value in changes.items():
                setattr(payment, field, value)

            await self.db.flush()
            mark_changed(self.db, EntityKind.PAYMENTS)
            return self._format_payment_for_api(payment)
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error updating payment {payment_id}: {e}", exc_info=True)
            raise

    async def delete_payment(self, payment_id: UUID) -> bool:
        log.info(f"Attempting to delete payment {payment_id}")
        try:
            payment = await self._get_payment_by_id_internal(payment_id)
            await self.db.delete(payment)
            await self.db.flush()
            mark_changed(self.db, EntityKind.PAYMENTS)
            return True
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Database error deleting payment {payment_id}: {e}", exc_info=True)
            raise

    # --- API Formatting Method ---

    def _format_payment_for_api(self, payment: db_models.Payments) -> finance_models.PaymentRead:
        """Formats a single payment for the API, resolving the student's name."""
        if type(payment) != db_models.Payments:
            raise TypeError(f"payment must be type {db_models.Payments}, instead got {type(payment)}")

        student = payment.student
        return finance_models.PaymentRead(
            id=payment.id,
            student_id=payment.student_id,
            student_name=student.name if student and student.name else finance_models.UNKNOWN_STUDENT_NAME,
            date=payment.date,
            amount=payment.amount,
            note=payment.note,
            created_at=payment.created_at
        )


# --- Service 2: Expenses ---

class ExpenseService:
    """Service for recording, reading, and managing expenses."""

    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def _get_expense_by_id_internal(self, expense_id: UUID) -> db_models.Expenses:
        expense = await self.db.get(db_models.Expenses, expense_id)
        if not expense:
            log.warning(f"Tried to fetch non-existent expense id: {expense_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found.")
        return expense

    async def get_all_expenses(self, reference_date: Optional[str] = None) -> list[db_models.Expenses]:
        log.info(f"Fetching expenses (reference_date={reference_date}).")
        try:
            stmt = select(db_models.Expenses)
            if reference_date is not None:
                monday, sunday = _week_bounds(reference_date)
                stmt = stmt.filter(db_models.Expenses.date.between(monday, sunday))
            stmt = stmt.order_by(db_models.Expenses.created_at.asc())
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
        except Exception as e:
            log.error(f"Database error fetching expenses: {e}", exc_info=True)
            raise

    async def get_all_expenses_for_api(self, reference_date: Optional[str] = None) -> list[finance_models.ExpenseRead]:
        expenses = await self.get_all_expenses(reference_date=reference_date)
        return [finance_models.ExpenseRead.model_validate(e) for e in expenses]

    async def get_expense_by_id_for_api(self, expense_id: UUID) -> finance_models.ExpenseRead:
        return finance_models.ExpenseRead.model_validate(await self._get_expense_by_id_internal(expense_id))

    async def create_expense(self, expense_data: dict) -> finance_models.ExpenseRead:
        log.info("Attempting to record expense")
        try:
            input_model = finance_models.ExpenseCreate.model_validate(expense_data)

            new_expense = db_models.Expenses(
                date=input_model.date,
                category=input_model.category or None,
                amount=input_model.amount,
                note=input_model.note or None
            )
            self.db.add(new_expense)
            await self.db.flush()
            await self.db.refresh(new_expense)
            mark_changed(self.db, EntityKind.EXPENSES)

            return finance_models.ExpenseRead.model_validate(new_expense)
        except (ValidationError, ValueError) as e:
            log.error(f"Pydantic validation failed for creating expense. Data: {expense_data}, Error: {e}")
            raise
        except Exception as e:
            log.error(f"Error in create_expense: {e}", exc_info=True)
            raise

    async def update_expense(self, expense_id: UUID, update_data: dict) -> finance_models.ExpenseRead:
        log.info(f"Attempting to update expense {expense_id}")
        try:
            changes = finance_models.ExpenseUpdate.model_validate(update_data).model_dump(exclude_unset=True)
            reject_nulls(changes, {"date", "amount"})

            expense = await self._get_expense_by_id_internal(expense_id)
            for field, value in changes.items():
                setattr(expense, field, value)

            await self.db.flush()
            await self.db.refresh(expense)
            mark_changed(self.db, EntityKind.EXPENSES)
            return finance_models.ExpenseRead.model_validate(expense)
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error updating expense {expense_id}: {e}", exc_info=True)
            raise

    async def delete_expense(self, expense_id: UUID) -> bool:
        log.info(f"Attempting to delete expense {expense_id}")
        try:
            expense = await self._get_expense_by_id_internal(expense_id)
            await self.db.delete(expense)
            await self.db.flush()
            mark_changed(self.db, EntityKind.EXPENSES)
            return True
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Database error deleting expense {expense_id}: {e}", exc_info=True)
            raise


# --- Service 3: Weekly Summary ---

class WeeklySummaryService:
    """
    Serves the weekly accounting figures from the shared LedgerSnapshot.

    When the current session holds writes that are not committed yet, those
    rows are invisible to other sessions and the shared snapshot would be
    wrong for this request, so a private snapshot is read through the session
    instead.
    """

    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        snapshot: Annotated[LedgerSnapshot, Depends(get_ledger_snapshot)]
    ):
        self.db = db
        self.snapshot = snapshot

    async def _current_snapshot(self) -> LedgerSnapshot:
        if self.db.info.get(CHANGED_KINDS_KEY):
            log.info("Session has uncommitted writes, reading a private snapshot.")
            return await LedgerSnapshot.load(self.db)
        if self.snapshot.is_stale:
            await self.snapshot.refresh(self.db)
        return self.snapshot

    async def get_week_period(self, reference_date: Optional[str] = None) -> finance_models.WeekPeriod:
        return accounting.resolve_week(reference_date)

    async def get_weekly_summary(self, reference_date: Optional[str] = None) -> finance_models.WeeklySummary:
        """
        Public API-facing method for the weekly summary.
        A missing or malformed reference_date means the current week.
        """
        log.info(f"Generating weekly summary for reference date {reference_date!r}")
        try:
            period = accounting.resolve_week(reference_date)
            snapshot = await self._current_snapshot()
            return snapshot.summary(period)
        except Exception as e:
            log.error(f"Error in get_weekly_summary for {reference_date!r}: {e}", exc_info=True)
            raise

    async def get_student_billing(
        self,
        student_id: UUID,
        reference_date: Optional[str] = None
    ) -> finance_models.StudentBilling:
        """Due, paid and outstanding for one student in one week."""
        log.info(f"Generating billing for student {student_id}, reference date {reference_date!r}")
        try:
            period = accounting.resolve_week(reference_date)
            snapshot = await self._current_snapshot()
            student = next((s for s in snapshot.students if s.id == student_id), None)
            if student is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found.")
            return accounting.bill_student(student, snapshot.payments, period)
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in get_student_billing for {student_id}: {e}", exc_info=True)
            raise

    async def get_students_billing(
        self,
        reference_date: Optional[str] = None,
        active_only: bool = False
    ) -> list[finance_models.StudentBilling]:
        period = accounting.resolve_week(reference_date)
        snapshot = await self._current_snapshot()
        return accounting.bill_students(snapshot.students, snapshot.payments, period, active_only=active_only)
