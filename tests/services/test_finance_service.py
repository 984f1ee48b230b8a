import pytest
from datetime import date
from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.ruang_belajar_backend.database import models as db_models
from src.ruang_belajar_backend.database.engine import CHANGED_KINDS_KEY
from src.ruang_belajar_backend.database.db_enums import EntityKind
from src.ruang_belajar_backend.services.finance_service import PaymentService, ExpenseService
from src.ruang_belajar_backend.models import finance as finance_models

from tests.constants import REFERENCE_DATE, TUESDAY, SUNDAY, MISSING_ID


@pytest.mark.anyio
class TestPaymentService:

    async def test_create_payment(
        self,
        payment_service: PaymentService,
        db_session: AsyncSession,
        student_orm: db_models.Students
    ):
        created = await payment_service.create_payment({
            "student_id": student_orm.id,
            "date": TUESDAY,
            "amount": 100000,
            "note": "Cicilan 1"
        })

        assert isinstance(created, finance_models.PaymentRead)
        assert created.student_name == "Ahmad"
        assert created.amount == 100000
        assert created.date == TUESDAY
        assert db_session.info[CHANGED_KINDS_KEY] == {EntityKind.PAYMENTS}

    async def test_create_payment_defaults_to_today(
        self,
        payment_service: PaymentService,
        student_orm: db_models.Students
    ):
        created = await payment_service.create_payment({"student_id": student_orm.id, "amount": 5000})
        assert isinstance(created.date, date)
        assert created.note is None

    async def test_create_payment_for_missing_student(self, payment_service: PaymentService):
        with pytest.raises(HTTPException) as e:
            await payment_service.create_payment({"student_id": MISSING_ID, "amount": 5000})
        assert e.value.status_code == 404
        assert e.value.detail == "Student not found."

    @pytest.mark.parametrize("amount", [0, -100])
    async def test_create_payment_rejects_non_positive_amount(
        self,
        payment_service: PaymentService,
        student_orm: db_models.Students,
        amount: int
    ):
        with pytest.raises(ValidationError):
            await payment_service.create_payment({"student_id": student_orm.id, "amount": amount})

    async def test_list_payments_filters(
        self,
        payment_service: PaymentService,
        student_orm: db_models.Students,
        inactive_student_orm: db_models.Students,
        ledger_orm: dict
    ):
        everything = await payment_service.get_all_payments_for_api()
        assert len(everything) == 3

        for_ahmad = await payment_service.get_all_payments_for_api(student_id=student_orm.id)
        assert {p.id for p in for_ahmad} == {ledger_orm["in_week_payment"].id, ledger_orm["next_week_payment"].id}
        assert all(p.student_name == "Ahmad" for p in for_ahmad)

        this_week = await payment_service.get_all_payments_for_api(reference_date=REFERENCE_DATE.isoformat())
        assert {p.id for p in this_week} == {ledger_orm["in_week_payment"].id, ledger_orm["inactive_payment"].id}

        ahmad_this_week = await payment_service.get_all_payments_for_api(
            student_id=student_orm.id,
            reference_date=SUNDAY.isoformat()
        )
        assert [p.id for p in ahmad_this_week] == [ledger_orm["in_week_payment"].id]

    async def test_get_payment(self, payment_service: PaymentService, ledger_orm: dict):
        payment = ledger_orm["inactive_payment"]
        found = await payment_service.get_payment_by_id_for_api(payment.id)
        assert found.student_name == "Citra"
        assert found.amount == 30000

    async def test_get_missing_payment(self, payment_service: PaymentService):
        with pytest.raises(HTTPException) as e:
            await payment_service.get_payment_by_id_for_api(MISSING_ID)
        assert e.value.status_code == 404

    async def test_update_payment(self, payment_service: PaymentService, ledger_orm: dict):
        payment = ledger_orm["in_week_payment"]
        updated = await payment_service.update_payment(payment.id, {"amount": 120000, "note": "koreksi"})
        assert updated.amount == 120000
        assert updated.note == "koreksi"
        assert updated.date == TUESDAY

    async def test_update_payment_cannot_null_amount(self, payment_service: PaymentService, ledger_orm: dict):
        with pytest.raises(HTTPException) as e:
            await payment_service.update_payment(ledger_orm["in_week_payment"].id, {"amount": None})
        assert e.value.status_code == 422

    async def test_delete_payment(
        self,
        payment_service: PaymentService,
        db_session: AsyncSession,
        ledger_orm: dict
    ):
        payment = ledger_orm["next_week_payment"]
        assert await payment_service.delete_payment(payment.id) is True
        assert await db_session.get(db_models.Payments, payment.id) is None
        assert db_session.info[CHANGED_KINDS_KEY] == {EntityKind.PAYMENTS}


@pytest.mark.anyio
class TestExpenseService:

    async def test_create_expense_default_category(
        self,
        expense_service: ExpenseService,
        db_session: AsyncSession
    ):
        created = await expense_service.create_expense({"date": TUESDAY, "amount": 15000})
        assert created.category == "Operasional"
        assert created.category_label == "Operasional"
        assert db_session.info[CHANGED_KINDS_KEY] == {EntityKind.EXPENSES}

    async def test_empty_category_falls_back_to_label(self, expense_service: ExpenseService):
        created = await expense_service.create_expense({"date": TUESDAY, "amount": 15000, "category": ""})
        assert created.category is None
        assert created.category_label == "Lainnya"

    async def test_list_expenses_of_the_week(self, expense_service: ExpenseService, ledger_orm: dict):
        everything = await expense_service.get_all_expenses_for_api()
        assert len(everything) == 2

        this_week = await expense_service.get_all_expenses_for_api(reference_date=REFERENCE_DATE.isoformat())
        assert [e.id for e in this_week] == [ledger_orm["in_week_expense"].id]
        assert this_week[0].category_label == "Listrik"

    async def test_update_and_delete_expense(
        self,
        expense_service: ExpenseService,
        db_session: AsyncSession,
        ledger_orm: dict
    ):
        expense = ledger_orm["in_week_expense"]
        updated = await expense_service.update_expense(expense.id, {"category": "Air", "amount": 25000})
        assert updated.category == "Air"
        assert updated.amount == 25000

        await expense_service.delete_expense(expense.id)
        assert await db_session.get(db_models.Expenses, expense.id) is None

    async def test_missing_expense(self, expense_service: ExpenseService):
        with pytest.raises(HTTPException) as e:
            await expense_service.delete_expense(MISSING_ID)
        assert e.value.status_code == 404
        assert e.value.detail == "Expense not found."
