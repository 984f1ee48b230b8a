'''
Pytest configuration for the FastAPI application.

This file sets up fixtures for:
1. Forcing the application into TEST_MODE before any code is imported.
2. Providing a FastAPI TestClient whose lifespan builds a fresh in-memory database.
3. Providing an isolated database session for service tests, on its own fresh database.
4. Providing instances of all service classes, pre-injected with that session.
'''

import os

# Must happen before the settings module is imported anywhere.
os.environ["TEST_MODE"] = "True"

import pytest
from typing import AsyncGenerator

# --- FastAPI & Testing Imports ---
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

# --- Application Imports ---
from src.ruang_belajar_backend.main import app
from src.ruang_belajar_backend.common.config import settings
from src.ruang_belajar_backend.database.engine import Database
from src.ruang_belajar_backend.database import models as db_models
from src.ruang_belajar_backend.services.change_feed import ChangeFeed
from src.ruang_belajar_backend.services.ledger_snapshot import LedgerSnapshot
from src.ruang_belajar_backend.services.roster_service import ClassService, StudentService
from src.ruang_belajar_backend.services.finance_service import (
    PaymentService,
    ExpenseService,
    WeeklySummaryService
)
from src.ruang_belajar_backend.services.document_service import DocumentService

from tests.database.factories import ClassFactory, StudentFactory, PaymentFactory, ExpenseFactory
from tests.constants import REFERENCE_DATE, TUESDAY, NEXT_MONDAY, MONDAY, PREVIOUS_SUNDAY


@pytest.fixture(scope="session")
def anyio_backend():
    """
    Override the default 'anyio_backend' fixture.
    1. Forces the backend to 'asyncio'.
    2. Promotes the scope to 'session' (solves 'ScopeMismatch').
    """
    return "asyncio"


@pytest.fixture(scope="function")
def client() -> TestClient:
    """
    The core fixture for all API tests.

    1. Verifies TEST_MODE is on, so the in-memory database URL is used.
    2. Runs the app's lifespan, which creates a brand new database,
       change feed and ledger snapshot for this test only.
    """
    assert settings.TEST_MODE is True, \
        "TEST_MODE was not set to True! Check your .env file or environment."

    # This 'with' block runs the app's startup lifespan,
    # which creates the engine, the tables and the session factory.
    with TestClient(app) as test_client:
        yield test_client


# --- 2. Function-Scoped Session Fixture (For Service Tests) ---

@pytest.fixture(scope="function")
async def database() -> AsyncGenerator[Database, None]:
    """A fresh in-memory database with every table created."""
    db = Database(settings.DATABASE_URL_TEST).connect()
    await db.create_tables()
    try:
        yield db
    finally:
        await db.dispose()


@pytest.fixture(scope="function")
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """
    Provides a single, isolated database session for service-level tests.
    The whole database is thrown away afterwards, so nothing needs rolling back.
    """
    session = database.session()
    try:
        yield session
    finally:
        await session.rollback()
        await session.close()


@pytest.fixture(scope="function")
def change_feed() -> ChangeFeed:
    return ChangeFeed()


@pytest.fixture(scope="function")
def ledger_snapshot(change_feed: ChangeFeed) -> LedgerSnapshot:
    snapshot = LedgerSnapshot(change_feed)
    yield snapshot
    snapshot.close()


# --- 3. ORM Data Fixtures ---

@pytest.fixture(scope="function")
async def class_orm(db_session: AsyncSession) -> db_models.Classes:
    class_obj = ClassFactory.build(name="Kelas Tahfidz")
    db_session.add(class_obj)
    await db_session.flush()
    return class_obj


@pytest.fixture(scope="function")
async def student_orm(db_session: AsyncSession, class_orm: db_models.Classes) -> db_models.Students:
    """Active student, fee 200000, mukafaah 50000: due 150000 per week."""
    student = StudentFactory.build(
        name="Ahmad",
        class_id=class_orm.id,
        fee_per_week=200000,
        mukafaah_per_week=50000,
        active=True
    )
    db_session.add(student)
    await db_session.flush()
    return student


@pytest.fixture(scope="function")
async def inactive_student_orm(db_session: AsyncSession) -> db_models.Students:
    student = StudentFactory.build(name="Citra", fee_per_week=300000, mukafaah_per_week=0, active=False)
    db_session.add(student)
    await db_session.flush()
    return student


@pytest.fixture(scope="function")
async def ledger_orm(
    db_session: AsyncSession,
    student_orm: db_models.Students,
    inactive_student_orm: db_models.Students
) -> dict:
    """
    A small ledger around the week of REFERENCE_DATE (8-14 January 2024):
    - Ahmad paid 100000 on Tuesday and 50000 next Monday (outside the week)
    - inactive Citra paid 30000 on Tuesday (counts in weekly payments)
    - expenses of 20000 on Monday and 10000 on the Sunday before (outside)
    """
    rows = {
        "in_week_payment": PaymentFactory.build(student_id=student_orm.id, date=TUESDAY, amount=100000),
        "next_week_payment": PaymentFactory.build(student_id=student_orm.id, date=NEXT_MONDAY, amount=50000),
        "inactive_payment": PaymentFactory.build(student_id=inactive_student_orm.id, date=TUESDAY, amount=30000),
        "in_week_expense": ExpenseFactory.build(date=MONDAY, amount=20000, category="Listrik"),
        "previous_week_expense": ExpenseFactory.build(date=PREVIOUS_SUNDAY, amount=10000),
    }
    db_session.add_all(rows.values())
    await db_session.flush()
    return rows


# --- 4. SERVICE FIXTURES ---
# These just depend on the clean `db_session` fixture.

@pytest.fixture(scope="function")
def class_service(db_session: AsyncSession) -> ClassService:
    return ClassService(db=db_session)

@pytest.fixture(scope="function")
def student_service(db_session: AsyncSession) -> StudentService:
    return StudentService(db=db_session)

@pytest.fixture(scope="function")
def payment_service(db_session: AsyncSession) -> PaymentService:
    return PaymentService(db=db_session)

@pytest.fixture(scope="function")
def expense_service(db_session: AsyncSession) -> ExpenseService:
    return ExpenseService(db=db_session)

@pytest.fixture(scope="function")
def weekly_summary_service(db_session: AsyncSession, ledger_snapshot: LedgerSnapshot) -> WeeklySummaryService:
    return WeeklySummaryService(db=db_session, snapshot=ledger_snapshot)

@pytest.fixture(scope="function")
def document_service(
    payment_service: PaymentService,
    weekly_summary_service: WeeklySummaryService
) -> DocumentService:
    return DocumentService(payment_service=payment_service, summary_service=weekly_summary_service)
