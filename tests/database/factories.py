'''
factory_boy factories building unsaved ORM rows.
Tests add them to their own session and flush.
'''
import factory
import uuid
import datetime
from factory.faker import Faker

from src.ruang_belajar_backend.database import models as db_models


class ClassFactory(factory.Factory):
    id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Kelas {n}")
    note = None

    class Meta:
        model = db_models.Classes

class StudentFactory(factory.Factory):
    id = factory.LazyFunction(uuid.uuid4)
    name = Faker("first_name")
    class_id = None
    fee_per_week = 200000
    mukafaah_per_week = 0
    active = True

    class Meta:
        model = db_models.Students

class PaymentFactory(factory.Factory):
    id = factory.LazyFunction(uuid.uuid4)
    student_id = None
    date = datetime.date(2024, 1, 10)
    amount = 100000
    note = None

    class Meta:
        model = db_models.Payments

class ExpenseFactory(factory.Factory):
    id = factory.LazyFunction(uuid.uuid4)
    date = datetime.date(2024, 1, 10)
    amount = Faker("random_int", min=5000, max=50000, step=1000)
    category = "Operasional"
    note = Faker("sentence", nb_words=3)

    class Meta:
        model = db_models.Expenses
