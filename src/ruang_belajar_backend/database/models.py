from typing import Optional

from sqlalchemy import BigInteger, Boolean, CheckConstraint, Date, DateTime, ForeignKeyConstraint, Index, PrimaryKeyConstraint, Text, Uuid, func, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
import datetime
import uuid


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Base(DeclarativeBase):
    pass


class Classes(Base):
    __tablename__ = 'classes'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='classes_pkey'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text)
    note: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utc_now, server_default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utc_now, onupdate=utc_now, server_default=func.now())

    students: Mapped[list['Students']] = relationship(
        'Students',
        back_populates='class_',
        passive_deletes=True
    )


class Students(Base):
    __tablename__ = 'students'
    __table_args__ = (
        CheckConstraint('fee_per_week >= 0 AND mukafaah_per_week >= 0', name='non_negative_weekly_amounts'),
        ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='SET NULL', name='students_class_id_fkey'),
        PrimaryKeyConstraint('id', name='students_pkey'),
        Index('idx_students_class', 'class_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text)
    class_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    fee_per_week: Mapped[int] = mapped_column(BigInteger, default=0, server_default=text('0'))
    mukafaah_per_week: Mapped[int] = mapped_column(BigInteger, default=0, server_default=text('0'))
    active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=text('true'))
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utc_now, server_default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utc_now, onupdate=utc_now, server_default=func.now())

    class_: Mapped[Optional['Classes']] = relationship('Classes', back_populates='students')
    payments: Mapped[list['Payments']] = relationship(
        'Payments',
        back_populates='student',
        passive_deletes=True
    )


class Payments(Base):
    __tablename__ = 'payments'
    __table_args__ = (
        ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE', name='payments_student_id_fkey'),
        PrimaryKeyConstraint('id', name='payments_pkey'),
        Index('idx_payments_student', 'student_id'),
        Index('idx_payments_date', 'date')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    date: Mapped[datetime.date] = mapped_column(Date)
    amount: Mapped[int] = mapped_column(BigInteger)
    note: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utc_now, server_default=func.now())

    student: Mapped['Students'] = relationship('Students', back_populates='payments')


class Expenses(Base):
    __tablename__ = 'expenses'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='expenses_pkey'),
        Index('idx_expenses_date', 'date')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    date: Mapped[datetime.date] = mapped_column(Date)
    amount: Mapped[int] = mapped_column(BigInteger)
    category: Mapped[Optional[str]] = mapped_column(Text)
    note: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utc_now, server_default=func.now())
