'''
Services for the roster: classes and the students enrolled in them.
'''
from typing import Optional, Annotated, Any
from uuid import UUID
from pydantic import ValidationError
from fastapi import Depends, HTTPException, status
from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session, mark_changed
from ..database import models as db_models
from ..database.db_enums import EntityKind
from ..models import roster as roster_models
from ..common.logger import log


def reject_nulls(update_data: dict[str, Any], required_fields: set[str]) -> None:
    """A PATCH may omit a required field but may not null it."""
    for field in required_fields:
        if field in update_data and update_data[field] is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Field '{field}' cannot be null."
            )


# --- Service 1: Classes ---

class ClassService:
    """Service for creating, reading, and managing classes."""

    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def _get_class_by_id_internal(self, class_id: UUID) -> db_models.Classes:
        """
        Internal helper to fetch a class by ID.
        Raises 404 if not found.
        """
        class_obj = await self.db.get(db_models.Classes, class_id)
        if not class_obj:
            log.warning(f"Tried to fetch non-existent class id: {class_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found.")
        return class_obj

    async def get_all_classes(self) -> list[db_models.Classes]:
        log.info("Fetching all classes.")
        try:
            stmt = select(db_models.Classes).order_by(db_models.Classes.created_at.asc())
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
        except Exception as e:
            log.error(f"Database error fetching all classes: {e}", exc_info=True)
            raise

    async def get_all_classes_for_api(self) -> list[roster_models.ClassRead]:
        return [roster_models.ClassRead.model_validate(c) for c in await self.get_all_classes()]

    async def get_class_by_id_for_api(self, class_id: UUID) -> roster_models.ClassRead:
        return roster_models.ClassRead.model_validate(await self._get_class_by_id_internal(class_id))

    async def create_class(self, class_data: dict) -> roster_models.ClassRead:
        log.info(f"Attempting to create class '{class_data.get('name')}'")
        try:
            input_model = roster_models.ClassCreate.model_validate(class_data)

            new_class = db_models.Classes(name=input_model.name, note=input_model.note)
            self.db.add(new_class)
            await self.db.flush()
            await self.db.refresh(new_class)
            mark_changed(self.db, EntityKind.CLASSES)

            return roster_models.ClassRead.model_validate(new_class)
        except (ValidationError, ValueError) as e:
            log.error(f"Pydantic validation failed for creating class. Data: {class_data}, Error: {e}")
            raise
        except Exception as e:
            log.error(f"Error in create_class: {e}", exc_info=True)
            raise

    async def update_class(self, class_id: UUID, update_data: dict) -> roster_models.ClassRead:
        log.info(f"Attempting to update class {class_id}")
        try:
            changes = roster_models.ClassUpdate.model_validate(update_data).model_dump(exclude_unset=True)
            reject_nulls(changes, {"name"})

            class_obj = await self._get_class_by_id_internal(class_id)
            for field, value in changes.items():
                setattr(class_obj, field, value)

            await self.db.flush()
            await self.db.refresh(class_obj)
            mark_changed(self.db, EntityKind.CLASSES)
            return roster_models.ClassRead.model_validate(class_obj)
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error updating class {class_id}: {e}", exc_info=True)
            raise

    async def delete_class(self, class_id: UUID) -> bool:
        """
        Deletes a class. Its students stay, they just no longer belong to a class.
        """
        log.info(f"Attempting to delete class {class_id}")
        try:
            class_obj = await self._get_class_by_id_internal(class_id)

            result = await self.db.execute(
                update(db_models.Students)
                .where(db_models.Students.class_id == class_id)
                .values(class_id=None, updated_at=db_models.utc_now())
            )
            await self.db.delete(class_obj)
            await self.db.flush()

            mark_changed(self.db, EntityKind.CLASSES)
            if result.rowcount:
                log.info(f"Cleared class of {result.rowcount} student(s).")
                mark_changed(self.db, EntityKind.STUDENTS)
            return True
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Database error deleting class {class_id}: {e}", exc_info=True)
            raise


# --- Service 2: Students ---

class StudentService:
    """Service for creating, reading, and managing students."""

    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def _get_student_by_id_internal(self, student_id: UUID) -> db_models.Students:
        """
        Internal helper to fetch a student by ID.
        Raises 404 if not found.
        """
        student = await self.db.get(db_models.Students, student_id)
        if not student:
            log.warning(f"Tried to fetch non-existent student id: {student_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found.")
        return student

    async def _ensure_class_exists(self, class_id: Optional[UUID]) -> None:
        if class_id is None:
            return
        if not await self.db.get(db_models.Classes, class_id):
            log.warning(f"Attempted to assign student to non-existent class {class_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found.")

    async def get_all_students(
        self,
        class_id: Optional[UUID] = None,
        active: Optional[bool] = None
    ) -> list[db_models.Students]:
        """
        Fetches all students in creation order, optionally narrowed to one class
        or to active / inactive students.
        """
        log.info(f"Fetching students (class_id={class_id}, active={active}).")
        try:
            stmt = select(db_models.Students)
            if class_id is not None:
                stmt = stmt.filter(db_models.Students.class_id == class_id)
            if active is not None:
                stmt = stmt.filter(db_models.Students.active == active)
            stmt = stmt.order_by(db_models.Students.created_at.asc())
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
        except Exception as e:
            log.error(f"Database error fetching students: {e}", exc_info=True)
            raise

    async def get_all_students_for_api(
        self,
        class_id: Optional[UUID] = None,
        active: Optional[bool] = None
    ) -> list[roster_models.StudentRead]:
        students = await self.get_all_students(class_id=class_id, active=active)
        return [roster_models.StudentRead.model_validate(s) for s in students]

    async def get_student_by_id_for_api(self, student_id: UUID) -> roster_models.StudentRead:
        return roster_models.StudentRead.model_validate(await self._get_student_by_id_internal(student_id))

    async def create_student(self, student_data: dict) -> roster_models.StudentRead:
        log.info(f"Attempting to create student '{student_data.get('name')}'")
        try:
            input_model = roster_models.StudentCreate.model_validate(student_data)
            await self._ensure_class_exists(input_model.class_id)

            new_student = db_models.Students(**input_model.model_dump())
            self.db.add(new_student)
            await self.db.flush()
            await self.db.refresh(new_student)
            mark_changed(self.db, EntityKind.STUDENTS)

            return roster_models.StudentRead.model_validate(new_student)
        except (ValidationError, ValueError) as e:
            log.error(f"Pydantic validation failed for creating student. Data: {student_data}, Error: {e}")
            raise
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in create_student: {e}", exc_info=True)
            raise

    async def update_student(self, student_id: UUID, update_data: dict) -> roster_models.StudentRead:
        """
        Applies only the fields present in update_data.
        class_id may be set to None to take the student out of its class.
        """
        log.info(f"Attempting to update student {student_id}")
        try:
            changes = roster_models.StudentUpdate.model_validate(update_data).model_dump(exclude_unset=True)
            reject_nulls(changes, {"name", "fee_per_week", "mukafaah_per_week", "active"})

            student = await self._get_student_by_id_internal(student_id)
            if "class_id" in changes:
                await self._ensure_class_exists(changes["class_id"])

            for field, value in changes.items():
                setattr(student, field, value)

            await self.db.flush()
            await self.db.refresh(student)
            mark_changed(self.db, EntityKind.STUDENTS)
            return roster_models.StudentRead.model_validate(student)
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error updating student {student_id}: {e}", exc_info=True)
            raise

    async def delete_student(self, student_id: UUID) -> bool:
        """Deletes a student together with all of their payments."""
        log.info(f"Attempting to delete student {student_id}")
        try:
            student = await self._get_student_by_id_internal(student_id)

            result = await self.db.execute(
                delete(db_models.Payments).where(db_models.Payments.student_id == student_id)
            )
            await self.db.delete(student)
            await self.db.flush()

            mark_changed(self.db, EntityKind.STUDENTS)
            if result.rowcount:
                log.info(f"Deleted {result.rowcount} payment(s) of student {student_id}.")
                mark_changed(self.db, EntityKind.PAYMENTS)
            return True
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Database error deleting student {student_id}: {e}", exc_info=True)
            raise
