'''
API endpoints for managing Students and reading their weekly billing.
'''
from typing import Annotated, Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, status, Query

from ..models import roster as roster_models
from ..models import finance as finance_models
from ..services.roster_service import StudentService
from ..services.finance_service import WeeklySummaryService

class StudentsAPI:
    """
    A class to encapsulate endpoints for Students.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/students",
            tags=["Students"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_students,
                methods=["GET"],
                response_model=list[roster_models.StudentRead])
        self.router.add_api_route(
                "/{student_id}",
                self.get_student,
                methods=["GET"],
                response_model=roster_models.StudentRead)
        self.router.add_api_route(
                "/{student_id}/billing",
                self.get_student_billing,
                methods=["GET"],
                response_model=finance_models.StudentBilling)
        self.router.add_api_route(
                "/",
                self.create_student,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=roster_models.StudentRead)
        self.router.add_api_route(
                "/{student_id}",
                self.update_student,
                methods=["PATCH"],
                response_model=roster_models.StudentRead)
        self.router.add_api_route(
                "/{student_id}",
                self.delete_student,
                methods=["DELETE"])

    async def list_students(
        self,
        student_service: Annotated[StudentService, Depends(StudentService)],
        class_id: Annotated[UUID | None, Query(description="Optional filter for Class ID")] = None,
        active: Annotated[bool | None, Query(description="Optional filter for the active flag")] = None
    ) -> list[Any]:
        return await student_service.get_all_students_for_api(class_id=class_id, active=active)

    async def get_student(
        self,
        student_id: UUID,
        student_service: Annotated[StudentService, Depends(StudentService)]
    ) -> Any:
        return await student_service.get_student_by_id_for_api(student_id)

    async def get_student_billing(
        self,
        student_id: UUID,
        summary_service: Annotated[WeeklySummaryService, Depends(WeeklySummaryService)],
        reference_date: Annotated[Optional[str], Query(description="Any day of the week, YYYY-MM-DD. Defaults to today.")] = None
    ) -> Any:
        """
        Due, paid and outstanding of one student for one week.
        """
        return await summary_service.get_student_billing(student_id, reference_date)

    async def create_student(
        self,
        student_data: roster_models.StudentCreate,
        student_service: Annotated[StudentService, Depends(StudentService)]
    ) -> Any:
        return await student_service.create_student(student_data.model_dump())

    async def update_student(
        self,
        student_id: UUID,
        update_data: roster_models.StudentUpdate,
        student_service: Annotated[StudentService, Depends(StudentService)]
    ) -> Any:
        return await student_service.update_student(student_id, update_data.model_dump(exclude_unset=True))

    async def delete_student(
        self,
        student_id: UUID,
        student_service: Annotated[StudentService, Depends(StudentService)]
    ):
        """
        Deletes a student together with all of their payments.
        """
        await student_service.delete_student(student_id)
        return {"message": "Student deleted successfully."}

# Instantiate the class and export its router
students_api = StudentsAPI()
router = students_api.router
