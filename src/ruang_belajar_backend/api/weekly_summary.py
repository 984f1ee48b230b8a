'''
API endpoints for the weekly financial summary.
'''
from typing import Annotated, Any, Optional
from fastapi import APIRouter, Depends, Query

from ..models import finance as finance_models
from ..services.finance_service import WeeklySummaryService

ReferenceDate = Annotated[
    Optional[str],
    Query(description="Any day of the week, YYYY-MM-DD. Missing or malformed means this week.")
]

class WeeklySummaryAPI:
    """
    A class to encapsulate the endpoints for the Weekly Summary.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/weekly-summary",
            tags=["Weekly Summary"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route("/", self.get_weekly_summary, methods=["GET"], response_model=finance_models.WeeklySummary)
        self.router.add_api_route("/students", self.list_student_billings, methods=["GET"], response_model=list[finance_models.StudentBilling])

    async def get_weekly_summary(
        self,
        summary_service: Annotated[WeeklySummaryService, Depends(WeeklySummaryService)],
        reference_date: ReferenceDate = None
    ) -> Any:
        """
        Retrieves the totals of one Monday-Sunday week.
        - weekly_expected: fee minus mukafaah over active students
        - weekly_payments / weekly_expenses: everything dated inside the week
        - weekly_net: payments minus expenses, may be negative
        """
        return await summary_service.get_weekly_summary(reference_date)

    async def list_student_billings(
        self,
        summary_service: Annotated[WeeklySummaryService, Depends(WeeklySummaryService)],
        reference_date: ReferenceDate = None,
        active_only: bool = False
    ) -> list[Any]:
        return await summary_service.get_students_billing(reference_date, active_only=active_only)

# Instantiate the class and export its router
weekly_summary_api = WeeklySummaryAPI()
router = weekly_summary_api.router
