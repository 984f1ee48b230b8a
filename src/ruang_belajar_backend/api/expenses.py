'''
API endpoints for managing Expenses.
'''
from typing import Annotated, Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, status, Query

from ..models import finance as finance_models
from ..services.finance_service import ExpenseService

class ExpensesAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/expenses",
            tags=["Expenses"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_expenses,
                methods=["GET"],
                response_model=list[finance_models.ExpenseRead])
        self.router.add_api_route(
                "/{expense_id}",
                self.get_expense,
                methods=["GET"],
                response_model=finance_models.ExpenseRead)
        self.router.add_api_route(
                "/",
                self.create_expense,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=finance_models.ExpenseRead)
        self.router.add_api_route(
                "/{expense_id}",
                self.update_expense,
                methods=["PATCH"],
                response_model=finance_models.ExpenseRead)
        self.router.add_api_route(
                "/{expense_id}",
                self.delete_expense,
                methods=["DELETE"])

    async def list_expenses(
        self,
        expense_service: Annotated[ExpenseService, Depends(ExpenseService)],
        reference_date: Annotated[Optional[str], Query(description="Only expenses of the week around this date")] = None
    ) -> list[Any]:
        return await expense_service.get_all_expenses_for_api(reference_date=reference_date)

    async def get_expense(
        self,
        expense_id: UUID,
        expense_service: Annotated[ExpenseService, Depends(ExpenseService)]
    ) -> Any:
        return await expense_service.get_expense_by_id_for_api(expense_id)

    async def create_expense(
        self,
        expense_data: finance_models.ExpenseCreate,
        expense_service: Annotated[ExpenseService, Depends(ExpenseService)]
    ) -> Any:
        return await expense_service.create_expense(expense_data.model_dump())

    async def update_expense(
        self,
        expense_id: UUID,
        update_data: finance_models.ExpenseUpdate,
        expense_service: Annotated[ExpenseService, Depends(ExpenseService)]
    ) -> Any:
        return await expense_service.update_expense(expense_id, update_data.model_dump(exclude_unset=True))

    async def delete_expense(
        self,
        expense_id: UUID,
        expense_service: Annotated[ExpenseService, Depends(ExpenseService)]
    ):
        await expense_service.delete_expense(expense_id)
        return {"message": "Expense deleted successfully."}

# Instantiate the class and export its router
expenses_api = ExpensesAPI()
router = expenses_api.router
