'''
API endpoints for managing Payments.
'''
from typing import Annotated, Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, status, Query

from ..models import finance as finance_models
from ..services.finance_service import PaymentService

class PaymentsAPI:
    """
    A class to encapsulate endpoints for Payments.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/payments",
            tags=["Payments"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_payments,
                methods=["GET"],
                response_model=list[finance_models.PaymentRead])
        self.router.add_api_route(
                "/{payment_id}",
                self.get_payment,
                methods=["GET"],
                response_model=finance_models.PaymentRead)
        self.router.add_api_route(
                "/",
                self.create_payment,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=finance_models.PaymentRead)
        self.router.add_api_route(
                "/{payment_id}",
                self.update_payment,
                methods=["PATCH"],
                response_model=finance_models.PaymentRead)
        self.router.add_api_route(
                "/{payment_id}",
                self.delete_payment,
                methods=["DELETE"])

    async def list_payments(
        self,
        payment_service: Annotated[PaymentService, Depends(PaymentService)],
        student_id: Annotated[UUID | None, Query(description="Optional filter for Student ID")] = None,
        reference_date: Annotated[Optional[str], Query(description="Only payments of the week around this date")] = None
    ) -> list[Any]:
        """
        Retrieves payments, optionally for one student and/or one week.
        """
        return await payment_service.get_all_payments_for_api(
            student_id=student_id,
            reference_date=reference_date
        )

    async def get_payment(
        self,
        payment_id: UUID,
        payment_service: Annotated[PaymentService, Depends(PaymentService)]
    ) -> Any:
        return await payment_service.get_payment_by_id_for_api(payment_id)

    async def create_payment(
        self,
        payment_data: finance_models.PaymentCreate,
        payment_service: Annotated[PaymentService, Depends(PaymentService)]
    ) -> Any:
        """
        Records a payment. The student must exist.
        """
        return await payment_service.create_payment(payment_data.model_dump())

    async def update_payment(
        self,
        payment_id: UUID,
        update_data: finance_models.PaymentUpdate,
        payment_service: Annotated[PaymentService, Depends(PaymentService)]
    ) -> Any:
        return await payment_service.update_payment(payment_id, update_data.model_dump(exclude_unset=True))

    async def delete_payment(
        self,
        payment_id: UUID,
        payment_service: Annotated[PaymentService, Depends(PaymentService)]
    ):
        await payment_service.delete_payment(payment_id)
        return {"message": "Payment deleted successfully."}

# Instantiate the class and export its router
payments_api = PaymentsAPI()
router = payments_api.router
