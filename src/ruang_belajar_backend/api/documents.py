'''
API endpoints serving printable invoices and receipts as HTML pages.
'''
from typing import Annotated, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from ..services.document_service import DocumentService

class DocumentsAPI:
    """
    A class to encapsulate the printable document endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/documents",
            tags=["Documents"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/invoice/{student_id}",
                self.get_invoice,
                methods=["GET"],
                response_class=HTMLResponse)
        self.router.add_api_route(
                "/receipt/{payment_id}",
                self.get_receipt,
                methods=["GET"],
                response_class=HTMLResponse)

    async def get_invoice(
        self,
        student_id: UUID,
        document_service: Annotated[DocumentService, Depends(DocumentService)],
        reference_date: Annotated[Optional[str], Query(description="Any day of the billed week")] = None
    ) -> HTMLResponse:
        """
        The weekly invoice (tagihan) of one student.
        """
        return HTMLResponse(await document_service.render_invoice(student_id, reference_date))

    async def get_receipt(
        self,
        payment_id: UUID,
        document_service: Annotated[DocumentService, Depends(DocumentService)]
    ) -> HTMLResponse:
        """
        The receipt (kwitansi) of one payment.
        """
        return HTMLResponse(await document_service.render_receipt(payment_id))

# Instantiate the class and export its router
documents_api = DocumentsAPI()
router = documents_api.router
