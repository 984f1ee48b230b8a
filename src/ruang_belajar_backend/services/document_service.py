'''
Printable documents: the weekly invoice of a student and the receipt of a payment.
Both are full HTML pages meant to be opened in a browser and printed.
'''
from typing import Optional, Annotated
from uuid import UUID
from fastapi import Depends, HTTPException
from jinja2 import DictLoader, Environment

from ..common.formatting import format_idr, format_date_id, MISSING_VALUE
from ..common.logger import log
from .finance_service import PaymentService, WeeklySummaryService

PRINT_SHELL = """<html><head><title>{{ title }}</title><style>
  body{font-family: ui-sans-serif,system-ui,Segoe UI,Roboto,Helvetica,Arial;}
  table{width:100%;border-collapse:collapse}
  th,td{border:1px solid #e5e7eb;padding:6px;text-align:left}
  .muted{color:#6b7280}
  .hdr{display:flex;justify-content:space-between;align-items:center;margin-bottom:8px}
</style></head><body>
{% block content %}{% endblock %}
</body></html>"""

INVOICE_TEMPLATE = """{% extends "shell" %}
{% block content %}
<div>
  <div class="hdr"><h2>INVOICE / TAGIHAN</h2><div class="muted">Periode: {{ period_label }}</div></div>
  <div>Nama Siswa: <b>{{ student_name }}</b></div>
  <table style="margin-top:8px">
    <tr><th>Komponen</th><th>Nominal</th></tr>
    <tr><td>Biaya Mingguan</td><td>{{ fee_per_week | idr }}</td></tr>
    <tr><td>Mukafaah (potongan)</td><td>{{ mukafaah_per_week | idr }}</td></tr>
    <tr><td><b>Total Tagihan</b></td><td><b>{{ due | idr }}</b></td></tr>
    <tr><td>Pembayaran (minggu ini)</td><td>{{ paid | idr }}</td></tr>
    <tr><td><b>Sisa</b></td><td><b>{{ outstanding | idr }}</b></td></tr>
  </table>
  <p class="muted" style="margin-top:10px">Mohon lakukan pembayaran sesuai sisa tagihan. Terima kasih.</p>
</div>
{% endblock %}"""

RECEIPT_TEMPLATE = """{% extends "shell" %}
{% block content %}
<div>
  <div class="hdr"><h2>KWITANSI PEMBAYARAN</h2><div class="muted">Tanggal: {{ payment_date | id_date }}</div></div>
  <div>Diterima dari: <b>{{ payer_name }}</b></div>
  <table style="margin-top:8px">
    <tr><th>Uraian</th><th>Nominal</th></tr>
    <tr><td>{{ description }}</td><td>{{ amount | idr }}</td></tr>
  </table>
  <p class="muted" style="margin-top:10px">Terima kasih.</p>
</div>
{% endblock %}"""

DEFAULT_RECEIPT_DESCRIPTION = "Pembayaran"


def _build_environment() -> Environment:
    env = Environment(
        loader=DictLoader({
            "shell": PRINT_SHELL,
            "invoice": INVOICE_TEMPLATE,
            "receipt": RECEIPT_TEMPLATE,
        }),
        autoescape=True,
    )
    env.filters["idr"] = format_idr
    env.filters["id_date"] = format_date_id
    return env

templates = _build_environment()


class DocumentService:
    """Renders invoices and receipts from the same figures the API serves."""

    def __init__(
        self,
        payment_service: Annotated[PaymentService, Depends(PaymentService)],
        summary_service: Annotated[WeeklySummaryService, Depends(WeeklySummaryService)]
    ):
        self.payment_service = payment_service
        self.summary_service = summary_service

    async def render_invoice(self, student_id: UUID, reference_date: Optional[str] = None) -> str:
        """
        Weekly invoice of one student for the week around reference_date.
        """
        log.info(f"Rendering invoice for student {student_id}, reference date {reference_date!r}")
        try:
            billing = await self.summary_service.get_student_billing(student_id, reference_date)
            return templates.get_template("invoice").render(
                title="Invoice",
                period_label=billing.period.label,
                student_name=billing.student_name or MISSING_VALUE,
                fee_per_week=billing.fee_per_week,
                mukafaah_per_week=billing.mukafaah_per_week,
                due=billing.due,
                paid=billing.paid,
                outstanding=billing.outstanding,
            )
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error rendering invoice for student {student_id}: {e}", exc_info=True)
            raise

    async def render_receipt(self, payment_id: UUID) -> str:
        log.info(f"Rendering receipt for payment {payment_id}")
        try:
            payment = await self.payment_service._get_payment_by_id_internal(payment_id)
            student = payment.student
            return templates.get_template("receipt").render(
                title="Kwitansi",
                payment_date=payment.date,
                payer_name=student.name if student and student.name else MISSING_VALUE,
                description=payment.note or DEFAULT_RECEIPT_DESCRIPTION,
                amount=payment.amount or 0,
            )
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error rendering receipt for payment {payment_id}: {e}", exc_info=True)
            raise
