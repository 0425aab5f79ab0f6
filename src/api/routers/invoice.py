from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session as DbSession
from ..deps import require_session
from ...core.db import get_db
from ...core.errors import InvoiceNotFoundError
from ...models.invoice import InvoiceDetail, InvoiceOut, InvoiceUpdate
from ...services.invoices import update_invoice
from ...services.storage.queries import get_invoice, get_invoices

router = APIRouter(prefix="/invoices", tags=["invoices"], dependencies=[Depends(require_session)])

# Listings are read from the database on every request; clients must not reuse them
NO_CACHE_HEADERS = {"Cache-Control": "no-cache, no-store, must-revalidate"}


@router.get("")
def list_invoices(
    response: Response,
    invoice_number: str | None = Query(default=None, description="Filter by invoice number (substring)"),
    db: DbSession = Depends(get_db),
):
    """List invoices, newest first"""
    rows = [
        InvoiceOut.model_validate(invoice).model_dump(mode="json", by_alias=True)
        for invoice in get_invoices(db, invoice_number=invoice_number)
    ]
    response.headers.update(NO_CACHE_HEADERS)
    return {"total": len(rows), "invoices": rows}


@router.get("/{invoice_id}", response_model=InvoiceDetail)
def get_invoice_detail(invoice_id: str, db: DbSession = Depends(get_db)):
    invoice = get_invoice(db, invoice_id)
    if invoice is None:
        raise InvoiceNotFoundError("Invoice not found")
    return InvoiceDetail.model_validate(invoice)


@router.patch("/{invoice_id}")
def patch_invoice(invoice_id: str, req: InvoiceUpdate, db: DbSession = Depends(get_db)):
    """
    Update individual invoice fields.

    Only fields present in the body are written. Example request:
    {
        "amount": 150.00
    }
    """
    result = update_invoice(db, invoice_id, req.model_dump(exclude_unset=True))

    if not result["success"]:
        return JSONResponse(status_code=404, content=result)

    invoice = get_invoice(db, invoice_id)
    return {
        "success": True,
        "updated": [to_camel(name) for name in result["updated"]],
        "invoice": InvoiceOut.model_validate(invoice).model_dump(mode="json", by_alias=True),
    }
