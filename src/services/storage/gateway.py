"""
Persists the outcome of an extraction.

One call writes, inside a single transaction:

1. a Document row holding the serialized extraction result (always)
2. an Invoice row (only when the document was classified as an invoice)
3. one InvoiceLine row per extracted line item

A failed write rolls everything back, so there is never a Document without
the Invoice it should have produced.
"""

import uuid
from dataclasses import dataclass, field
from typing import Optional
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from .queries import save_document, save_invoice, save_invoice_lines
from ..invoice_types import ExtractionResult
from ...core.errors import PersistenceError


@dataclass
class PersistedUpload:
    document_id: str
    invoice_id: Optional[str] = None
    line_ids: list[str] = field(default_factory=list)


def generate_id() -> str:
    return str(uuid.uuid4())


def persist_extraction(
    db: Session,
    result: ExtractionResult,
    *,
    user_id: str,
    filename: str,
    kind: str = "text",
) -> PersistedUpload:
    document_id = generate_id()
    persisted = PersistedUpload(document_id=document_id)

    try:
        save_document(
            db,
            id=document_id,
            title=filename,
            kind=kind,
            content=result.model_dump_json(by_alias=True),
            user_id=user_id,
        )

        invoice = result.invoice
        if result.is_invoice and invoice is not None:
            invoice_id = generate_id()
            save_invoice(
                db,
                id=invoice_id,
                customer_name=invoice.customer_name,
                vendor_name=invoice.vendor_name,
                invoice_number=invoice.invoice_number,
                invoice_date=invoice.invoice_date,
                due_date=invoice.due_date,
                amount=invoice.amount,
            )
            persisted.invoice_id = invoice_id

            if invoice.line_items:
                invoice_lines = [
                    {
                        "id": generate_id(),
                        "invoice_id": invoice_id,
                        "description": item.description,
                        "quantity": item.quantity,
                        "unit_price": item.unit_price,
                        "amount": item.amount,
                    }
                    for item in invoice.line_items
                ]
                save_invoice_lines(db, invoice_lines=invoice_lines)
                persisted.line_ids = [line["id"] for line in invoice_lines]

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to persist extraction for {filename}: {e}")
        raise PersistenceError("Failed to save document") from e

    logger.info(
        "Persisted extraction",
        document_id=persisted.document_id,
        invoice_id=persisted.invoice_id,
        line_items=len(persisted.line_ids),
    )
    return persisted
