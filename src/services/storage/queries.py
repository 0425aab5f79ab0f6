"""
Data-access operations for documents, invoices and invoice lines.

The ``save_*`` functions only stage rows on the session; the caller owns the
transaction and commits (see ``gateway.persist_extraction``).
``update_invoice_by_id`` is a standalone operation and commits itself.
"""

from typing import Optional
from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from .models import Document, Invoice, InvoiceLine
from ...core.errors import PersistenceError

UPDATABLE_INVOICE_FIELDS = (
    "invoice_number",
    "customer_name",
    "vendor_name",
    "amount",
    "invoice_date",
    "due_date",
    "file_url",
)


def save_document(db: Session, *, id: str, title: str, kind: str, content: str, user_id: str) -> Document:
    document = Document(id=id, title=title, kind=kind, content=content, user_id=user_id)
    db.add(document)
    db.flush()
    return document


def save_invoice(
    db: Session,
    *,
    id: str,
    customer_name: str,
    vendor_name: str,
    invoice_number: str,
    invoice_date,
    due_date,
    amount: float,
    file_url: str | None = None,
) -> Invoice:
    invoice = Invoice(
        id=id,
        customer_name=customer_name,
        vendor_name=vendor_name,
        invoice_number=invoice_number,
        invoice_date=invoice_date,
        due_date=due_date,
        amount=amount,
        file_url=file_url,
    )
    db.add(invoice)
    db.flush()
    return invoice


def save_invoice_lines(db: Session, *, invoice_lines: list[dict]) -> list[InvoiceLine]:
    lines = [InvoiceLine(**line) for line in invoice_lines]
    db.add_all(lines)
    db.flush()
    return lines


def update_invoice_by_id(db: Session, id: str, fields: dict) -> dict:
    """
    Write only the given fields of one invoice.

    Returns:
        {"success": True, "updated": [...]} or {"success": False, "error": ...}
        when the invoice does not exist.
    """
    unknown = set(fields) - set(UPDATABLE_INVOICE_FIELDS)
    if unknown:
        raise ValueError(f"Fields not updatable: {sorted(unknown)}")

    try:
        exists = db.scalar(select(Invoice.id).where(Invoice.id == id))
        if exists is None:
            return {"success": False, "error": "Invoice not found"}

        if fields:
            db.execute(update(Invoice).where(Invoice.id == id).values(**fields))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update invoice {id}: {e}")
        raise PersistenceError("Failed to update invoice") from e

    return {"success": True, "updated": sorted(fields)}


def get_invoice(db: Session, id: str) -> Optional[Invoice]:
    return db.scalar(
        select(Invoice)
        .options(selectinload(Invoice.lines))
        .where(Invoice.id == id)
        .execution_options(populate_existing=True)
    )


def get_invoices(db: Session, invoice_number: str | None = None) -> list[Invoice]:
    """Invoices newest first, optionally filtered by invoice number substring"""
    stmt = select(Invoice).order_by(Invoice.created_at.desc())
    if invoice_number:
        stmt = stmt.where(Invoice.invoice_number.ilike(f"%{invoice_number}%"))
    return list(db.scalars(stmt).all())


def get_documents(db: Session) -> list[Document]:
    """Documents newest first"""
    return list(db.scalars(select(Document).order_by(Document.created_at.desc())).all())
