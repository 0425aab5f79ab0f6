from loguru import logger
from sqlalchemy.orm import Session
from .storage.queries import update_invoice_by_id


def update_invoice(db: Session, invoice_id: str, fields: dict) -> dict:
    """
    Apply a partial edit to one invoice.

    Only keys present in ``fields`` are written; everything else on the row is
    left as stored. Listings read straight from the database, so the next read
    reflects the change.
    """
    result = update_invoice_by_id(db, invoice_id, fields)

    if result["success"]:
        logger.info("Invoice updated", invoice_id=invoice_id, fields=result["updated"])
    else:
        logger.warning("Invoice update failed", invoice_id=invoice_id, error=result.get("error"))

    return result
