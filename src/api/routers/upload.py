import base64
import time
from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from loguru import logger
from sqlalchemy.orm import Session as DbSession
from starlette.datastructures import UploadFile
from ..deps import require_session
from ...core.auth import Session
from ...core.db import get_db
from ...core.errors import (
    ExtractionError,
    InvoiceAppError,
    NotInvoiceError,
    PersistenceError,
    RequestMalformedError,
    UploadValidationError,
)
from ...models.invoice import UploadResponse
from ...services.attachments import build_attachment, kind_for_content_type
from ...services.extraction import ExtractionService, get_extraction_service
from ...services.storage import persist_extraction
from ...services.upload_rules import check_upload

router = APIRouter(tags=["upload"])


@router.post("/upload", response_model=UploadResponse)
async def upload(
    request: Request,
    session: Session = Depends(require_session),
    db: DbSession = Depends(get_db),
    extractor: ExtractionService = Depends(get_extraction_service),
):
    """
    Upload an invoice file, extract its metadata and store it.

    Accepts multipart/form-data with a single ``file`` part (JPEG, PNG or
    PDF, at most 5MB). The file is classified and extracted by the LLM; a
    Document row is always stored for a successful extraction, and Invoice
    plus InvoiceLine rows when the file is an invoice.

    Example response:
    {
        "url": "data:application/pdf;base64,JVBERi0...",
        "pathname": "/uploads/1760000000000-invoice.pdf",
        "contentType": "application/pdf",
        "documentId": "5b0c...",
        "isInvoice": true
    }
    """
    if not await request.body():
        raise RequestMalformedError("Request body is empty")

    try:
        form = await request.form()
    except Exception as e:
        logger.error(f"Request processing error: {e}")
        raise InvoiceAppError("Failed to process request") from e

    file = form.get("file")
    if not isinstance(file, UploadFile):
        raise RequestMalformedError("No file uploaded")

    data = await file.read()
    content_type = file.content_type or ""
    filename = file.filename or "upload"

    check = check_upload(len(data), content_type)
    if not check.accepted:
        raise UploadValidationError(check.messages)

    kind = kind_for_content_type(content_type)
    attachment = build_attachment(kind, data, filename=filename)

    try:
        meta = await extractor.extract(attachment)
        # Synchronous SQLAlchemy writes stay off the event loop
        persisted = await run_in_threadpool(
            persist_extraction, db, meta, user_id=session.user.id, filename=filename, kind=kind
        )
    except (ExtractionError, PersistenceError) as e:
        logger.error("Upload error: {error}", error=e.message, filename=filename)
        raise InvoiceAppError("Upload failed") from e

    if not meta.is_invoice:
        logger.info("Uploaded file is not an invoice", filename=filename, document_id=persisted.document_id)
        raise NotInvoiceError()

    logger.info(
        "Upload processed",
        filename=filename,
        content_type=content_type,
        size=len(data),
        document_id=persisted.document_id,
        invoice_id=persisted.invoice_id,
    )

    return UploadResponse(
        url=f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}",
        pathname=f"/uploads/{int(time.time() * 1000)}-{filename}",
        content_type=content_type,
        document_id=persisted.document_id,
        is_invoice=meta.is_invoice,
    )
