from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DbSession
from ..deps import require_session
from ...core.db import get_db
from ...models.invoice import DocumentOut
from ...services.storage.queries import get_documents

router = APIRouter(prefix="/documents", tags=["documents"], dependencies=[Depends(require_session)])


@router.get("")
def list_documents(db: DbSession = Depends(get_db)):
    """List uploaded documents with their stored extraction result, newest first"""
    rows = [
        DocumentOut.model_validate(document).model_dump(mode="json", by_alias=True)
        for document in get_documents(db)
    ]
    return {"total": len(rows), "documents": rows}
