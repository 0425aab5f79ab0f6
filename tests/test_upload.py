"""
Tests for POST /upload.

Covers every exit of the endpoint: auth, malformed request, validation,
extraction failure, persistence failure, non-invoice classification and success.
"""

import io
import json

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from src.api.main import app
from src.core.auth import get_session
from src.core.errors import ExtractionError
from src.services.attachments import FileAttachment, ImageAttachment
from src.services.extraction import get_extraction_service, mock_extraction_result
from src.services.invoice_types import ExtractionResult
from src.services.storage import gateway
from src.services.storage.models import Document, Invoice, InvoiceLine

PDF_BYTES = b"%PDF-1.4 sample invoice"


class StubExtractor:
    """Stands in for ExtractionService and records what it was asked to extract"""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.attachments = []

    async def extract(self, attachment):
        self.attachments.append(attachment)
        if self.error:
            raise self.error
        return self.result


def pdf_upload(name="invoice.pdf", data=PDF_BYTES, content_type="application/pdf"):
    return {"file": (name, io.BytesIO(data), content_type)}


def test_upload_mock_invoice_success(client, count_rows):
    r = client.post("/upload", files=pdf_upload())
    assert r.status_code == 200

    body = r.json()
    assert body["isInvoice"] is True
    assert body["contentType"] == "application/pdf"
    assert body["url"].startswith("data:application/pdf;base64,")
    assert body["pathname"].startswith("/uploads/")
    assert body["pathname"].endswith("-invoice.pdf")
    assert body["documentId"]

    assert count_rows(Document) == 1
    assert count_rows(Invoice) == 1
    assert count_rows(InvoiceLine) == 1


def test_upload_mock_persists_fixture_values(client, db):
    r = client.post("/upload", files=pdf_upload())
    assert r.status_code == 200

    document = db.get(Document, r.json()["documentId"])
    content = json.loads(document.content)
    assert content["isInvoice"] is True
    assert content["invoice"]["invoiceNumber"] == "INV-12345"
    assert content["invoice"]["amount"] == 999.99
    assert document.user_id == "user_0"
    assert document.title == "invoice.pdf"


def test_upload_requires_session(client, count_rows):
    app.dependency_overrides[get_session] = lambda: None

    r = client.post("/upload", files=pdf_upload())

    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}
    assert count_rows(Document) == 0


def test_upload_empty_body_returns_400(client):
    r = client.post("/upload", content=b"")
    assert r.status_code == 400
    assert r.json() == {"error": "Request body is empty"}


def test_upload_without_file_part_returns_400(client):
    r = client.post("/upload", data={"note": "no file here"})
    assert r.status_code == 400
    assert r.json() == {"error": "No file uploaded"}


def test_upload_oversized_jpeg_returns_400(client, count_rows):
    big = b"\xff\xd8\xff" + b"\x00" * (10 * 1024 * 1024)

    r = client.post("/upload", files=pdf_upload("photo.jpg", big, "image/jpeg"))

    assert r.status_code == 400
    assert "size" in r.json()["error"].lower()
    assert count_rows(Document) == 0


def test_upload_wrong_type_returns_400(client, count_rows):
    r = client.post("/upload", files=pdf_upload("notes.txt", b"hello", "text/plain"))

    assert r.status_code == 400
    assert r.json() == {"error": "File type should be JPEG, PNG or PDF"}
    assert count_rows(Document) == 0


def test_upload_reports_all_validation_failures(client):
    big = b"\x00" * (5 * 1024 * 1024 + 1)

    r = client.post("/upload", files=pdf_upload("archive.zip", big, "application/zip"))

    assert r.status_code == 400
    assert r.json()["error"] == "File size should be less than 5MB, File type should be JPEG, PNG or PDF"


def test_validation_runs_before_extraction(client):
    stub = StubExtractor(result=mock_extraction_result())
    app.dependency_overrides[get_extraction_service] = lambda: stub

    r = client.post("/upload", files=pdf_upload("notes.txt", b"hello", "text/plain"))

    assert r.status_code == 400
    assert stub.attachments == []


def test_upload_bank_statement_is_rejected_but_recorded(client, db, count_rows):
    statement = mock_extraction_result()
    statement.is_invoice = False
    app.dependency_overrides[get_extraction_service] = lambda: StubExtractor(result=statement)

    r = client.post("/upload", files=pdf_upload("statement.pdf", b"%PDF" + b"\x00" * (2 * 1024 * 1024 - 4)))

    assert r.status_code == 400
    assert r.json() == {"error": "File is not an invoice"}
    assert count_rows(Document) == 1
    assert count_rows(Invoice) == 0
    assert count_rows(InvoiceLine) == 0

    document = db.scalars(select(Document)).first()
    assert json.loads(document.content)["isInvoice"] is False


def test_upload_extraction_failure_returns_500_and_writes_nothing(client, count_rows):
    stub = StubExtractor(error=ExtractionError("Invoice extraction returned invalid output"))
    app.dependency_overrides[get_extraction_service] = lambda: stub

    r = client.post("/upload", files=pdf_upload())

    assert r.status_code == 500
    assert r.json() == {"error": "Upload failed"}
    assert count_rows(Document) == 0
    assert count_rows(Invoice) == 0


def test_upload_image_is_sent_as_image_attachment(client, db):
    stub = StubExtractor(result=mock_extraction_result())
    app.dependency_overrides[get_extraction_service] = lambda: stub

    r = client.post("/upload", files=pdf_upload("scan.png", b"\x89PNG\r\n", "image/png"))

    assert r.status_code == 200
    assert isinstance(stub.attachments[0], ImageAttachment)
    assert stub.attachments[0].mime_type == "image/jpeg"
    assert db.get(Document, r.json()["documentId"]).kind == "image"


def test_upload_pdf_is_sent_as_file_attachment(client):
    stub = StubExtractor(result=mock_extraction_result())
    app.dependency_overrides[get_extraction_service] = lambda: stub

    r = client.post("/upload", files=pdf_upload())

    assert r.status_code == 200
    assert isinstance(stub.attachments[0], FileAttachment)
    assert stub.attachments[0].data == PDF_BYTES


def test_same_file_twice_creates_independent_records(client, count_rows):
    first = client.post("/upload", files=pdf_upload())
    second = client.post("/upload", files=pdf_upload())

    assert first.status_code == second.status_code == 200
    assert first.json()["documentId"] != second.json()["documentId"]
    assert count_rows(Document) == 2
    assert count_rows(Invoice) == 2


def test_successful_upload_shows_in_next_invoice_listing(client):
    empty = client.get("/invoices")
    assert empty.json()["total"] == 0

    r = client.post("/upload", files=pdf_upload())
    assert r.status_code == 200

    listing = client.get("/invoices").json()
    assert listing["total"] == 1
    assert listing["invoices"][0]["invoiceNumber"] == "INV-12345"


def test_upload_persistence_failure_returns_500_and_writes_nothing(client, count_rows, monkeypatch):
    def broken_save_invoice_lines(*args, **kwargs):
        raise OperationalError("INSERT INTO invoice_lines", {}, Exception("disk I/O error"))

    monkeypatch.setattr(gateway, "save_invoice_lines", broken_save_invoice_lines)

    r = client.post("/upload", files=pdf_upload())

    assert r.status_code == 500
    assert r.json() == {"error": "Upload failed"}
    assert count_rows(Document) == 0
    assert count_rows(Invoice) == 0
    assert count_rows(InvoiceLine) == 0


def test_upload_non_invoice_without_invoice_fields(client, db, count_rows):
    result = ExtractionResult(invoice=None, is_invoice=False)
    app.dependency_overrides[get_extraction_service] = lambda: StubExtractor(result=result)

    r = client.post("/upload", files=pdf_upload("letter.pdf"))

    assert r.status_code == 400
    assert r.json() == {"error": "File is not an invoice"}
    assert count_rows(Document) == 1
    assert count_rows(Invoice) == 0

    content = json.loads(db.scalars(select(Document)).first().content)
    assert content == {"invoice": None, "isInvoice": False}
