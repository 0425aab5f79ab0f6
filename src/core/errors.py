"""
Error types raised by the upload/extraction/persistence pipeline.

Every error carries the HTTP status it maps to. The exception handler in
``src.api.main`` turns them into ``{"error": message}`` JSON bodies.
"""


class InvoiceAppError(Exception):
    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class AuthError(InvoiceAppError):
    """No session for the request"""
    status_code = 401


class RequestMalformedError(InvoiceAppError):
    """Empty body or missing file part"""
    status_code = 400


class UploadValidationError(InvoiceAppError):
    """Uploaded file violates size or type constraints"""
    status_code = 400

    def __init__(self, messages: list[str]):
        super().__init__(", ".join(messages))
        self.messages = messages


class NotInvoiceError(InvoiceAppError):
    status_code = 400

    def __init__(self, message: str = "File is not an invoice"):
        super().__init__(message)


class InvoiceNotFoundError(InvoiceAppError):
    status_code = 404


class ExtractionError(InvoiceAppError):
    """Model call failed or returned output that does not match the schema"""
    status_code = 500


class PersistenceError(InvoiceAppError):
    """A database write failed"""
    status_code = 500
