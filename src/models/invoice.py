from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class InvoiceUpdate(ApiModel):
    """Partial edit; only fields present in the request body are written"""
    # Required columns default to None when omitted but reject an explicit null
    invoice_number: str = Field(default=None, min_length=1)
    customer_name: str = Field(default=None, min_length=1)
    vendor_name: str = Field(default=None, min_length=1)
    amount: float = Field(default=None)
    invoice_date: date = Field(default=None)
    due_date: date = Field(default=None)
    file_url: str | None = Field(default=None)


class InvoiceLineOut(ApiModel):
    id: str
    invoice_id: str
    description: str
    quantity: float
    unit_price: float
    amount: float


class InvoiceOut(ApiModel):
    id: str
    customer_name: str
    vendor_name: str
    invoice_number: str
    invoice_date: date
    due_date: date
    amount: float
    file_url: str | None = None
    created_at: datetime


class InvoiceDetail(InvoiceOut):
    lines: list[InvoiceLineOut] = Field(default_factory=list)


class DocumentOut(ApiModel):
    id: str
    title: str
    kind: str
    content: str | None = None
    user_id: str
    created_at: datetime


class UploadResponse(ApiModel):
    url: str
    pathname: str
    content_type: str
    document_id: str
    is_invoice: bool
