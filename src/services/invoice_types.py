from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    # JSON uses camelCase keys, Python attributes stay snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExtractedLineItem(_CamelModel):
    description: str = Field(description="line item description")
    quantity: float = Field(description="line item quantity")
    unit_price: float = Field(description="line item unit price")
    amount: float = Field(description="line item total amount")


class ExtractedInvoice(_CamelModel):
    customer_name: str = Field(min_length=1, description="invoice customer name")
    vendor_name: str = Field(min_length=1, description="invoice vendor name")
    invoice_number: str = Field(min_length=1, description="invoice number")
    invoice_date: date = Field(description="invoice create date (ISO 8601)")
    due_date: date = Field(description="invoice due date (ISO 8601)")
    amount: float = Field(description="invoice total amount")
    line_items: list[ExtractedLineItem] = Field(default_factory=list)

    @field_validator("invoice_date", "due_date", mode="before")
    @classmethod
    def parse_iso_date(cls, value):
        """Accept ISO dates and full ISO timestamps; keep the calendar date"""
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.strip()).date()
            except ValueError as e:
                raise ValueError(f"not an ISO 8601 date: {value!r}") from e
        if isinstance(value, datetime):
            return value.date()
        return value


class ExtractionResult(_CamelModel):
    # Absent (null) when the document is not an invoice
    invoice: Optional[ExtractedInvoice] = None
    is_invoice: bool = Field(
        description=(
            "is this file invoice? if not, return false. we only want to process invoice files, "
            "not other types, e.g. receipts or statements etc."
        )
    )
