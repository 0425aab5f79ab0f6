from datetime import datetime, UTC
from sqlalchemy import Column, String, Text, Float, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from ...core.db import Base


def _utcnow():
    return datetime.now(UTC)


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True)
    title = Column(Text, nullable=False)
    kind = Column(String(20), nullable=False, default="text")
    content = Column(Text)
    user_id = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(String(36), primary_key=True)
    customer_name = Column(Text, nullable=False)
    vendor_name = Column(Text, nullable=False)
    invoice_number = Column(Text, nullable=False, index=True)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    amount = Column(Float, nullable=False)
    file_url = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    lines = relationship(
        "InvoiceLine",
        back_populates="invoice",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class InvoiceLine(Base):
    __tablename__ = "invoice_lines"

    id = Column(String(36), primary_key=True)
    invoice_id = Column(
        String(36),
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    description = Column(Text, nullable=False)
    quantity = Column(Float, nullable=False)
    unit_price = Column(Float, nullable=False)
    amount = Column(Float, nullable=False)

    invoice = relationship("Invoice", back_populates="lines")
