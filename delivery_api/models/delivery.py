from datetime import datetime, date
from typing import Optional

from sqlalchemy import (
    String,
    Integer,
    DateTime,
    Date,
    Text,
    Float,
    ForeignKey,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column

from delivery_api.database import Base

# Statuses still in progress, legacy Portuguese values included.
OPEN_STATUSES = frozenset(
    {"PENDING", "IN_TRANSIT", "PENDENTE", "EM_ANDAMENTO", "PROBLEM", "REATTEMPTED"}
)
COMPLETED_STATUSES = frozenset({"DELIVERED", "REALIZADA", "COMPLETED", "FINALIZADA"})
KNOWN_STATUSES = (
    OPEN_STATUSES
    | COMPLETED_STATUSES
    | frozenset({"CANCELLED", "REFUSED", "CANCELADA", "RECUSADA"})
)


class Client(Base):
    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(String(30))


class Delivery(Base):
    __tablename__ = "delivery_notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id"), nullable=False
    )
    # Holds either a drivers.id or a users.id for older rows; no FK on purpose.
    driver_id: Mapped[Optional[int]] = mapped_column(Integer)
    created_by_user_id: Mapped[Optional[int]] = mapped_column(Integer)
    client_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("clients.id")
    )
    nf_number: Mapped[Optional[str]] = mapped_column(String(50))
    client_name_extracted: Mapped[Optional[str]] = mapped_column(String(200))
    client_address: Mapped[Optional[str]] = mapped_column(Text)
    merchandise_value: Mapped[Optional[float]] = mapped_column(Float)
    status: Mapped[str] = mapped_column(String(20), default="PENDING")
    notes: Mapped[Optional[str]] = mapped_column(Text)
    delivery_date_expected: Mapped[Optional[date]] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    __table_args__ = (
        Index("idx_delivery_notes_company", "company_id"),
        Index("idx_delivery_notes_driver_id", "driver_id"),
        Index("idx_delivery_notes_status", "status"),
        Index("idx_delivery_notes_created", "created_at"),
    )


class DeliveryReceipt(Base):
    __tablename__ = "delivery_receipts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    delivery_note_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("delivery_notes.id"), nullable=False
    )
    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id"), nullable=False
    )
    captured_by_user_id: Mapped[Optional[int]] = mapped_column(Integer)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), default="PENDING")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    __table_args__ = (
        Index("idx_delivery_receipts_delivery", "delivery_note_id"),
    )


class DeliveryOccurrence(Base):
    __tablename__ = "delivery_occurrences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    delivery_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("delivery_notes.id"), nullable=False
    )
    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id"), nullable=False
    )
    driver_id: Mapped[Optional[int]] = mapped_column(Integer)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    photo_url: Mapped[Optional[str]] = mapped_column(Text)
    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)
    created_by: Mapped[Optional[int]] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    __table_args__ = (
        Index("idx_occurrences_delivery", "delivery_id"),
        Index("idx_occurrences_company", "company_id"),
    )
