from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from delivery_api.database import Base


class OperationalAlert(Base):
    """Append-only operational event. Rows are never updated."""

    __tablename__ = "operational_alerts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    identifier: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    company_id: Mapped[Optional[int]] = mapped_column(Integer)
    delivery_id: Mapped[Optional[str]] = mapped_column(String(50))
    nf_number: Mapped[Optional[str]] = mapped_column(String(50))
    driver_id: Mapped[Optional[str]] = mapped_column(String(50))
    driver_name: Mapped[Optional[str]] = mapped_column(String(200))
    vehicle_label: Mapped[Optional[str]] = mapped_column(String(120))
    actor_id: Mapped[Optional[str]] = mapped_column(String(50))
    actor_name: Mapped[Optional[str]] = mapped_column(String(200))
    actor_role: Mapped[Optional[str]] = mapped_column(String(20))
    occurred_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    __table_args__ = (
        Index("idx_alerts_company", "company_id"),
        Index("idx_alerts_occurred", "occurred_at"),
    )
