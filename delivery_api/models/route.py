from datetime import datetime, date
from typing import Optional

from sqlalchemy import String, Integer, DateTime, Date, Float, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from delivery_api.database import Base


class Route(Base):
    __tablename__ = "routes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id"), nullable=False
    )
    driver_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("drivers.id")
    )
    vehicle_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("vehicles.id")
    )
    route_date: Mapped[Optional[date]] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), default="PLANNED")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    __table_args__ = (
        Index("idx_routes_company", "company_id"),
    )


class RouteDelivery(Base):
    __tablename__ = "route_deliveries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    route_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("routes.id"), nullable=False
    )
    delivery_note_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("delivery_notes.id"), nullable=False
    )
    sequence: Mapped[Optional[int]] = mapped_column(Integer)

    __table_args__ = (
        Index("idx_route_deliveries_delivery", "delivery_note_id"),
    )


class TrackingPoint(Base):
    __tablename__ = "tracking_points"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    driver_id: Mapped[Optional[int]] = mapped_column(Integer)
    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id"), nullable=False
    )
    delivery_id: Mapped[Optional[int]] = mapped_column(Integer)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    accuracy: Mapped[Optional[float]] = mapped_column(Float)
    speed: Mapped[Optional[float]] = mapped_column(Float)
    heading: Mapped[Optional[float]] = mapped_column(Float)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    __table_args__ = (
        Index("idx_tracking_points_driver", "driver_id", "timestamp"),
        Index("idx_tracking_points_delivery", "delivery_id"),
    )
