"""Slot model definitions."""

from sqlalchemy import Column, DateTime, Index, Integer
from sqlalchemy.orm import relationship

from booking_api.database import Base


class Slot(Base):
    """Represents a bookable 30-minute interval."""
    __tablename__ = "slots"
    __table_args__ = (
        Index("uq_slots_start_end", "start_at", "end_at", unique=True),
    )

    id = Column(Integer, primary_key=True)
    start_at = Column(DateTime, nullable=False, index=True)
    end_at = Column(DateTime, nullable=False)

    booking = relationship("Booking", back_populates="slot", uselist=False)
