"""Booking model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import relationship

from booking_api.database import Base


class Booking(Base):
    """Represents a reservation of one slot by one user."""
    __tablename__ = "bookings"
    __table_args__ = (
        # The store, not the service, guarantees one booking per slot.
        Index("uq_bookings_slot_id", "slot_id", unique=True),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    slot_id = Column(Integer, ForeignKey("slots.id"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    user = relationship("User", back_populates="bookings")
    slot = relationship("Slot", back_populates="booking")
