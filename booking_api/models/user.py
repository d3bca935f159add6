"""User model definitions."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from booking_api.database import Base

ROLE_ADMIN = "admin"
ROLE_PATIENT = "patient"


class User(Base):
    """Represents an application user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default=ROLE_PATIENT)  # patient/admin

    bookings = relationship("Booking", back_populates="user")
