# Import all models so relationship targets resolve whichever module is loaded first
from .user import User
from .slot import Slot
from .booking import Booking

__all__ = [
    "User",
    "Slot",
    "Booking",
]
