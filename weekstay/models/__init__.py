"""SQLAlchemy models for WeekStay.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from weekstay.models.booking import Booking, BookingStatus
from weekstay.models.house import House, house_assignments
from weekstay.models.user import User, UserRole

__all__ = [
    "Booking",
    "BookingStatus",
    "House",
    "User",
    "UserRole",
    "house_assignments",
]
