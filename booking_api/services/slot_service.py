import logging
from datetime import date, datetime, time, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from booking_api.models.booking import Booking
from booking_api.models.slot import Slot

logger = logging.getLogger(__name__)

OPEN_TIME = time(9, 0)
CLOSE_TIME = time(17, 0)
SLOT_DURATION_MINUTES = 30
SLOT_RANGE_DAYS = 7


def iterate_slot_windows(first_day: date, days: int = SLOT_RANGE_DAYS) -> list[tuple[datetime, datetime]]:
    """Return every (start, end) pair of the grid, day by day from ``first_day``."""
    windows: list[tuple[datetime, datetime]] = []
    duration = timedelta(minutes=SLOT_DURATION_MINUTES)

    for offset in range(days):
        current_day = first_day + timedelta(days=offset)
        current_start = datetime.combine(current_day, OPEN_TIME)
        day_close = datetime.combine(current_day, CLOSE_TIME)

        while current_start + duration <= day_close:
            windows.append((current_start, current_start + duration))
            current_start += duration

    return windows


def generate_slots(db: Session, today: date | None = None) -> list[Slot]:
    """Insert the grid slots that do not exist yet and return the new ones.

    Append-only: existing slots, including ones that have rolled out of the
    window, are left untouched.
    """
    first_day = today or date.today()
    windows = iterate_slot_windows(first_day)
    window_start = windows[0][0]
    window_end = windows[-1][1]

    existing = {
        (start_at, end_at)
        for start_at, end_at in db.query(Slot.start_at, Slot.end_at).filter(
            Slot.start_at >= window_start,
            Slot.start_at < window_end,
        ).all()
    }

    created = [Slot(start_at=start_at, end_at=end_at) for start_at, end_at in windows if (start_at, end_at) not in existing]
    if not created:
        logger.info('Slot grid already present for %s days from %s', SLOT_RANGE_DAYS, first_day.isoformat())
        return []

    db.add_all(created)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning('Slot generation raced with another process; keeping the slots it created')
        return []

    logger.info('Generated %s slots starting %s', len(created), first_day.isoformat())
    return created


def list_available_slots(db: Session, start: datetime | None = None, end: datetime | None = None) -> list[Slot]:
    query = db.query(Slot).outerjoin(Booking, Booking.slot_id == Slot.id).filter(Booking.id.is_(None))

    if start is not None:
        query = query.filter(Slot.start_at >= start)
    if end is not None:
        query = query.filter(Slot.start_at <= end)

    return query.order_by(Slot.start_at.asc(), Slot.id.asc()).all()
