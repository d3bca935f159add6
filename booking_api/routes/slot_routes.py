import logging
from datetime import date, datetime, time

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from booking_api.core.errors import InternalError, ValidationError
from booking_api.database import get_db
from booking_api.services import slot_service

router = APIRouter(tags=['slots'])

logger = logging.getLogger(__name__)

DATE_ONLY_LENGTH = len('YYYY-MM-DD')


class SlotResponse(BaseModel):
    id: int
    start_at: datetime
    end_at: datetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


def parse_date_bound(value: str | None, *, end_of_day: bool = False) -> datetime | None:
    """Parse an ISO date or datetime query bound into a naive local datetime.

    A bare date covers the whole day: it starts at midnight when used as a
    lower bound and runs to the last instant of the day as an upper bound.
    """
    if value is None or not value.strip():
        return None

    raw = value.strip()
    try:
        if len(raw) == DATE_ONLY_LENGTH:
            day = date.fromisoformat(raw)
            return datetime.combine(day, time.max if end_of_day else time.min)

        if raw.endswith('Z'):
            raw = raw[:-1] + '+00:00'
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationError('INVALID_DATE', f'Invalid date: {value}') from exc

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


@router.get('/slots', response_model=list[SlotResponse])
def list_slots(
    from_: str | None = Query(default=None, alias='from'),
    to: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    start = parse_date_bound(from_)
    end = parse_date_bound(to, end_of_day=True)

    try:
        return slot_service.list_available_slots(db, start=start, end=end)
    except SQLAlchemyError as exc:
        logger.exception('Get slots error')
        raise InternalError('FETCH_SLOTS_FAILED', 'Failed to fetch slots') from exc
