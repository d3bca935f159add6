import logging
from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from booking_api.auth.dependencies import get_current_principal, require_admin
from booking_api.auth.jwt_handler import TokenClaims
from booking_api.core.errors import InternalError
from booking_api.database import get_db
from booking_api.routes.auth_routes import UserSummaryResponse
from booking_api.routes.slot_routes import SlotResponse
from booking_api.services import booking_service

router = APIRouter(tags=['bookings'])

logger = logging.getLogger(__name__)


class CreateBookingRequest(BaseModel):
    slot_id: int | None = Field(default=None, alias='slotId')

    class Config:
        populate_by_name = True


class BookingResponse(BaseModel):
    id: int
    user_id: int
    slot_id: int
    created_at: datetime
    slot: SlotResponse

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class BookingDetailResponse(BookingResponse):
    user: UserSummaryResponse


@router.post('/book', response_model=BookingDetailResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: CreateBookingRequest | None = None,
    principal: TokenClaims = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    data = data or CreateBookingRequest()

    try:
        return booking_service.create_booking(db, principal.user_id, data.slot_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Booking error')
        raise InternalError('BOOKING_FAILED', 'Failed to create booking') from exc


@router.get('/my-bookings', response_model=list[BookingResponse])
def list_my_bookings(
    principal: TokenClaims = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    try:
        return booking_service.list_user_bookings(db, principal.user_id)
    except SQLAlchemyError as exc:
        logger.exception('Get my bookings error')
        raise InternalError('FETCH_BOOKINGS_FAILED', 'Failed to fetch bookings') from exc


@router.get(
    '/all-bookings',
    response_model=list[BookingDetailResponse],
    dependencies=[Depends(require_admin)],
)
def list_all_bookings(db: Session = Depends(get_db)):
    try:
        return booking_service.list_all_bookings(db)
    except SQLAlchemyError as exc:
        logger.exception('Get all bookings error')
        raise InternalError('FETCH_ALL_BOOKINGS_FAILED', 'Failed to fetch all bookings') from exc
