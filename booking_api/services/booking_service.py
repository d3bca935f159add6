"""Slot reservation.

A booking is created with an optimistic "is the slot free?" read followed by
a single insert. The read only exists to return a clear error quickly; the
unique index on ``bookings.slot_id`` is what actually prevents two requests
that both passed the read from both succeeding.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from booking_api.core.errors import ConflictError, NotFoundError, ValidationError
from booking_api.models.booking import Booking
from booking_api.models.slot import Slot

logger = logging.getLogger(__name__)


def _slot_taken() -> ConflictError:
    return ConflictError('SLOT_TAKEN', 'Slot is already booked')


def find_booking_for_slot(db: Session, slot_id: int) -> Booking | None:
    return db.query(Booking).filter(Booking.slot_id == slot_id).first()


def _load_booking(db: Session, booking_id: int) -> Booking:
    return (
        db.query(Booking)
        .options(joinedload(Booking.slot), joinedload(Booking.user))
        .filter(Booking.id == booking_id)
        .one()
    )


def create_booking(db: Session, user_id: int, slot_id: int | None) -> Booking:
    # 0 is never a valid id and counts as missing.
    if not slot_id:
        raise ValidationError('MISSING_SLOT_ID', 'Slot ID is required')

    slot = db.query(Slot).filter(Slot.id == slot_id).first()
    if slot is None:
        raise NotFoundError('SLOT_NOT_FOUND', 'Slot not found')

    if find_booking_for_slot(db, slot_id) is not None:
        raise _slot_taken()

    booking = Booking(user_id=user_id, slot_id=slot_id)
    db.add(booking)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        # Only a booking that now holds the slot makes this a double booking;
        # any other integrity failure is not the client's conflict.
        if find_booking_for_slot(db, slot_id) is None:
            raise
        logger.warning('Booking conflict on slot %s caught by unique index (user %s)', slot_id, user_id)
        raise _slot_taken() from exc

    logger.info('User %s booked slot %s (booking %s)', user_id, slot_id, booking.id)
    return _load_booking(db, booking.id)


def list_user_bookings(db: Session, user_id: int) -> list[Booking]:
    return (
        db.query(Booking)
        .options(joinedload(Booking.slot))
        .filter(Booking.user_id == user_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )


def list_all_bookings(db: Session) -> list[Booking]:
    return (
        db.query(Booking)
        .options(joinedload(Booking.slot), joinedload(Booking.user))
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )
