"""One-time initialisation run before the API starts serving.

Every step is idempotent, so restarting the process (or running several
instances against the same database) never duplicates the admin account or
any slot.
"""

import logging
from datetime import date

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from booking_api.core import config
from booking_api.database import ensure_booking_schema
from booking_api.services import auth_service, slot_service

logger = logging.getLogger(__name__)


def initialize(engine: Engine, session_factory: sessionmaker, today: date | None = None) -> None:
    ensure_booking_schema(engine)
    logger.info('Database connected')

    db = session_factory()
    try:
        auth_service.seed_admin(db, config.ADMIN_EMAIL, config.ADMIN_PASSWORD)
        slot_service.generate_slots(db, today=today)
    finally:
        db.close()
