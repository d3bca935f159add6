from collections.abc import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from booking_api.core import config


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute('PRAGMA foreign_keys=ON')
    finally:
        cursor.close()


def build_engine(database_url: str, **kwargs) -> Engine:
    is_sqlite = database_url.startswith('sqlite')
    if is_sqlite:
        # Sessions are handed across the threadpool FastAPI runs sync routes in.
        kwargs.setdefault('connect_args', {'check_same_thread': False})

    engine = create_engine(database_url, **kwargs)

    if is_sqlite:
        # SQLite ignores ForeignKey constraints unless enabled per connection.
        event.listen(engine, 'connect', _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=bind,
    )


engine = build_engine(config.DATABASE_URL)

SessionLocal = build_session_factory(engine)

Base = declarative_base()


def ensure_booking_schema(bind: Engine) -> None:
    """Create missing tables and backfill indexes on databases from older builds."""
    Base.metadata.create_all(bind=bind)

    inspector = inspect(bind)
    table_names = set(inspector.get_table_names())

    # Names match the model Index definitions so fresh databases skip every step.
    index_steps = [
        ('slots', 'CREATE UNIQUE INDEX IF NOT EXISTS uq_slots_start_end ON slots(start_at, end_at)'),
        ('slots', 'CREATE INDEX IF NOT EXISTS ix_slots_start_at ON slots(start_at)'),
        ('bookings', 'CREATE UNIQUE INDEX IF NOT EXISTS uq_bookings_slot_id ON bookings(slot_id)'),
        ('bookings', 'CREATE INDEX IF NOT EXISTS ix_bookings_user_id ON bookings(user_id)'),
    ]

    with bind.begin() as connection:
        for table_name, statement in index_steps:
            if table_name in table_names:
                connection.execute(text(statement))


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
