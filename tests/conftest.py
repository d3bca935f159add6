import os

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key-that-is-long-enough-for-hs256')
os.environ.setdefault('RATE_LIMIT_ENABLED', 'false')

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from booking_api.auth.passwords import hash_password  # noqa: E402
from booking_api.database import build_engine, build_session_factory, ensure_booking_schema  # noqa: E402
from booking_api.main import create_app  # noqa: E402
from booking_api.models import Slot, User  # noqa: E402


@pytest.fixture
def engine():
    engine = build_engine('sqlite://', poolclass=StaticPool)
    ensure_booking_schema(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(engine, session_factory):
    app = create_app(engine=engine, session_factory=session_factory, rate_limit_enabled=False)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    def _make_user(name='Alice', email='alice@x.com', password='password1', role='patient') -> User:
        user = User(name=name, email=email, password_hash=hash_password(password), role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_slot(db):
    def _make_slot(start_at, end_at) -> Slot:
        slot = Slot(start_at=start_at, end_at=end_at)
        db.add(slot)
        db.commit()
        db.refresh(slot)
        return slot

    return _make_slot
