from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import StaticPool

from booking_api import bootstrap
from booking_api.core import config
from booking_api.database import build_session_factory, ensure_booking_schema
from booking_api.main import create_app
from booking_api.models import Slot, User


def test_root_reports_health(client) -> None:
    response = client.get('/')

    body = response.json()
    assert response.status_code == 200
    assert body['status'] == 'OK'
    assert body['message'] == 'Appointment Booking API is running'
    assert 'timestamp' in body


def test_unknown_route_uses_error_envelope(client) -> None:
    response = client.get('/nope')

    assert response.status_code == 404
    assert response.json()['error']['code'] == 'NOT_FOUND'


def test_malformed_body_uses_error_envelope(client) -> None:
    response = client.post('/register', content='{not json', headers={'Content-Type': 'application/json'})

    assert response.status_code == 400
    assert response.json()['error']['code'] == 'INVALID_REQUEST'


def test_cors_allows_configured_origin(client) -> None:
    origin = config.ALLOWED_ORIGINS[0]

    response = client.options(
        '/slots',
        headers={'Origin': origin, 'Access-Control-Request-Method': 'GET'},
    )

    assert response.status_code == 200
    assert response.headers['access-control-allow-origin'] == origin


def test_rate_limit_returns_429_envelope(engine, session_factory) -> None:
    app = create_app(engine=engine, session_factory=session_factory, rate_limit='2/minute', rate_limit_enabled=True)

    with TestClient(app) as client:
        responses = [client.get('/') for _ in range(3)]

    assert [response.status_code for response in responses] == [200, 200, 429]
    assert responses[-1].json()['error']['code'] == 'RATE_LIMITED'


def test_startup_seeds_admin_and_generates_slots(client, db) -> None:
    admins = db.query(User).filter(User.role == 'admin').all()

    assert [admin.email for admin in admins] == [config.ADMIN_EMAIL]
    assert db.query(Slot).count() == 112


def test_initialize_is_idempotent(engine, session_factory, db) -> None:
    bootstrap.initialize(engine, session_factory, today=date(2026, 1, 5))
    bootstrap.initialize(engine, session_factory, today=date(2026, 1, 5))

    assert db.query(User).count() == 1
    assert db.query(Slot).count() == 112


def test_production_refuses_default_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'APP_ENV', 'production')
    monkeypatch.setattr(config, 'JWT_SECRET_KEY', 'change-me')

    with pytest.raises(RuntimeError):
        config.validate_runtime_config()


def test_ensure_booking_schema_backfills_unique_slot_index_on_legacy_table() -> None:
    engine = create_engine('sqlite://', connect_args={'check_same_thread': False}, poolclass=StaticPool)
    with engine.begin() as connection:
        connection.execute(text(
            'CREATE TABLE bookings (id INTEGER PRIMARY KEY, user_id INTEGER, slot_id INTEGER, created_at DATETIME)'
        ))

    ensure_booking_schema(engine)

    session = build_session_factory(engine)()
    try:
        session.execute(text("INSERT INTO bookings (user_id, slot_id, created_at) VALUES (1, 1, '2026-01-05')"))
        with pytest.raises(IntegrityError):
            session.execute(text("INSERT INTO bookings (user_id, slot_id, created_at) VALUES (2, 1, '2026-01-05')"))
    finally:
        session.rollback()
        session.close()
        engine.dispose()
