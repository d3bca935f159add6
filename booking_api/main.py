import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from booking_api import bootstrap, database
from booking_api.core import config
from booking_api.core.errors import register_exception_handlers
from booking_api.routes import auth_routes, booking_routes, slot_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config.validate_runtime_config()
    try:
        bootstrap.initialize(app.state.engine, app.state.session_factory)
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
        raise

    logger.info('Allowed origins: %s', ', '.join(config.ALLOWED_ORIGINS))
    yield

    logger.info('Shutting down server...')
    app.state.engine.dispose()


def create_app(
    engine: Engine | None = None,
    session_factory: sessionmaker | None = None,
    rate_limit: str | None = None,
    rate_limit_enabled: bool | None = None,
) -> FastAPI:
    app = FastAPI(title='Appointment Booking API', lifespan=lifespan)

    app.state.engine = engine or database.engine
    app.state.session_factory = session_factory or database.build_session_factory(app.state.engine)

    app.state.limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[rate_limit or config.RATE_LIMIT],
        enabled=config.RATE_LIMIT_ENABLED if rate_limit_enabled is None else rate_limit_enabled,
    )
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
        allow_headers=['Content-Type', 'Authorization'],
    )

    register_exception_handlers(app)

    @app.get('/')
    def root():
        return {
            'status': 'OK',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'message': 'Appointment Booking API is running',
        }

    app.include_router(auth_routes.router)
    app.include_router(slot_routes.router)
    app.include_router(booking_routes.router)

    return app


app = create_app()
