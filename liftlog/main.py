"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from liftlog.config.settings import Settings, get_settings
from liftlog.core.error_handlers import domain_error_handler, unhandled_error_handler
from liftlog.core.exceptions import DomainError
from liftlog.core.logging import configure_logging, get_logger
from liftlog.db import database
from liftlog.middleware.request_id import RequestIDMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    await database.init_db(app.state.engine)
    logger.info("app_started", app=app.state.settings.app_name)
    yield
    await database.close_engine(app.state.engine)


def create_app(
    settings: Settings | None = None,
    engine: AsyncEngine | None = None,
    session_maker: async_sessionmaker[AsyncSession] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    configure_logging("api", settings)

    app = FastAPI(
        title=settings.app_name,
        description="Program copy-status polling and program management API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine or database.engine
    app.state.session_maker = session_maker or database.create_session_maker(app.state.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    from liftlog.api.routes import cardio_router, health_router, programs_router

    app.include_router(health_router, tags=["Health"])
    app.include_router(programs_router, prefix="/api/programs", tags=["Programs"])
    app.include_router(cardio_router, prefix="/api/cardio", tags=["Cardio"])

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("liftlog.main:app", host="0.0.0.0", port=8000)
