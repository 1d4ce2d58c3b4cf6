"""Clone worker application receiving push deliveries from the job queue."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from liftlog.config.settings import Settings, get_settings
from liftlog.core.logging import configure_logging, get_logger
from liftlog.db import database

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await database.init_db(app.state.engine)
    logger.info("worker_started", port=app.state.settings.worker_port)
    yield
    await database.close_engine(app.state.engine)


def create_worker_app(
    settings: Settings | None = None,
    engine: AsyncEngine | None = None,
    session_maker: async_sessionmaker[AsyncSession] | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging("clone-worker", settings)

    app = FastAPI(title=f"{settings.app_name}-clone-worker", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine or database.engine
    app.state.session_maker = session_maker or database.create_session_maker(app.state.engine)

    from liftlog.api.routes import health_router, worker_router

    app.include_router(worker_router)
    app.include_router(health_router)

    return app


app = create_worker_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("liftlog.worker:app", host="0.0.0.0", port=get_settings().worker_port)
