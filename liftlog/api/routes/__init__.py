"""API routes module."""
from liftlog.api.routes.cardio import router as cardio_router
from liftlog.api.routes.health import router as health_router
from liftlog.api.routes.programs import router as programs_router
from liftlog.api.routes.worker import router as worker_router

__all__ = [
    "cardio_router",
    "health_router",
    "programs_router",
    "worker_router",
]
