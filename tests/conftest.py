"""
Shared fixtures for liftlog tests.

Provides:
- A fresh file-backed SQLite database per test (foreign keys enforced)
- Factories for shell programs, weeks and catalog exercises
- API and worker clients wired to the test database
- Bearer tokens signed like the auth provider's
"""
import os
from datetime import datetime, timedelta

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTH_JWT_SECRET", "test-auth-secret")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from liftlog.config.settings import Settings
from liftlog.db.database import create_engine, create_session_maker, init_db
from liftlog.main import create_app
from liftlog.models import (
    CardioProgram,
    CardioWeek,
    ExerciseAlias,
    ExerciseDefinition,
    Program,
    ProgramType,
    Week,
)
from liftlog.security import create_access_token
from liftlog.worker import create_worker_app
from tests.factories import USER_ID


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        auth_jwt_secret="test-auth-secret",
        clone_week_timeout_seconds=5.0,
    )


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'liftlog.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return create_session_maker(engine)


@pytest.fixture
def create_shell(session_maker):
    """Insert a shell program row; ``weeks`` pre-commits that many week rows."""

    async def _create(
        program_type: ProgramType = ProgramType.STRENGTH,
        *,
        user_id: str = USER_ID,
        name: str = "Hypertrophy Block",
        copy_status: str | None = "cloning",
        heartbeat_age: timedelta | None = None,
        created_age: timedelta = timedelta(0),
        weeks: int = 0,
        **columns,
    ):
        now = datetime.utcnow()
        model = CardioProgram if program_type == ProgramType.CARDIO else Program
        program = model(
            user_id=user_id,
            name=name,
            copy_status=copy_status,
            copy_status_updated_at=now - heartbeat_age if heartbeat_age is not None else None,
            created_at=now - created_age,
            **columns,
        )
        async with session_maker() as session:
            session.add(program)
            await session.flush()
            for week_number in range(1, weeks + 1):
                if program_type == ProgramType.CARDIO:
                    session.add(
                        CardioWeek(week_number=week_number, cardio_program_id=program.id, user_id=user_id)
                    )
                else:
                    session.add(Week(week_number=week_number, program_id=program.id, user_id=user_id))
            await session.commit()
        return program

    return _create


@pytest.fixture
def create_definition(session_maker):
    """Insert a catalog (system) exercise definition with optional aliases."""

    async def _create(name: str, aliases: tuple[str, ...] = (), created_by: str | None = None):
        definition = ExerciseDefinition(
            name=name,
            normalized_name=" ".join(name.split()).lower(),
            is_system=created_by is None,
            created_by=created_by,
            aliases=[ExerciseAlias(alias=alias) for alias in aliases],
        )
        async with session_maker() as session:
            session.add(definition)
            await session.commit()
        return definition

    return _create


@pytest.fixture
def auth_headers(settings):
    def _headers(user_id: str = USER_ID) -> dict:
        token = create_access_token({"sub": user_id}, settings=settings)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture
async def api_client(settings, engine, session_maker):
    app = create_app(settings=settings, engine=engine, session_maker=session_maker)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def worker_client(settings, engine, session_maker):
    app = create_worker_app(settings=settings, engine=engine, session_maker=session_maker)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

