"""Match free-text exercise names to catalog definitions.

Lookup order for each name: exact normalized name, then alias, then a new
custom definition owned by the user. Names are resolved in one batch before
any week is written so the per-week transactions never race each other into
creating the same custom definition twice.
"""
from typing import Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from liftlog.core.exceptions import ValidationError
from liftlog.core.logging import get_logger
from liftlog.core.transactions import transactional
from liftlog.repositories.exercise_definition_repository import ExerciseDefinitionRepository

logger = get_logger(__name__)


def normalize_exercise_name(name: str) -> str:
    return " ".join(name.split()).lower()


class ExerciseDefinitionResolver:
    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def resolve(self, names: Iterable[str], user_id: str) -> dict[str, str]:
        """Return normalized name -> exercise definition id for every name given."""
        wanted: dict[str, str] = {}
        for name in names:
            wanted.setdefault(normalize_exercise_name(name), name.strip())
        if not wanted:
            return {}

        try:
            async with self._session_maker() as session:
                return await self._resolve_in(session=session, wanted=wanted, user_id=user_id)
        except IntegrityError:
            # A duplicate delivery created some of the same custom definitions
            # first; they are now visible to the exact-name stage.
            logger.info("exercise_definition_race_retry", user_id=user_id, names=len(wanted))
            async with self._session_maker() as session:
                return await self._resolve_in(session=session, wanted=wanted, user_id=user_id)

    async def check_known_ids(self, definition_ids: set[str]) -> None:
        """Reject explicit definition ids with no catalog row; they would only fail at flush."""
        if not definition_ids:
            return
        async with self._session_maker() as session:
            known = await ExerciseDefinitionRepository(session).existing_ids(definition_ids)
        unknown = sorted(definition_ids - known)
        if unknown:
            raise ValidationError(
                "exerciseDefinitionId",
                f"unknown exercise definition {unknown[0]}",
                {"field": "exerciseDefinitionId", "unknown": unknown},
            )

    @transactional()
    async def _resolve_in(
        self, *, session: AsyncSession, wanted: dict[str, str], user_id: str
    ) -> dict[str, str]:
        repo = ExerciseDefinitionRepository(session)
        pending = set(wanted)

        resolved = await repo.find_by_normalized_names(pending, user_id)
        pending -= resolved.keys()

        by_alias = await repo.find_by_aliases(pending)
        resolved.update(by_alias)
        pending -= by_alias.keys()

        for normalized_name in sorted(pending):
            definition = await repo.create_custom(wanted[normalized_name], normalized_name, user_id)
            resolved[normalized_name] = definition.id

        logger.info(
            "exercise_definitions_resolved",
            user_id=user_id,
            total=len(wanted),
            by_alias=len(by_alias),
            created=len(pending),
        )
        return resolved
