from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from liftlog.models import ExerciseAlias, ExerciseDefinition
from liftlog.repositories.base import Repository


class ExerciseDefinitionRepository(Repository[ExerciseDefinition, str]):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, id: str) -> ExerciseDefinition | None:
        return await self._session.get(ExerciseDefinition, id)

    async def existing_ids(self, ids: set[str]) -> set[str]:
        result = await self._session.execute(
            select(ExerciseDefinition.id).where(ExerciseDefinition.id.in_(ids))
        )
        return set(result.scalars().all())

    async def find_by_normalized_names(
        self, names: set[str], user_id: str
    ) -> dict[str, str]:
        """Map normalized name -> definition id among catalog and the user's own entries.

        Catalog entries win over a user's custom definition with the same name.
        """
        if not names:
            return {}
        result = await self._session.execute(
            select(ExerciseDefinition.normalized_name, ExerciseDefinition.id, ExerciseDefinition.is_system)
            .where(
                ExerciseDefinition.normalized_name.in_(names),
                or_(
                    ExerciseDefinition.is_system.is_(True),
                    ExerciseDefinition.created_by == user_id,
                ),
            )
        )
        matches: dict[str, str] = {}
        for normalized_name, definition_id, is_system in result.all():
            if normalized_name not in matches or is_system:
                matches[normalized_name] = definition_id
        return matches

    async def find_by_aliases(self, names: set[str]) -> dict[str, str]:
        if not names:
            return {}
        result = await self._session.execute(
            select(ExerciseAlias.alias, ExerciseAlias.exercise_definition_id)
            .where(ExerciseAlias.alias.in_(names))
        )
        return {alias: definition_id for alias, definition_id in result.all()}

    async def create_custom(self, name: str, normalized_name: str, user_id: str) -> ExerciseDefinition:
        definition = ExerciseDefinition(
            name=name,
            normalized_name=normalized_name,
            is_system=False,
            created_by=user_id,
        )
        self._session.add(definition)
        await self._session.flush()
        return definition
