from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from liftlog.models import Exercise, Program, Week, Workout
from liftlog.repositories.base import Repository


class ProgramRepository(Repository[Program, str]):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, id: str) -> Program | None:
        return await self._session.get(Program, id)

    async def get_tree(self, id: str) -> Program | None:
        """Load a program with weeks, workouts, exercises and prescribed sets."""
        result = await self._session.execute(
            select(Program)
            .options(
                selectinload(Program.weeks)
                .selectinload(Week.workouts)
                .selectinload(Workout.exercises)
                .selectinload(Exercise.prescribed_sets)
            )
            .where(Program.id == id)
        )
        return result.scalar_one_or_none()
