from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from liftlog.models import CardioProgram, CardioWeek
from liftlog.repositories.base import Repository


class CardioProgramRepository(Repository[CardioProgram, str]):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, id: str) -> CardioProgram | None:
        return await self._session.get(CardioProgram, id)

    async def get_tree(self, id: str) -> CardioProgram | None:
        result = await self._session.execute(
            select(CardioProgram)
            .options(selectinload(CardioProgram.weeks).selectinload(CardioWeek.sessions))
            .where(CardioProgram.id == id)
        )
        return result.scalar_one_or_none()

    async def list_archived(self, user_id: str, limit: int) -> list[CardioProgram]:
        result = await self._session.execute(
            select(CardioProgram)
            .where(
                CardioProgram.user_id == user_id,
                CardioProgram.is_archived.is_(True),
            )
            .order_by(CardioProgram.archived_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
