from __future__ import annotations
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, or_
from liftlog.core.copy_status import CLONING, READY
from liftlog.models import SHELL_MODELS, ProgramType, ShellProgramMixin
from liftlog.repositories.base import Repository


class ShellProgramRepository(Repository[ShellProgramMixin, str]):
    """Copy-status reads and writes on a strength or cardio shell program.

    Writes are single-statement and conditional where the poller and the
    clone worker can race on the same row.
    """

    def __init__(self, session: AsyncSession, program_type: ProgramType):
        self._session = session
        self.program_type = program_type
        self._models = SHELL_MODELS[program_type]

    async def get(self, id: str) -> ShellProgramMixin | None:
        return await self._session.get(self._models.program, id)

    async def get_fresh(self, id: str) -> ShellProgramMixin | None:
        result = await self._session.execute(
            select(self._models.program)
            .where(self._models.program.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def set_copy_status(self, id: str, copy_status: str) -> bool:
        """Write a status unless the row already reads ready.

        Returns False when no row was updated: the program is gone or already ready.
        """
        program = self._models.program
        result = await self._session.execute(
            update(program)
            .where(
                program.id == id,
                or_(program.copy_status.is_(None), program.copy_status != READY),
            )
            .values(copy_status=copy_status, copy_status_updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def promote_to_ready(self, id: str, expected_status: str) -> bool:
        result = await self._session.execute(
            update(self._models.program)
            .where(
                self._models.program.id == id,
                self._models.program.copy_status == expected_status,
            )
            .values(copy_status=READY, copy_status_updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def delete_if_unchanged(
        self, id: str, observed_status: str | None, observed_heartbeat: datetime | None
    ) -> bool:
        program = self._models.program
        conditions = [program.id == id]
        conditions.append(
            program.copy_status.is_(None) if observed_status is None
            else program.copy_status == observed_status
        )
        conditions.append(
            program.copy_status_updated_at.is_(None) if observed_heartbeat is None
            else program.copy_status_updated_at == observed_heartbeat
        )
        result = await self._session.execute(
            delete(program).where(*conditions).execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def delete(self, id: str) -> bool:
        program = await self.get(id)
        if program:
            await self._session.delete(program)
            await self._session.flush()
            return True
        return False

    async def count_weeks(self, id: str) -> int:
        return await self._session.scalar(
            select(func.count()).select_from(self._models.week).where(
                self._models.week_program_column == id
            )
        ) or 0

    async def existing_week_numbers(self, id: str) -> set[int]:
        result = await self._session.execute(
            select(self._models.week.week_number).where(self._models.week_program_column == id)
        )
        return set(result.scalars().all())

    async def week_exists(self, id: str, week_number: int) -> bool:
        found = await self._session.scalar(
            select(self._models.week.id).where(
                self._models.week_program_column == id,
                self._models.week.week_number == week_number,
            )
        )
        return found is not None

    async def list_in_progress(self) -> list[ShellProgramMixin]:
        program = self._models.program
        result = await self._session.execute(
            select(program).where(
                (program.copy_status == CLONING) | program.copy_status.like("cloning\\_week\\_%", escape="\\")
            )
        )
        return list(result.scalars().all())
