"""Program lifecycle operations outside the clone flow."""
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.config.settings import Settings, get_settings
from liftlog.core.logging import get_logger
from liftlog.models import CardioProgram
from liftlog.repositories import CardioProgramRepository
from liftlog.services.base import BaseService

logger = get_logger(__name__)


def clamp_archived_limit(limit: int | None, settings: Settings) -> int:
    if limit is None:
        return settings.archived_programs_default_limit
    return max(1, min(limit, settings.archived_programs_max_limit))


class ProgramService(BaseService):
    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        super().__init__(session)
        self._settings = settings or get_settings()

    async def delete_program(self, program_id: str, user_id: str) -> None:
        """Delete a strength or cardio program and its whole week subtree.

        Foreign programs raise the same not-found error as missing ones.
        """
        repo, program = await self._get_owned_shell(program_id, user_id)
        await repo.delete(program.id)
        logger.info(
            "program_deleted",
            program_id=program_id,
            program_type=repo.program_type.value,
            copy_status=program.copy_status,
        )

    async def list_archived_cardio(self, user_id: str, limit: int | None = None) -> list[CardioProgram]:
        return await CardioProgramRepository(self._session).list_archived(
            user_id, clamp_archived_limit(limit, self._settings)
        )
