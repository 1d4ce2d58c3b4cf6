from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.exceptions import NotFoundError, OwnershipError
from liftlog.models import ProgramType, ShellProgramMixin
from liftlog.repositories import ShellProgramRepository


class BaseService:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_owned_shell(
        self,
        program_id: str,
        user_id: str,
        error_msg: str = "Program not found",
    ) -> tuple[ShellProgramRepository, ShellProgramMixin]:
        """Find a strength or cardio program owned by ``user_id``.

        Strength programs are checked first. A program owned by another user
        raises OwnershipError, which callers render exactly like not-found.
        """
        for program_type in (ProgramType.STRENGTH, ProgramType.CARDIO):
            repo = ShellProgramRepository(self._session, program_type)
            program = await repo.get(program_id)
            if program is None:
                continue
            if program.user_id != user_id:
                raise OwnershipError("program", {"program_id": program_id})
            return repo, program

        raise NotFoundError("program", error_msg, {"program_id": program_id})
