"""Run one delivered clone job and record its failure on the shell program."""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from liftlog.config.settings import Settings
from liftlog.core.copy_status import FAILED
from liftlog.core.exceptions import NotFoundError, ValidationError
from liftlog.core.logging import add_log_context, clear_log_context, get_logger
from liftlog.core.metrics import track_clone_job
from liftlog.core.transactions import run_in_transaction
from liftlog.repositories import ShellProgramRepository
from liftlog.schemas.clone_job import CloneJob
from liftlog.services.program_cloner import CloneResult, ProgramCloner

logger = get_logger(__name__)

TERMINAL_ERRORS = (NotFoundError, ValidationError)


def is_terminal(exc: Exception) -> bool:
    """Terminal failures would fail the same way on redelivery."""
    return isinstance(exc, TERMINAL_ERRORS)


async def mark_failed(session_maker: async_sessionmaker[AsyncSession], job: CloneJob) -> bool:
    """Best-effort ``failed`` marker; never raises.

    A shell that already reads ``ready`` was finished by another delivery and
    keeps its status.
    """
    try:
        async with session_maker() as session:
            repo = ShellProgramRepository(session, job.program_type)

            async def mark() -> bool | None:
                if await repo.set_copy_status(job.program_id, FAILED):
                    return True
                return False if await repo.get_fresh(job.program_id) is not None else None

            marked = await run_in_transaction(session, mark)
    except Exception as e:
        logger.error("clone_job_mark_failed_error", error=str(e), exc_info=e)
        return False

    if marked is None:
        logger.warning("clone_job_mark_failed_no_shell")
    elif not marked:
        logger.info("clone_job_mark_failed_skipped_ready")
    return bool(marked)


async def run_clone_job(
    job: CloneJob,
    session_maker: async_sessionmaker[AsyncSession],
    settings: Settings,
) -> CloneResult:
    add_log_context(
        program_id=job.program_id,
        program_type=job.program_type.value,
        user_id=job.user_id,
    )
    try:
        logger.info(
            "clone_job_started",
            source="program" if job.source_data is None else "message",
        )
        cloner = ProgramCloner(session_maker, week_timeout=settings.clone_week_timeout_seconds)
        try:
            result = await cloner.clone(job)
        except Exception as e:
            terminal = is_terminal(e)
            logger.error(
                "clone_job_failed",
                error=str(e),
                error_type=type(e).__name__,
                terminal=terminal,
                exc_info=not terminal,
            )
            await mark_failed(session_maker, job)
            track_clone_job(job.program_type.value, "rejected" if terminal else "failed")
            raise

        track_clone_job(job.program_type.value, "succeeded")
        return result
    finally:
        clear_log_context()
