"""Report clone progress to polling clients and clean up stuck clone jobs.

A job is stale when its last heartbeat (``copy_status_updated_at``, or the
row's ``created_at`` if no heartbeat was ever written) is older than the
stuck threshold. Stale jobs are remediated on read:

- plain ``cloning`` with at least one committed week is promoted to ``ready``
- anything else is deleted and reported as not found

Both writes are conditional on the row still holding what was read, so a
worker that heartbeats in between is left alone.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from liftlog.core.copy_status import (
    CLONING,
    READY,
    Progress,
    effective_status,
    is_in_progress,
    parse_progress,
)
from liftlog.core.exceptions import NotFoundError, StuckJobError
from liftlog.core.logging import get_logger
from liftlog.core.metrics import track_remediation
from liftlog.models import ProgramType, ShellProgramMixin
from liftlog.repositories import ShellProgramRepository
from liftlog.services.base import BaseService

logger = get_logger(__name__)

DEFAULT_STUCK_THRESHOLD = timedelta(seconds=90)

PROMOTED = "promoted"
DELETED = "deleted"


@dataclass
class CopyStatusReport:
    program_id: str
    program_type: ProgramType
    name: str
    status: str
    progress: Progress | None = None


@dataclass
class SweepAction:
    program_type: ProgramType
    program_id: str
    copy_status: str
    action: str
    applied: bool


def heartbeat_of(program: ShellProgramMixin) -> datetime:
    return program.copy_status_updated_at or program.created_at


def is_stale(program: ShellProgramMixin, threshold: timedelta, now: datetime | None = None) -> bool:
    now = now or datetime.utcnow()
    return now - heartbeat_of(program) > threshold


def remediation_for(status: str, week_count: int) -> str:
    if status == CLONING and week_count > 0:
        return PROMOTED
    return DELETED


async def _apply_remediation(
    repo: ShellProgramRepository, program: ShellProgramMixin, action: str
) -> bool:
    if action == PROMOTED:
        return await repo.promote_to_ready(program.id, CLONING)
    return await repo.delete_if_unchanged(
        program.id, program.copy_status, program.copy_status_updated_at
    )


class CopyStatusReporter(BaseService):
    def __init__(self, session: AsyncSession, stuck_threshold: timedelta = DEFAULT_STUCK_THRESHOLD):
        super().__init__(session)
        self._stuck_threshold = stuck_threshold

    async def report(self, program_id: str, user_id: str) -> CopyStatusReport:
        """Current clone status of one of the user's programs.

        Raises:
            NotFoundError: no such program, or it belongs to another user
            StuckJobError: the clone was stale and its shell has been deleted
        """
        repo, program = await self._get_owned_shell(
            program_id, user_id, "Program not found - cloning may have failed"
        )
        status = effective_status(program.copy_status)

        if is_in_progress(status) and is_stale(program, self._stuck_threshold):
            return await self._remediate(repo, program, status)

        return self._to_report(repo.program_type, program, status)

    async def _remediate(
        self, repo: ShellProgramRepository, program: ShellProgramMixin, status: str
    ) -> CopyStatusReport:
        action = remediation_for(status, await repo.count_weeks(program.id))
        applied = await _apply_remediation(repo, program, action)
        await self._session.commit()

        if not applied:
            # The worker moved the row on since we read it; report what it wrote.
            logger.info(
                "copy_status_remediation_skipped",
                program_id=program.id,
                program_type=repo.program_type.value,
                action=action,
            )
            fresh = await repo.get_fresh(program.id)
            if fresh is None:
                raise NotFoundError(
                    "program",
                    "Program not found - cloning may have failed",
                    {"program_id": program.id},
                )
            return self._to_report(repo.program_type, fresh, effective_status(fresh.copy_status))

        track_remediation(repo.program_type.value, action)
        logger.warning(
            "stuck_clone_remediated",
            program_id=program.id,
            program_type=repo.program_type.value,
            copy_status=status,
            action=action,
            last_heartbeat=heartbeat_of(program).isoformat(),
        )
        if action == DELETED:
            raise StuckJobError(program.id)
        return self._to_report(repo.program_type, program, READY)

    @staticmethod
    def _to_report(
        program_type: ProgramType, program: ShellProgramMixin, status: str
    ) -> CopyStatusReport:
        return CopyStatusReport(
            program_id=program.id,
            program_type=program_type,
            name=program.name,
            status=status,
            progress=parse_progress(status),
        )


async def sweep_stuck_clones(
    session_maker: async_sessionmaker[AsyncSession],
    threshold: timedelta = DEFAULT_STUCK_THRESHOLD,
    dry_run: bool = False,
) -> list[SweepAction]:
    """Remediate every stale in-progress clone across both program tables."""
    actions: list[SweepAction] = []
    now = datetime.utcnow()

    for program_type in (ProgramType.STRENGTH, ProgramType.CARDIO):
        async with session_maker() as session:
            repo = ShellProgramRepository(session, program_type)
            for program in await repo.list_in_progress():
                if not is_stale(program, threshold, now):
                    continue
                action = remediation_for(program.copy_status, await repo.count_weeks(program.id))
                applied = False
                if not dry_run:
                    applied = await _apply_remediation(repo, program, action)
                    if applied:
                        track_remediation(program_type.value, action)
                actions.append(
                    SweepAction(program_type, program.id, program.copy_status, action, applied)
                )
            await session.commit()

    logger.info(
        "stuck_clone_sweep_finished",
        candidates=len(actions),
        applied=sum(1 for a in actions if a.applied),
        dry_run=dry_run,
    )
    return actions
