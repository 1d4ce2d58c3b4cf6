"""Tests for copy-status reporting and stuck clone remediation."""
from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from liftlog.core.copy_status import Progress
from liftlog.core.exceptions import NotFoundError, OwnershipError, StuckJobError
from liftlog.models import CardioProgram, Program, ProgramType, Week
from liftlog.repositories import ShellProgramRepository
from liftlog.services.copy_status import (
    DELETED,
    PROMOTED,
    CopyStatusReporter,
    remediation_for,
    sweep_stuck_clones,
)
from tests.factories import OTHER_USER_ID, USER_ID

STALE = timedelta(seconds=120)
FRESH = timedelta(seconds=10)


async def _report(session_maker, program_id, user_id=USER_ID):
    async with session_maker() as session:
        return await CopyStatusReporter(session).report(program_id, user_id)


async def _load(session_maker, model, program_id):
    async with session_maker() as session:
        return await session.get(model, program_id)


class TestReport:
    @pytest.mark.asyncio
    async def test_fresh_week_progress_is_reported_untouched(self, session_maker, create_shell):
        shell = await create_shell(copy_status="cloning_week_3_of_9", heartbeat_age=FRESH, weeks=2)

        report = await _report(session_maker, shell.id)

        assert report.status == "cloning_week_3_of_9"
        assert report.progress == Progress(current_week=3, total_weeks=9)
        assert report.program_type == ProgramType.STRENGTH
        assert report.name == "Hypertrophy Block"
        row = await _load(session_maker, Program, shell.id)
        assert row.copy_status == "cloning_week_3_of_9"
        assert row.copy_status_updated_at == shell.copy_status_updated_at

    @pytest.mark.asyncio
    async def test_missing_status_reads_as_ready(self, session_maker, create_shell):
        shell = await create_shell(copy_status=None, created_age=timedelta(days=30))

        report = await _report(session_maker, shell.id)

        assert report.status == "ready"
        assert report.progress is None

    @pytest.mark.asyncio
    async def test_failed_is_reported_as_is(self, session_maker, create_shell):
        shell = await create_shell(copy_status="failed", heartbeat_age=STALE)

        report = await _report(session_maker, shell.id)

        assert report.status == "failed"
        assert await _load(session_maker, Program, shell.id) is not None

    @pytest.mark.asyncio
    async def test_cardio_program_found_after_strength_miss(self, session_maker, create_shell):
        shell = await create_shell(ProgramType.CARDIO, name="Base Miles", copy_status="cloning", heartbeat_age=FRESH)

        report = await _report(session_maker, shell.id)

        assert report.program_type == ProgramType.CARDIO
        assert report.name == "Base Miles"
        assert report.status == "cloning"

    @pytest.mark.asyncio
    async def test_unknown_program(self, session_maker):
        with pytest.raises(NotFoundError) as exc_info:
            await _report(session_maker, "nope")

        assert exc_info.value.message == "Program not found - cloning may have failed"

    @pytest.mark.asyncio
    async def test_foreign_program_reads_as_not_found(self, session_maker, create_shell):
        shell = await create_shell(user_id=OTHER_USER_ID, copy_status="cloning", heartbeat_age=STALE)

        with pytest.raises(OwnershipError) as exc_info:
            await _report(session_maker, shell.id)

        assert exc_info.value.message == "Program not found"
        # Nobody else's stuck job gets remediated through this user's poll
        assert (await _load(session_maker, Program, shell.id)).copy_status == "cloning"


class TestStuckRemediation:
    @pytest.mark.asyncio
    async def test_stale_cloning_without_weeks_is_deleted(self, session_maker, create_shell):
        shell = await create_shell(copy_status="cloning", heartbeat_age=STALE)

        with pytest.raises(StuckJobError) as exc_info:
            await _report(session_maker, shell.id)

        assert exc_info.value.message == "Clone timed out and was cleaned up"
        assert await _load(session_maker, Program, shell.id) is None

    @pytest.mark.asyncio
    async def test_stale_cloning_with_weeks_is_promoted(self, session_maker, create_shell):
        shell = await create_shell(copy_status="cloning", heartbeat_age=STALE, weeks=3)

        report = await _report(session_maker, shell.id)

        assert report.status == "ready"
        assert report.progress is None
        assert (await _load(session_maker, Program, shell.id)).copy_status == "ready"

    @pytest.mark.asyncio
    async def test_stale_week_progress_is_deleted_with_its_weeks(self, session_maker, create_shell):
        shell = await create_shell(copy_status="cloning_week_2_of_4", heartbeat_age=STALE, weeks=1)

        with pytest.raises(StuckJobError):
            await _report(session_maker, shell.id)

        assert await _load(session_maker, Program, shell.id) is None
        async with session_maker() as session:
            weeks = (await session.execute(select(func.count(Week.id)))).scalar()
        assert weeks == 0

    @pytest.mark.asyncio
    async def test_age_falls_back_to_created_at(self, session_maker, create_shell):
        fresh = await create_shell(ProgramType.CARDIO, copy_status="cloning", created_age=FRESH)
        stale = await create_shell(ProgramType.CARDIO, copy_status="cloning", created_age=STALE)

        assert (await _report(session_maker, fresh.id)).status == "cloning"
        with pytest.raises(StuckJobError):
            await _report(session_maker, stale.id)
        assert await _load(session_maker, CardioProgram, stale.id) is None

    @pytest.mark.asyncio
    async def test_recent_heartbeat_keeps_old_program_alive(self, session_maker, create_shell):
        shell = await create_shell(
            copy_status="cloning_week_5_of_12", created_age=timedelta(minutes=20), heartbeat_age=FRESH
        )

        report = await _report(session_maker, shell.id)

        assert report.progress == Progress(5, 12)

    @pytest.mark.asyncio
    async def test_custom_threshold(self, session_maker, create_shell):
        shell = await create_shell(copy_status="cloning", heartbeat_age=timedelta(seconds=40))

        async with session_maker() as session:
            reporter = CopyStatusReporter(session, stuck_threshold=timedelta(seconds=30))
            with pytest.raises(StuckJobError):
                await reporter.report(shell.id, USER_ID)

    @pytest.mark.asyncio
    async def test_worker_heartbeat_wins_over_delete(self, session_maker, create_shell):
        shell = await create_shell(copy_status="cloning", heartbeat_age=STALE)
        real_delete = ShellProgramRepository.delete_if_unchanged

        async def heartbeat_then_delete(self, id, observed_status, observed_heartbeat):
            async with session_maker() as other:
                await ShellProgramRepository(other, ProgramType.STRENGTH).set_copy_status(
                    id, "cloning_week_1_of_3"
                )
                await other.commit()
            return await real_delete(self, id, observed_status, observed_heartbeat)

        with patch.object(ShellProgramRepository, "delete_if_unchanged", heartbeat_then_delete):
            report = await _report(session_maker, shell.id)

        assert report.status == "cloning_week_1_of_3"
        assert report.progress == Progress(1, 3)
        assert await _load(session_maker, Program, shell.id) is not None

    @pytest.mark.asyncio
    async def test_worker_completion_wins_over_promotion(self, session_maker, create_shell):
        shell = await create_shell(copy_status="cloning", heartbeat_age=STALE, weeks=2)

        async def finished_first(self, id, expected_status):
            async with session_maker() as other:
                await ShellProgramRepository(other, ProgramType.STRENGTH).set_copy_status(id, "failed")
                await other.commit()
            return False

        with patch.object(ShellProgramRepository, "promote_to_ready", finished_first):
            report = await _report(session_maker, shell.id)

        assert report.status == "failed"


@pytest.mark.parametrize(
    "status, weeks, action",
    [
        ("cloning", 1, PROMOTED),
        ("cloning", 0, DELETED),
        ("cloning_week_2_of_4", 3, DELETED),
        ("cloning_week_1_of_1", 0, DELETED),
    ],
)
def test_remediation_for(status, weeks, action):
    assert remediation_for(status, weeks) == action


class TestSweep:
    @pytest.mark.asyncio
    async def test_sweep_applies_remediation_across_tables(self, session_maker, create_shell):
        promoted = await create_shell(copy_status="cloning", heartbeat_age=STALE, weeks=1)
        deleted = await create_shell(ProgramType.CARDIO, copy_status="cloning_week_1_of_2", heartbeat_age=STALE)
        fresh = await create_shell(copy_status="cloning_week_1_of_2", heartbeat_age=FRESH)
        done = await create_shell(copy_status="ready", heartbeat_age=STALE)

        actions = await sweep_stuck_clones(session_maker, timedelta(seconds=90))

        assert {(a.program_id, a.action, a.applied) for a in actions} == {
            (promoted.id, PROMOTED, True),
            (deleted.id, DELETED, True),
        }
        assert (await _load(session_maker, Program, promoted.id)).copy_status == "ready"
        assert await _load(session_maker, CardioProgram, deleted.id) is None
        assert (await _load(session_maker, Program, fresh.id)).copy_status == "cloning_week_1_of_2"
        assert (await _load(session_maker, Program, done.id)).copy_status == "ready"

    @pytest.mark.asyncio
    async def test_dry_run_changes_nothing(self, session_maker, create_shell):
        shell = await create_shell(copy_status="cloning", heartbeat_age=STALE)

        actions = await sweep_stuck_clones(session_maker, timedelta(seconds=90), dry_run=True)

        assert [(a.program_id, a.action, a.applied) for a in actions] == [(shell.id, DELETED, False)]
        assert (await _load(session_maker, Program, shell.id)).copy_status == "cloning"
