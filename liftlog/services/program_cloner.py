"""Copy a program's weeks into an existing shell program, one week per transaction.

Before each week is written its heartbeat (``cloning_week_<i>_of_<n>``) is
committed on the shell row, so pollers can watch progress without holding a
long transaction open. ``ready`` is written only after the last week commits.

Deliveries are at-least-once. Weeks already committed for the program are
skipped, and a concurrent duplicate that wins the ``(program, week_number)``
unique constraint turns this delivery's insert into a skip. Status writes never
move a shell off ``ready``; a delivery that finds its shell already finished
by a duplicate stops without writing.
"""
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from liftlog.core.copy_status import READY, week_progress_status
from liftlog.core.exceptions import ShellProgramMissingError
from liftlog.core.logging import get_logger
from liftlog.core.metrics import track_clone_week
from liftlog.core.transactions import run_in_transaction
from liftlog.models import (
    CardioSession,
    CardioWeek,
    Exercise,
    PrescribedSet,
    ProgramType,
    Week,
    Workout,
)
from liftlog.repositories import ShellProgramRepository
from liftlog.schemas.clone_job import CloneJob, ProgramData, WeekData
from liftlog.services.exercise_matching import ExerciseDefinitionResolver, normalize_exercise_name
from liftlog.services.program_source import load_source_program

logger = get_logger(__name__)

WEEK_TRANSACTION_TIMEOUT_SECONDS = 30.0


@dataclass
class CloneResult:
    program_id: str
    program_type: ProgramType
    total_weeks: int
    weeks_written: list[int] = field(default_factory=list)
    weeks_skipped: list[int] = field(default_factory=list)
    status: str = READY


def build_strength_week(
    week: WeekData, program_id: str, user_id: str, definition_ids: dict[str, str]
) -> Week:
    """Build the ORM subtree for one strength week; nothing is flushed here."""
    return Week(
        week_number=week.week_number,
        program_id=program_id,
        user_id=user_id,
        workouts=[
            Workout(
                name=workout.name,
                day_number=workout.day_number,
                user_id=user_id,
                exercises=[
                    Exercise(
                        name=exercise.name,
                        exercise_definition_id=(
                            exercise.exercise_definition_id
                            or definition_ids[normalize_exercise_name(exercise.name)]
                        ),
                        order=exercise.order,
                        exercise_group=exercise.exercise_group,
                        notes=exercise.notes,
                        user_id=user_id,
                        prescribed_sets=[
                            PrescribedSet(
                                set_number=s.set_number,
                                reps=s.reps,
                                weight=s.weight,
                                rpe=s.rpe,
                                rir=s.rir,
                                user_id=user_id,
                            )
                            for s in exercise.prescribed_sets
                        ],
                    )
                    for exercise in workout.exercises
                ],
            )
            for workout in week.workouts
        ],
    )


def build_cardio_week(week: WeekData, program_id: str, user_id: str) -> CardioWeek:
    return CardioWeek(
        week_number=week.week_number,
        cardio_program_id=program_id,
        user_id=user_id,
        sessions=[
            CardioSession(
                day_number=session.day_number,
                name=session.name,
                description=session.description,
                target_duration=session.target_duration,
                intensity_zone=session.intensity_zone,
                equipment=session.equipment,
                target_hr_range=session.target_hr_range,
                target_power_range=session.target_power_range,
                interval_structure=session.interval_structure,
                notes=session.notes,
                user_id=user_id,
            )
            for session in week.sessions
        ],
    )


def unresolved_exercise_names(source: ProgramData) -> list[str]:
    return [
        exercise.name
        for week in source.weeks
        for workout in week.workouts
        for exercise in workout.exercises
        if not exercise.exercise_definition_id
    ]


def explicit_definition_ids(source: ProgramData) -> set[str]:
    return {
        exercise.exercise_definition_id
        for week in source.weeks
        for workout in week.workouts
        for exercise in workout.exercises
        if exercise.exercise_definition_id
    }


class ProgramCloner:
    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        week_timeout: float = WEEK_TRANSACTION_TIMEOUT_SECONDS,
    ):
        self._session_maker = session_maker
        self._week_timeout = week_timeout

    async def clone(self, job: CloneJob) -> CloneResult:
        """Materialize every source week under the shell program of ``job``.

        Raises:
            ShellProgramMissingError: the shell row is gone (deleted by a poller or the user)
            NotFoundError / ValidationError: the referenced source program is unusable,
                or an exercise names a definition id that does not exist
            TransientDatastoreError: a week transaction timed out or lost its connection
        """
        program_type = job.program_type
        source = await self._load_source(job)
        weeks = source.ordered_weeks()
        result = CloneResult(job.program_id, program_type, total_weeks=len(weeks))

        async with self._session_maker() as session:
            shells = ShellProgramRepository(session, program_type)
            shell = await shells.get(job.program_id)
            if shell is None:
                raise ShellProgramMissingError(job.program_id, program_type.value)
            # Only an explicit ready counts as finished; the caller creates shells as cloning
            if shell.copy_status == READY:
                logger.info("clone_job_already_complete", program_id=job.program_id)
                result.weeks_skipped = [w.week_number for w in weeks]
                return result
            committed = await shells.existing_week_numbers(job.program_id)

        definition_ids: dict[str, str] = {}
        if program_type == ProgramType.STRENGTH:
            resolver = ExerciseDefinitionResolver(self._session_maker)
            await resolver.check_known_ids(explicit_definition_ids(source))
            pending_names = unresolved_exercise_names(source)
            if pending_names:
                definition_ids = await resolver.resolve(pending_names, job.user_id)

        for index, week in enumerate(weeks):
            if week.week_number in committed:
                logger.info("clone_week_skipped", program_id=job.program_id, week_number=week.week_number)
                result.weeks_skipped.append(week.week_number)
                track_clone_week(program_type.value, "skipped")
                continue

            if not await self._set_status(job, week_progress_status(index + 1, len(weeks))):
                logger.info("clone_job_completed_concurrently", program_id=job.program_id)
                result.weeks_skipped.extend(w.week_number for w in weeks[index:])
                return result

            if await self._write_week(job, week, definition_ids):
                result.weeks_written.append(week.week_number)
                track_clone_week(program_type.value, "written")
            else:
                result.weeks_skipped.append(week.week_number)
                track_clone_week(program_type.value, "skipped")

        await self._set_status(job, READY)
        logger.info(
            "clone_job_finished",
            program_id=job.program_id,
            written=len(result.weeks_written),
            skipped=len(result.weeks_skipped),
        )
        return result

    async def _load_source(self, job: CloneJob) -> ProgramData:
        if job.source_data is not None:
            return job.source_data
        async with self._session_maker() as session:
            return await load_source_program(
                session, job.program_type, job.source_program_id, job.user_id
            )

    async def _set_status(self, job: CloneJob, copy_status: str) -> bool:
        """Returns False if the shell already reads ready (another delivery finished it)."""
        async with self._session_maker() as session:
            repo = ShellProgramRepository(session, job.program_type)

            async def write() -> bool | None:
                if await repo.set_copy_status(job.program_id, copy_status):
                    return True
                # No row updated: either it was deleted or it already reads ready
                return False if await repo.get_fresh(job.program_id) is not None else None

            written = await run_in_transaction(session, write)
        if written is None:
            raise ShellProgramMissingError(job.program_id, job.program_type.value)
        return written

    async def _write_week(self, job: CloneJob, week: WeekData, definition_ids: dict[str, str]) -> bool:
        """Write one week subtree atomically. Returns False if a duplicate delivery beat us to it."""
        if job.program_type == ProgramType.CARDIO:
            row = build_cardio_week(week, job.program_id, job.user_id)
        else:
            row = build_strength_week(week, job.program_id, job.user_id, definition_ids)

        async def work() -> None:
            session.add(row)
            await session.flush()

        try:
            async with self._session_maker() as session:
                await run_in_transaction(session, work, timeout=self._week_timeout)
        except IntegrityError:
            async with self._session_maker() as session:
                exists = await ShellProgramRepository(session, job.program_type).week_exists(
                    job.program_id, week.week_number
                )
            if not exists:
                raise
            logger.info(
                "clone_week_written_concurrently",
                program_id=job.program_id,
                week_number=week.week_number,
            )
            return False

        logger.info(
            "clone_week_written",
            program_id=job.program_id,
            week_number=week.week_number,
        )
        return True
