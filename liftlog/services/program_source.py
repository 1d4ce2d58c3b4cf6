"""Load clone source data from an existing program instead of the message body."""
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.copy_status import READY, effective_status
from liftlog.core.exceptions import NotFoundError, OwnershipError, ValidationError
from liftlog.models import CardioProgram, Program, ProgramType
from liftlog.repositories import CardioProgramRepository, ProgramRepository
from liftlog.schemas.clone_job import (
    CardioSessionData,
    ExerciseData,
    PrescribedSetData,
    ProgramData,
    WeekData,
    WorkoutData,
)


def strength_program_to_data(program: Program) -> ProgramData:
    return ProgramData(
        weeks=[
            WeekData(
                week_number=week.week_number,
                workouts=[
                    WorkoutData(
                        name=workout.name,
                        day_number=workout.day_number,
                        exercises=[
                            ExerciseData(
                                name=exercise.name,
                                exercise_definition_id=exercise.exercise_definition_id,
                                order=exercise.order,
                                exercise_group=exercise.exercise_group,
                                notes=exercise.notes,
                                prescribed_sets=[
                                    PrescribedSetData(
                                        set_number=s.set_number,
                                        reps=s.reps,
                                        weight=s.weight,
                                        rpe=s.rpe,
                                        rir=s.rir,
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
            for week in program.weeks
        ]
    )


def cardio_program_to_data(program: CardioProgram) -> ProgramData:
    return ProgramData(
        weeks=[
            WeekData(
                week_number=week.week_number,
                sessions=[
                    CardioSessionData(
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
                    )
                    for session in week.sessions
                ],
            )
            for week in program.weeks
        ]
    )


async def load_source_program(
    session: AsyncSession,
    program_type: ProgramType,
    source_program_id: str,
    user_id: str,
) -> ProgramData:
    """Snapshot the referenced program as clone source data.

    Raises:
        NotFoundError: no such program, or it belongs to another user
        ValidationError: the source is itself still being cloned
    """
    if program_type == ProgramType.CARDIO:
        source = await CardioProgramRepository(session).get_tree(source_program_id)
    else:
        source = await ProgramRepository(session).get_tree(source_program_id)

    if source is None:
        raise NotFoundError(
            "source_program",
            f"Source program {source_program_id} not found",
            {"source_program_id": source_program_id},
        )
    if source.user_id != user_id:
        raise OwnershipError("source_program", {"source_program_id": source_program_id})
    if effective_status(source.copy_status) != READY:
        raise ValidationError("sourceProgramId", "source program is not fully cloned yet")

    if program_type == ProgramType.CARDIO:
        return cardio_program_to_data(source)
    return strength_program_to_data(source)
