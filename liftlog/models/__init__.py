"""ORM models for programs, their week subtrees and the exercise catalog."""
from dataclasses import dataclass

from liftlog.models.base import ShellProgramMixin, new_id
from liftlog.models.cardio import CardioProgram, CardioSession, CardioWeek
from liftlog.models.enums import ProgramType
from liftlog.models.program import (
    Exercise,
    ExerciseAlias,
    ExerciseDefinition,
    PrescribedSet,
    Program,
    Week,
    Workout,
)


@dataclass(frozen=True)
class ShellModels:
    """Tables backing one program type: the shell row and its week rows."""
    program_type: ProgramType
    program: type
    week: type
    week_program_fk: str

    @property
    def week_program_column(self):
        return getattr(self.week, self.week_program_fk)


SHELL_MODELS: dict[ProgramType, ShellModels] = {
    ProgramType.STRENGTH: ShellModels(ProgramType.STRENGTH, Program, Week, "program_id"),
    ProgramType.CARDIO: ShellModels(ProgramType.CARDIO, CardioProgram, CardioWeek, "cardio_program_id"),
}


__all__ = [
    "CardioProgram",
    "CardioSession",
    "CardioWeek",
    "Exercise",
    "ExerciseAlias",
    "ExerciseDefinition",
    "PrescribedSet",
    "Program",
    "ProgramType",
    "SHELL_MODELS",
    "ShellModels",
    "ShellProgramMixin",
    "Week",
    "Workout",
    "new_id",
]
