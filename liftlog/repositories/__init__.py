"""Repositories package."""
from liftlog.repositories.base import Repository
from liftlog.repositories.cardio_program_repository import CardioProgramRepository
from liftlog.repositories.exercise_definition_repository import ExerciseDefinitionRepository
from liftlog.repositories.program_repository import ProgramRepository
from liftlog.repositories.shell_program_repository import ShellProgramRepository

__all__ = [
    "Repository",
    "CardioProgramRepository",
    "ExerciseDefinitionRepository",
    "ProgramRepository",
    "ShellProgramRepository",
]
