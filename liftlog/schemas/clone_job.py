"""Clone job payload carried inside the queue message."""
from pydantic import AliasChoices, Field, field_validator, model_validator

from liftlog.models.enums import ProgramType
from liftlog.schemas.base import CamelModel


def _numbers_to_str(value):
    # Spreadsheet-sourced programs send reps/weight as bare numbers
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class PrescribedSetData(CamelModel):
    set_number: int
    reps: str
    weight: str | None = None
    rpe: float | None = None
    rir: int | None = None

    @field_validator("reps", "weight", mode="before")
    @classmethod
    def numbers_to_text(cls, value):
        return _numbers_to_str(value)


class ExerciseData(CamelModel):
    name: str = Field(min_length=1)
    exercise_definition_id: str | None = None
    order: int
    exercise_group: str | None = None
    notes: str | None = None
    prescribed_sets: list[PrescribedSetData] = Field(default_factory=list)


class WorkoutData(CamelModel):
    name: str
    day_number: int
    exercises: list[ExerciseData] = Field(default_factory=list)


class CardioSessionData(CamelModel):
    day_number: int
    name: str
    description: str | None = None
    target_duration: int
    intensity_zone: str | None = None
    equipment: str | None = None
    target_hr_range: str | None = Field(default=None, alias="targetHRRange")
    target_power_range: str | None = None
    interval_structure: str | None = None
    notes: str | None = None


class WeekData(CamelModel):
    week_number: int = Field(ge=1)
    workouts: list[WorkoutData] = Field(default_factory=list)
    sessions: list[CardioSessionData] = Field(default_factory=list)


class ProgramData(CamelModel):
    weeks: list[WeekData] = Field(default_factory=list)

    @field_validator("weeks")
    @classmethod
    def week_numbers_unique(cls, weeks: list[WeekData]) -> list[WeekData]:
        seen: set[int] = set()
        for week in weeks:
            if week.week_number in seen:
                raise ValueError(f"duplicate weekNumber {week.week_number}")
            seen.add(week.week_number)
        return weeks

    def ordered_weeks(self) -> list[WeekData]:
        return sorted(self.weeks, key=lambda w: w.week_number)


class CloneJob(CamelModel):
    program_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    program_type: ProgramType
    source_data: ProgramData | None = Field(
        default=None,
        validation_alias=AliasChoices("sourceData", "programData", "source_data"),
    )
    source_program_id: str | None = None

    @model_validator(mode="after")
    def require_source(self) -> "CloneJob":
        if self.source_data is None and not self.source_program_id:
            raise ValueError("either sourceData or sourceProgramId is required")
        return self
