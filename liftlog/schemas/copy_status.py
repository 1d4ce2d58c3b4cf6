from liftlog.models.enums import ProgramType
from liftlog.schemas.base import CamelModel


class ProgressResponse(CamelModel):
    current_week: int
    total_weeks: int


class CopyStatusResponse(CamelModel):
    status: str
    program_type: ProgramType
    name: str
    progress: ProgressResponse | None = None
