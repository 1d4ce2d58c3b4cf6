from datetime import datetime

from liftlog.schemas.base import CamelModel


class ArchivedProgramResponse(CamelModel):
    id: str
    name: str
    description: str | None = None
    archived_at: datetime | None = None


class ArchivedProgramsResponse(CamelModel):
    programs: list[ArchivedProgramResponse]


class DeleteProgramResponse(CamelModel):
    success: bool = True
