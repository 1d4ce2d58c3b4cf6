"""API routes for cardio programs."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.api.routes.dependencies import get_app_settings, get_current_user_id, get_db
from liftlog.config.settings import Settings
from liftlog.schemas.program import ArchivedProgramResponse, ArchivedProgramsResponse
from liftlog.services.program import ProgramService

router = APIRouter()


@router.get(
    "/programs/archived",
    response_model=ArchivedProgramsResponse,
    response_model_by_alias=True,
)
async def list_archived_programs(
    limit: int | None = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Most recently archived cardio programs first; limit is clamped to 1..20."""
    programs = await ProgramService(db, settings).list_archived_cardio(user_id, limit)
    return ArchivedProgramsResponse(
        programs=[
            ArchivedProgramResponse(
                id=p.id,
                name=p.name,
                description=p.description,
                archived_at=p.archived_at,
            )
            for p in programs
        ]
    )
