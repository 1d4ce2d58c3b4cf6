"""API routes for strength and cardio programs."""
from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.api.routes.dependencies import get_app_settings, get_current_user_id, get_db
from liftlog.config.settings import Settings
from liftlog.schemas.copy_status import CopyStatusResponse, ProgressResponse
from liftlog.schemas.program import DeleteProgramResponse
from liftlog.services.copy_status import CopyStatusReporter
from liftlog.services.program import ProgramService

router = APIRouter()


@router.get(
    "/{program_id}/copy-status",
    response_model=CopyStatusResponse,
    response_model_by_alias=True,
)
async def get_copy_status(
    program_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Poll the clone progress of a program.

    Stale clone jobs are fixed up on the way: promoted to ``ready`` when
    weeks exist, otherwise deleted and reported as not found.
    """
    reporter = CopyStatusReporter(
        db, stuck_threshold=timedelta(seconds=settings.stuck_clone_threshold_seconds)
    )
    report = await reporter.report(program_id, user_id)
    progress = None
    if report.progress is not None:
        progress = ProgressResponse(
            current_week=report.progress.current_week,
            total_weeks=report.progress.total_weeks,
        )
    return CopyStatusResponse(
        status=report.status,
        program_type=report.program_type,
        name=report.name,
        progress=progress,
    )


@router.delete("/{program_id}", response_model=DeleteProgramResponse, response_model_by_alias=True)
async def delete_program(
    program_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    await ProgramService(db, settings).delete_program(program_id, user_id)
    return DeleteProgramResponse()
