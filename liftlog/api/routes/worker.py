"""Push endpoint of the clone worker.

Responses are plain text. The push transport redelivers on any non-2xx
response, so only failures that could succeed on retry get a 500; malformed
messages and jobs whose shell or source program is gone get a 400.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from liftlog.api.routes.dependencies import get_app_settings, get_session_maker
from liftlog.config.settings import Settings
from liftlog.core.exceptions import DecodeError, ValidationError
from liftlog.core.logging import get_logger
from liftlog.core.metrics import track_invalid_message
from liftlog.services.clone_job_decoder import decode_push_payload
from liftlog.services.clone_worker import is_terminal, run_clone_job

logger = get_logger(__name__)
router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def worker_health():
    return "OK"


@router.post("/", response_class=PlainTextResponse)
async def handle_push(
    request: Request,
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_session_maker),
    settings: Settings = Depends(get_app_settings),
):
    body = await request.body()
    try:
        job = decode_push_payload(body)
    except (DecodeError, ValidationError) as e:
        logger.warning("clone_message_rejected", code=e.code, error=e.message)
        track_invalid_message(e.code)
        return PlainTextResponse(f"Bad Request: {e.message}", status_code=400)

    try:
        await run_clone_job(job, session_maker, settings)
    except Exception as e:
        if is_terminal(e):
            return PlainTextResponse(f"Bad Request: {e}", status_code=400)
        return PlainTextResponse("Error processing clone job", status_code=500)

    return PlainTextResponse("OK")
