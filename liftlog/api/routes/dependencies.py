"""Shared dependencies for API routes."""
from typing import AsyncIterator

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from liftlog.config.settings import Settings
from liftlog.core.exceptions import AuthenticationError
from liftlog.security import verify_token


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_maker(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.session_maker


async def get_db(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_session_maker),
) -> AsyncIterator[AsyncSession]:
    """Request-scoped session, committed on success and rolled back on error."""
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_current_user_id(
    authorization: str | None = Header(None, alias="Authorization"),
    settings: Settings = Depends(get_app_settings),
) -> str:
    """Get the caller's user ID from the auth provider's bearer token.

    Raises:
        AuthenticationError: header missing, malformed, or token invalid
    """
    if not authorization:
        raise AuthenticationError("No authorization header provided")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError("Invalid authorization header format")
    if scheme.lower() != "bearer":
        raise AuthenticationError("Invalid authentication scheme")

    user_id = verify_token(token, settings)

    if user_id is None:
        raise AuthenticationError("Invalid or expired token")

    return user_id
