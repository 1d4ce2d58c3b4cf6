import asyncio
from functools import wraps
from typing import Awaitable, Callable, ParamSpec, TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.exceptions import TransientDatastoreError

P = ParamSpec('P')
T = TypeVar('T')


async def run_in_transaction(
    session: AsyncSession,
    work: Callable[[], Awaitable[T]],
    *,
    timeout: float | None = None,
) -> T:
    """Run ``work`` inside ``session.begin()``, committing on success.

    The whole transaction, commit included, is bounded by ``timeout`` seconds.
    Timeouts and connection-level failures surface as TransientDatastoreError
    after the transaction has been rolled back.
    """
    try:
        async with asyncio.timeout(timeout):
            async with session.begin():
                return await work()
    except TimeoutError as e:
        raise TransientDatastoreError(
            f"Transaction exceeded {timeout}s timeout",
            code="DS_TIMEOUT",
            details={"timeout_seconds": timeout},
        ) from e
    except OperationalError as e:
        raise TransientDatastoreError(str(e.orig or e), code="DS_OPERATIONAL") from e
    except DBAPIError as e:
        if e.connection_invalidated:
            raise TransientDatastoreError(str(e.orig or e), code="DS_CONNECTION") from e
        raise


def transactional(
    *,
    timeout: float | None = None,
):
    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            session = _extract_session(args, kwargs)
            return await run_in_transaction(
                session, lambda: func(*args, **kwargs), timeout=timeout
            )
        return wrapper
    return decorator


def _extract_session(args, kwargs) -> AsyncSession:
    if args and isinstance(args[0], AsyncSession):
        return args[0]
    if 'db' in kwargs:
        return kwargs['db']
    if 'session' in kwargs:
        return kwargs['session']
    if args and hasattr(args[0], '_session') and isinstance(args[0]._session, AsyncSession):
        return args[0]._session
    raise ValueError("No session found in function arguments")
