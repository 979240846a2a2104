"""Decorators for MCP tool handlers.

Provides common functionality for MCP tool handlers:
- Capture session injection
- Query error formatting

Decorator Order:
    When combining decorators, apply in this order (outermost first):

        @handle_query_error      # Catches CaptureQueryError from the inner function
        @require_capture_session # Injects the active session before calling handler
        async def handler(session: CaptureSession, ...) -> str:
            ...
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TYPE_CHECKING, Concatenate, ParamSpec

from netsift.browser.session import CaptureSessionManager
from netsift.models import CaptureQueryError, ErrorCode

if TYPE_CHECKING:
    from netsift.browser.session import CaptureSession

logger = logging.getLogger(__name__)

P = ParamSpec("P")

NO_SESSION_MESSAGE = (
    f"Error [{ErrorCode.NO_SESSION.value}]: No active capture session. Use browser_navigate to open a page first."
)


def require_capture_session(
    func: Callable[Concatenate[CaptureSession, P], Awaitable[str]],
) -> Callable[P, Awaitable[str]]:
    """Decorator to inject the active capture session.

    If no session is active, returns an error message instead of
    calling the handler.

    Usage:
        @require_capture_session
        async def my_handler(session: CaptureSession, query: str) -> str:
            return await do_something(session.store, query)

    Args:
        func: The async function to wrap. Must accept CaptureSession as first argument.

    Returns:
        Wrapped function that resolves the session before calling the original.
    """

    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> str:
        session = CaptureSessionManager.get_active_session()
        if session is None:
            return NO_SESSION_MESSAGE
        return await func(session, *args, **kwargs)

    return wrapper


def handle_query_error(
    func: Callable[P, Awaitable[str]],
) -> Callable[P, Awaitable[str]]:
    """Decorator to catch and format CaptureQueryError exceptions.

    Other exceptions are propagated.

    Args:
        func: The async function to wrap.

    Returns:
        Wrapped function that turns CaptureQueryError into an error message.
    """

    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> str:
        try:
            return await func(*args, **kwargs)
        except CaptureQueryError as e:
            logger.info(
                "CaptureQueryError in %s: code=%s, message=%s",
                func.__name__,
                e.code.value,
                e.message,
            )
            return f"Error [{e.code.value}]: {e.message}"

    return wrapper
