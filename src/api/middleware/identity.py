# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Gateway identity middleware.

Credentials are verified by the upstream gateway. This middleware only
reads the identity headers the gateway forwards and populates
request.state.user with them. It also binds request_id and user_id to the
structlog context for the duration of the request.

Example:
    # Request forwarded by the gateway
    POST /api/v1/practice/submissions
    X-User-Id: 3f0c...
    X-User-Type: student
"""

import logging
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"
USER_TYPE_HEADER = "X-User-Type"
REQUEST_ID_HEADER = "X-Request-ID"

USER_TYPES = frozenset({"student", "admin"})


class CurrentUser:
    """Caller identity as forwarded by the gateway.

    Attributes:
        id: Student or administrator ID.
        user_type: Either "student" or "admin".
    """

    def __init__(self, user_id: str, user_type: str) -> None:
        self.id = user_id
        self.user_type = user_type

    @property
    def is_student(self) -> bool:
        """Check if user is a student."""
        return self.user_type == "student"

    @property
    def is_admin(self) -> bool:
        """Check if user is an administrator."""
        return self.user_type == "admin"


class IdentityMiddleware(BaseHTTPMiddleware):
    """Populates request.state.user from gateway headers.

    Requests without headers, or with an unknown user type, continue with
    request.state.user = None; endpoints decide whether that is acceptable.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        """Attach identity and logging context, then process the request.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler.

        Returns:
            HTTP response carrying the request ID header.
        """
        request.state.user = None

        user_id = request.headers.get(USER_ID_HEADER, "").strip()
        user_type = request.headers.get(USER_TYPE_HEADER, "").strip().lower()
        if user_id and user_type in USER_TYPES:
            request.state.user = CurrentUser(user_id, user_type)
        elif user_id:
            logger.debug("Ignoring identity with unknown user type: %s", user_type)

        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        clear_context()
        bind_context(request_id=request_id, user_id=user_id or None)

        try:
            response = await call_next(request)
        finally:
            clear_context()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def get_current_user(request: Request) -> CurrentUser | None:
    """Get current user from request state.

    Args:
        request: HTTP request with state.

    Returns:
        CurrentUser or None if the gateway sent no identity.
    """
    return getattr(request.state, "user", None)
