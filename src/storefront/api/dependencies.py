"""Request-scoped dependencies for the Storefront API."""

from fastapi import Header

from storefront.session import SessionContext


def session_context(
    x_session_id: str = Header(),
    x_user_id: str | None = Header(default=None),
    x_staff: bool = Header(default=False),
) -> SessionContext:
    """Build the caller's session from the ``X-Session-Id``, ``X-User-Id`` and ``X-Staff`` headers."""
    return SessionContext(session_id=x_session_id, user_id=x_user_id or None, is_staff=x_staff)
