"""Session context passed explicitly into every cart and checkout call."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionContext:
    """Who is calling: an anonymous session token and, when signed in, a user id.

    The session id is a client-generated opaque credential. It is never
    validated here beyond ownership of the cart rows it keys.
    """

    session_id: str
    user_id: str | None = None
    is_staff: bool = False

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    @property
    def owner_key(self) -> str:
        """Namespace for objects this caller owns: user id when signed in, else session id."""
        return self.user_id or self.session_id
