"""Session provider interface."""

from typing import Protocol


class SessionProvider(Protocol):
    """Interface for whoever knows the signed-in user."""

    def current_user_id(self) -> str | None:
        """Stable id of the signed-in user, or None when signed out."""
        ...
