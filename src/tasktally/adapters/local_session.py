"""Local session adapter for the file backend."""


class LocalSession:
    """
    Fixed single-user session.

    Implements SessionProvider protocol. An empty user id means signed out.
    """

    def __init__(self, user_id: str | None):
        self.user_id = user_id or None

    def current_user_id(self) -> str | None:
        return self.user_id
