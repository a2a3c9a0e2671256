"""Supabase auth adapter - password sign-in with token refresh."""

import logging
import time

import requests

from tasktally.config import Config, Session, load_config
from tasktally.errors import AuthenticationError

logger = logging.getLogger(__name__)

AUTH_PATH = "/auth/v1"
TIMEOUT = 30


class SupabaseAuth:
    """
    Supabase GoTrue auth adapter.

    Implements SessionProvider protocol and hands fresh access tokens to
    SupabaseRecordStore.
    """

    def __init__(self, config: Config | None = None, session: Session | None = None):
        self.config = config or load_config()
        self.session = session or Session.load()
        self._http = requests.Session()

    def _auth_url(self, endpoint: str) -> str:
        return f"{self.config.supabase_url}{AUTH_PATH}{endpoint}"

    def _post_token(self, grant_type: str, body: dict, action: str) -> dict:
        try:
            resp = self._http.post(
                self._auth_url("/token"),
                params={"grant_type": grant_type},
                json=body,
                headers={"apikey": self.config.supabase_anon_key},
                timeout=TIMEOUT,
            )
        except requests.RequestException as e:
            raise AuthenticationError(f"{action} failed: {e}") from e
        if resp.status_code != 200:
            raise AuthenticationError(f"{action} failed: {resp.text}")
        return resp.json()

    def _store_response(self, data: dict) -> None:
        self.session.access_token = data["access_token"]
        if data.get("refresh_token"):
            self.session.refresh_token = data["refresh_token"]
        self.session.expires_at = int(time.time()) + data.get("expires_in", 3600)
        user = data.get("user") or {}
        if user.get("id"):
            self.session.user_id = user["id"]
        self.session.save()

    def sign_in(self, email: str, password: str) -> Session:
        """Exchange email and password for a session."""
        if not self.config.supabase_url or not self.config.supabase_anon_key:
            raise AuthenticationError("Missing Supabase credentials. Add them to config/tally.conf")

        data = self._post_token("password", {"email": email, "password": password}, "Sign-in")
        self._store_response(data)
        return self.session

    def _refresh_token(self) -> None:
        """Refresh the access token."""
        if not self.session.refresh_token:
            raise AuthenticationError("No refresh token. Run 'tally login' first.")

        data = self._post_token("refresh_token", {"refresh_token": self.session.refresh_token}, "Token refresh")
        self._store_response(data)

    def access_token(self) -> str:
        """Current access token, refreshed if expired or expiring soon."""
        if not self.session.access_token:
            raise AuthenticationError("Not signed in. Run 'tally login' first.")

        # Refresh if expiring within 5 minutes
        if self.session.expires_at and time.time() >= self.session.expires_at - 300:
            self._refresh_token()
        return self.session.access_token

    def current_user_id(self) -> str | None:
        if not self.session.access_token or not self.session.user_id:
            return None
        return self.session.user_id

    def sign_out(self) -> None:
        """Revoke the session remotely (best effort) and forget it locally."""
        if self.session.access_token:
            try:
                self._http.post(
                    self._auth_url("/logout"),
                    headers={
                        "apikey": self.config.supabase_anon_key,
                        "Authorization": f"Bearer {self.session.access_token}",
                    },
                    timeout=TIMEOUT,
                )
            except requests.RequestException as e:
                logger.warning(f"Remote sign-out failed, clearing local session anyway: {e}")
        self.session = Session()
        Session.clear()
