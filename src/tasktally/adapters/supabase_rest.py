"""Supabase REST adapter - HTTP client for the tasks and notifications tables."""

import logging
from typing import Any, Iterable, Protocol

import requests

from tasktally.errors import StoreError
from tasktally.ports.record_store import Filter, Order

logger = logging.getLogger(__name__)

REST_PATH = "/rest/v1"


class TokenSource(Protocol):
    def access_token(self) -> str: ...


def encode_value(value: Any) -> str:
    """Render a filter value the way PostgREST expects it."""
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


def encode_filters(filters: Iterable[Filter]) -> list[tuple[str, str]]:
    params = []
    for f in filters:
        if f.op == "eq" and f.value is None:
            params.append((f.field, "is.null"))
        else:
            params.append((f.field, f"{f.op}.{encode_value(f.value)}"))
    return params


class SupabaseRecordStore:
    """
    Supabase (PostgREST) record store.

    Implements RecordStore protocol. Row-level security on the hosted
    tables scopes user sessions to their own rows; the reset job talks to
    it with the service key instead. No business logic - just I/O.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        auth: TokenSource | None = None,
        timeout: int = 30,
    ):
        if not url or not api_key:
            raise StoreError("Supabase URL and key must be configured in tally.conf")
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.auth = auth
        self.timeout = timeout
        self._session = requests.Session()

    def _headers(self) -> dict[str, str]:
        token = self.auth.access_token() if self.auth else self.api_key
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    def _request(
        self,
        method: str,
        table: str,
        params: list[tuple[str, str]] | None = None,
        body: dict | None = None,
    ) -> list[dict]:
        """Make authenticated REST request."""
        try:
            resp = self._session.request(
                method,
                f"{self.url}{REST_PATH}/{table}",
                params=params,
                json=body,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Supabase {method} {table} failed: {e}")
            raise StoreError(f"Could not reach Supabase: {e}") from e

        if resp.status_code >= 400:
            try:
                detail = resp.json().get("message", resp.text)
            except ValueError:
                detail = resp.text
            logger.error(f"Supabase {method} {table} returned {resp.status_code}: {detail}")
            raise StoreError(f"Supabase {method} {table} failed: {detail}")

        if not resp.content:
            return []
        return resp.json()

    def select(
        self,
        table: str,
        filters: Iterable[Filter] = (),
        order: Order | None = None,
    ) -> list[dict]:
        params = [("select", "*")] + encode_filters(filters)
        if order:
            direction = "desc" if order.descending else "asc"
            params.append(("order", f"{order.field}.{direction}"))
        return self._request("GET", table, params=params)

    def insert(self, table: str, record: dict) -> dict:
        # Let the database generate the primary key
        body = {k: v for k, v in record.items() if not (k == "id" and v is None)}
        rows = self._request("POST", table, body=body)
        if not rows:
            raise StoreError(f"Supabase insert into {table} returned no row")
        return rows[0]

    def update(self, table: str, patch: dict, filters: Iterable[Filter]) -> int:
        return len(self._request("PATCH", table, params=encode_filters(filters), body=patch))

    def delete(self, table: str, filters: Iterable[Filter]) -> int:
        return len(self._request("DELETE", table, params=encode_filters(filters)))
