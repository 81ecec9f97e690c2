"""
Minimal client for a Supabase table, talking to its PostgREST endpoint.

Only the two operations the seeder needs are implemented: a batched upsert
keyed on a conflict column, and an exact row count.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Iterable

import requests

logger = logging.getLogger(__name__)
if os.getenv("SEED_DEBUG"):
    logging.basicConfig(level=logging.INFO, format="%(message)s")

REQUEST_TIMEOUT = 30


class SupabaseError(Exception):
    """Raised when a request to the Supabase REST API fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SupabaseTable:
    """Client bound to a single table of a Supabase project."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str,
        session: requests.Session | None = None,
    ):
        self.url = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self.table = table
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "SupabaseTable":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, **kwargs) -> requests.Response:
        try:
            response = self.session.request(method, self.url, timeout=REQUEST_TIMEOUT, **kwargs)
        except requests.RequestException as exc:
            raise SupabaseError(f"{method} {self.table} failed: {exc}") from exc

        if response.status_code >= 400:
            raise SupabaseError(
                f"{method} {self.table} returned {response.status_code}: {_error_message(response)}",
                status_code=response.status_code,
            )
        return response

    def upsert(self, rows: Iterable[dict[str, Any]], on_conflict: str) -> None:
        """Insert ``rows``, overwriting existing rows that match on ``on_conflict``."""
        rows = list(rows)
        logger.info("POST %s (%d rows, on_conflict=%s)", self.url, len(rows), on_conflict)
        params = {"on_conflict": on_conflict}
        # PostgREST rejects a bulk body whose objects have different keys
        # unless the full column list is given.
        columns = unique_columns(rows)
        if columns:
            params["columns"] = ",".join(f'"{column}"' for column in columns)
        self._request(
            "POST",
            params=params,
            json=rows,
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    def count(self) -> int:
        """Return the exact number of rows in the table."""
        logger.info("HEAD %s (count=exact)", self.url)
        response = self._request(
            "HEAD",
            params={"select": "*"},
            headers={"Prefer": "count=exact"},
        )
        return parse_content_range_total(response.headers.get("Content-Range"))


def unique_columns(rows: Iterable[dict[str, Any]]) -> list[str]:
    """Return every key used across ``rows``, in first-seen order."""
    columns: dict[str, None] = {}
    for row in rows:
        columns.update(dict.fromkeys(row))
    return list(columns)


def parse_content_range_total(header: str | None) -> int:
    """Extract the total from a PostgREST ``Content-Range`` header.

    The header looks like ``0-99/250`` or ``*/0``.
    """
    if not header or "/" not in header:
        raise SupabaseError(f"Missing row count in Content-Range header: {header!r}")
    total = header.rsplit("/", 1)[1]
    if not total.isdigit():
        raise SupabaseError(f"Row count unavailable in Content-Range header: {header!r}")
    return int(total)


def _error_message(response: requests.Response) -> str:
    """Return the PostgREST error message, or the raw body when it isn't JSON."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or ""
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    return str(body)
