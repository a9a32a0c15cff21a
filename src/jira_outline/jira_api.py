from __future__ import annotations
import logging
from typing import Iterable

import httpx

from .config import DEFAULT_FIELDS, DEFAULT_JQL, SEARCH_PATH, Settings
from .errors import NetworkError, ParseError

log = logging.getLogger(__name__)


class JiraClient:
    def __init__(self, settings: Settings, client: httpx.Client | None = None) -> None:
        self.settings = settings
        self._owns_client = client is None
        self.client = client or settings.build_client()

    # lifecycle
    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "JiraClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # API
    def search_raw(
        self,
        *,
        jql: str = DEFAULT_JQL,
        fields: Iterable[str] = DEFAULT_FIELDS,
    ) -> dict:
        """
        One GET /rest/api/2/search with jql and a comma-joined field list.
        Returns the decoded response body. The status code is only logged,
        a Jira error body surfaces as a ParseError in search().
        """
        params = {"jql": jql, "fields": ",".join(fields)}
        try:
            r = self.client.get(SEARCH_PATH, params=params)
        except httpx.TransportError as e:
            raise NetworkError(f"Jira /search request failed: {e}") from e

        log.debug("Search response", extra={"status_code": r.status_code, "url": str(r.request.url)})
        if r.status_code >= 400:
            log.warning("Jira /search returned an error status", extra={"status_code": r.status_code})

        try:
            return r.json()
        except ValueError as e:
            raise ParseError(
                f"Jira /search returned {r.status_code} with a non-JSON body: {r.text[:200]!r}"
            ) from e

    def search(
        self,
        *,
        jql: str = DEFAULT_JQL,
        fields: Iterable[str] = DEFAULT_FIELDS,
    ) -> list[dict]:
        data = self.search_raw(jql=jql, fields=fields)
        issues = data.get("issues") if isinstance(data, dict) else None
        if not isinstance(issues, list):
            errors = data.get("errorMessages") if isinstance(data, dict) else None
            raise ParseError(f"Jira /search response has no 'issues' list (errors: {errors or 'n/a'})")
        log.info("Search done", extra={"count": len(issues), "total": data.get("total")})
        return issues


__all__ = [
    "JiraClient",
    "SEARCH_PATH",
    "DEFAULT_JQL",
    "DEFAULT_FIELDS",
]
