"""
Document store REST client.

Thin synchronous client over the store's collection API
(``GET/POST /{collection}``, ``GET/PATCH /{collection}/{id}``). Transient
failures (5xx, network) are retried with exponential backoff; 4xx responses
are permanent and raised immediately.

Filters use the store's bracket query syntax, built from nested dicts:
``{"job": {"equals": "12"}}`` becomes ``where[job][equals]=12``.

Dependencies: httpx, tenacity
System role: Leaf dependency for every pipeline phase
"""

import logging
from typing import Any

import httpx
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from itinerary_pipeline.configs.store import StoreSettings, get_store_settings
from itinerary_pipeline.core.exceptions import (
    StoreRequestError,
    StoreUnavailableError,
    UniqueConstraintError,
)

logger = logging.getLogger(__name__)

_UNIQUE_MARKERS = ("unique", "duplicate", "already exists")


def build_where_params(where: dict[str, Any] | None, prefix: str = "where") -> list[tuple[str, str]]:
    """
    Flatten a nested filter into bracket-notation query parameters.

    Lists of dicts (``and``/``or`` clauses) are indexed; lists of scalars
    (``in``/``not_in`` operands) are comma-joined.

    Args:
        where: Nested filter dict
        prefix: Parameter prefix

    Returns:
        list of (name, value) pairs, in insertion order
    """
    params: list[tuple[str, str]] = []
    for key, value in (where or {}).items():
        name = f"{prefix}[{key}]"
        if isinstance(value, dict):
            params.extend(build_where_params(value, name))
        elif isinstance(value, (list, tuple)) and value and all(isinstance(v, dict) for v in value):
            for index, clause in enumerate(value):
                params.extend(build_where_params(clause, f"{name}[{index}]"))
        elif isinstance(value, (list, tuple)):
            params.append((name, ",".join(_format_scalar(v) for v in value)))
        else:
            params.append((name, _format_scalar(value)))
    return params


def _format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def _is_unique_violation(response: httpx.Response) -> bool:
    if response.status_code == 409:
        return True
    if response.status_code != 400:
        return False
    body = response.text.lower()
    return any(marker in body for marker in _UNIQUE_MARKERS)


class StoreClient:
    """
    Retrying client for the document store.

    Usage:
        client = StoreClient()
        docs = client.find("image-statuses", {"job": {"equals": job_id}})["docs"]
    """

    def __init__(
        self,
        settings: StoreSettings | None = None,
        http_client: httpx.Client | None = None,
        wait: wait_base | None = None,
    ) -> None:
        """
        Initialize the store client.

        Args:
            settings: Store settings (defaults to environment settings)
            http_client: Preconfigured httpx client (tests pass a MockTransport client)
            wait: Override for the retry backoff strategy
        """
        self._settings = settings or get_store_settings()
        self._http = http_client or httpx.Client(
            base_url=self._settings.api_url.rstrip("/"),
            timeout=self._settings.timeout_seconds,
        )
        self._headers = {"Content-Type": "application/json"}
        if self._settings.api_key:
            self._headers["Authorization"] = f"users API-Key {self._settings.api_key}"
        self._retrying = Retrying(
            retry=retry_if_exception_type(StoreUnavailableError),
            stop=stop_after_attempt(self._settings.max_attempts),
            wait=wait
            or wait_exponential(
                multiplier=self._settings.backoff_initial,
                max=self._settings.backoff_max,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _send(
        self,
        method: str,
        path: str,
        collection: str,
        params: list[tuple[str, str]] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            response = self._http.request(
                method, path, params=params, json=body, headers=self._headers
            )
        except httpx.TransportError as e:
            raise StoreUnavailableError(
                f"{method} {path} failed: {type(e).__name__}: {e}",
                collection=collection,
            ) from e

        if response.status_code >= 500:
            raise StoreUnavailableError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
                collection=collection,
                details={"body": response.text[:500]},
            )
        if response.status_code >= 400:
            error_cls = UniqueConstraintError if _is_unique_violation(response) else StoreRequestError
            raise error_cls(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
                collection=collection,
                details={"body": response.text[:500]},
            )
        if not response.content:
            return {}
        return response.json()

    def request(
        self,
        method: str,
        path: str,
        collection: str,
        params: list[tuple[str, str]] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Send a request, retrying transient failures.

        Raises:
            StoreUnavailableError: 5xx or network failure after all attempts
            UniqueConstraintError: Create rejected by a unique field
            StoreRequestError: Any other 4xx response
        """
        return self._retrying(self._send, method, path, collection, params, body)

    # ------------------------------------------------------------------
    # Collection operations
    # ------------------------------------------------------------------

    def find(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        limit: int = 100,
        depth: int = 0,
        sort: str | None = None,
        page: int | None = None,
    ) -> dict[str, Any]:
        """
        Query a collection.

        Args:
            collection: Collection slug
            where: Nested filter dict
            limit: Maximum documents returned
            depth: Relationship population depth
            sort: Optional sort field (prefix with '-' for descending)
            page: 1-based page number

        Returns:
            dict with ``docs``, ``totalDocs`` and ``hasNextPage``
        """
        params = build_where_params(where)
        params.append(("limit", str(limit)))
        params.append(("depth", str(depth)))
        if sort:
            params.append(("sort", sort))
        if page:
            params.append(("page", str(page)))
        data = self.request("GET", f"/{collection}", collection, params=params)
        return {
            "docs": data.get("docs", []),
            "totalDocs": data.get("totalDocs", 0),
            "hasNextPage": bool(data.get("hasNextPage", False)),
        }

    def find_one(self, collection: str, where: dict[str, Any]) -> dict[str, Any] | None:
        """Return the first document matching ``where`` or None."""
        docs = self.find(collection, where, limit=1)["docs"]
        return docs[0] if docs else None

    def count(self, collection: str, where: dict[str, Any] | None = None) -> int:
        """Return the number of documents matching ``where``."""
        return int(self.find(collection, where, limit=1)["totalDocs"])

    def get_by_id(self, collection: str, doc_id: str, depth: int = 0) -> dict[str, Any] | None:
        """
        Fetch one document by id.

        Returns:
            The document, or None when the store answers 404
        """
        try:
            return self.request(
                "GET", f"/{collection}/{doc_id}", collection, params=[("depth", str(depth))]
            )
        except StoreRequestError as e:
            if e.status_code == 404:
                return None
            raise

    def create(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create a document and return it."""
        result = self.request("POST", f"/{collection}", collection, body=data)
        return result.get("doc", result)

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Patch a document and return the updated version."""
        result = self.request("PATCH", f"/{collection}/{doc_id}", collection, body=data)
        return result.get("doc", result)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "StoreClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
