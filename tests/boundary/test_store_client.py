"""
Tests for the document store REST client.

Uses httpx.MockTransport so no network is involved.
"""

import json

import httpx
import pytest
from tenacity import wait_none

from itinerary_pipeline.boundary.store.store_client import StoreClient, build_where_params
from itinerary_pipeline.configs.store import StoreSettings
from itinerary_pipeline.core.exceptions import (
    StoreRequestError,
    StoreUnavailableError,
    UniqueConstraintError,
)


def make_client(handler, settings: StoreSettings) -> StoreClient:
    http = httpx.Client(transport=httpx.MockTransport(handler), base_url=settings.api_url)
    return StoreClient(settings=settings, http_client=http, wait=wait_none())


class TestBuildWhereParams:
    """Test suite for bracket query parameter flattening."""

    def test_nested_operator_should_render_brackets(self) -> None:
        """Should turn nested dicts into bracket names."""
        params = build_where_params({"job": {"equals": 12}})

        assert params == [("where[job][equals]", "12")]

    def test_and_clauses_should_be_indexed(self) -> None:
        """Should index each clause of a list of dicts."""
        params = build_where_params(
            {"and": [{"job": {"equals": "1"}}, {"status": {"equals": "pending"}}]}
        )

        assert params == [
            ("where[and][0][job][equals]", "1"),
            ("where[and][1][status][equals]", "pending"),
        ]

    def test_scalar_lists_should_be_comma_joined(self) -> None:
        """Should comma-join scalar list operands."""
        params = build_where_params({"status": {"in": ["complete", "skipped"]}})

        assert params == [("where[status][in]", "complete,skipped")]

    def test_booleans_and_none_should_use_literals(self) -> None:
        """Should render booleans lowercase and None as null."""
        params = build_where_params({"read": {"equals": False}, "job": {"exists": None}})

        assert ("where[read][equals]", "false") in params
        assert ("where[job][exists]", "null") in params

    def test_empty_filter_should_produce_no_params(self) -> None:
        """Should return an empty list for no filter."""
        assert build_where_params(None) == []


class TestStoreClient:
    """Test suite for StoreClient request handling."""

    def test_find_should_send_filter_and_auth_header(self, store_settings: StoreSettings) -> None:
        """Should send bracket filters, limit, and the API key header."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(
                200, json={"docs": [{"id": "1"}], "totalDocs": 1, "hasNextPage": False}
            )

        client = make_client(handler, store_settings)

        result = client.find("image-statuses", {"job": {"equals": "7"}}, limit=5)

        assert result == {"docs": [{"id": "1"}], "totalDocs": 1, "hasNextPage": False}
        assert seen["url"].path == "/api/image-statuses"
        assert seen["url"].params["where[job][equals]"] == "7"
        assert seen["url"].params["limit"] == "5"
        assert seen["auth"] == "users API-Key test-key"

    def test_server_error_should_be_retried(self, store_settings: StoreSettings) -> None:
        """Should retry 5xx responses until one succeeds."""
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            if len(attempts) < 3:
                return httpx.Response(503, text="busy")
            return httpx.Response(200, json={"doc": {"id": "9", "status": "pending"}})

        client = make_client(handler, store_settings)

        doc = client.create("image-statuses", {"status": "pending"})

        assert len(attempts) == 3
        assert doc == {"id": "9", "status": "pending"}

    def test_persistent_server_error_should_surface_unavailable(self, store_settings: StoreSettings) -> None:
        """Should raise StoreUnavailableError after the last attempt."""
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            return httpx.Response(502, text="bad gateway")

        client = make_client(handler, store_settings)

        with pytest.raises(StoreUnavailableError) as exc_info:
            client.count("media")

        assert len(attempts) == store_settings.max_attempts
        assert exc_info.value.status_code == 502

    def test_network_error_should_be_retried(self, store_settings: StoreSettings) -> None:
        """Should treat transport failures as transient."""
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            if len(attempts) == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json={"docs": [], "totalDocs": 4, "hasNextPage": False})

        client = make_client(handler, store_settings)

        assert client.count("media") == 4
        assert len(attempts) == 2

    def test_client_error_should_not_be_retried(self, store_settings: StoreSettings) -> None:
        """Should raise StoreRequestError immediately on a 4xx."""
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            return httpx.Response(403, text="forbidden")

        client = make_client(handler, store_settings)

        with pytest.raises(StoreRequestError) as exc_info:
            client.update("itineraries", "3", {"title": "x"})

        assert len(attempts) == 1
        assert not isinstance(exc_info.value, UniqueConstraintError)
        assert exc_info.value.collection == "itineraries"

    @pytest.mark.parametrize(
        "status, body",
        [
            (409, "conflict"),
            (400, '{"errors":[{"message":"Value must be unique"}]}'),
            (400, "duplicate key value violates constraint"),
        ],
    )
    def test_unique_violation_should_be_detected(
        self, store_settings: StoreSettings, status: int, body: str
    ) -> None:
        """Should map conflicts and uniqueness messages to UniqueConstraintError."""
        client = make_client(lambda request: httpx.Response(status, text=body), store_settings)

        with pytest.raises(UniqueConstraintError):
            client.create("media", {"sourceS3Key": "a.jpg"})

    def test_get_by_id_should_return_none_on_404(self, store_settings: StoreSettings) -> None:
        """Should return None for a missing document."""
        client = make_client(lambda request: httpx.Response(404, text="not found"), store_settings)

        assert client.get_by_id("itinerary-jobs", "missing") is None

    def test_update_should_send_json_patch(self, store_settings: StoreSettings) -> None:
        """Should PATCH the document path with a JSON body."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"doc": {"id": "5", "status": "failed"}})

        client = make_client(handler, store_settings)

        doc = client.update("itinerary-jobs", "5", {"status": "failed"})

        assert seen == {
            "method": "PATCH",
            "path": "/api/itinerary-jobs/5",
            "body": {"status": "failed"},
        }
        assert doc["status"] == "failed"
