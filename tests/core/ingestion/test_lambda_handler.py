"""
Tests for the Lambda handlers and their event and environment helpers.
"""

import json
import os
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from itinerary_pipeline.core.ingestion import lambda_handler
from itinerary_pipeline.core.ingestion.lambda_utils import (
    ConfigurationError,
    EventParseError,
    configure_secrets,
    parse_event,
    unwrap_event,
    validate_environment,
)
from itinerary_pipeline.models.events import (
    ChunkEvent,
    ChunkResult,
    FinalizeResult,
    IntakeEvent,
    IntakeMode,
    IntakeResult,
)


@pytest.fixture
def pipeline() -> MagicMock:
    """Provide a pipeline double returned by get_pipeline."""
    pipeline = MagicMock()
    with patch.object(lambda_handler, "get_pipeline", return_value=pipeline):
        yield pipeline


def _body(response: dict) -> dict:
    return json.loads(response["body"])


class TestHandlers:
    """Test suite for the phase handlers."""

    def test_intake_should_return_camel_case_result(self, pipeline: MagicMock) -> None:
        """Should return 200 with the intake result in store casing."""
        pipeline.intake.return_value = IntakeResult(
            job_id="1", itinerary_id="7", mode=IntakeMode.CREATE, total_images=3, total_videos=1, version=1
        )

        response = lambda_handler.intake_handler({"jobId": "1", "itrvlUrl": "https://portal.test/portal/k/i"}, None)

        assert response["statusCode"] == 200
        body = _body(response)
        assert body["success"] is True
        assert body["jobId"] == "1"
        assert body["itineraryId"] == "7"
        assert body["totalImages"] == 3
        assert body["mode"] == "create"
        parsed = pipeline.intake.call_args.args[0]
        assert parsed.source_url == "https://portal.test/portal/k/i"

    def test_chunk_handler_should_accept_http_envelope(self, pipeline: MagicMock) -> None:
        """Should decode a JSON string body."""
        pipeline.process_media.return_value = ChunkResult(
            job_id="1", itinerary_id="7", chunk_index=2, remaining=0, processed=4
        )
        event = {"body": json.dumps({"jobId": "1", "itineraryId": "7", "chunkIndex": 2, "processVideosOnly": True})}

        response = lambda_handler.image_processor_handler(event, None)

        assert response["statusCode"] == 200
        assert _body(response)["remaining"] == 0
        parsed = pipeline.process_media.call_args.args[0]
        assert parsed.process_videos_only is True
        assert parsed.chunk_index == 2

    def test_invalid_event_should_return_400(self, pipeline: MagicMock) -> None:
        """Should reject an event missing required fields without touching the pipeline."""
        response = lambda_handler.finalizer_handler({"jobId": "1"}, None)

        assert response["statusCode"] == 400
        body = _body(response)
        assert body["success"] is False
        assert body["error"] == "Invalid event"
        pipeline.finalize.assert_not_called()

    def test_phase_exception_should_return_500(self, pipeline: MagicMock) -> None:
        """Should report the exception type and message."""
        pipeline.finalize.side_effect = RuntimeError("store down")

        response = lambda_handler.finalizer_handler({"jobId": "1", "itineraryId": "7"}, None)

        assert response["statusCode"] == 500
        assert _body(response) == {"success": False, "error": "RuntimeError", "details": "store down"}

    def test_configuration_error_should_return_500(self) -> None:
        """Should surface missing configuration as a server error."""
        with patch.object(
            lambda_handler,
            "get_pipeline",
            side_effect=ConfigurationError("Missing required environment variables: MEDIA_BUCKET"),
        ):
            response = lambda_handler.finalizer_handler({"jobId": "1", "itineraryId": "7"}, None)

        assert response["statusCode"] == 500
        assert "MEDIA_BUCKET" in _body(response)["error"]

    def test_finalize_result_should_serialize(self, pipeline: MagicMock) -> None:
        """Should include final status and blockers in the body."""
        pipeline.finalize.return_value = FinalizeResult(
            job_id="1", itinerary_id="7", final_status="needs_attention", blockers=["No hero image selected"]
        )

        body = _body(lambda_handler.finalizer_handler({"jobId": "1", "itineraryId": "7"}, None))

        assert body["finalStatus"] == "needs_attention"
        assert body["blockers"] == ["No hero image selected"]


class TestEventParsing:
    """Test suite for event unwrapping and validation."""

    def test_bare_event_should_pass_through(self) -> None:
        """Should return an event without a body unchanged."""
        event = {"jobId": "1"}
        assert unwrap_event(event) is event

    def test_dict_body_should_be_returned(self) -> None:
        """Should accept an already decoded body."""
        assert unwrap_event({"body": {"jobId": "1"}}) == {"jobId": "1"}

    @pytest.mark.parametrize(
        "event",
        [
            "not-a-dict",
            {"body": ""},
            {"body": "{not json"},
            {"body": "[1, 2]"},
        ],
    )
    def test_malformed_event_should_raise(self, event) -> None:
        """Should reject malformed envelopes."""
        with pytest.raises(EventParseError):
            unwrap_event(event)

    def test_parse_event_should_wrap_validation_errors(self) -> None:
        """Should convert validation failures to EventParseError."""
        with pytest.raises(EventParseError, match="Invalid ChunkEvent"):
            parse_event({"jobId": "1"}, ChunkEvent)

    def test_parse_event_should_default_mode(self) -> None:
        """Should default intake mode to create."""
        event = parse_event({"jobId": "1", "sourceUrl": "https://portal.test/x"}, IntakeEvent)
        assert event.mode == IntakeMode.CREATE


class TestEnvironment:
    """Test suite for environment validation and secret loading."""

    def test_validate_environment_should_return_values(self, monkeypatch) -> None:
        """Should return every required variable."""
        monkeypatch.setenv("STORE_API_URL", "https://store.test/api")
        monkeypatch.setenv("MEDIA_BUCKET", "media-bucket")

        assert validate_environment() == {"STORE_API_URL": "https://store.test/api", "MEDIA_BUCKET": "media-bucket"}

    def test_validate_environment_should_list_missing(self, monkeypatch) -> None:
        """Should name every missing variable."""
        monkeypatch.delenv("STORE_API_URL", raising=False)
        monkeypatch.setenv("MEDIA_BUCKET", "")

        with pytest.raises(ConfigurationError, match="STORE_API_URL, MEDIA_BUCKET"):
            validate_environment()

    def test_configure_secrets_should_skip_when_key_present(self, monkeypatch) -> None:
        """Should not call Secrets Manager when the key is already set."""
        monkeypatch.setenv("STORE_API_KEY", "existing")
        monkeypatch.setenv("STORE_API_KEY_SECRET_ARN", "arn:secret")
        client = MagicMock()

        configure_secrets(client)

        client.get_secret_value.assert_not_called()

    @pytest.mark.parametrize(
        ("secret", "expected"),
        [
            ('{"api_key": "from-json"}', "from-json"),
            ("raw-key", "raw-key"),
        ],
    )
    def test_configure_secrets_should_export_key(self, monkeypatch, secret, expected) -> None:
        """Should set STORE_API_KEY from a JSON or raw secret string."""
        monkeypatch.setenv("STORE_API_KEY", "")
        monkeypatch.setenv("STORE_API_KEY_SECRET_ARN", "arn:secret")
        client = MagicMock()
        client.get_secret_value.return_value = {"SecretString": secret}

        configure_secrets(client)

        client.get_secret_value.assert_called_once_with(SecretId="arn:secret")
        assert os.environ["STORE_API_KEY"] == expected

    def test_configure_secrets_should_ignore_placeholder(self, monkeypatch) -> None:
        """Should leave the environment alone for the placeholder value."""
        monkeypatch.setenv("STORE_API_KEY", "")
        monkeypatch.setenv("STORE_API_KEY_SECRET_ARN", "arn:secret")
        client = MagicMock()
        client.get_secret_value.return_value = {"SecretString": "PLACEHOLDER_SET_VIA_CLI"}

        configure_secrets(client)

        assert os.environ["STORE_API_KEY"] == ""

    def test_configure_secrets_should_tolerate_client_error(self, monkeypatch) -> None:
        """Should log and continue when the secret cannot be fetched."""
        monkeypatch.setenv("STORE_API_KEY", "")
        monkeypatch.setenv("STORE_API_KEY_SECRET_ARN", "arn:secret")
        client = MagicMock()
        client.get_secret_value.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "denied"}}, "GetSecretValue"
        )

        configure_secrets(client)

        assert os.environ["STORE_API_KEY"] == ""
