"""
Error sanitization tests — verify generic error messages prevent information leakage.
Unexpected exceptions must surface as a plain-text 500 with no internal details.
"""

from collections.abc import Generator
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api.routes.rate_routes import get_today
from domain.constants import DEFAULT_LANGUAGE, GENERIC_ERROR_MESSAGE
from i18n import t
from infrastructure.providers import get_rate_source
from logging_config import request_id_var
from main import app
from tests.conftest import FIXED_TODAY, FakeRateSource


@pytest.fixture()
def lenient_client() -> Generator[TestClient, None, None]:
    """TestClient that returns 500 responses instead of re-raising server errors."""
    app.dependency_overrides[get_rate_source] = lambda: FakeRateSource()
    app.dependency_overrides[get_today] = lambda: FIXED_TODAY

    with TestClient(app, raise_server_exceptions=False) as c:
        yield c

    app.dependency_overrides.clear()


def test_conversion_exception_sanitized(lenient_client):
    """Conversion endpoint returns generic error on exception (no leak)."""
    # Arrange
    with patch("api.routes.rate_routes.convert") as mock_convert:
        mock_convert.side_effect = RuntimeError("disk cache corrupted - secret info")

        # Act
        response = lenient_client.get("/", params={"from": "USD", "to": "CNY"})

    # Assert
    assert response.status_code == 500
    assert response.text == t(GENERIC_ERROR_MESSAGE, lang=DEFAULT_LANGUAGE)
    assert "secret info" not in response.text
    assert response.headers["access-control-allow-origin"] == "*"


def test_history_exception_sanitized(lenient_client):
    """History endpoint returns generic error on exception (no leak)."""
    # Arrange
    with patch("api.routes.rate_routes.run_history") as mock_run:
        mock_run.side_effect = KeyError("rates")

        # Act
        response = lenient_client.get("/history", params={"from": "USD", "to": "CNY"})

    # Assert
    assert response.status_code == 500
    assert "rates" not in response.text
    assert response.text == t(GENERIC_ERROR_MESSAGE, lang=DEFAULT_LANGUAGE)


def test_generic_error_follows_requested_language(lenient_client):
    # Arrange
    with patch("api.routes.rate_routes.convert") as mock_convert:
        mock_convert.side_effect = RuntimeError("boom")

        # Act
        response = lenient_client.get("/", params={"from": "USD", "to": "CNY", "lang": "en"})

    # Assert
    assert response.status_code == 500
    assert response.text == t(GENERIC_ERROR_MESSAGE, lang="en")


def test_unexpected_error_keeps_request_id(lenient_client):
    """The 500 response echoes X-Request-ID and the traceback is logged under that id."""
    # Arrange
    logged_ids: list[str] = []
    with (
        patch("api.routes.rate_routes.convert") as mock_convert,
        patch("main.logger") as mock_logger,
    ):
        mock_convert.side_effect = RuntimeError("boom")
        mock_logger.exception.side_effect = lambda *_a, **_k: logged_ids.append(
            request_id_var.get()
        )

        # Act
        response = lenient_client.get(
            "/", params={"from": "USD", "to": "CNY"}, headers={"X-Request-ID": "abc123"}
        )

    # Assert
    assert response.status_code == 500
    assert response.headers["x-request-id"] == "abc123"
    assert logged_ids == ["abc123"]


def test_unexpected_error_generates_request_id_when_absent(lenient_client):
    # Arrange
    with patch("api.routes.rate_routes.run_history") as mock_run:
        mock_run.side_effect = RuntimeError("boom")

        # Act
        response = lenient_client.get("/history", params={"from": "USD", "to": "CNY"})

    # Assert
    assert response.status_code == 500
    assert response.headers.get("x-request-id")
