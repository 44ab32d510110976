"""Tests for reCAPTCHA verification."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from ctrlaltvibe.app.config import RecaptchaConfig
from ctrlaltvibe.infra.recaptcha import RecaptchaVerifier


def _config(**overrides) -> RecaptchaConfig:
    values = {"secret_key": "secret", "min_score": 0.5}
    values.update(overrides)
    return RecaptchaConfig(**values)


@pytest.fixture
def mock_http():
    """Patch httpx.AsyncClient inside the verifier; yields the client mock."""
    client = MagicMock()
    client.post = AsyncMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    with patch("ctrlaltvibe.infra.recaptcha.httpx.AsyncClient", return_value=client):
        yield client


def _response(payload: dict) -> MagicMock:
    resp = MagicMock()
    resp.raise_for_status = MagicMock()
    resp.json = MagicMock(return_value=payload)
    return resp


class TestRecaptchaVerifier:
    """RecaptchaVerifier.verify() tests."""

    async def test_bypass_token(self, mock_http) -> None:
        """Logged-in clients' fixed token skips the remote call."""
        verifier = RecaptchaVerifier(_config(secret_key=None))
        assert await verifier.verify("authenticated-user-token") is True
        mock_http.post.assert_not_called()

    async def test_missing_secret(self, mock_http) -> None:
        verifier = RecaptchaVerifier(_config(secret_key=None))
        assert await verifier.verify("token") is False
        mock_http.post.assert_not_called()

    async def test_success(self, mock_http) -> None:
        mock_http.post.return_value = _response({"success": True, "score": 0.9})
        assert await RecaptchaVerifier(_config()).verify("token") is True

        _, kwargs = mock_http.post.call_args
        assert kwargs["data"] == {"secret": "secret", "response": "token"}

    async def test_low_score(self, mock_http) -> None:
        mock_http.post.return_value = _response({"success": True, "score": 0.3})
        assert await RecaptchaVerifier(_config()).verify("token") is False

    async def test_unsuccessful(self, mock_http) -> None:
        mock_http.post.return_value = _response({"success": False, "score": 0.9})
        assert await RecaptchaVerifier(_config()).verify("token") is False

    async def test_transport_error(self, mock_http) -> None:
        """Network failures count as a failed verification."""
        mock_http.post.side_effect = httpx.ConnectError("down")
        assert await RecaptchaVerifier(_config()).verify("token") is False
