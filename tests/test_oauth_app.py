"""Tests for the Google Calendar OAuth bootstrap app."""
import time
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from contentflow_core import google_oauth
from contentflow_core.api.oauth import create_app
from contentflow_core.config import Settings
from contentflow_core.connectors.calendar import CALENDAR_API_URL
from contentflow_core.token_store import TokenStore


@pytest.fixture
def tokens_file(tmp_path):
    return tmp_path / "google-tokens.json"


@pytest.fixture
def client(tokens_file):
    settings = Settings({
        "GOOGLE_CLIENT_ID": "client-id",
        "GOOGLE_CLIENT_SECRET": "client-secret",
        "GOOGLE_REDIRECT_URI": "http://localhost:3000/auth/google/callback",
        "GOOGLE_TOKENS_FILE": str(tokens_file),
    })
    return TestClient(create_app(settings))


def _issue_state(client):
    """Start the consent flow and return the state it expects back."""
    response = client.get("/auth", follow_redirects=False)
    return parse_qs(urlparse(response.headers["location"]).query)["state"][0]


class TestConsent:
    """Test the consent redirect and status endpoints."""

    def test_status(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["tokens_configured"] is False

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_auth_redirects_to_google(self, client):
        response = client.get("/auth", follow_redirects=False)
        assert response.status_code == 302

        location = urlparse(response.headers["location"])
        assert f"{location.scheme}://{location.netloc}{location.path}" == google_oauth.AUTH_URL
        params = parse_qs(location.query)
        assert params["access_type"] == ["offline"]
        assert params["prompt"] == ["consent"]
        assert params["scope"] == [" ".join(google_oauth.CALENDAR_SCOPES)]
        assert params["redirect_uri"] == ["http://localhost:3000/auth/google/callback"]
        assert params["state"][0]

    def test_each_redirect_gets_its_own_state(self, client):
        assert _issue_state(client) != _issue_state(client)


class TestCallback:
    """Test state checking and the authorization code exchange."""

    @pytest.fixture
    def exchange(self, monkeypatch):
        """Replace the blocking code exchange; records the codes it was given."""
        codes = []

        def _exchange(config, code):
            codes.append(code)
            return {
                "access_token": "ya29.token",
                "refresh_token": "1//refresh",
                "token_type": "Bearer",
                "expiry_date": 1_740_000_000_000,
            }

        monkeypatch.setattr(google_oauth, "exchange_code", _exchange)
        return codes

    def test_missing_code(self, client):
        response = client.get("/auth/google/callback", params={"state": _issue_state(client)})
        assert response.status_code == 400
        assert response.json()["detail"] == "Authorization code not received"

    def test_consent_denied(self, client):
        response = client.get("/auth/google/callback", params={"error": "access_denied"})
        assert response.status_code == 400
        assert "access_denied" in response.json()["detail"]

    @pytest.mark.parametrize("state", [None, "forged-state"])
    def test_unknown_state_is_rejected(self, client, tokens_file, exchange, state):
        _issue_state(client)
        params = {"code": "4/abc"}
        if state:
            params["state"] = state
        response = client.get("/auth/google/callback", params=params)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid OAuth state"
        assert exchange == []
        assert not tokens_file.exists()

    def test_state_is_single_use(self, client, exchange):
        state = _issue_state(client)
        assert client.get("/auth/google/callback", params={"code": "4/abc", "state": state}).status_code == 200

        replay = client.get("/auth/google/callback", params={"code": "4/abc", "state": state})
        assert replay.status_code == 400
        assert exchange == ["4/abc"]

    def test_code_exchange_saves_tokens(self, client, tokens_file, exchange):
        response = client.get("/auth/google/callback", params={"code": "4/abc", "state": _issue_state(client)})

        assert exchange == ["4/abc"]
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "authenticated"
        assert body["has_refresh_token"] is True
        assert body["expiry_date"] == 1_740_000_000_000
        # Tokens are never echoed back
        assert "ya29.token" not in response.text

        saved = TokenStore(tokens_file).load()
        assert saved["access_token"] == "ya29.token"
        assert saved["expiry_date"] == body["expiry_date"]

    def test_rejected_code(self, client, tokens_file, monkeypatch):
        def _rejected(config, code):
            raise google_oauth.TokenGrantError("Google code exchange rejected: Bad Request", 400)

        monkeypatch.setattr(google_oauth, "exchange_code", _rejected)
        response = client.get("/auth/google/callback", params={"code": "4/expired", "state": _issue_state(client)})

        assert response.status_code == 502
        assert "Bad Request" in response.json()["detail"]
        assert not tokens_file.exists()


class TestCalendarCheck:
    """Test the calendar connectivity check."""

    def test_without_tokens(self, client):
        response = client.get("/test-calendar")
        assert response.status_code == 401
        assert "re-authenticate" in response.json()["detail"]

    def test_with_tokens(self, client, tokens_file):
        TokenStore(tokens_file).save({
            "access_token": "ya29.token",
            "expiry_date": int(time.time() * 1000) + 3_600_000,
        })
        with respx.mock:
            respx.get(f"{CALENDAR_API_URL}/calendars/primary/events").mock(
                return_value=httpx.Response(200, json={"items": [{"id": "evt1", "summary": "Review"}]}),
            )
            response = client.get("/test-calendar")

        assert response.status_code == 200
        assert response.json()["event_count"] == 1
        assert response.json()["events"][0]["title"] == "Review"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
