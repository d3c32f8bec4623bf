"""Tests for the Google OAuth helpers and token document conversion."""
from datetime import datetime
from urllib.parse import parse_qs, urlparse

import pytest
from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from oauthlib.oauth2.rfc6749.errors import InvalidGrantError

from contentflow_core import google_oauth


class TestConsentUrl:

    def test_state_is_returned_and_embedded(self, calendar_config):
        url, state = google_oauth.build_consent_url(calendar_config)

        params = parse_qs(urlparse(url).query)
        assert params["state"] == [state]
        assert params["client_id"] == ["client-id"]
        assert params["response_type"] == ["code"]
        # Callback runs on a fresh Flow, so no PKCE challenge is sent
        assert "code_challenge" not in params


class TestTokenConversion:
    """Test mapping between the token file and google-auth Credentials."""

    def test_expiry_round_trip(self, calendar_config):
        credentials = google_oauth.credentials_from_tokens(
            calendar_config, {"access_token": "a", "refresh_token": "r", "expiry_date": 1_740_787_200_000},
        )

        assert credentials.token == "a"
        assert credentials.refresh_token == "r"
        assert credentials.expiry == datetime(2025, 3, 1)
        assert credentials.client_id == "client-id"
        assert google_oauth.tokens_from_credentials(credentials)["expiry_date"] == 1_740_787_200_000

    def test_missing_expiry_never_expires(self, calendar_config):
        credentials = google_oauth.credentials_from_tokens(calendar_config, {"access_token": "a"})
        assert credentials.expiry is None
        assert not credentials.expired

    @pytest.mark.parametrize("tokens, field", [
        ({}, "access_token"),
        ({"access_token": ""}, "access_token"),
        ({"access_token": "a", "expiry_date": "2025-03-01T00:00:00Z"}, "expiry_date"),
        ({"access_token": "a", "expiry_date": False}, "expiry_date"),
        ({"access_token": "a", "expiry_date": 10 ** 20}, "expiry_date"),
        ({"access_token": "a", "refresh_token": 7}, "refresh_token"),
    ])
    def test_malformed_documents(self, calendar_config, tokens, field):
        with pytest.raises(google_oauth.MalformedTokensError, match=field):
            google_oauth.credentials_from_tokens(calendar_config, tokens)

    def test_refresh_keeps_previous_fields(self):
        credentials = Credentials(token="fresh", expiry=datetime(2025, 3, 1))
        previous = {"access_token": "old", "refresh_token": "1//refresh", "expires_in": 3599, "id": "kept"}

        tokens = google_oauth.tokens_from_credentials(credentials, previous=previous)

        assert tokens["access_token"] == "fresh"
        assert tokens["refresh_token"] == "1//refresh"
        assert tokens["id"] == "kept"
        assert "expires_in" not in tokens
        assert tokens["expiry_date"] == 1_740_787_200_000


class TestGrants:
    """Test grant error mapping."""

    def test_exchange_code(self, calendar_config, monkeypatch):
        def _fetch_token(self, **kwargs):
            assert kwargs == {"code": "4/abc"}
            self.oauth2session.token = {
                "access_token": "ya29.token",
                "refresh_token": "1//refresh",
                "token_type": "Bearer",
                "expires_in": 3599,
                "expires_at": 1_740_787_200,
            }

        monkeypatch.setattr(Flow, "fetch_token", _fetch_token)
        tokens = google_oauth.exchange_code(calendar_config, "4/abc")

        assert tokens["access_token"] == "ya29.token"
        assert tokens["refresh_token"] == "1//refresh"
        assert tokens["expiry_date"] == 1_740_787_200_000

    def test_rejected_exchange(self, calendar_config, monkeypatch):
        def _fetch_token(self, **kwargs):
            raise InvalidGrantError(description="Bad Request")

        monkeypatch.setattr(Flow, "fetch_token", _fetch_token)
        with pytest.raises(google_oauth.TokenGrantError, match="Bad Request") as exc_info:
            google_oauth.exchange_code(calendar_config, "4/expired")
        assert exc_info.value.status_code == 400

    def test_rejected_refresh(self, calendar_config, monkeypatch):
        def _refresh(self, request):
            raise RefreshError("invalid_grant: Token has been revoked.")

        monkeypatch.setattr(Credentials, "refresh", _refresh)
        credentials = google_oauth.credentials_from_tokens(
            calendar_config, {"access_token": "old", "refresh_token": "1//refresh", "expiry_date": 1},
        )
        with pytest.raises(google_oauth.TokenGrantError, match="Token has been revoked"):
            google_oauth.refresh_credentials(credentials)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
