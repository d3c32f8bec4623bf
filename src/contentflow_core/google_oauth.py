"""Google OAuth 2.0 helpers shared by the calendar connector and the bootstrap app.

Consent and code exchange go through google-auth-oauthlib's ``Flow``; refresh
goes through google-auth ``Credentials``. Both are blocking, so async callers
run them in a worker thread. The token file keeps its own shape
(``access_token``, ``refresh_token``, ``expiry_date`` in epoch milliseconds)
and is converted to and from ``Credentials`` here.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

import requests
from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from .config import GoogleCalendarConfig

logger = logging.getLogger("contentflow-core.google_oauth")

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar"]

# Command that recovers from missing or revoked credentials
BOOTSTRAP_HINT = "Run the OAuth setup (`contentflow-oauth`) and open /auth to re-authenticate."


class TokenGrantError(Exception):
    """Raised when Google rejects a code exchange or refresh grant."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedTokensError(ValueError):
    """Raised when a stored token document cannot be turned into credentials."""


def client_config(config: GoogleCalendarConfig) -> dict:
    """Client secrets in the "web" layout Flow.from_client_config expects."""
    return {
        "web": {
            "client_id": config.client_id,
            "client_secret": config.client_secret,
            "auth_uri": AUTH_URL,
            "token_uri": TOKEN_URL,
            "redirect_uris": [config.redirect_uri],
        }
    }


def build_flow(config: GoogleCalendarConfig) -> Flow:
    # The consent redirect and the callback run on separate Flow instances,
    # so there is no shared PKCE verifier to carry between them.
    return Flow.from_client_config(
        client_config(config),
        scopes=CALENDAR_SCOPES,
        redirect_uri=config.redirect_uri,
        autogenerate_code_verifier=False,
    )


def build_consent_url(config: GoogleCalendarConfig) -> tuple[str, str]:
    """Consent URL requesting offline access; forced consent guarantees a refresh token.

    Returns:
        (url, state) where state must be checked on the callback
    """
    return build_flow(config).authorization_url(access_type="offline", prompt="consent")


def expiry_to_ms(expiry: Optional[datetime]) -> Optional[int]:
    """google-auth keeps expiry as a naive UTC datetime."""
    if expiry is None:
        return None
    return int(expiry.replace(tzinfo=timezone.utc).timestamp() * 1000)


def expiry_from_ms(expiry_date: float) -> datetime:
    return datetime.fromtimestamp(expiry_date / 1000, tz=timezone.utc).replace(tzinfo=None)


def credentials_from_tokens(config: GoogleCalendarConfig, tokens: dict) -> Credentials:
    """Build refreshable credentials from a stored token document.

    Raises:
        MalformedTokensError: access_token, refresh_token or expiry_date has the wrong shape
    """
    access_token = tokens.get("access_token")
    if not isinstance(access_token, str) or not access_token:
        raise MalformedTokensError("access_token must be a non-empty string")

    refresh_token = tokens.get("refresh_token")
    if refresh_token is not None and not isinstance(refresh_token, str):
        raise MalformedTokensError("refresh_token must be a string")

    expiry_date = tokens.get("expiry_date")
    if expiry_date is not None and (isinstance(expiry_date, bool) or not isinstance(expiry_date, (int, float))):
        raise MalformedTokensError(f"expiry_date must be epoch milliseconds, got {expiry_date!r}")
    try:
        expiry = expiry_from_ms(expiry_date) if expiry_date is not None else None
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedTokensError(f"expiry_date is out of range: {expiry_date!r}") from e

    return Credentials(
        token=access_token,
        refresh_token=refresh_token or None,
        token_uri=TOKEN_URL,
        client_id=config.client_id,
        client_secret=config.client_secret,
        scopes=CALENDAR_SCOPES,
        expiry=expiry,
    )


def tokens_from_credentials(credentials: Credentials, previous: Optional[dict] = None) -> dict:
    """Token document for `credentials`, keeping extra fields of `previous`.

    Google usually omits the refresh token when refreshing, so an earlier one
    is kept unless the credentials carry a new one.
    """
    tokens = {k: v for k, v in (previous or {}).items() if k != "expires_in"}
    tokens["access_token"] = credentials.token
    tokens["token_type"] = "Bearer"
    if credentials.refresh_token:
        tokens["refresh_token"] = credentials.refresh_token
    if credentials.scopes:
        tokens["scope"] = " ".join(credentials.scopes)

    expiry_date = expiry_to_ms(credentials.expiry)
    if expiry_date is None:
        tokens.pop("expiry_date", None)
    else:
        tokens["expiry_date"] = expiry_date
    return tokens


def exchange_code(config: GoogleCalendarConfig, code: str) -> dict:
    """Exchange an authorization code for a token document (blocking).

    Raises:
        TokenGrantError: Google rejected the code or could not be reached
    """
    flow = build_flow(config)
    try:
        flow.fetch_token(code=code)
    except OAuth2Error as e:
        detail = e.description or e.error
        logger.error(f"Google code exchange rejected: {e.status_code} {detail}")
        raise TokenGrantError(f"Google code exchange rejected: {detail}", e.status_code) from e
    except requests.RequestException as e:
        logger.error(f"Google code exchange failed: {type(e).__name__}: {e}")
        raise TokenGrantError(f"Google code exchange failed: {e}") from e
    return tokens_from_credentials(flow.credentials)


def refresh_credentials(credentials: Credentials) -> Credentials:
    """Run the refresh-token grant, updating `credentials` in place (blocking).

    Raises:
        TokenGrantError: the refresh token was rejected or Google could not be reached
    """
    try:
        credentials.refresh(Request())
    except RefreshError as e:
        logger.error(f"Google token refresh rejected: {e}")
        raise TokenGrantError(f"Google token refresh rejected: {e}") from e
    except TransportError as e:
        logger.error(f"Google token refresh failed: {type(e).__name__}: {e}")
        raise TokenGrantError(f"Google token refresh failed: {e}") from e
    return credentials
