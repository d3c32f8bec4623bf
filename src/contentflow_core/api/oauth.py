"""Google Calendar OAuth bootstrap server.

One-time interactive flow that obtains calendar credentials and writes them
to the token file read by the calendar connector:

- GET /auth: redirect to the Google consent screen with a one-time state
- GET /auth/google/callback: exchange the code and persist the tokens
- GET /test-calendar: connectivity check against the primary calendar
"""
import asyncio
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query, status
from fastapi.responses import RedirectResponse

from .. import google_oauth
from ..config import Settings, get_settings
from ..connectors.calendar import CalendarConnector
from ..errors import AuthRequiredError, ConfigurationError, RemoteCallError
from ..token_store import TokenStore

logger = logging.getLogger("contentflow-core.oauth")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the bootstrap app.

    Raises:
        ConfigurationError: Google client id/secret/redirect URI are not configured
    """
    settings = settings or get_settings()
    config = settings.google_calendar
    token_store = TokenStore(config.tokens_file)

    app = FastAPI(
        title="Content Workflow OAuth Setup",
        description="Obtain Google Calendar credentials for the content workflow MCP server",
        version="1.0.0",
    )

    @app.get("/")
    def root():
        """Token status and next steps."""
        return {
            "name": "Content Workflow OAuth Setup",
            "tokens_configured": token_store.exists(),
            "tokens_file": str(token_store.path),
            "authenticate": "/auth",
            "test": "/test-calendar",
        }

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    # States issued by /auth and not yet redeemed by the callback
    pending_states: set[str] = set()

    @app.get("/auth")
    def start_auth():
        """Redirect to Google's consent screen (offline access, forced consent)."""
        url, state = google_oauth.build_consent_url(config)
        pending_states.add(state)
        logger.info("Redirecting to Google OAuth consent screen")
        return RedirectResponse(url, status_code=status.HTTP_302_FOUND)

    @app.get("/auth/google/callback")
    async def auth_callback(
        code: Optional[str] = Query(None),
        state: Optional[str] = Query(None),
        error: Optional[str] = Query(None),
    ):
        """Exchange the authorization code and persist the tokens."""
        if error:
            logger.error(f"OAuth consent failed: {error}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Authorization failed: {error}")
        if not state or state not in pending_states:
            logger.warning("OAuth callback rejected: unknown or missing state")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid OAuth state")
        pending_states.discard(state)
        if not code:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Authorization code not received")

        logger.info("Exchanging authorization code for tokens")
        try:
            tokens = await asyncio.to_thread(google_oauth.exchange_code, config, code)
        except google_oauth.TokenGrantError as e:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

        token_store.save(tokens)
        logger.info("OAuth flow completed successfully")
        return {
            "status": "authenticated",
            "tokens_file": str(token_store.path),
            "has_refresh_token": bool(tokens.get("refresh_token")),
            "expiry_date": tokens.get("expiry_date"),
            "next_steps": "Restart the MCP server or make a calendar call; tokens are read from the token file.",
        }

    @app.get("/test-calendar")
    async def test_calendar():
        """List a few upcoming events with the stored credentials."""
        async with CalendarConnector(config, token_store=token_store, timeout=settings.http_timeout) as calendar:
            try:
                events = await calendar.list_events({"maxResults": 5})
            except AuthRequiredError as e:
                raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
            except RemoteCallError as e:
                raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
        return {
            "status": "ok",
            "event_count": len(events),
            "events": [event.model_dump() for event in events],
        }

    return app


def main():
    """Run the bootstrap server (console script `contentflow-oauth`)."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    settings = get_settings()
    try:
        app = create_app(settings)
    except ConfigurationError as e:
        logger.error(str(e))
        raise SystemExit(1)
    logger.info(f"OAuth setup server listening on http://{settings.oauth_host}:{settings.oauth_port}")
    uvicorn.run(app, host=settings.oauth_host, port=settings.oauth_port)


if __name__ == "__main__":
    main()
