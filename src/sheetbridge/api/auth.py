"""Google OAuth login and token revocation.

The browser signs in through Google's web flow. The signed session cookie
only carries the user's email and an opaque key; the Google tokens stay in
process memory under that key until ``/revoke`` hands them back to Google.
"""

import html
import logging
import secrets
import threading
from typing import Optional

import httpx
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from google_auth_oauthlib.flow import Flow

from ..config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

LOGIN_SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]
REVOKE_URL = "https://oauth2.googleapis.com/revoke"

# Session key -> {"access_token": ..., "refresh_token": ...}
_token_store: dict[str, dict[str, str]] = {}
_token_store_lock = threading.Lock()


def store_tokens(tokens: dict[str, str]) -> str:
    """Keep tokens server-side and return the opaque key for the session."""
    key = secrets.token_urlsafe(32)
    with _token_store_lock:
        _token_store[key] = tokens
    return key


def pop_tokens(key: Optional[str]) -> dict[str, str]:
    if not key:
        return {}
    with _token_store_lock:
        return _token_store.pop(key, {})


def create_oauth_flow(state: Optional[str] = None) -> Flow:
    """Create the Google OAuth web flow."""
    if not settings.oauth_configured:
        raise HTTPException(
            status_code=500,
            detail="Google OAuth not configured. Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET.",
        )

    client_config = {
        "web": {
            "client_id": settings.google_client_id,
            "client_secret": settings.google_client_secret,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": [settings.google_redirect_uri],
        }
    }
    return Flow.from_client_config(
        client_config,
        scopes=LOGIN_SCOPES,
        state=state,
        redirect_uri=settings.google_redirect_uri,
    )


def revoke_google_token(token: str) -> bool:
    """Revoke an access or refresh token at Google. Failures are logged, not raised."""
    try:
        with httpx.Client(timeout=10.0) as client:
            response = client.post(
                REVOKE_URL,
                data={"token": token},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        logger.info(f"Revoke response: {response.status_code}")
        return response.is_success
    except httpx.HTTPError as e:
        logger.error(f"Failed to revoke Google token: {e}")
        return False


@router.get("/", response_class=HTMLResponse)
def home(request: Request):
    email = request.session.get("email")
    if email:
        body = f"<p>Signed in as {html.escape(email)}</p><p><a href=\"/revoke\">Sign out</a></p>"
    else:
        body = '<p><a href="/login">Sign in with Google</a></p>'
    return HTMLResponse(
        f"<html><head><title>{html.escape(settings.application_name)}</title></head>"
        f"<body>{body}</body></html>"
    )


@router.get("/login")
def login(request: Request):
    """Redirect to Google's consent screen."""
    flow = create_oauth_flow()
    authorization_url, state = flow.authorization_url(
        access_type="offline", include_granted_scopes="true", prompt="consent"
    )
    request.session["oauth_state"] = state
    if flow.code_verifier:
        request.session["oauth_code_verifier"] = flow.code_verifier
    return RedirectResponse(url=authorization_url, status_code=302)


@router.get("/login/oauth2/callback")
def oauth_callback(request: Request, code: str, state: str):
    """Exchange the authorization code and remember the user in the session."""
    expected_state = request.session.pop("oauth_state", None)
    if not expected_state or expected_state != state:
        logger.warning("Invalid OAuth state on callback")
        raise HTTPException(status_code=400, detail="Invalid or expired state token")

    flow = create_oauth_flow(state=state)
    code_verifier = request.session.pop("oauth_code_verifier", None)
    if code_verifier:
        flow.code_verifier = code_verifier
    try:
        flow.fetch_token(code=code)
        credentials = flow.credentials
        id_info = id_token.verify_oauth2_token(
            credentials.id_token,
            google_requests.Request(),
            settings.google_client_id,
        )
    except Exception:
        logger.exception("Failed to complete Google OAuth callback")
        raise HTTPException(status_code=400, detail="Authentication failed")

    tokens = {"access_token": credentials.token}
    if credentials.refresh_token:
        tokens["refresh_token"] = credentials.refresh_token
    pop_tokens(request.session.get("session_key"))
    request.session["email"] = id_info.get("email")
    request.session["session_key"] = store_tokens(tokens)
    logger.info(f"OAuth login successful for {id_info.get('email')}")
    return RedirectResponse(url="/", status_code=302)


@router.get("/revoke")
def revoke(request: Request):
    """Revoke the signed-in user's tokens, end the session, and go home."""
    tokens = pop_tokens(request.session.get("session_key"))
    for key in ("access_token", "refresh_token"):
        token = tokens.get(key)
        if token:
            revoke_google_token(token)
    request.session.clear()
    return RedirectResponse(url="/", status_code=302)
