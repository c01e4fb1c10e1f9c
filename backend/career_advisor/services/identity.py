import logging

import httpx

from career_advisor.core.config import settings

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = {"accounts.google.com", "https://accounts.google.com"}


class InvalidToken(ValueError):
    pass


def _fetch_token_info(token: str) -> dict:
    try:
        with httpx.Client(timeout=settings.identity_timeout_seconds) as client:
            response = client.get(settings.google_tokeninfo_url, params={"id_token": token})
            response.raise_for_status()
            payload = response.json()
    except httpx.HTTPStatusError as exc:
        raise InvalidToken(f"Token rejected by issuer ({exc.response.status_code})") from exc
    except (httpx.HTTPError, ValueError) as exc:
        raise InvalidToken(f"Token verification failed: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidToken("Token verification returned an unexpected payload")
    return payload


def verify_google_token(token: str) -> dict[str, str]:
    """Verify a Google ID token and return its profile claims.

    Signature, expiry and issuer checks are delegated to Google's tokeninfo
    endpoint; the audience is matched against ``google_client_id``. Every
    failure surfaces as ``InvalidToken``.
    """
    if not token:
        raise InvalidToken("Missing token")
    if not settings.google_client_id:
        raise InvalidToken("Google client id is not configured")

    payload = _fetch_token_info(token)
    if payload.get("aud") != settings.google_client_id:
        raise InvalidToken("Token audience mismatch")
    if payload.get("iss") not in GOOGLE_ISSUERS:
        raise InvalidToken("Token issuer mismatch")
    email = payload.get("email")
    if not email:
        raise InvalidToken("Token has no email claim")

    return {
        "email": email,
        "name": payload.get("name") or "",
        "picture": payload.get("picture") or "",
        "locale": payload.get("locale") or "",
    }
