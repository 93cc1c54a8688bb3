"""Helpers for verifying Google ID tokens before they are exchanged for a Supabase session."""

from dataclasses import dataclass
from typing import Optional
import logging

from google.auth import exceptions as google_exceptions
from google.auth.transport import requests
from google.oauth2 import id_token

from earthlord.config import GoogleConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoogleIdentity:
    email: str
    subject: str
    email_verified: bool
    name: Optional[str]
    picture: Optional[str]


class GoogleIdentityError(RuntimeError):
    """
    Raised when a Google ID token fails verification or Google Sign-In is not configured.
    """

    def __init__(self, message: str, *, code: str = "google_invalid_token"):
        super().__init__(message)
        self.code = code


def verify_google_id_token(raw_token: str, config: GoogleConfig, request=None) -> GoogleIdentity:
    """
    Validate a Google ID token issued to this app's client id.

    Returns the identity when successful; raises GoogleIdentityError otherwise.
    """

    if not config.is_configured():
        raise GoogleIdentityError("GOOGLE_CLIENT_ID is not configured.", code="google_not_configured")

    try:
        payload = id_token.verify_oauth2_token(raw_token, request or requests.Request(), config.google_client_id)
    except (ValueError, google_exceptions.GoogleAuthError) as exc:
        logger.warning("Failed to verify Google ID token: %s", exc)
        raise GoogleIdentityError("Google ID token could not be verified.") from exc

    email = payload.get("email")
    if not email:
        raise GoogleIdentityError("Google ID token has no email claim.")

    email_verified = bool(payload.get("email_verified", False))
    if config.google_require_verified_email and not email_verified:
        raise GoogleIdentityError("Google account email is not verified.", code="google_unverified_email")

    return GoogleIdentity(
        email=email,
        subject=payload.get("sub", ""),
        email_verified=email_verified,
        name=payload.get("name"),
        picture=payload.get("picture"),
    )
