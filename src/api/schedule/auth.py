"""
Identity verification for write endpoints.

The frontend signs members in with Firebase Authentication and sends the ID
token as "Authorization: Bearer <token>". The verified email claim is recorded
as the submitter of a schedule entry.
"""

import threading
from typing import Any

import firebase_admin
from firebase_admin import auth
from firebase_functions import https_fn

from api.schedule.models import IdentityError
from utils.get_logger import get_logger

logger = get_logger(__name__)

_app_lock = threading.Lock()


def _ensure_firebase_app() -> None:
    """Initialize the default Firebase app once per process."""
    if firebase_admin._apps:
        return
    with _app_lock:
        if not firebase_admin._apps:
            firebase_admin.initialize_app()


def bearer_token(req: https_fn.Request) -> str:
    """Extract the bearer token from the Authorization header.

    Raises:
        IdentityError: 401 if the header is missing or not a bearer token
    """
    header = req.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise IdentityError("Authorization header with a Bearer token is required", 401)
    return token.strip()


class IdentityVerifier:
    """Resolves the verified email claim of the caller."""

    def decode(self, token: str) -> dict[str, Any]:
        return auth.verify_id_token(token)

    def verify(self, req: https_fn.Request) -> str:
        """
        Return the caller's verified email.

        Raises:
            IdentityError: 401 for a missing or rejected token, 403 when the token
                has no verified email, 500 when Google certificates are unreachable
        """
        token = bearer_token(req)

        # App setup errors propagate; they are not token rejections
        _ensure_firebase_app()
        try:
            claims = self.decode(token)
        except auth.CertificateFetchError as e:
            logger.error(f"Could not fetch token verification certificates: {e}")
            raise IdentityError("Unable to verify identity token", 500) from e
        except (auth.InvalidIdTokenError, ValueError) as e:
            # Expired/revoked tokens are InvalidIdTokenError subclasses
            logger.warning(f"Rejected identity token: {type(e).__name__}")
            raise IdentityError("Invalid or expired identity token", 401) from e

        email = claims.get("email")
        if not email:
            raise IdentityError("Identity token has no email claim", 403)
        if claims.get("email_verified") is False:
            raise IdentityError("Email address is not verified", 403)

        return email


# Global verifier instance used by the handlers
identity_verifier = IdentityVerifier()
