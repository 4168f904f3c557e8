"""
Recipe Book Backend — Unverified Token Decoder (INSECURE, development only)
============================================================================

What:  Reads the claims of a JWT without checking its signature.
Why:   Lets the API run against the Firebase Auth emulator or hand-made
       tokens when no Firebase project is available.

SECURITY WARNING:
    Anyone can forge a token this decoder accepts and act as any user. It is
    selected only by AUTH_MODE=unverified and logs a warning when built.
"""

import logging

from google.auth import jwt as google_jwt

from app.exceptions import InvalidTokenError
from app.services.token_verifier_base import AuthenticatedUser, TokenVerifier

logger = logging.getLogger(__name__)


class UnverifiedTokenDecoder(TokenVerifier):
    """Accepts any syntactically valid JWT and trusts its payload."""

    verifies_signature = False

    def __init__(self):
        logger.warning(
            "UnverifiedTokenDecoder in use: bearer token signatures are NOT checked"
        )

    async def verify(self, token: str) -> AuthenticatedUser:
        try:
            claims = google_jwt.decode(token, verify=False)
            if not isinstance(claims, dict):
                raise ValueError("Token payload is not a JSON object")
            return AuthenticatedUser.from_claims(claims)
        except ValueError as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(reason=str(e))
