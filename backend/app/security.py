"""
Recipe Book Backend — Bearer Token Dependencies
================================================

What:  FastAPI dependencies that authenticate a request from its
       `Authorization: Bearer <token>` header.
How:   extract_bearer_token → TokenVerifier.verify → AuthenticatedUser,
       stored on request.state.user. Failures raise AuthenticationError, which
       short-circuits the request with 401 before the handler body runs.

Dependencies:
    require_user   — token mandatory (POST /api/recipes)
    optional_user  — token used when present (ownership and like routes)
    get_token_verifier — the configured strategy; override it in tests:
        app.dependency_overrides[get_token_verifier] = lambda: FakeVerifier()
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, Request

from app.config import Settings, settings
from app.exceptions import UnauthenticatedError
from app.services.firebase_verifier import FirebaseTokenVerifier
from app.services.token_verifier_base import AuthenticatedUser, TokenVerifier
from app.services.unverified_decoder import UnverifiedTokenDecoder

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the raw token from an Authorization header value."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise UnauthenticatedError()
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthenticatedError()
    return token


def build_token_verifier(config: Settings) -> TokenVerifier:
    """Pick the verifier strategy named by AUTH_MODE."""
    if config.auth_mode == "unverified":
        return UnverifiedTokenDecoder()
    return FirebaseTokenVerifier(config)


@lru_cache(maxsize=1)
def get_token_verifier() -> TokenVerifier:
    """Process-wide verifier (the Firebase app handle is reused across requests)."""
    return build_token_verifier(settings)


async def authenticate(
    request: Request,
    authorization: Optional[str],
    verifier: TokenVerifier,
) -> AuthenticatedUser:
    token = extract_bearer_token(authorization)
    user = await verifier.verify(token)
    request.state.user = user
    return user


async def require_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> AuthenticatedUser:
    """Dependency for routes that cannot run without a verified caller."""
    return await authenticate(request, authorization, verifier)


async def optional_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> Optional[AuthenticatedUser]:
    """
    Dependency for routes that fall back to a client-supplied userId.

    A present but invalid token is still rejected with 401; silently
    ignoring it would let a bad token downgrade to body-based identity.
    """
    if authorization is None and not settings.require_verified_ownership:
        return None
    return await authenticate(request, authorization, verifier)
