"""
Recipe Book Backend — Abstract Token Verifier Interface
========================================================

What:  Contract for turning a raw bearer token into an authenticated identity.
Why:   The identity provider is an external collaborator. Routes depend on
       this interface, so the provider (Firebase today) can be swapped and
       tests can inject a fake without touching the network.
How:   Concrete strategies inherit from TokenVerifier and implement verify().

Implementations:
    - FirebaseTokenVerifier: cryptographic verification via Firebase Admin (default)
    - UnverifiedTokenDecoder: payload decode with NO signature check (dev only)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class AuthenticatedUser(BaseModel):
    """Identity attached to a request after its bearer token was accepted."""

    uid: str = Field(description="Subject identifier issued by the identity provider")
    email: Optional[str] = None
    name: Optional[str] = None
    claims: Dict[str, Any] = Field(default_factory=dict)

    @property
    def display_name(self) -> str:
        """Email local-part, falling back to the name claim, then "User"."""
        if self.email:
            local_part = self.email.split("@")[0]
            if local_part:
                return local_part
        return self.name or "User"

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "AuthenticatedUser":
        """
        Build an identity from decoded token claims.

        Firebase ID tokens carry the subject as `uid` once verified by the
        Admin SDK, and as `user_id`/`sub` in the raw payload.
        """
        uid = claims.get("uid") or claims.get("user_id") or claims.get("sub")
        if not uid:
            raise ValueError("Token has no subject claim")
        return cls(
            uid=str(uid),
            email=claims.get("email"),
            name=claims.get("name"),
            claims=dict(claims),
        )


class TokenVerifier(ABC):
    """
    Abstract interface for bearer-token verification.

    Contract:
        - verify() accepts the token string (without the "Bearer " prefix)
        - Returns an AuthenticatedUser on success
        - Raises InvalidTokenError for ANY rejection, with the provider's
          explanation as `reason`
    """

    #: Whether tokens are cryptographically checked. Logged at startup.
    verifies_signature: bool = True

    @abstractmethod
    async def verify(self, token: str) -> AuthenticatedUser:
        """
        Verify a bearer token and return the caller's identity.

        Raises:
            InvalidTokenError: The token is malformed, expired, revoked,
                issued for another project, or the provider could not be reached.
        """
        ...
