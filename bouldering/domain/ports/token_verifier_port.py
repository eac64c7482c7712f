"""
Token Verifier Port

Architectural Intent:
- Turns a bearer ID token into an authenticated user
- Keeps the identity provider (Firebase) out of the presentation layer
"""

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class AuthenticatedUser:
    uid: str
    email: Optional[str] = None
    email_verified: bool = False


@runtime_checkable
class TokenVerifierPort(Protocol):
    async def verify(self, token: str) -> AuthenticatedUser:
        """Raises AuthenticationError for invalid or expired tokens."""
        ...
