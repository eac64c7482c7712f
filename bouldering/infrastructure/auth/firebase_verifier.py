"""
Firebase Token Verifier

Architectural Intent:
- Implements TokenVerifierPort with Firebase Admin ID-token verification
- Any verification failure surfaces as AuthenticationError (HTTP 401)

Design Decisions:
- The Firebase app is initialised lazily under its own name so tests and
  other Firebase users in the process are unaffected
- Credentials come from a service-account file when configured, otherwise
  from Application Default Credentials
- verify_id_token is blocking (it may fetch Google's public keys) and runs
  in a worker thread
"""

import asyncio
import logging
from typing import Any, Optional

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError

from bouldering.domain.errors import AuthenticationError
from bouldering.domain.ports.token_verifier_port import AuthenticatedUser
from bouldering.infrastructure.config import FirebaseConfig

logger = logging.getLogger(__name__)

APP_NAME = "bouldering"


def extract_bearer_token(header: Optional[str]) -> str:
    """Return the token from an 'Authorization: Bearer <token>' header."""
    if not header or not header.startswith("Bearer "):
        raise AuthenticationError("Missing or invalid authorization header")
    token = header[len("Bearer "):].strip()
    if not token:
        raise AuthenticationError("Missing ID token")
    return token


class FirebaseTokenVerifier:
    def __init__(self, config: FirebaseConfig, app: Optional[Any] = None):
        self.config = config
        self._app = app

    def _get_app(self) -> Any:
        if self._app is not None:
            return self._app
        try:
            self._app = firebase_admin.get_app(APP_NAME)
        except ValueError:
            cred = (
                credentials.Certificate(self.config.credentials_path)
                if self.config.credentials_path
                else credentials.ApplicationDefault()
            )
            options = {"projectId": self.config.project_id} if self.config.project_id else None
            self._app = firebase_admin.initialize_app(cred, options, name=APP_NAME)
            logger.info("Firebase app initialised for project %s", self.config.project_id)
        return self._app

    async def verify(self, token: str) -> AuthenticatedUser:
        app = self._get_app()
        try:
            decoded = await asyncio.to_thread(auth.verify_id_token, token, app=app)
        except (ValueError, FirebaseError) as e:
            logger.warning("ID token verification failed: %s", e)
            raise AuthenticationError("Invalid or expired token") from e

        user = AuthenticatedUser(
            uid=decoded["uid"],
            email=decoded.get("email"),
            email_verified=bool(decoded.get("email_verified", False)),
        )
        logger.debug("User authenticated: %s", user.uid)
        return user
