"""
Recipe Book Backend — Firebase ID Token Verifier
=================================================

What:  Verifies Firebase Authentication ID tokens with the Firebase Admin SDK.
Why:   The frontend signs users in with Firebase; the backend must check the
       token signature, issuer, audience and expiry before trusting any claim.
How:   firebase_admin.auth.verify_id_token runs in a worker thread (it is a
       blocking call that may fetch Google's public certificates) and every
       SDK failure is translated into InvalidTokenError.

Initialisation:
    The Firebase app is created lazily on first use under a dedicated name,
    from FIREBASE_CREDENTIALS_FILE (service-account JSON) when given, and
    with FIREBASE_PROJECT_ID as the expected audience. Verification only needs
    the project ID; credentials are required for revocation checks.
"""

import logging
from typing import Any, Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin import exceptions as firebase_exceptions
from starlette.concurrency import run_in_threadpool

from app.config import Settings
from app.exceptions import InvalidTokenError
from app.services.token_verifier_base import AuthenticatedUser, TokenVerifier

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "recipe-book"


class FirebaseTokenVerifier(TokenVerifier):
    """
    Verified-mode token strategy backed by Firebase Admin.

    Args:
        config: application settings (project ID, credentials path, revocation flag)
        firebase_app: an already-initialised firebase_admin.App; skips lazy init
    """

    verifies_signature = True

    def __init__(self, config: Settings, firebase_app: Optional[Any] = None):
        self._config = config
        self._app = firebase_app

    def _get_app(self):
        if self._app is not None:
            return self._app
        try:
            self._app = firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            cred = None
            if self._config.firebase_credentials_file:
                cred = credentials.Certificate(self._config.firebase_credentials_file)
            options = {}
            if self._config.firebase_project_id:
                options["projectId"] = self._config.firebase_project_id
            self._app = firebase_admin.initialize_app(
                cred, options=options, name=FIREBASE_APP_NAME
            )
            logger.info(
                "Firebase Admin initialised (project=%s, credentials=%s)",
                self._config.firebase_project_id or "<from credentials>",
                "file" if cred else "application-default",
            )
        return self._app

    async def verify(self, token: str) -> AuthenticatedUser:
        try:
            app = self._get_app()
            claims = await run_in_threadpool(
                firebase_auth.verify_id_token,
                token,
                app=app,
                check_revoked=self._config.firebase_check_revoked,
            )
            user = AuthenticatedUser.from_claims(claims)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            # ValueError: malformed token, missing subject, or unknown project ID
            logger.warning("Token verification failed: %s", str(e))
            raise InvalidTokenError(reason=str(e))

        logger.debug("Token verified successfully for user: %s", user.uid)
        return user
