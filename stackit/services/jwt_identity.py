"""
StackIt Backend — JWT Identity Provider
=========================================

What:  IdentityProvider that verifies access tokens issued by the hosted auth
       service (HS256-signed JWTs).
How:   python-jose checks signature, expiry and audience; claims are mapped to
       an Identity.

Token Claims Used:
    sub                       → Identity.user_id (UUID)
    email                     → Identity.email
    aud                       → must equal settings.auth_jwt_audience
    user_metadata.username    → Identity.username
    user_metadata.full_name   → Identity.full_name
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from stackit.config import settings
from stackit.exceptions import AuthenticationError
from stackit.services.identity_base import Identity, IdentityProvider

logger = logging.getLogger(__name__)


class JWTIdentityProvider(IdentityProvider):
    """Verifies HMAC-signed JWT access tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        audience: Optional[str] = "authenticated",
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience

    def authenticate(self, token: str) -> Identity:
        if not self.secret:
            logger.error("Token presented but AUTH_JWT_SECRET is not configured")
            raise AuthenticationError(message="Authentication is not configured on this server")

        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError as e:
            logger.info("Rejected bearer token: %s", str(e))
            raise AuthenticationError(
                message="Your session is invalid or has expired. Please log in again.",
            )

        return self._identity_from_claims(claims)

    def _identity_from_claims(self, claims: Dict[str, Any]) -> Identity:
        try:
            user_id = uuid.UUID(str(claims.get("sub")))
        except ValueError:
            raise AuthenticationError(
                message="Your session is invalid or has expired. Please log in again.",
                context={"reason": "sub claim is not a UUID"},
            )

        metadata = claims.get("user_metadata") or {}
        return Identity(
            user_id=user_id,
            email=claims.get("email"),
            username=metadata.get("username") or None,
            full_name=metadata.get("full_name") or None,
        )

    def issue_token(
        self,
        user_id: uuid.UUID,
        email: Optional[str] = None,
        username: Optional[str] = None,
        full_name: Optional[str] = None,
        expires_in: timedelta = timedelta(hours=1),
    ) -> str:
        """
        Mint a token the way the hosted auth service does.

        Used by local tooling and the test suite; production tokens come from
        the auth service itself.
        """
        metadata = {}
        if username:
            metadata["username"] = username
        if full_name:
            metadata["full_name"] = full_name
        claims: Dict[str, Any] = {
            "sub": str(user_id),
            "exp": datetime.now(timezone.utc) + expires_in,
            "user_metadata": metadata,
        }
        if email:
            claims["email"] = email
        if self.audience:
            claims["aud"] = self.audience
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)


identity_provider = JWTIdentityProvider(
    secret=settings.auth_jwt_secret,
    algorithm=settings.auth_jwt_algorithm,
    audience=settings.auth_jwt_audience or None,
)
