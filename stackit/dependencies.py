"""
StackIt Backend — Request Dependencies
========================================

What:  FastAPI dependencies that resolve "who is calling?" for a request.
How:   The Authorization: Bearer <token> header is handed to the injected
       IdentityProvider. A request without the header is anonymous; a request
       with a bad token is rejected with 401.

Usage in a route:
    @router.post("/questions")
    async def create_question(identity: Identity = Depends(require_identity)):
        ...

Tests override get_identity_provider via app.dependency_overrides.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.database import get_db_session
from stackit.exceptions import AuthenticationError
from stackit.services.identity_base import Identity, IdentityProvider
from stackit.services.jwt_identity import identity_provider
from stackit.services.profile_service import profile_service

# auto_error=False: anonymous requests are allowed to reach read-only routes
bearer_scheme = HTTPBearer(auto_error=False)


def get_identity_provider() -> IdentityProvider:
    return identity_provider


async def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    provider: IdentityProvider = Depends(get_identity_provider),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[Identity]:
    """
    Resolve the caller, or None for anonymous requests.

    The first request from a new account also creates its profile row.
    """
    if credentials is None:
        return None
    identity = provider.authenticate(credentials.credentials)
    await profile_service.ensure_profile(db, identity)
    return identity


async def require_identity(
    identity: Optional[Identity] = Depends(get_optional_identity),
) -> Identity:
    """Like get_optional_identity, but anonymous callers get 401 "Login required"."""
    if identity is None:
        raise AuthenticationError(message="Login required")
    return identity
