"""
StackIt Backend — Abstract Identity Provider Interface
========================================================

What:  Abstract base class for turning a bearer token into a signed-in user.
Why:   Accounts, sign-up, sign-in and sign-out belong to a hosted auth service.
       The API only needs "who is calling?", so that question is asked through
       this interface and the concrete provider is injected with FastAPI's
       Depends(), which lets tests and other deployments swap it out.
How:   Concrete implementations inherit from IdentityProvider and implement
       authenticate().
Who:   Called by the request dependencies in stackit/dependencies.py.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """
    The signed-in user behind a request.

    Attributes:
        user_id:   Provider's user id (also the profile primary key)
        email:     Account e-mail, when the provider shares it
        username:  Username chosen at sign-up, when present
        full_name: Full name chosen at sign-up, when present
    """
    user_id: uuid.UUID
    email: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Name stamped on questions and answers as `author_name`."""
        if self.username:
            return self.username
        if self.email:
            local_part = self.email.split("@")[0]
            if local_part:
                return local_part
        return "Anonymous"


class IdentityProvider(ABC):
    """
    Contract:
        - authenticate() accepts the raw bearer token and returns an Identity
        - Any token that cannot be trusted raises AuthenticationError
        - Callers never see provider-specific exceptions
    """

    @abstractmethod
    def authenticate(self, token: str) -> Identity:
        """
        Verify a bearer token.

        Raises:
            AuthenticationError: Token is malformed, expired, or not signed
                by the provider.
        """
        ...
