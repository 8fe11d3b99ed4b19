"""
Abstract Identity Provider Interface

Authentication is delegated entirely to the hosted backend. This
interface is the only surface the rest of the app sees.

DESIGN DECISION: Every call returns a result object. Failures are
reported as an error string, never raised, so the UI can show them
as-is.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.models.transaction import AuthResult, AuthUser


class AuthServiceInterface(ABC):
    """Sign-up, sign-in, sign-out, password reset and session lookup."""

    @abstractmethod
    async def sign_up(self, email: str, password: str, username: Optional[str] = None) -> AuthResult:
        """
        Register a new account.

        AuthResult.needs_confirmation is True when the provider issued
        no session because the email must be confirmed first.
        """
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthResult:
        pass

    @abstractmethod
    async def sign_out(self) -> AuthResult:
        pass

    @abstractmethod
    async def reset_password(self, email: str) -> AuthResult:
        pass

    @abstractmethod
    async def get_current_user(self) -> Optional[AuthUser]:
        """The user of the active session, or None when signed out."""
        pass
