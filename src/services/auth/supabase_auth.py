"""
Authentication service using Supabase Auth.

Wraps the Supabase Auth API behind AuthServiceInterface. Password
hashing, session issuance and email confirmation all happen on the
backend.
"""

from typing import Optional

import structlog
from supabase import Client

from src.config import get_settings
from src.models.transaction import AuthResult, AuthUser
from src.services.auth.interface import AuthServiceInterface
from src.services.supabase_client import get_supabase_client


logger = structlog.get_logger(__name__)


def _error_message(error: Exception) -> str:
    """Best human-readable text for a provider error."""
    return (
        getattr(error, "error_description", None)
        or getattr(error, "message", None)
        or str(error)
    )


class SupabaseAuthService(AuthServiceInterface):
    """
    Service class for Supabase authentication operations.

    Handles registration, login, logout and password reset.
    """

    def __init__(self, client: Optional[Client] = None):
        self.supabase: Client = client or get_supabase_client()
        self._settings = get_settings().supabase

    async def sign_up(
        self,
        email: str,
        password: str,
        username: Optional[str] = None,
    ) -> AuthResult:
        """
        Register a new user and create their profile row.

        Returns:
            AuthResult; needs_confirmation is set when no session was issued
        """
        try:
            response = self.supabase.auth.sign_up(
                {"email": email, "password": password}
            )

            user = response.user
            if user is not None:
                # Profile row only once the auth user exists
                self.supabase.table(self._settings.users_table).insert(
                    [{"id": user.id, "username": username, "email": email}]
                ).execute()

            logger.info("auth_sign_up", email=email, confirmed=response.session is not None)
            return AuthResult(
                success=True,
                needs_confirmation=response.session is None,
                user=AuthUser(id=str(user.id), email=user.email) if user else None,
            )
        except Exception as e:
            logger.warning("auth_sign_up_failed", email=email, error=str(e))
            return AuthResult(success=False, error=_error_message(e))

    async def sign_in(self, email: str, password: str) -> AuthResult:
        """Sign in with email and password, then record the login time."""
        try:
            response = self.supabase.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            logger.warning("auth_sign_in_failed", email=email, error=str(e))
            return AuthResult(success=False, error=_error_message(e))

        user = response.user
        if user is None:
            return AuthResult(success=False, error="Invalid login credentials")

        try:
            self.supabase.rpc("update_last_login", {"user_uuid": user.id}).execute()
        except Exception as e:
            # Don't fail the login if the bookkeeping RPC fails
            logger.warning("update_last_login_failed", user_id=str(user.id), error=str(e))

        logger.info("auth_sign_in", user_id=str(user.id))
        return AuthResult(success=True, user=AuthUser(id=str(user.id), email=user.email))

    async def sign_out(self) -> AuthResult:
        try:
            self.supabase.auth.sign_out()
            return AuthResult(success=True)
        except Exception as e:
            logger.warning("auth_sign_out_failed", error=str(e))
            return AuthResult(success=False, error=_error_message(e))

    async def reset_password(self, email: str) -> AuthResult:
        try:
            self.supabase.auth.reset_password_for_email(email)
            return AuthResult(success=True)
        except Exception as e:
            logger.warning("auth_reset_password_failed", email=email, error=str(e))
            return AuthResult(success=False, error=_error_message(e))

    async def get_current_user(self) -> Optional[AuthUser]:
        try:
            response = self.supabase.auth.get_user()
        except Exception as e:
            logger.warning("auth_get_user_failed", error=str(e))
            return None

        if response is None or response.user is None:
            return None
        return AuthUser(id=str(response.user.id), email=response.user.email)
