"""Identity provider package."""

from src.services.auth.interface import AuthServiceInterface
from src.services.auth.supabase_auth import SupabaseAuthService

__all__ = ["AuthServiceInterface", "SupabaseAuthService"]
