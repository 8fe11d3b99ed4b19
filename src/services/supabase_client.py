"""
Supabase client configuration.

Provides the single configured Supabase client used by both the auth
adapter and the transaction storage adapter.
"""

from typing import Optional

import structlog
from supabase import Client, create_client

from src.config import get_settings


logger = structlog.get_logger(__name__)

_supabase_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Get or create the Supabase client instance.

    Returns:
        Configured Supabase client

    Raises:
        pydantic.ValidationError: If SUPABASE_URL / SUPABASE_ANON_KEY are not set
    """
    global _supabase_client

    if _supabase_client is None:
        settings = get_settings().supabase
        logger.info("supabase_client_init", url=settings.url)
        _supabase_client = create_client(settings.url, settings.anon_key)

    return _supabase_client


def reset_supabase_client() -> None:
    """Drop the cached client (e.g. after settings change)."""
    global _supabase_client
    _supabase_client = None
