# app/core/supabase_client.py
from functools import lru_cache
from supabase import create_client, Client

from app.core.config import get_settings


@lru_cache
def supabase_admin() -> Client:
    """
    Create a Supabase client with the service role key.

    Used by the image store (product images bucket) and by the
    identity gateway to create accounts.

    WARNING:
      - Never expose service role key to frontend.
      - Only backend should call this.

    Raises:
        RuntimeError: if SUPABASE_SERVICE_ROLE_KEY is not set.
    """
    settings = get_settings()
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("Missing SUPABASE_SERVICE_ROLE_KEY in .env")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


def supabase_anon() -> Client:
    """
    Create a fresh anon-key client for a password sign-in.

    Not cached: a sign-in stores the user's session on the client,
    so clients are never shared between requests.

    Raises:
        RuntimeError: if SUPABASE_KEY is not set.
    """
    settings = get_settings()
    if not settings.SUPABASE_KEY:
        raise RuntimeError("Missing SUPABASE_KEY in .env")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
