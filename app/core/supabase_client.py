# app/core/supabase_client.py
from supabase import create_client, Client

from app.core.config import Settings


def create_supabase_client(settings: Settings) -> Client:
    """
    Create a Supabase client with the anon/public key.

    The client is built once at startup and handed to the repositories
    and managers that need it; nothing imports a module-level instance.

    Note: This client respects RLS. Every games/profiles query is also
    filtered on the owner id explicitly.
    """
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
