"""Supabase client singleton. Persistence is disabled when not configured."""

import logging

from supabase import Client, create_client

from config import settings

logger = logging.getLogger(__name__)

_client: Client | None = None


def get_client() -> Client | None:
    global _client
    if not settings.supabase_configured:
        logger.warning("No SUPABASE_URL/SUPABASE_KEY set - using local catalog and in-memory store")
        return None
    if _client is None:
        _client = create_client(settings.supabase_url, settings.supabase_key)
    return _client
