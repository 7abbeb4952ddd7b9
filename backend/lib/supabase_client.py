"""
Supabase client for session snapshot persistence
"""
import os
from typing import Optional

from supabase import create_client, Client
from dotenv import load_dotenv

load_dotenv()

_supabase_client: Optional[Client] = None


def supabase_configured() -> bool:
    """True when both the Supabase URL and service key are set."""
    return bool(os.getenv("SUPABASE_URL") and os.getenv("SUPABASE_SERVICE_KEY"))


def get_supabase_client() -> Client:
    """Get or create the Supabase client singleton"""
    global _supabase_client

    if _supabase_client is None:
        url = os.getenv("SUPABASE_URL")
        # Service role key: the backend writes snapshots on behalf of learners
        key = os.getenv("SUPABASE_SERVICE_KEY")

        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set in environment")

        _supabase_client = create_client(url, key)

    return _supabase_client


def get_optional_supabase_client() -> Optional[Client]:
    """Supabase client if configured, otherwise None (in-memory mode)."""
    if not supabase_configured():
        return None
    return get_supabase_client()
