"""Supabase service utilities."""

from scribe.services.supabase.helpers import first_row, raise_for_auth_error, raise_for_postgrest_error
from scribe.services.supabase.supabase import create_supabase_admin_client, create_supabase_user_client

__all__ = [
    "create_supabase_admin_client",
    "create_supabase_user_client",
    "first_row",
    "raise_for_auth_error",
    "raise_for_postgrest_error",
]
