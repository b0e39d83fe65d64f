"""Supabase Auth (GoTrue) provider."""
from nakshatra_talks.providers.supabase.supabase_provider import \
    SupabaseIdentityProvider

__all__ = ["SupabaseIdentityProvider"]
