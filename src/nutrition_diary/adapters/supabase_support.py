"""Shared helpers for Supabase repositories."""

import httpx
from supabase import PostgrestAPIError

from nutrition_diary.domain.errors import StoreIOError


def execute(query, action: str):  # type: ignore[no-untyped-def]
    """Run a query builder, translating client failures into StoreIOError."""
    try:
        return query.execute()
    except (PostgrestAPIError, httpx.HTTPError) as exc:
        raise StoreIOError(f"Supabase {action} failed: {exc}") from exc
