"""
supabase_rest.py — HTTP client for Supabase's PostgREST API.
Used to mirror each user's state blob to a remote table. Uses only httpx.
"""
import httpx
from urllib.parse import quote

from config import SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY


def is_configured() -> bool:
    return bool(SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY)


def _headers():
    return {
        "apikey": SUPABASE_SERVICE_ROLE_KEY,
        "Authorization": f"Bearer {SUPABASE_SERVICE_ROLE_KEY}",
        "Content-Type": "application/json",
        "Prefer": "return=representation",
    }


def sb_select(table: str, filters: dict = None, columns: str = "*") -> list:
    """Select rows from a table with optional equality filters."""
    url = f"{SUPABASE_URL}/rest/v1/{table}?select={columns}"
    if filters:
        for key, value in filters.items():
            url += f"&{key}=eq.{quote(str(value))}"

    with httpx.Client(timeout=10) as client:
        resp = client.get(url, headers=_headers())
        resp.raise_for_status()
        return resp.json()


def sb_upsert(table: str, data: dict, on_conflict: str) -> dict:
    """Insert or replace a row keyed by the on_conflict column."""
    url = f"{SUPABASE_URL}/rest/v1/{table}?on_conflict={on_conflict}"
    headers = {**_headers(), "Prefer": "return=representation,resolution=merge-duplicates"}
    with httpx.Client(timeout=10) as client:
        resp = client.post(url, json=data, headers=headers)
        resp.raise_for_status()
        result = resp.json()
        return result[0] if isinstance(result, list) and result else {}
