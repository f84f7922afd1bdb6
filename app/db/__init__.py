"""
Database layer for Interview Caller.

Uses Supabase (PostgreSQL) for candidates and the call configuration,
with an in-process fallback when Supabase is not configured.
"""

from app.db.client import get_supabase_client, is_supabase_configured
from app.db.repository import (
    CandidateRepository,
    ConfigRepository,
    MemoryStore,
    clear_all_data,
    export_data,
    import_data,
)

__all__ = [
    "get_supabase_client",
    "is_supabase_configured",
    "CandidateRepository",
    "ConfigRepository",
    "MemoryStore",
    "clear_all_data",
    "export_data",
    "import_data",
]
