"""
Repository layer for database operations.

Provides CRUD operations for candidates and the call configuration.
When Supabase is not configured every repository reads and writes a
process-local MemoryStore instead.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable

import structlog
from supabase import Client

from app.db.client import get_optional_client
from app.db.models import CallConfiguration, CandidateCreate, CandidateStatus

logger = structlog.get_logger()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class MemoryStore:
    """Fallback storage used when Supabase is not configured."""

    candidates: list[dict] = field(default_factory=list)
    config: dict | None = None
    next_id: int = 1

    def clear(self) -> None:
        self.candidates = []
        self.config = None
        self.next_id = 1


_memory_store = MemoryStore()


def get_memory_store() -> MemoryStore:
    return _memory_store


class BaseRepository:
    """Base repository with common operations."""

    table_name: str = ""

    def __init__(self, client: Client | None = None, memory: MemoryStore | None = None):
        self.client = client or get_optional_client()
        self.memory = memory or get_memory_store()

    @property
    def uses_fallback(self) -> bool:
        return self.client is None

    def _table(self):
        return self.client.table(self.table_name)


class CandidateRepository(BaseRepository):
    """Repository for candidates table (also backs the call queue and history)."""

    table_name = "candidates"

    def list_all(self) -> list[dict]:
        """List all candidates, newest first."""
        if self.uses_fallback:
            return list(reversed(self.memory.candidates))
        result = self._table().select("*").order("created_at", desc=True).execute()
        return result.data or []

    def get(self, candidate_id: int) -> dict | None:
        """Get a candidate by ID."""
        if self.uses_fallback:
            return next((c for c in self.memory.candidates if c["id"] == candidate_id), None)
        result = self._table().select("*").eq("id", candidate_id).execute()
        return result.data[0] if result.data else None

    def create(self, candidate: CandidateCreate | dict, **extra) -> dict:
        """Create a candidate."""
        return self.create_many([candidate], **extra)[0]

    def create_many(self, candidates: Iterable[CandidateCreate | dict], **extra) -> list[dict]:
        """Batch create candidates. `extra` is applied to every row."""
        rows = [{**self._to_row(c), **extra} for c in candidates]
        if not rows:
            return []

        if self.uses_fallback:
            created = []
            for row in rows:
                row = {**row, "id": self.memory.next_id, "created_at": _now(), "updated_at": _now()}
                self.memory.next_id += 1
                self.memory.candidates.append(row)
                created.append(row)
            logger.info("Created candidates", count=len(created), storage="memory")
            return created

        result = self._table().insert(rows).execute()
        logger.info("Created candidates", count=len(result.data))
        return result.data

    def update(self, candidate_id: int, **kwargs) -> dict | None:
        """Update a candidate."""
        data = {**kwargs, "updated_at": _now()}
        if self.uses_fallback:
            candidate = self.get(candidate_id)
            if candidate is None:
                return None
            candidate.update(data)
            return candidate

        result = self._table().update(data).eq("id", candidate_id).execute()
        return result.data[0] if result.data else None

    def delete(self, candidate_id: int) -> None:
        """Delete a candidate."""
        if self.uses_fallback:
            self.memory.candidates = [c for c in self.memory.candidates if c["id"] != candidate_id]
            return
        self._table().delete().eq("id", candidate_id).execute()

    def delete_all(self) -> None:
        if self.uses_fallback:
            self.memory.candidates = []
            return
        self._table().delete().neq("id", 0).execute()

    def list_by_status(self, status: CandidateStatus | str) -> list[dict]:
        """List candidates with the given status, newest first."""
        status = CandidateStatus(status).value
        if self.uses_fallback:
            return [c for c in self.list_all() if c.get("status") == status]
        result = (
            self._table()
            .select("*")
            .eq("status", status)
            .order("created_at", desc=True)
            .execute()
        )
        return result.data or []

    # ── Call queue ──

    def list_queue(self) -> list[dict]:
        return self.list_by_status(CandidateStatus.PENDING)

    def list_history(self) -> list[dict]:
        return self.list_by_status(CandidateStatus.COMPLETED)

    def add_to_queue(self, candidates: Iterable[CandidateCreate | dict]) -> list[dict]:
        """Insert candidates as pending calls."""
        return self.create_many(
            candidates,
            status=CandidateStatus.PENDING.value,
            added_at=_now(),
        )

    def update_status(self, candidate_id: int, status: CandidateStatus | str, **extra) -> dict | None:
        """Update call status, stamping start/end times."""
        status = CandidateStatus(status)
        data = {"status": status.value, **extra}

        if status == CandidateStatus.CALLING:
            data["call_start_time"] = _now()
        elif status == CandidateStatus.COMPLETED:
            data["call_end_time"] = _now()

        updated = self.update(candidate_id, **data)
        logger.info("Updated candidate status", candidate_id=candidate_id, status=status.value)
        return updated

    def clear_queue(self) -> None:
        """Remove every pending candidate."""
        if self.uses_fallback:
            self.memory.candidates = [
                c for c in self.memory.candidates
                if c.get("status") != CandidateStatus.PENDING.value
            ]
            return
        self._table().delete().eq("status", CandidateStatus.PENDING.value).execute()

    def _to_row(self, candidate: CandidateCreate | dict) -> dict:
        if isinstance(candidate, CandidateCreate):
            return candidate.model_dump(mode="json")
        row = CandidateCreate.model_validate(candidate).model_dump(mode="json")
        # Keep any history fields an import carries along
        for key in ("call_result", "call_notes", "call_time", "added_at", "call_start_time", "call_end_time"):
            if candidate.get(key) is not None:
                row[key] = candidate[key]
        return row


class ConfigRepository(BaseRepository):
    """Repository for call_configs table. Holds one current configuration."""

    table_name = "call_configs"

    def get(self) -> CallConfiguration | None:
        """Get the current configuration, or None if nothing was saved yet."""
        row = self._latest_row()
        return CallConfiguration.from_row(row) if row else None

    def save(self, config: CallConfiguration) -> CallConfiguration:
        """Replace the current configuration wholesale."""
        row = config.to_row()

        if self.uses_fallback:
            self.memory.config = {**row, "id": 1, "updated_at": _now()}
            logger.info("Saved call configuration", storage="memory", method=config.method.value)
            return CallConfiguration.from_row(self.memory.config)

        existing = self._latest_row()
        if existing:
            result = (
                self._table()
                .update({**row, "updated_at": _now()})
                .eq("id", existing["id"])
                .execute()
            )
        else:
            result = self._table().insert(row).execute()

        logger.info("Saved call configuration", method=config.method.value)
        return CallConfiguration.from_row(result.data[0]) if result.data else config

    def delete_all(self) -> None:
        if self.uses_fallback:
            self.memory.config = None
            return
        self._table().delete().neq("id", 0).execute()

    def _latest_row(self) -> dict | None:
        if self.uses_fallback:
            return self.memory.config
        result = (
            self._table()
            .select("*")
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        return result.data[0] if result.data else None


def get_candidate_repository() -> CandidateRepository:
    return CandidateRepository()


# ══════════════════════════════════════════════════════════
# Export / import
# ══════════════════════════════════════════════════════════


def export_data(client: Client | None = None, memory: MemoryStore | None = None) -> dict[str, Any]:
    """Dump candidates and the current configuration."""
    candidates = CandidateRepository(client, memory).list_all()
    config = ConfigRepository(client, memory).get()

    return {
        "candidates": candidates,
        "config": config.to_row() if config else None,
        "exported_at": _now(),
    }


def import_data(
    data: dict[str, Any],
    client: Client | None = None,
    memory: MemoryStore | None = None,
) -> dict[str, int]:
    """
    Restore an export. Candidates replace the existing ones; the config,
    when present, is saved as the new current configuration.

    Everything is validated before anything is written.

    Raises:
        ValueError: If a candidate or the config is malformed
    """
    candidate_repo = CandidateRepository(client, memory)
    imported = 0

    candidates = data.get("candidates")
    rows = [candidate_repo._to_row(c) for c in candidates] if isinstance(candidates, list) else None

    config = None
    if data.get("config"):
        try:
            config = CallConfiguration.from_row(data["config"])
        except KeyError as e:
            raise ValueError(f"Config is missing {e}") from e

    if rows is not None:
        candidate_repo.delete_all()
        imported = len(candidate_repo.create_many(rows))

    if config:
        ConfigRepository(client, memory).save(config)

    logger.info("Imported data", candidates=imported, config=config is not None)
    return {"candidates": imported}


def clear_all_data(client: Client | None = None, memory: MemoryStore | None = None) -> None:
    CandidateRepository(client, memory).delete_all()
    ConfigRepository(client, memory).delete_all()
    logger.info("Cleared all data")
