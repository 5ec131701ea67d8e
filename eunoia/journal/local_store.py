"""
Local-first journal cache.

Every entry is an atomic markdown file with YAML frontmatter under
workspace/journal/{user_id}/{entry_id}.md. The frontmatter holds the
structured fields; the body holds the optional free-text content.

The local cache is always written first. Cloud sync reads pending entries
from here and never the other way around.
"""

from __future__ import annotations

import json
from datetime import date as date_type
from datetime import tzinfo
from pathlib import Path
from typing import Any

import frontmatter
from loguru import logger

from eunoia.errors import DatabaseError
from eunoia.journal.entry import EntryNugget, JournalEntry, SyncStatus
from eunoia.remote.base import decode_timestamp
from eunoia.utils.helpers import ensure_dir, safe_filename

PENDING_DELETIONS_FILE = "pendingEntryDeletions.json"


class LocalJournalStore:
    """File-backed journal cache, one directory per user."""

    def __init__(self, workspace: Path):
        """
        Initialize local store.

        Args:
            workspace: Path to workspace directory.
        """
        self.workspace = workspace
        self.journal_dir = ensure_dir(workspace / "journal")

    def _user_dir(self, user_id: str) -> Path:
        return ensure_dir(self.journal_dir / safe_filename(user_id))

    def _entry_path(self, user_id: str, entry_id: str) -> Path:
        return self._user_dir(user_id) / f"{safe_filename(entry_id)}.md"

    def _to_post(self, entry: JournalEntry) -> frontmatter.Post:
        post = frontmatter.Post(entry.content or "")
        meta: dict[str, Any] = {
            "id": entry.id,
            "user_id": entry.user_id,
            "date": entry.date.isoformat(),
            "gratitude": entry.gratitude,
            "highlight": entry.highlight,
            "learning": entry.learning,
            "last_modified": entry.last_modified.isoformat(),
            "sync_status": entry.sync_status.value,
        }
        if entry.learning_nugget is not None:
            meta["learning_nugget"] = entry.learning_nugget.to_document()
        if entry.server_timestamp is not None:
            meta["server_timestamp"] = entry.server_timestamp.isoformat()
        if entry.title is not None:
            meta["title"] = entry.title
        if entry.location is not None:
            meta["location"] = entry.location
        if entry.image_urls:
            meta["image_urls"] = list(entry.image_urls)
        if entry.local_image_paths:
            meta["local_image_paths"] = list(entry.local_image_paths)
        post.metadata.update(meta)
        return post

    def _from_post(self, post: frontmatter.Post, file_path: Path) -> JournalEntry:
        meta = post.metadata
        for field_name in ("id", "user_id", "date"):
            if field_name not in meta:
                raise ValueError(f"Missing required field '{field_name}' in {file_path.name}")

        entry_date = decode_timestamp(meta["date"])
        if entry_date is None:
            raise ValueError(f"Invalid date in {file_path.name}")

        nugget = meta.get("learning_nugget")
        body = post.content.strip()
        return JournalEntry(
            id=str(meta["id"]),
            user_id=str(meta["user_id"]),
            date=entry_date,
            gratitude=meta.get("gratitude") or "",
            highlight=meta.get("highlight") or "",
            learning=meta.get("learning") or "",
            learning_nugget=EntryNugget.from_document(nugget) if nugget else None,
            last_modified=decode_timestamp(meta.get("last_modified")) or entry_date,
            sync_status=SyncStatus(meta.get("sync_status", SyncStatus.PENDING_UPLOAD.value)),
            server_timestamp=decode_timestamp(meta.get("server_timestamp")),
            title=meta.get("title"),
            content=body or None,
            location=meta.get("location"),
            image_urls=list(meta.get("image_urls") or []),
            local_image_paths=list(meta.get("local_image_paths") or []),
        )

    def _read_file(self, file_path: Path) -> JournalEntry | None:
        """Read one entry file; unreadable files are logged and skipped."""
        try:
            post = frontmatter.load(file_path)
            return self._from_post(post, file_path)
        except Exception as e:
            logger.error("Failed to read journal entry {}: {}", file_path, e)
            return None

    def save(self, entry: JournalEntry) -> Path:
        """
        Create or overwrite an entry file.

        Raises:
            DatabaseError: If the file cannot be written.
        """
        file_path = self._entry_path(entry.user_id, entry.id)
        try:
            file_path.write_text(frontmatter.dumps(self._to_post(entry)) + "\n", encoding="utf-8")
        except OSError as e:
            logger.error("Failed to save journal entry {}: {}", entry.id, e)
            raise DatabaseError() from e
        logger.debug("Saved journal entry {} ({})", entry.id, entry.sync_status.value)
        return file_path

    def save_all(self, entries: list[JournalEntry]) -> None:
        for entry in entries:
            self.save(entry)

    def get(self, user_id: str, entry_id: str) -> JournalEntry | None:
        file_path = self._entry_path(user_id, entry_id)
        if not file_path.exists():
            return None
        return self._read_file(file_path)

    def delete(self, user_id: str, entry_id: str) -> bool:
        """Remove an entry file. Returns False if it did not exist."""
        file_path = self._entry_path(user_id, entry_id)
        if not file_path.exists():
            return False
        try:
            file_path.unlink()
        except OSError as e:
            logger.error("Failed to delete journal entry {}: {}", entry_id, e)
            raise DatabaseError() from e
        logger.info("Deleted local journal entry {}", entry_id)
        return True

    def list_entries(self, user_id: str) -> list[JournalEntry]:
        """All readable entries for a user, newest date first."""
        entries = []
        for file_path in self._user_dir(user_id).glob("*.md"):
            entry = self._read_file(file_path)
            if entry is not None:
                entries.append(entry)
        entries.sort(key=lambda e: e.date, reverse=True)
        return entries

    def list_pending(self, user_id: str) -> list[JournalEntry]:
        """Entries with local changes not yet confirmed by the cloud."""
        return [e for e in self.list_entries(user_id) if e.sync_status != SyncStatus.SYNCED]

    def entry_for_day(self, user_id: str, day: date_type, tz: tzinfo | None = None) -> JournalEntry | None:
        """First entry dated on the given calendar day (in ``tz``), if any."""
        for entry in self.list_entries(user_id):
            if entry.local_day(tz) == day and entry.sync_status != SyncStatus.PENDING_DELETE:
                return entry
        return None

    # ---- Deletion queue ----

    def _deletions_path(self, user_id: str) -> Path:
        return self._user_dir(user_id) / PENDING_DELETIONS_FILE

    def pending_deletions(self, user_id: str) -> list[str]:
        """Entry ids whose cloud deletion has not gone through yet."""
        path = self._deletions_path(user_id)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to read deletion queue for {}: {}", user_id, e)
            return []
        return [str(item) for item in data] if isinstance(data, list) else []

    def _write_deletions(self, user_id: str, ids: list[str]) -> None:
        path = self._deletions_path(user_id)
        try:
            path.write_text(json.dumps(ids), encoding="utf-8")
        except OSError as e:
            logger.error("Failed to write deletion queue for {}: {}", user_id, e)
            raise DatabaseError() from e

    def queue_deletion(self, user_id: str, entry_id: str) -> None:
        ids = self.pending_deletions(user_id)
        if entry_id not in ids:
            ids.append(entry_id)
            self._write_deletions(user_id, ids)
            logger.warning("Queued cloud deletion of entry {}", entry_id)

    def clear_deletion(self, user_id: str, entry_id: str) -> None:
        ids = self.pending_deletions(user_id)
        if entry_id in ids:
            ids.remove(entry_id)
            self._write_deletions(user_id, ids)
