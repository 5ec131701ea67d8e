"""
JSON-file document store.

Each collection is one JSON file under the store root, mapping document ids
to documents. Writes go through a temp file and ``os.replace`` so a crash
never leaves a half-written collection behind.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from eunoia.errors import DatabaseError
from eunoia.remote.base import DocumentStore, Filter, matches
from eunoia.utils.helpers import ensure_dir, safe_filename


class FileDocumentStore(DocumentStore):
    """Document store persisted as one JSON file per collection."""

    def __init__(self, root: Path):
        """
        Initialize the store.

        Args:
            root: Directory holding the collection files.
        """
        self.root = ensure_dir(root)
        self._lock = asyncio.Lock()

    def _path(self, collection: str) -> Path:
        return self.root / f"{safe_filename(collection)}.json"

    def _load(self, collection: str) -> dict[str, dict[str, Any]]:
        path = self._path(collection)
        if not path.exists():
            return {}
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to read collection {}: {}", collection, e)
            raise DatabaseError(f"Could not read {collection}") from e

    def _dump(self, collection: str, docs: dict[str, dict[str, Any]]) -> None:
        path = self._path(collection)
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_text(json.dumps(docs, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            logger.error("Failed to write collection {}: {}", collection, e)
            raise DatabaseError(f"Could not write {collection}") from e

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        async with self._lock:
            doc = self._load(collection).get(doc_id)
        if doc is None:
            return None
        return {**doc, "id": doc.get("id", doc_id)}

    async def set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        resolved = self._resolve(data)
        async with self._lock:
            docs = self._load(collection)
            if merge and doc_id in docs:
                docs[doc_id].update(resolved)
            else:
                docs[doc_id] = resolved
            self._dump(collection, docs)
        logger.debug("Wrote {}/{}", collection, doc_id)

    async def delete(self, collection: str, doc_id: str) -> None:
        async with self._lock:
            docs = self._load(collection)
            if docs.pop(doc_id, None) is not None:
                self._dump(collection, docs)
                logger.debug("Deleted {}/{}", collection, doc_id)

    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        async with self._lock:
            docs = self._load(collection)
        results = [
            {**doc, "id": doc.get("id", doc_id)}
            for doc_id, doc in docs.items()
            if matches(doc, filters)
        ]
        return results[:limit] if limit else results

    async def batch_set(self, collection: str, docs: list[tuple[str, dict[str, Any]]]) -> None:
        async with self._lock:
            existing = self._load(collection)
            for doc_id, data in docs:
                existing[doc_id] = self._resolve(data)
            self._dump(collection, existing)
        logger.info("Batch wrote {} documents to {}", len(docs), collection)
