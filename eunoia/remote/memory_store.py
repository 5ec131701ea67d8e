"""In-process document store."""

from __future__ import annotations

from typing import Any

from eunoia.errors import NetworkError, NetworkErrorKind
from eunoia.remote.base import DocumentStore, Filter, matches


class InMemoryDocumentStore(DocumentStore):
    """
    Dict-backed document store.

    Useful for tests and offline demos. Outages can be simulated with
    ``online = False`` or by setting ``fail_next`` to the number of
    upcoming calls that should fail with a network error.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.online = True
        self.fail_next = 0
        self.calls = 0

    def _check_available(self) -> None:
        self.calls += 1
        if not self.online:
            raise NetworkError(NetworkErrorKind.NO_CONNECTION)
        if self.fail_next > 0:
            self.fail_next -= 1
            raise NetworkError(NetworkErrorKind.TIMEOUT)

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        self._check_available()
        doc = self._collection(collection).get(doc_id)
        if doc is None:
            return None
        return {**self._resolve(doc), "id": doc.get("id", doc_id)}

    async def set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        self._check_available()
        docs = self._collection(collection)
        resolved = self._resolve(data)
        if merge and doc_id in docs:
            docs[doc_id].update(resolved)
        else:
            docs[doc_id] = resolved

    async def delete(self, collection: str, doc_id: str) -> None:
        self._check_available()
        self._collection(collection).pop(doc_id, None)

    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        self._check_available()
        results = [
            {**self._resolve(doc), "id": doc.get("id", doc_id)}
            for doc_id, doc in self._collection(collection).items()
            if matches(doc, filters)
        ]
        return results[:limit] if limit else results

    async def batch_set(self, collection: str, docs: list[tuple[str, dict[str, Any]]]) -> None:
        # One availability check for the whole batch, then apply all writes
        self._check_available()
        target = self._collection(collection)
        for doc_id, data in docs:
            target[doc_id] = self._resolve(data)
