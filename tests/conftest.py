"""Shared fixtures."""

from pathlib import Path

import pytest

from eunoia.journal.local_store import LocalJournalStore
from eunoia.journal.service import JournalService
from eunoia.remote.memory_store import InMemoryDocumentStore


class FakeSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def remote() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def local_store(tmp_path: Path) -> LocalJournalStore:
    return LocalJournalStore(tmp_path)


@pytest.fixture
def journal(local_store: LocalJournalStore, remote: InMemoryDocumentStore, fake_sleep: FakeSleep) -> JournalService:
    return JournalService(local_store, remote, sleep=fake_sleep)
