"""Cloud document store module."""

from eunoia.remote.base import (
    JOURNAL_ENTRIES,
    LEARNING_NUGGETS,
    LEGACY_NUGGETS,
    SERVER_TIMESTAMP,
    USER_NUGGETS,
    VISION_BOARDS,
    DocumentStore,
    decode_timestamp,
    encode_timestamp,
)
from eunoia.remote.file_store import FileDocumentStore
from eunoia.remote.memory_store import InMemoryDocumentStore

__all__ = [
    "DocumentStore",
    "FileDocumentStore",
    "InMemoryDocumentStore",
    "SERVER_TIMESTAMP",
    "encode_timestamp",
    "decode_timestamp",
    "JOURNAL_ENTRIES",
    "VISION_BOARDS",
    "LEARNING_NUGGETS",
    "USER_NUGGETS",
    "LEGACY_NUGGETS",
]
