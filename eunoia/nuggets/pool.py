"""
Rolling-refill nugget distribution.

All users draw from one shared pool per category. Each user has a seen-list
per category; a user is handed the oldest pool nugget not on that list. When
everything in a category has been seen, a fresh batch is generated, added to
the pool, and the first new nugget is handed out. Nobody receives the same
pool nugget twice.
"""

from __future__ import annotations

from datetime import timedelta

from loguru import logger

from eunoia.errors import (
    EunoiaError,
    GenerationFailedError,
    InvalidDataError,
    InvalidResponseError,
    NoNuggetsAvailableError,
)
from eunoia.nuggets.fallback import example_nuggets
from eunoia.nuggets.generator import NuggetGenerator
from eunoia.nuggets.models import (
    LearningNugget,
    NuggetCategory,
    SharedNugget,
    UserNuggetRecord,
    record_id,
)
from eunoia.remote.base import (
    LEARNING_NUGGETS,
    LEGACY_NUGGETS,
    USER_NUGGETS,
    DocumentStore,
    decode_timestamp,
)
from eunoia.utils.helpers import utcnow


class NuggetPool:
    """Shared nugget pool with per-user seen tracking."""

    def __init__(
        self,
        store: DocumentStore,
        generator: NuggetGenerator | None = None,
        nuggets_per_category: int = 25,
        use_fallback: bool = False,
    ):
        """
        Initialize the pool.

        Args:
            store: Cloud document store.
            generator: Nugget generator; without one the pool cannot refill.
            nuggets_per_category: Batch size for refills and seeding.
            use_fallback: Refill with built-in examples when generation fails.
        """
        self.store = store
        self.generator = generator
        self.nuggets_per_category = nuggets_per_category
        self.use_fallback = use_fallback

    # ---- Reads ----

    async def get_record(self, user_id: str, category: NuggetCategory) -> UserNuggetRecord:
        doc = await self.store.get(USER_NUGGETS, record_id(user_id, category))
        if doc is None:
            return UserNuggetRecord(user_id=user_id, category=category)
        return UserNuggetRecord.from_document(doc)

    async def list_category(self, category: NuggetCategory) -> list[SharedNugget]:
        """Pool nuggets of a category, oldest first."""
        nuggets = []
        for doc in await self.store.query(LEARNING_NUGGETS, [("category", category.value)]):
            try:
                nuggets.append(SharedNugget.from_document(doc))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping malformed pool nugget {}: {}", doc.get("id"), e)
        nuggets.sort(key=lambda n: (n.created_at, n.id))
        return nuggets

    async def statistics(self) -> dict[str, int]:
        """Number of pool nuggets per category."""
        stats = {category.value: 0 for category in NuggetCategory}
        for doc in await self.store.query(LEARNING_NUGGETS):
            try:
                stats[NuggetCategory.parse(doc.get("category", "")).value] += 1
            except ValueError:
                continue
        logger.debug("Nugget statistics: {}", stats)
        return stats

    # ---- Distribution ----

    async def fetch_nugget(self, category: NuggetCategory, user_id: str) -> LearningNugget:
        """
        Hand the user the next unseen nugget of a category.

        Raises:
            NoNuggetsAvailableError: If the pool is exhausted and refilling yields
                nothing (including an unparseable model reply).
            EunoiaError: Generation errors when no fallback is configured.
        """
        record = await self.get_record(user_id, category)
        seen = set(record.seen_nuggets)
        unseen = [n for n in await self.list_category(category) if n.id not in seen]

        if not unseen:
            logger.info("User {} has seen all {} nuggets, refilling", user_id, category.value)
            try:
                fresh = await self._refill(category)
            except InvalidResponseError as e:
                logger.warning("Refill for {} produced no nuggets: {}", category.value, e.message)
                raise NoNuggetsAvailableError() from e
            unseen = [n for n in fresh if n.id not in seen]
            if not unseen:
                raise NoNuggetsAvailableError()

        chosen = unseen[0]
        record.add_seen(chosen.id)
        await self.store.set(USER_NUGGETS, record.doc_id, record.to_document())
        logger.info("Delivered nugget {} ({}) to {}", chosen.id, category.value, user_id)
        return LearningNugget.from_shared(chosen, user_id)

    async def _refill(self, category: NuggetCategory) -> list[SharedNugget]:
        try:
            return await self.generate_new_nuggets(category, self.nuggets_per_category)
        except EunoiaError as e:
            if not self.use_fallback:
                raise
            logger.warning("Generation failed for {} ({}), using examples", category.value, e.message)
            examples = example_nuggets(category)
            await self._store_batch(examples)
            return examples

    async def mark_seen(self, user_id: str, category: NuggetCategory, nugget_id: str) -> UserNuggetRecord:
        """Add a nugget to the user's seen-list (creating the record if needed)."""
        record = await self.get_record(user_id, category)
        if record.add_seen(nugget_id):
            logger.debug("Marked nugget {} seen for {}", nugget_id, user_id)
        await self.store.set(USER_NUGGETS, record.doc_id, record.to_document())
        return record

    async def mark_added_to_journal(self, user_id: str, category: NuggetCategory, nugget_id: str) -> None:
        """
        Record that a delivered nugget was added to the user's journal.

        Raises:
            InvalidDataError: If the user was never handed this nugget.
        """
        record = await self.get_record(user_id, category)
        if nugget_id not in record.seen_nuggets:
            logger.error("Nugget {} was never delivered to {}", nugget_id, user_id)
            raise InvalidDataError("This learning nugget was not found for the user.")
        if nugget_id not in record.added_to_journal:
            record.added_to_journal.append(nugget_id)
            await self.store.set(USER_NUGGETS, record.doc_id, record.to_document())
        logger.debug("Nugget {} added to journal for {}", nugget_id, user_id)

    # ---- Pool maintenance ----

    async def _store_batch(self, nuggets: list[SharedNugget]) -> None:
        await self.store.batch_set(LEARNING_NUGGETS, [(n.id, n.to_document()) for n in nuggets])

    async def generate_new_nuggets(self, category: NuggetCategory, count: int | None = None) -> list[SharedNugget]:
        """
        Generate a batch for a category and add it to the pool.

        Raises:
            GenerationFailedError: If no generator is configured.
            EunoiaError: Whatever the generator raises.
        """
        if self.generator is None:
            raise GenerationFailedError()
        pairs = await self.generator.generate(category, count or self.nuggets_per_category)
        nuggets = [SharedNugget.create(category, title, content) for title, content in pairs]
        # Keep generation order when the pool sorts by creation time
        base = utcnow()
        for i, nugget in enumerate(nuggets):
            nugget.created_at = base + timedelta(microseconds=i)
        await self._store_batch(nuggets)
        logger.info("Added {} nuggets to the {} pool", len(nuggets), category.value)
        return nuggets

    async def _seed(self, categories: list[NuggetCategory]) -> dict[str, int]:
        results = {}
        for category in categories:
            try:
                results[category.value] = len(await self.generate_new_nuggets(category))
            except EunoiaError as e:
                logger.error("Seeding {} failed: {}", category.value, e.message)
                results[category.value] = 0
        return results

    async def initialize_pool(self) -> dict[str, int]:
        """Seed every category, unless the pool already holds anything."""
        if await self.store.query(LEARNING_NUGGETS, limit=1):
            logger.info("Nugget pool already initialized, skipping")
            return {}
        return await self._seed(list(NuggetCategory))

    async def initialize_missing_categories(self) -> dict[str, int]:
        """Seed only categories with no pool nuggets yet; others report 0."""
        missing = []
        results = {}
        for category in NuggetCategory:
            if await self.store.query(LEARNING_NUGGETS, [("category", category.value)], limit=1):
                logger.debug("Category {} already has nuggets", category.value)
                results[category.value] = 0
            else:
                missing.append(category)
        results.update(await self._seed(missing))
        return results

    async def migrate_legacy(self) -> int:
        """
        Move per-user nuggets from the legacy collection into the pool.

        Every legacy nugget becomes a pool nugget with the same id and is
        recorded as seen by its owner. Safe to run more than once.

        Returns:
            Number of pool nuggets created.
        """
        legacy_docs = await self.store.query(LEGACY_NUGGETS)
        if not legacy_docs:
            return 0

        existing = {doc["id"] for doc in await self.store.query(LEARNING_NUGGETS)}
        new_nuggets: list[SharedNugget] = []
        records: dict[str, UserNuggetRecord] = {}

        for doc in legacy_docs:
            try:
                category = NuggetCategory.parse(doc.get("category", ""))
                user_id = str(doc["userId"])
            except (KeyError, ValueError) as e:
                logger.warning("Skipping legacy nugget {}: {}", doc.get("id"), e)
                continue

            nugget_id = str(doc["id"])
            if nugget_id not in existing:
                shared = SharedNugget(
                    id=nugget_id,
                    category=category,
                    title=str(doc.get("title", "")),
                    content=str(doc.get("content", "")),
                )
                created = decode_timestamp(doc.get("date"))
                if created is not None:
                    shared.created_at = created
                new_nuggets.append(shared)
                existing.add(nugget_id)

            key = record_id(user_id, category)
            if key not in records:
                records[key] = await self.get_record(user_id, category)
            record = records[key]
            record.add_seen(nugget_id)
            if doc.get("isAddedToJournal") and nugget_id not in record.added_to_journal:
                record.added_to_journal.append(nugget_id)

        if new_nuggets:
            await self._store_batch(new_nuggets)
        for record in records.values():
            await self.store.set(USER_NUGGETS, record.doc_id, record.to_document())

        logger.info("Migrated {} legacy nuggets for {} user records", len(new_nuggets), len(records))
        return len(new_nuggets)

    def fallback_nugget(self, category: NuggetCategory, user_id: str) -> LearningNugget:
        """A built-in example nugget for when nothing can be fetched or generated."""
        return LearningNugget.from_shared(example_nuggets(category)[0], user_id)
