"""Vision board persistence: local JSON cache plus cloud copy."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

from loguru import logger

from eunoia.errors import DatabaseError, EunoiaError, InvalidDataError
from eunoia.journal.entry import SyncStatus
from eunoia.remote.base import VISION_BOARDS, DocumentStore
from eunoia.utils.helpers import ensure_dir, safe_filename, utcnow
from eunoia.vision.board import DesiredPersonality, Goal, LifestyleVision, PersonalValue, VisionBoard


class VisionBoardService:
    """
    Load and save one vision board per user.

    Reads prefer whichever copy (local or cloud) was modified last. Writes go
    to the local cache first and stay pending when the cloud is unreachable.
    """

    def __init__(self, workspace: Path, remote: DocumentStore):
        self.vision_dir = ensure_dir(workspace / "vision")
        self.remote = remote

    def _path(self, user_id: str) -> Path:
        return self.vision_dir / f"{safe_filename(user_id)}.json"

    def _load_local(self, user_id: str) -> VisionBoard | None:
        path = self._path(user_id)
        if not path.exists():
            return None
        try:
            return VisionBoard.from_document(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError) as e:
            logger.error("Failed to read vision board {}: {}", path, e)
            return None

    def _save_local(self, board: VisionBoard) -> None:
        try:
            self._path(board.user_id).write_text(
                json.dumps(board.to_document(), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            logger.error("Failed to save vision board for {}: {}", board.user_id, e)
            raise DatabaseError() from e

    async def _fetch_remote(self, user_id: str) -> VisionBoard | None:
        docs = await self.remote.query(VISION_BOARDS, [("userId", user_id)], limit=1)
        if not docs:
            return None
        try:
            return VisionBoard.from_document(docs[0], sync_status=SyncStatus.SYNCED)
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Ignoring malformed remote vision board for {}: {}", user_id, e)
            return None

    async def load(self, user_id: str) -> VisionBoard:
        """
        Load the user's board, creating an empty one if none exists.

        A local board with unpushed changes newer than the cloud copy wins.
        """
        local = self._load_local(user_id)
        try:
            remote = await self._fetch_remote(user_id)
        except EunoiaError as e:
            logger.warning("Could not fetch vision board for {}: {}", user_id, e.message)
            remote = None

        if remote is None:
            board = local or VisionBoard(user_id=user_id)
        elif local is not None and local.sync_status != SyncStatus.SYNCED and local.last_modified > remote.last_modified:
            board = local
        else:
            board = remote
            self._save_local(board)
        return board

    async def save(self, board: VisionBoard) -> VisionBoard:
        """
        Validate and save a board locally, then to the cloud.

        Raises:
            InvalidDataError: If validation fails.
        """
        errors = board.validate()
        if errors:
            raise InvalidDataError("; ".join(errors))

        board.last_modified = utcnow()
        board.sync_status = SyncStatus.PENDING_UPDATE
        self._save_local(board)

        doc = board.to_document()
        doc["syncStatus"] = SyncStatus.SYNCED.value
        try:
            await self.remote.set(VISION_BOARDS, board.id, doc)
        except EunoiaError as e:
            logger.warning("Vision board upload failed for {}, kept locally: {}", board.user_id, e.message)
            return board

        board.sync_status = SyncStatus.SYNCED
        self._save_local(board)
        logger.info("Saved vision board for {}", board.user_id)
        return board

    async def _update(self, user_id: str, change: Callable[[VisionBoard], None]) -> VisionBoard:
        board = await self.load(user_id)
        change(board)
        return await self.save(board)

    async def add_value(self, user_id: str, value: PersonalValue) -> VisionBoard:
        return await self._update(user_id, lambda b: b.personal_values.append(value))

    async def add_goal(self, user_id: str, goal: Goal) -> VisionBoard:
        return await self._update(user_id, lambda b: b.goals.append(goal))

    async def remove_goal(self, user_id: str, goal_id: str) -> VisionBoard:
        def _remove(board: VisionBoard) -> None:
            board.goals = [g for g in board.goals if g.id != goal_id]

        return await self._update(user_id, _remove)

    async def update_lifestyle(self, user_id: str, vision: LifestyleVision) -> VisionBoard:
        def _set(board: VisionBoard) -> None:
            board.lifestyle_vision = vision

        return await self._update(user_id, _set)

    async def update_personality(self, user_id: str, personality: DesiredPersonality) -> VisionBoard:
        def _set(board: VisionBoard) -> None:
            board.desired_personality = personality

        return await self._update(user_id, _set)
