"""
User directory cache.

Loads the user listing once and exposes an id -> display name map. The
orchestrator waits for this load to settle before starting a cycle; a
failed load leaves the map empty so names fall back to placeholders.
"""

import asyncio
from typing import Optional

from pydantic import ValidationError

from src.core.models import DirectoryUser
from src.observability.logger import get_logger

from .sources.base import UserDirectory

logger = get_logger(__name__)


class UserDirectoryCache:
    """
    Cached view of a UserDirectory.

    Attributes:
        users: Users loaded from the directory, in listing order
        names: user id -> display name
        failed: True if the last load raised
    """

    def __init__(self, directory: UserDirectory):
        self.directory = directory
        self.users: list[DirectoryUser] = []
        self.names: dict[str, str] = {}
        self.failed = False
        self._task: Optional[asyncio.Task] = None

    @property
    def ready(self) -> bool:
        """True once a load has settled (successfully or not)."""
        return self._task is not None and self._task.done()

    async def ensure_loaded(self) -> None:
        """
        Load the directory if it has not been loaded yet.

        Concurrent callers share one load. Never raises for directory
        failures.
        """
        if self._task is None:
            self._task = asyncio.ensure_future(self._load())
        await asyncio.shield(self._task)

    async def refresh(self) -> None:
        """Discard the cached listing and load it again."""
        self._task = None
        await self.ensure_loaded()

    async def _load(self) -> None:
        try:
            raw_users = await self.directory.list_users()
        except Exception as e:
            self.failed = True
            self.users = []
            self.names = {}
            logger.error(
                f"User directory load failed, names fall back to placeholders: {e}",
                exc_info=True,
            )
            return

        if raw_users is None:
            raw_users = []
        if not isinstance(raw_users, list):
            self.failed = True
            self.users = []
            self.names = {}
            logger.error(
                f"User directory returned {type(raw_users).__name__} instead of a list, "
                "names fall back to placeholders"
            )
            return

        users: list[DirectoryUser] = []
        skipped = 0
        for index, raw in enumerate(raw_users):
            if not isinstance(raw, dict):
                skipped += 1
                logger.warning("Skipping malformed directory entry", extra={"index": index})
                continue
            try:
                user = DirectoryUser.from_raw(raw)
            except (ValidationError, TypeError, ValueError) as e:
                skipped += 1
                logger.warning(
                    f"Skipping unreadable directory entry: {e}",
                    extra={"index": index, "error_type": type(e).__name__},
                )
                continue
            if any(existing.id == user.id for existing in users):
                continue
            users.append(user)

        self.failed = False
        self.users = users
        self.names = {user.id: user.display_name for user in users}
        logger.info(
            f"Loaded {len(users)} directory users",
            extra={"user_count": len(users), "skipped_count": skipped},
        )
