"""Disk-backed catalog snapshot with a wall-clock TTL.

The cache owns a single storage slot. It never raises for storage or parse
problems: an unreadable slot is a cache miss, and an unparsable one is
deleted so it cannot resurface on the next run.

Two runs racing on the same slot are not protected against; the last
writer wins.
"""

import json
import logging
import time
from pathlib import Path
from typing import Callable, Optional, Protocol

import aiofiles
import aiofiles.os

from better_agents import console
from better_agents.constants import SKILLS_CACHE_TTL_SECONDS
from better_agents.settings import get_skills_cache_path
from better_agents.skills.models import CatalogSnapshot, SkillMetadata

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CacheStorage(Protocol):
    """A single persisted text slot."""

    async def read(self) -> Optional[str]:
        """Slot contents, or None when nothing is stored."""
        ...

    async def write(self, data: str) -> None: ...

    async def delete(self) -> None: ...


class FileCacheStorage:
    def __init__(self, path: Path):
        self.path = path

    async def read(self) -> Optional[str]:
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                return await f.read()
        except FileNotFoundError:
            return None

    async def write(self, data: str) -> None:
        await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
        async with aiofiles.open(self.path, "w", encoding="utf-8") as f:
            await f.write(data)

    async def delete(self) -> None:
        try:
            await aiofiles.os.remove(self.path)
        except FileNotFoundError:
            pass


class MemoryCacheStorage:
    def __init__(self, data: Optional[str] = None):
        self.data = data

    async def read(self) -> Optional[str]:
        return self.data

    async def write(self, data: str) -> None:
        self.data = data

    async def delete(self) -> None:
        self.data = None


class SkillsCache:
    def __init__(
        self,
        storage: CacheStorage,
        clock: Clock = time.time,
        ttl_seconds: float = SKILLS_CACHE_TTL_SECONDS,
    ):
        self.storage = storage
        self.clock = clock
        self.ttl_seconds = ttl_seconds

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    async def load(self) -> Optional[CatalogSnapshot]:
        """The persisted snapshot regardless of age, or None."""
        try:
            raw = await self.storage.read()
            if raw is None:
                return None
            return CatalogSnapshot.from_dict(json.loads(raw))
        except OSError as e:
            logger.debug("Could not read skills cache: %s", e)
            return None
        except (ValueError, TypeError) as e:
            # Undecodable bytes and bad JSON are both ValueErrors.
            logger.debug("Deleting corrupt skills cache: %s", e)
            await self.clear()
            return None

    def is_fresh(self, snapshot: CatalogSnapshot) -> bool:
        return self._now_ms() - snapshot.timestamp < self.ttl_seconds * 1000

    async def save(self, skills: list[SkillMetadata]) -> None:
        snapshot = CatalogSnapshot(timestamp=self._now_ms(), skills=tuple(skills))
        try:
            await self.storage.write(json.dumps(snapshot.to_dict(), indent=2))
        except OSError as e:
            logger.debug("Could not write skills cache: %s", e)
            console.warning("Failed to save skills cache")

    async def clear(self) -> None:
        try:
            await self.storage.delete()
        except OSError as e:
            logger.debug("Could not delete skills cache: %s", e)


def default_cache() -> SkillsCache:
    """The per-user cache at ~/.better-agents/skills-cache.json."""
    return SkillsCache(FileCacheStorage(get_skills_cache_path()))
