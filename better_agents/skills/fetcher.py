"""Fetching the remote skills catalog.

Skills are listed from the ``skills/`` directory of the contextware/skills
GitHub repository, and each skill's SKILL.md is fetched and parsed into a
``SkillMetadata``. Results are cached for 24 hours so repeated runs do not
hit GitHub API rate limits.

``SkillsCatalog.fetch`` never raises: when GitHub is unreachable the last
snapshot on disk is used even if it has expired, and with no snapshot at
all the result is an empty list.
"""

import asyncio
import logging
import os
from typing import Optional, Protocol

import httpx

from better_agents import console
from better_agents.constants import (
    EXCLUDED_CATALOG_ENTRIES,
    GITHUB_API_BASE,
    GITHUB_RAW_BASE,
    SKILLS_REPO_BRANCH,
    SKILLS_REPO_NAME,
    SKILLS_REPO_OWNER,
)
from better_agents.skills.cache import SkillsCache, default_cache
from better_agents.skills.models import SkillMetadata
from better_agents.skills.parser import parse_skill_metadata

logger = logging.getLogger(__name__)

_REQUEST_TIMEOUT_SECONDS = 15.0


class SkillsFetchError(Exception):
    """The catalog listing could not be retrieved."""


class SkillsSource(Protocol):
    async def list_skill_names(self) -> list[str]:
        """Candidate skill names. Raises ``SkillsFetchError``."""
        ...

    async def fetch_skill(self, name: str) -> Optional[SkillMetadata]:
        """One skill's descriptor, or None when it cannot be fetched."""
        ...


def _github_headers() -> dict[str, str]:
    headers = {"Accept": "application/vnd.github.v3+json"}
    token = os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN")
    if token and token.strip():
        headers["Authorization"] = f"Bearer {token.strip()}"
    return headers


class GitHubSkillsSource:
    def __init__(
        self,
        client: httpx.AsyncClient,
        owner: str = SKILLS_REPO_OWNER,
        repo: str = SKILLS_REPO_NAME,
        branch: str = SKILLS_REPO_BRANCH,
    ):
        self.client = client
        self.owner = owner
        self.repo = repo
        self.branch = branch

    @property
    def listing_url(self) -> str:
        return f"{GITHUB_API_BASE}/repos/{self.owner}/{self.repo}/contents/skills"

    def skill_url(self, name: str) -> str:
        return (
            f"{GITHUB_RAW_BASE}/{self.owner}/{self.repo}/{self.branch}"
            f"/skills/{name}/SKILL.md"
        )

    async def list_skill_names(self) -> list[str]:
        try:
            response = await self.client.get(self.listing_url, headers=_github_headers())
        except httpx.HTTPError as e:
            raise SkillsFetchError(f"GitHub API request failed: {e}") from e

        if response.status_code == 403:
            console.warning("GitHub API rate limit reached")
            raise SkillsFetchError("GitHub API request failed: 403")
        if not response.is_success:
            console.warning(f"Failed to fetch skills: HTTP {response.status_code}")
            raise SkillsFetchError(f"GitHub API request failed: {response.status_code}")

        try:
            contents = response.json()
        except ValueError as e:
            raise SkillsFetchError(f"Invalid catalog listing: {e}") from e
        if not isinstance(contents, list):
            raise SkillsFetchError("Invalid catalog listing: expected a list")

        names = [
            item["name"]
            for item in contents
            if isinstance(item, dict)
            and item.get("type") == "dir"
            and isinstance(item.get("name"), str)
            and item["name"] not in EXCLUDED_CATALOG_ENTRIES
        ]
        logger.debug("Found %d skill directories", len(names))
        return names

    async def fetch_skill(self, name: str) -> Optional[SkillMetadata]:
        try:
            response = await self.client.get(self.skill_url(name))
            if not response.is_success:
                logger.debug("Failed to fetch SKILL.md for %s: %s", name, response.status_code)
                return None
            return parse_skill_metadata(name, response.text)
        except Exception as e:
            logger.debug("Error fetching skill metadata for %s: %s", name, e)
            return None


class SkillsCatalog:
    def __init__(self, cache: SkillsCache, source: SkillsSource):
        self.cache = cache
        self.source = source

    async def fetch(
        self, *, force_refresh: bool = False, show_status: bool = False
    ) -> list[SkillMetadata]:
        if not force_refresh:
            snapshot = await self.cache.load()
            if snapshot is not None and self.cache.is_fresh(snapshot):
                logger.debug("Using cached skills list")
                if show_status:
                    console.info(f"Found {len(snapshot.skills)} skills (cached)")
                return list(snapshot.skills)
        else:
            # Cleared up front so a failed fetch cannot fall back to it.
            await self.cache.clear()

        try:
            if show_status:
                console.info("Fetching latest skills from GitHub...")
            skills = await self._fetch_remote()
        except Exception as e:
            logger.debug(
                "Skills fetch failed: %s", e, exc_info=not isinstance(e, SkillsFetchError)
            )
            stale = await self.cache.load()
            if stale is not None:
                console.warning("Failed to fetch skills from GitHub, using cached version")
                return list(stale.skills)
            console.warning("Failed to fetch skills and no cache available")
            return []

        await self.cache.save(skills)
        if show_status:
            console.info(f"Found {len(skills)} skills (refreshed from GitHub)")
        return skills

    async def _fetch_remote(self) -> list[SkillMetadata]:
        names = await self.source.list_skill_names()
        results = await asyncio.gather(
            *(self.source.fetch_skill(name) for name in names), return_exceptions=True
        )
        skills: list[SkillMetadata] = []
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.debug("Dropping skill %s: %s", name, result)
            elif isinstance(result, BaseException):
                raise result
            elif result is not None:
                skills.append(result)
        skills.sort(key=lambda skill: skill.name)
        return skills


async def fetch_skills(
    *,
    force_refresh: bool = False,
    show_status: bool = False,
    cache: Optional[SkillsCache] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[SkillMetadata]:
    """Skills from the cache or GitHub. Never raises."""
    async with httpx.AsyncClient(
        timeout=_REQUEST_TIMEOUT_SECONDS,
        follow_redirects=True,
        transport=transport,
    ) as client:
        catalog = SkillsCatalog(cache or default_cache(), GitHubSkillsSource(client))
        return await catalog.fetch(force_refresh=force_refresh, show_status=show_status)


async def get_cached_skills(cache: Optional[SkillsCache] = None) -> Optional[list[SkillMetadata]]:
    """Whatever snapshot is on disk, without touching the network."""
    snapshot = await (cache or default_cache()).load()
    return list(snapshot.skills) if snapshot is not None else None


async def clear_skills_cache(cache: Optional[SkillsCache] = None) -> None:
    await (cache or default_cache()).clear()
    logger.debug("Skills cache cleared")
