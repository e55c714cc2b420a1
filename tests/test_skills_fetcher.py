"""Tests for better_agents.skills.fetcher module."""

import json
from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest

from better_agents.skills.cache import FileCacheStorage, MemoryCacheStorage, SkillsCache
from better_agents.skills.fetcher import (
    SkillsCatalog,
    clear_skills_cache,
    fetch_skills,
    get_cached_skills,
)
from better_agents.skills.models import SkillMetadata

DAY_SECONDS = 24 * 60 * 60
NOW = 1_700_000_000.0

LISTING = [
    {"name": "hubspot", "path": "skills/hubspot", "type": "dir"},
    {"name": "slack", "path": "skills/slack", "type": "dir"},
    {"name": "LICENSE", "path": "skills/LICENSE", "type": "file"},
]

HUBSPOT_DOC = "## Purpose\nManage HubSpot contacts.\n"


class FakeGitHub:
    """Serves the listing and SKILL.md documents, recording every request."""

    def __init__(
        self,
        listing: object = LISTING,
        documents: Optional[dict[str, str]] = None,
        listing_status: int = 200,
        listing_error: Optional[Exception] = None,
        document_errors: Optional[dict[str, Exception]] = None,
    ):
        self.listing = listing
        self.documents = documents if documents is not None else {"hubspot": HUBSPOT_DOC}
        self.listing_status = listing_status
        self.listing_error = listing_error
        self.document_errors = document_errors or {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "api.github.com":
            if self.listing_error is not None:
                raise self.listing_error
            return httpx.Response(self.listing_status, json=self.listing)
        name = request.url.path.split("/")[-2]
        if name in self.document_errors:
            raise self.document_errors[name]
        if name in self.documents:
            return httpx.Response(200, text=self.documents[name])
        return httpx.Response(404, text="Not Found")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def _cache(raw: Optional[str] = None, clock: Callable[[], float] = lambda: NOW) -> SkillsCache:
    return SkillsCache(MemoryCacheStorage(raw), clock=clock)


def _snapshot(age_seconds: float, names: list[str]) -> str:
    return json.dumps(
        {
            "timestamp": int((NOW - age_seconds) * 1000),
            "skills": [{"name": n, "description": f"cached {n}"} for n in names],
        }
    )


@pytest.mark.asyncio
async def test_partial_descriptor_failure_and_exclusions() -> None:
    github = FakeGitHub()
    cache = _cache()

    skills = await fetch_skills(cache=cache, transport=github.transport)

    assert [s.name for s in skills] == ["hubspot"]
    assert skills[0].description == "Manage HubSpot contacts."
    stored = json.loads(cache.storage.data or "")  # type: ignore[attr-defined]
    assert [s["name"] for s in stored["skills"]] == ["hubspot"]
    # LICENSE is a file and is never fetched.
    assert not any("LICENSE" in str(r.url) for r in github.requests)


@pytest.mark.asyncio
async def test_results_sorted_by_name() -> None:
    listing = [{"name": n, "type": "dir"} for n in ["zendesk", "asana", "miro"]]
    documents = {n: f"## Purpose\n{n} things\n" for n in ["zendesk", "asana", "miro"]}
    github = FakeGitHub(listing=listing, documents=documents)

    skills = await fetch_skills(cache=_cache(), transport=github.transport)

    assert [s.name for s in skills] == ["asana", "miro", "zendesk"]


@pytest.mark.asyncio
async def test_request_urls_and_headers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_token")
    github = FakeGitHub()

    await fetch_skills(cache=_cache(), transport=github.transport)

    listing_request = github.requests[0]
    assert str(listing_request.url) == (
        "https://api.github.com/repos/contextware/skills/contents/skills"
    )
    assert listing_request.headers["Accept"] == "application/vnd.github.v3+json"
    assert listing_request.headers["Authorization"] == "Bearer ghp_token"
    assert str(github.requests[1].url).startswith(
        "https://raw.githubusercontent.com/contextware/skills/main/skills/"
    )


@pytest.mark.asyncio
async def test_fresh_cache_skips_network() -> None:
    github = FakeGitHub()
    cache = _cache(_snapshot(60, ["cached-skill"]))

    skills = await fetch_skills(cache=cache, transport=github.transport)

    assert [s.name for s in skills] == ["cached-skill"]
    assert github.requests == []


@pytest.mark.asyncio
async def test_expired_cache_triggers_fetch() -> None:
    github = FakeGitHub()
    cache = _cache(_snapshot(DAY_SECONDS, ["cached-skill"]))

    skills = await fetch_skills(cache=cache, transport=github.transport)

    assert [s.name for s in skills] == ["hubspot"]
    assert github.requests


@pytest.mark.asyncio
async def test_stale_fallback_on_listing_failure(capsys: pytest.CaptureFixture[str]) -> None:
    github = FakeGitHub(listing_status=500)
    cache = _cache(_snapshot(DAY_SECONDS * 2, ["old-skill"]))

    skills = await fetch_skills(cache=cache, transport=github.transport)

    assert [s.name for s in skills] == ["old-skill"]
    err = capsys.readouterr().err
    assert "HTTP 500" in err
    assert "using cached version" in err


@pytest.mark.asyncio
async def test_network_error_without_cache_returns_empty(
    capsys: pytest.CaptureFixture[str],
) -> None:
    github = FakeGitHub(listing_error=httpx.ConnectError("offline"))

    skills = await fetch_skills(cache=_cache(), transport=github.transport)

    assert skills == []
    assert "no cache available" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_rate_limit_is_reported(capsys: pytest.CaptureFixture[str]) -> None:
    github = FakeGitHub(listing_status=403)

    skills = await fetch_skills(cache=_cache(), transport=github.transport)

    assert skills == []
    assert "rate limit" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_invalid_listing_body_is_a_listing_failure() -> None:
    github = FakeGitHub(listing={"message": "unexpected"})
    cache = _cache(_snapshot(DAY_SECONDS * 2, ["old-skill"]))

    skills = await fetch_skills(cache=cache, transport=github.transport)

    assert [s.name for s in skills] == ["old-skill"]


@pytest.mark.asyncio
async def test_forced_refresh_clears_before_fetching() -> None:
    github = FakeGitHub(listing_status=500)
    # Still fresh, but a forced refresh must not fall back to it.
    cache = _cache(_snapshot(60, ["fresh-skill"]))

    skills = await fetch_skills(force_refresh=True, cache=cache, transport=github.transport)

    assert skills == []
    assert await cache.load() is None


@pytest.mark.asyncio
async def test_forced_refresh_replaces_fresh_cache() -> None:
    github = FakeGitHub()
    cache = _cache(_snapshot(60, ["fresh-skill"]))

    skills = await fetch_skills(force_refresh=True, cache=cache, transport=github.transport)

    assert [s.name for s in skills] == ["hubspot"]
    snapshot = await cache.load()
    assert snapshot is not None
    assert [s.name for s in snapshot.skills] == ["hubspot"]


@pytest.mark.asyncio
async def test_zero_skills_is_a_valid_snapshot() -> None:
    github = FakeGitHub(listing=[])
    cache = _cache()

    assert await fetch_skills(cache=cache, transport=github.transport) == []

    snapshot = await cache.load()
    assert snapshot is not None
    assert snapshot.skills == ()


@pytest.mark.asyncio
async def test_show_status_messages(capsys: pytest.CaptureFixture[str]) -> None:
    github = FakeGitHub()
    cache = _cache()

    await fetch_skills(show_status=True, cache=cache, transport=github.transport)
    await fetch_skills(show_status=True, cache=cache, transport=github.transport)

    out = capsys.readouterr().out
    assert "Fetching latest skills from GitHub..." in out
    assert "Found 1 skills (refreshed from GitHub)" in out
    assert "Found 1 skills (cached)" in out


@pytest.mark.asyncio
async def test_get_cached_skills_and_clear() -> None:
    cache = _cache(_snapshot(DAY_SECONDS * 5, ["old-skill"]))

    cached = await get_cached_skills(cache)
    assert cached is not None
    assert [s.name for s in cached] == ["old-skill"]

    await clear_skills_cache(cache)
    assert await get_cached_skills(cache) is None


@pytest.mark.asyncio
async def test_unexpected_descriptor_error_drops_only_that_skill() -> None:
    github = FakeGitHub(
        documents={"hubspot": HUBSPOT_DOC, "slack": "## Purpose\nPost to Slack.\n"},
        document_errors={"slack": RuntimeError("boom")},
    )

    skills = await fetch_skills(cache=_cache(), transport=github.transport)

    assert [s.name for s in skills] == ["hubspot"]


@pytest.mark.asyncio
async def test_unexpected_listing_error_falls_back_to_stale() -> None:
    github = FakeGitHub(listing_error=RuntimeError("boom"))
    cache = _cache(_snapshot(DAY_SECONDS * 2, ["old-skill"]))

    skills = await fetch_skills(cache=cache, transport=github.transport)

    assert [s.name for s in skills] == ["old-skill"]


class RaisingSource:
    async def list_skill_names(self) -> list[str]:
        return ["hubspot", "slack"]

    async def fetch_skill(self, name: str) -> Optional[SkillMetadata]:
        if name == "slack":
            raise ValueError("unparsable")
        return SkillMetadata(name=name, description=f"{name} skill")


@pytest.mark.asyncio
async def test_catalog_tolerates_source_errors_per_skill() -> None:
    catalog = SkillsCatalog(_cache(), RaisingSource())

    skills = await catalog.fetch()

    assert [s.name for s in skills] == ["hubspot"]


@pytest.mark.asyncio
async def test_undecodable_cache_file_is_replaced_by_empty_result(tmp_path: Path) -> None:
    path = tmp_path / "skills-cache.json"
    path.write_bytes(b"\xff\xfe{garbage")
    cache = SkillsCache(FileCacheStorage(path), clock=lambda: NOW)
    github = FakeGitHub(listing_status=500)

    skills = await fetch_skills(cache=cache, transport=github.transport)

    assert skills == []
    assert not path.exists()
