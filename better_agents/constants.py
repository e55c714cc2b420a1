"""Centralized constants for better-agents to ensure consistency across modules."""

# Distribution name, used for version lookup and analytics.
APP_NAME = "better-agents"

# Per-user directory holding settings, caches and the machine id.
GLOBAL_DIR_NAME = ".better-agents"

# Remote skills catalog.
SKILLS_REPO_OWNER = "contextware"
SKILLS_REPO_NAME = "skills"
SKILLS_REPO_BRANCH = "main"
SKILLS_REPO_URL = f"https://github.com/{SKILLS_REPO_OWNER}/{SKILLS_REPO_NAME}"
GITHUB_API_BASE = "https://api.github.com"
GITHUB_RAW_BASE = "https://raw.githubusercontent.com"

# Entries in the catalog listing that are never skills.
EXCLUDED_CATALOG_ENTRIES = frozenset(
    {"LICENSE", "README.md", "CONTRIBUTING.md", "CONTRIBURING.md", ".git", ".github"}
)

# A cached catalog snapshot is trusted for this long without refetching.
SKILLS_CACHE_TTL_SECONDS = 24 * 60 * 60

# Each `npx skills add` invocation gets this long before it is killed.
SKILL_INSTALL_TIMEOUT_SECONDS = 30

# Installed skills live under this directory of a generated project.
SKILLS_INSTALL_DIR = ".agent/skills"

DEFAULT_LANGWATCH_ENDPOINT = "https://app.langwatch.ai"
