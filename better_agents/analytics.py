"""Anonymous usage analytics sent to PostHog.

Analytics only run when POSTHOG_API_KEY is set and the user has not opted out
with BETTER_AGENTS_TELEMETRY. Nothing here may break the CLI: every failure
is logged at debug level and otherwise ignored.
"""

import json
import logging
import os
import platform
import time
import uuid
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Literal, Optional

from posthog import Posthog

from better_agents import console
from better_agents.constants import APP_NAME
from better_agents.settings import get_global_dir

logger = logging.getLogger(__name__)

AnalyticsEvent = Literal["cli_init_started", "cli_prompt_shown", "cli_init_failed"]

TELEMETRY_FLAG = "BETTER_AGENTS_TELEMETRY"
DEFAULT_POSTHOG_HOST = "https://eu.i.posthog.com"
_DISABLE_VALUES = {"0", "false", "off", "disable", "disabled", "no"}

_client: Optional[Posthog] = None
_distinct_id: Optional[str] = None


def is_telemetry_disabled() -> bool:
    flag = os.environ.get(TELEMETRY_FLAG)
    if not flag:
        return False
    return flag.strip().lower() in _DISABLE_VALUES


def is_analytics_enabled() -> bool:
    if is_telemetry_disabled():
        return False
    return bool(os.environ.get("POSTHOG_API_KEY"))


def cli_version() -> str:
    try:
        return version(APP_NAME)
    except PackageNotFoundError:
        return "unknown"


def get_or_create_machine_id() -> str:
    """Anonymous id stored in ~/.better-agents/machine-id.

    A fresh id is returned, unpersisted, when the file cannot be written.
    """
    path = get_global_dir() / "machine-id"
    try:
        existing = path.read_text(encoding="utf-8").strip()
        if existing:
            return existing
    except OSError:
        pass

    new_id = str(uuid.uuid4())
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(new_id, encoding="utf-8")
    except OSError as e:
        logger.debug("Could not persist machine id: %s", e)
    return new_id


def _get_client() -> Optional[Posthog]:
    global _client
    if not is_analytics_enabled():
        return None
    if _client is None:
        _client = Posthog(
            os.environ["POSTHOG_API_KEY"],
            host=os.environ.get("POSTHOG_HOST") or DEFAULT_POSTHOG_HOST,
            sync_mode=True,
            disable_geoip=False,
        )
    return _client


def _get_distinct_id() -> str:
    global _distinct_id
    if _distinct_id is None:
        try:
            _distinct_id = get_or_create_machine_id()
        except Exception as e:
            logger.debug("Falling back to anonymous id: %s", e)
            _distinct_id = "anonymous"
    return _distinct_id


def track_event(event: AnalyticsEvent, properties: Optional[dict[str, Any]] = None) -> None:
    try:
        client = _get_client()
        if client is None:
            return
        client.capture(
            distinct_id=_get_distinct_id(),
            event=event,
            properties={
                **(properties or {}),
                "cliVersion": cli_version(),
                "osPlatform": platform.system().lower(),
                "osRelease": platform.release(),
            },
        )
    except Exception as e:
        logger.debug("Failed to track %s: %s", event, e)


def shutdown() -> None:
    global _client
    try:
        if _client is not None:
            _client.shutdown()
    except Exception as e:
        logger.debug("Analytics shutdown failed: %s", e)
    finally:
        _client = None


def reset_client() -> None:
    global _client, _distinct_id
    _client = None
    _distinct_id = None


def show_telemetry_notice() -> None:
    """Print the telemetry status, with the full notice on first run only."""
    if is_telemetry_disabled():
        console.plain(f"Telemetry: disabled via {TELEMETRY_FLAG}")
        return
    if not is_analytics_enabled():
        return

    notice_path = get_global_dir() / "telemetry-notice.json"
    try:
        shown = bool(json.loads(notice_path.read_text(encoding="utf-8")).get("shown"))
    except (OSError, ValueError, AttributeError):
        shown = False

    if shown:
        console.plain(f"Telemetry: enabled (set {TELEMETRY_FLAG}=0 to disable)")
        return

    console.plain("")
    console.plain("Telemetry")
    console.plain(
        "  Better Agents collects anonymous usage data (no prompts, messages, or secrets)"
    )
    console.plain("  to understand feature usage and improve stability.")
    console.plain(f"  Disable anytime with: {TELEMETRY_FLAG}=0")
    console.plain("")
    try:
        notice_path.parent.mkdir(parents=True, exist_ok=True)
        notice_path.write_text(
            json.dumps({"shown": True, "at": int(time.time() * 1000)}), encoding="utf-8"
        )
    except OSError as e:
        logger.debug("Could not persist telemetry notice: %s", e)
