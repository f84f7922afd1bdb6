"""
Time-bounded cache for the current call configuration.

Call initiation reads the interview script on every request; this keeps
those reads off the database. A cached copy is served for five minutes,
an explicit refresh drops it immediately, and when the store cannot be
read the last good copy (or a built-in default) is served instead.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

import structlog

from app.db.models import CallConfiguration, CallMethod, CallSettings, VoiceSettings
from app.db.repository import ConfigRepository

logger = structlog.get_logger()

STALENESS_WINDOW_SECONDS = 5 * 60

DEFAULT_SCRIPT = """Hello! This is an automated call regarding your job application. Do you have a few minutes to answer some questions?

1. Can you tell me about yourself and your background?
2. What interests you about this position?
3. What are your key strengths and skills?
4. Do you have any questions about the role or company?
5. What is your availability for the next steps?

Thank you for your time!"""


class ConfigStore(Protocol):
    def get(self) -> CallConfiguration | None: ...

    def save(self, config: CallConfiguration) -> CallConfiguration: ...


class CacheOutcome(str, Enum):
    """Where a configuration read was served from."""

    FRESH = "fresh"  # just read from the store
    CACHED = "cached"  # in-window cached copy, no I/O
    DEGRADED = "degraded"  # store failed, stale cached copy
    DEFAULT = "default"  # built-in configuration


@dataclass(frozen=True)
class ConfigResult:
    config: CallConfiguration
    outcome: CacheOutcome

    @property
    def is_fallback(self) -> bool:
        return self.outcome in (CacheOutcome.DEGRADED, CacheOutcome.DEFAULT)


class ScriptCache:
    """Serves the current CallConfiguration with a fixed staleness window."""

    def __init__(
        self,
        store: ConfigStore,
        clock: Callable[[], float] = time.monotonic,
        staleness_window: float = STALENESS_WINDOW_SECONDS,
    ):
        self.store = store
        self.clock = clock
        self.staleness_window = staleness_window
        self._cached: CallConfiguration | None = None
        self._fetched_at: float | None = None

    def fetch(self) -> ConfigResult:
        """Return the configuration and how it was obtained. Never raises."""
        now = self.clock()

        if self._cached is not None and self._fetched_at is not None:
            if now - self._fetched_at < self.staleness_window:
                return ConfigResult(self._cached, CacheOutcome.CACHED)

        try:
            config = self.store.get()
        except Exception as e:
            if self._cached is not None:
                logger.warning("Config store read failed, serving stale config", error=str(e))
                return ConfigResult(self._cached, CacheOutcome.DEGRADED)
            logger.warning("Config store read failed, serving default config", error=str(e))
            return ConfigResult(self.get_default_config(), CacheOutcome.DEFAULT)

        if config is None:
            # Not cached, so the next read tries the store again
            logger.info("No saved call configuration, serving default config")
            return ConfigResult(self.get_default_config(), CacheOutcome.DEFAULT)

        self._cached = config
        self._fetched_at = now
        logger.debug("Call configuration cached", method=config.method.value)
        return ConfigResult(config, CacheOutcome.FRESH)

    def refresh(self) -> ConfigResult:
        """Drop the cached copy and read the store again."""
        self.invalidate()
        return self.fetch()

    def invalidate(self) -> None:
        self._cached = None
        self._fetched_at = None

    def get_config(self) -> CallConfiguration:
        return self.fetch().config

    def refresh_config(self) -> CallConfiguration:
        return self.refresh().config

    @staticmethod
    def get_default_config() -> CallConfiguration:
        """Built-in configuration. Returns a new object on every call."""
        return CallConfiguration(
            method=CallMethod.HYBRID,
            script=DEFAULT_SCRIPT,
            voice_settings=VoiceSettings(
                provider="elevenlabs",
                voice_id="adam",
                speed=1.0,
                pitch=1.0,
            ),
            call_settings=CallSettings(
                max_duration_minutes=15,
                retry_attempts=2,
                delay_between_calls_seconds=30,
            ),
        )

    def get_script(self) -> str:
        return self.get_config().script

    def get_voice_settings(self) -> VoiceSettings:
        return self.get_config().voice_settings

    def get_call_settings(self) -> CallSettings:
        return self.get_config().call_settings

    def get_call_method(self) -> CallMethod:
        return self.get_config().method


# Process-wide instance
_script_cache: ScriptCache | None = None


def get_script_cache() -> ScriptCache:
    """Get or create the ScriptCache singleton."""
    global _script_cache
    if _script_cache is None:
        _script_cache = ScriptCache(ConfigRepository())
    return _script_cache
