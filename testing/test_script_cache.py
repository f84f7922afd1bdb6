"""
Tests for the call configuration cache.

A FakeStore counts reads and can be switched to failing; a FakeClock
moves time across the five minute window.
"""

from app.calling.script_cache import (
    DEFAULT_SCRIPT,
    STALENESS_WINDOW_SECONDS,
    CacheOutcome,
    ScriptCache,
)
from app.db.models import CallMethod
from testing.conftest import FakeClock, FakeStore
from testing.sample_inputs import get_sample_config


def make_cache(config=None) -> tuple[ScriptCache, FakeStore, FakeClock]:
    store = FakeStore(config)
    clock = FakeClock()
    return ScriptCache(store, clock=clock), store, clock


# ── Staleness window ──


def test_reads_within_window_hit_store_once():
    cache, store, clock = make_cache(get_sample_config())

    first = cache.get_config()
    for _ in range(10):
        clock.advance(STALENESS_WINDOW_SECONDS / 20)
        assert cache.get_config() is first

    assert store.reads == 1


def test_read_after_window_hits_store_again():
    cache, store, clock = make_cache(get_sample_config())

    cache.get_config()
    clock.advance(STALENESS_WINDOW_SECONDS)
    cache.get_config()
    cache.get_config()

    assert store.reads == 2


def test_outcomes_fresh_then_cached():
    cache, _, _ = make_cache(get_sample_config())

    assert cache.fetch().outcome == CacheOutcome.FRESH
    assert cache.fetch().outcome == CacheOutcome.CACHED


# ── Save and refresh ──


def test_save_then_refresh_is_visible_immediately():
    cache, store, clock = make_cache(get_sample_config(CallMethod.VAPI))
    cache.get_config()
    clock.advance(10)

    updated = get_sample_config(CallMethod.TWILIO, script="1. Only one question?")
    store.save(updated)

    # Still inside the window, so the old copy is served until a refresh
    assert cache.get_config().method == CallMethod.VAPI

    cache.refresh_config()
    assert cache.get_config() == updated


def test_refresh_reads_store_even_inside_window():
    cache, store, _ = make_cache(get_sample_config())

    cache.get_config()
    result = cache.refresh()

    assert store.reads == 2
    assert result.outcome == CacheOutcome.FRESH


# ── Fallbacks ──


def test_store_failure_without_prior_read_returns_default():
    cache, store, _ = make_cache(get_sample_config())
    store.fail = True

    result = cache.fetch()

    assert result.outcome == CacheOutcome.DEFAULT
    assert result.is_fallback
    assert result.config == ScriptCache.get_default_config()


def test_store_failure_after_prior_read_returns_stale_copy():
    saved = get_sample_config()
    cache, store, clock = make_cache(saved)

    cache.get_config()
    clock.advance(STALENESS_WINDOW_SECONDS * 3)
    store.fail = True

    result = cache.fetch()
    assert result.outcome == CacheOutcome.DEGRADED
    assert result.config == saved
    assert result.config != ScriptCache.get_default_config()


def test_store_failure_on_refresh_returns_default():
    cache, store, _ = make_cache(get_sample_config())

    cache.get_config()
    store.fail = True

    # Refresh drops the cached copy first, so nothing stale is left
    assert cache.refresh().outcome == CacheOutcome.DEFAULT


def test_empty_store_returns_default_without_caching():
    cache, store, _ = make_cache(None)

    first = cache.fetch()
    assert first.outcome == CacheOutcome.DEFAULT
    assert first.config.script == DEFAULT_SCRIPT

    saved = get_sample_config()
    store.save(saved)

    second = cache.fetch()
    assert second.outcome == CacheOutcome.FRESH
    assert second.config == saved
    assert store.reads == 2


def test_fetch_never_raises():
    class BrokenStore:
        def get(self):
            raise RuntimeError("boom")

        def save(self, config):
            raise RuntimeError("boom")

    cache = ScriptCache(BrokenStore(), clock=FakeClock())
    assert cache.get_script() == DEFAULT_SCRIPT


# ── Default configuration ──


def test_default_config_is_independent_per_call():
    first = ScriptCache.get_default_config()
    second = ScriptCache.get_default_config()

    assert first == second
    assert first is not second

    first.voice_settings.speed = 2.5
    first.call_settings.retry_attempts = 9

    assert second.voice_settings.speed == 1.0
    assert second.call_settings.retry_attempts == 2
    assert ScriptCache.get_default_config().voice_settings.speed == 1.0


def test_default_config_values():
    config = ScriptCache.get_default_config()

    assert config.method == CallMethod.HYBRID
    assert config.voice_settings.provider == "elevenlabs"
    assert config.voice_settings.voice_id == "adam"
    assert config.call_settings.max_duration_minutes == 15
    assert config.call_settings.delay_between_calls_seconds == 30


# ── Convenience getters ──


def test_getters_read_through_cache():
    saved = get_sample_config(CallMethod.TWILIO)
    cache, store, _ = make_cache(saved)

    assert cache.get_call_method() == CallMethod.TWILIO
    assert cache.get_script() == saved.script
    assert cache.get_voice_settings() == saved.voice_settings
    assert cache.get_call_settings() == saved.call_settings
    assert store.reads == 1


def test_works_over_memory_repository(script_cache, config_repo):
    assert script_cache.fetch().outcome == CacheOutcome.DEFAULT

    saved = get_sample_config()
    config_repo.save(saved)

    assert script_cache.refresh().config == saved
