"""Tests for the instance registry and the job details cache."""

import threading
from unittest.mock import Mock

import pytest

from rundeck_notifier.client import ApiError, ClientConfigurationError, JobDetailsCache, RundeckRegistry
from rundeck_notifier.config.models import AdvancedConfig, JobCacheConfig, RundeckInstanceConfig
from rundeck_notifier.domain.models import Job


@pytest.fixture
def registry():
    """Registry with an authenticated and an anonymous instance."""
    return RundeckRegistry(
        [
            RundeckInstanceConfig(name="Default", url="https://rundeck.example.com/", username="admin", password="secret"),
            RundeckInstanceConfig(name="Anonymous", url="http://localhost:4440"),
        ],
        AdvancedConfig(http_request_timeout=20, user_agent="RundeckNotifier/test"),
    )


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


# ============================================================================
# Registry
# ============================================================================


class TestRundeckRegistry:
    """Test instance lookups and client creation."""

    def test_names(self, registry):
        assert registry.names() == ["Anonymous", "Default"]

    def test_instances_read_only(self, registry):
        with pytest.raises(TypeError):
            registry.instances["Other"] = registry.get_instance("Default")

    def test_duplicate_instance(self):
        instance = RundeckInstanceConfig(name="Default", url="http://localhost:4440")
        with pytest.raises(ClientConfigurationError, match="Duplicate"):
            RundeckRegistry([instance, instance])

    def test_unknown_instance(self, registry):
        with pytest.raises(ClientConfigurationError, match="Known instances: Anonymous, Default"):
            registry.get_client("Production")

    def test_client_uses_instance_credentials(self, registry):
        client = registry.get_client("Default")

        assert client.url == "https://rundeck.example.com"
        assert client.username == "admin"
        assert client.timeout == 20

    def test_credentials_override(self, registry):
        """Test that explicit credentials replace the instance defaults."""
        client = registry.get_client("Default", username="deployer", password="hunter2")
        assert client.username == "deployer"

    def test_anonymous_instance(self, registry):
        assert registry.get_client("Anonymous").username is None


# ============================================================================
# Job details cache
# ============================================================================


class TestJobDetailsCache:
    """Test expiry and loader behavior of the job cache."""

    def test_disabled_cache_always_loads(self):
        cache = JobDetailsCache(enabled=False)
        loader = Mock(return_value=Job(id="1", name="ls"))

        cache.get_or_load("Default", "1", loader)
        cache.get_or_load("Default", "1", loader)

        assert loader.call_count == 2
        assert len(cache) == 0

    def test_enabled_cache_serves_hits(self):
        cache = JobDetailsCache(enabled=True, expiration_seconds=60, clock=FakeClock())
        loader = Mock(return_value=Job(id="1", name="ls"))

        first = cache.get_or_load("Default", "1", loader)
        second = cache.get_or_load("Default", "1", loader)

        assert first is second
        loader.assert_called_once()

    def test_entries_expire(self):
        clock = FakeClock()
        cache = JobDetailsCache(enabled=True, expiration_seconds=60, clock=clock)
        cache.put("Default", "1", Job(id="1"))

        clock.now += 59
        assert cache.get("Default", "1") is not None

        clock.now += 1
        assert cache.get("Default", "1") is None
        assert len(cache) == 0

    def test_keys_include_instance(self):
        cache = JobDetailsCache(enabled=True)
        cache.put("Default", "1", Job(id="1", name="prod"))

        assert cache.get("Staging", "1") is None

    def test_loader_errors_are_not_cached(self):
        cache = JobDetailsCache(enabled=True)
        loader = Mock(side_effect=ApiError("Job ID does not exist: 1"))

        with pytest.raises(ApiError):
            cache.get_or_load("Default", "1", loader)

        assert len(cache) == 0

    def test_invalidate(self):
        cache = JobDetailsCache(enabled=True)
        cache.put("Default", "1", Job(id="1"))
        cache.put("Default", "2", Job(id="2"))
        cache.put("Staging", "1", Job(id="1"))

        cache.invalidate("Default")
        assert len(cache) == 1

        cache.invalidate()
        assert len(cache) == 0

    def test_from_config(self):
        cache = JobDetailsCache.from_config(JobCacheConfig(enabled=True, expiration="15m"))

        assert cache.enabled is True
        assert cache.expiration_seconds == 900

    def test_concurrent_writes(self):
        cache = JobDetailsCache(enabled=True)

        def write(instance):
            for i in range(100):
                cache.put(instance, str(i), Job(id=str(i)))

        threads = [threading.Thread(target=write, args=(f"instance-{n}",)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(cache) == 400
