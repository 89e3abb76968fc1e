"""Time-bounded cache of job definitions."""

import threading
import time
from typing import Callable, Dict, Optional, Tuple

from rundeck_notifier.config.models import JobCacheConfig
from rundeck_notifier.domain.models import Job
from rundeck_notifier.logging import get_logger

logger = get_logger(__name__, component="cache")

CacheKey = Tuple[str, str]


class JobDetailsCache:
    """Cache of job definitions keyed by (instance name, job id).

    Entries expire a fixed time after they were written. When disabled,
    every lookup goes straight to the loader.
    """

    def __init__(
        self,
        enabled: bool = False,
        expiration_seconds: int = 1800,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.enabled = enabled
        self.expiration_seconds = expiration_seconds
        self._clock = clock
        self._entries: Dict[CacheKey, Tuple[float, Job]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: JobCacheConfig) -> "JobDetailsCache":
        return cls(enabled=config.enabled, expiration_seconds=config.expiration_seconds or 1800)

    def get(self, instance: str, job_id: str) -> Optional[Job]:
        """Return a cached, unexpired job definition or None."""
        if not self.enabled:
            return None

        key = (instance, job_id)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            written_at, job = entry
            if self._clock() - written_at >= self.expiration_seconds:
                del self._entries[key]
                return None
            return job

    def put(self, instance: str, job_id: str, job: Job) -> None:
        """Store a job definition (no-op when disabled)."""
        if not self.enabled:
            return
        with self._lock:
            self._entries[(instance, job_id)] = (self._clock(), job)

    def get_or_load(self, instance: str, job_id: str, loader: Callable[[], Job]) -> Job:
        """Return the cached definition, loading and storing it on a miss.

        Loader errors propagate and nothing is cached.
        """
        job = self.get(instance, job_id)
        if job is not None:
            logger.debug(
                "Job definition served from cache",
                extra={"event": "cache.hit", "instance": instance, "job_id": job_id},
            )
            return job

        job = loader()
        self.put(instance, job_id, job)
        return job

    def invalidate(self, instance: Optional[str] = None) -> None:
        """Drop every entry, or only those of one instance."""
        with self._lock:
            if instance is None:
                self._entries.clear()
            else:
                for key in [k for k in self._entries if k[0] == instance]:
                    del self._entries[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
