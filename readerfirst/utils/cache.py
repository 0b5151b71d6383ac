"""Translation and enhancement caching utilities."""

import hashlib
import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any, List

import diskcache

from readerfirst.core.exceptions import CacheError

logger = logging.getLogger(__name__)


TRANSLATIONS = "translations"
ENHANCEMENTS = "enhancements"


def hash_text(text: str) -> str:
    """Stable content fingerprint."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class TranslationCache:
    """
    Key-value cache with graceful fallback to memory.

    One instance per namespace (translations, enhancements). Construct it once
    per process and inject it where needed. Entries never expire unless a ttl
    is given; there is no eviction.
    """

    def __init__(
        self,
        cache_dir: str = ".cache/readerfirst",
        namespace: str = TRANSLATIONS,
        use_disk: bool = True,
        fallback_to_memory: bool = True,
        ttl: Optional[int] = None
    ):
        """
        Initialize cache.

        Args:
            cache_dir: Root directory for disk caches
            namespace: Logical namespace; each gets its own subdirectory
            use_disk: Use disk cache (requires diskcache)
            fallback_to_memory: Fallback to memory cache if disk cache fails
            ttl: Time-to-live in seconds. None keeps entries forever.
        """
        self.namespace = namespace
        self.cache_dir = Path(cache_dir) / namespace
        self.use_disk = False
        self.fallback_to_memory = fallback_to_memory
        self.memory_cache: Dict[str, str] = {}
        self._cache_errors: List[str] = []
        self.ttl = ttl
        self.hits = 0
        self.misses = 0

        if use_disk:
            try:
                self.cache_dir.mkdir(parents=True, exist_ok=True)
                self.disk_cache = diskcache.Cache(str(self.cache_dir))
                self.use_disk = True
                logger.debug(f"Using disk cache at {self.cache_dir}")
            except Exception as e:
                error_msg = f"Failed to initialize disk cache: {e}"
                self._cache_errors.append(error_msg)
                logger.warning(f"{error_msg}. Falling back to memory cache.")
                if not fallback_to_memory:
                    raise CacheError(
                        error_msg,
                        cache_type="disk",
                        operation="init"
                    ) from e
        if not self.use_disk:
            logger.debug(f"Using memory cache for '{namespace}'")

    @staticmethod
    def make_key(provider: str, text: str) -> str:
        """Cache key from provider id and the (guarded) text."""
        return f"{provider}:{hash_text(text)}"

    def get(self, key: str) -> Optional[str]:
        """
        Get a cached value.

        Returns:
            Cached value or None (never raises)
        """
        try:
            if self.use_disk:
                value = self.disk_cache.get(key)
                if value is None:
                    value = self.memory_cache.get(key)
            else:
                value = self.memory_cache.get(key)
        except Exception as e:
            error_msg = f"Cache get failed: {e}"
            self._cache_errors.append(error_msg)
            logger.warning(f"{error_msg}. Continuing without cache.")
            value = None

        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def put(self, key: str, value: str) -> None:
        """
        Store a value. Existing entries are left untouched.

        Note:
            Never raises - cache errors are logged but non-fatal
        """
        try:
            if self.use_disk:
                if self.ttl:
                    self.disk_cache.add(key, value, expire=self.ttl)
                else:
                    self.disk_cache.add(key, value)
            else:
                self.memory_cache.setdefault(key, value)
        except Exception as e:
            error_msg = f"Cache put failed: {e}"
            self._cache_errors.append(error_msg)
            logger.warning(f"{error_msg}. Continuing without cache.")
            if self.use_disk and self.fallback_to_memory:
                self.memory_cache.setdefault(key, value)
                logger.debug("Fell back to memory cache")

    def get_json(self, key: str) -> Optional[Any]:
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding unreadable cache entry {key}")
            return None

    def put_json(self, key: str, value: Any) -> None:
        self.put(key, json.dumps(value, ensure_ascii=False))

    def clear(self) -> None:
        """Clear this namespace."""
        if self.use_disk:
            self.disk_cache.clear()
        self.memory_cache.clear()
        logger.info(f"Cache '{self.namespace}' cleared")

    def close(self) -> None:
        if self.use_disk:
            self.disk_cache.close()

    def __len__(self) -> int:
        if self.use_disk:
            return len(self.disk_cache)
        return len(self.memory_cache)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        stats: Dict[str, Any] = {
            "namespace": self.namespace,
            "type": "disk" if self.use_disk else "memory",
            "hits": self.hits,
            "misses": self.misses,
            "errors": len(self._cache_errors)
        }

        try:
            stats["size"] = len(self)
            if self.use_disk:
                stats["location"] = str(self.cache_dir)
        except Exception as e:
            stats["error"] = str(e)

        if self._cache_errors:
            stats["recent_errors"] = self._cache_errors[-5:]

        return stats
