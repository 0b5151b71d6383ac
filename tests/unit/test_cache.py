"""
Tests for the namespaced translation cache.
"""

from unittest.mock import patch

import pytest

from readerfirst.core.exceptions import CacheError
from readerfirst.utils.cache import ENHANCEMENTS, TRANSLATIONS, TranslationCache, hash_text


class TestKeys:

    def test_key_shape(self):
        key = TranslationCache.make_key("deepl", "Hello")
        assert key == f"deepl:{hash_text('Hello')}"
        assert len(key.split(":", 1)[1]) == 64

    def test_provider_separates_keys(self):
        assert TranslationCache.make_key("openai", "x") != TranslationCache.make_key("deepl", "x")


class TestMemoryCache:

    def test_miss_then_hit(self, memory_cache):
        assert memory_cache.get("k") is None
        memory_cache.put("k", "v")
        assert memory_cache.get("k") == "v"
        assert memory_cache.hits == 1
        assert memory_cache.misses == 1

    def test_put_keeps_first_value(self, memory_cache):
        memory_cache.put("k", "first")
        memory_cache.put("k", "second")
        assert memory_cache.get("k") == "first"

    def test_json_roundtrip_and_bad_entry(self, memory_cache):
        memory_cache.put_json("j", {"summary": "Sum"})
        assert memory_cache.get_json("j") == {"summary": "Sum"}

        memory_cache.put("broken", "{not json")
        assert memory_cache.get_json("broken") is None

    def test_clear_and_len(self, memory_cache):
        memory_cache.put("a", "1")
        memory_cache.put("b", "2")
        assert len(memory_cache) == 2
        memory_cache.clear()
        assert len(memory_cache) == 0

    def test_stats(self, memory_cache):
        stats = memory_cache.get_stats()
        assert stats["namespace"] == TRANSLATIONS
        assert stats["type"] == "memory"
        assert stats["size"] == 0


class TestDiskCache:

    def test_namespaces_are_separate(self, tmp_path):
        translations = TranslationCache(cache_dir=str(tmp_path), namespace=TRANSLATIONS)
        enhancements = TranslationCache(cache_dir=str(tmp_path), namespace=ENHANCEMENTS)
        try:
            translations.put("k", "translated")
            assert enhancements.get("k") is None
            assert (tmp_path / TRANSLATIONS).is_dir()
            assert (tmp_path / ENHANCEMENTS).is_dir()
        finally:
            translations.close()
            enhancements.close()

    def test_persists_across_instances(self, tmp_path):
        first = TranslationCache(cache_dir=str(tmp_path))
        first.put("k", "v")
        first.close()

        second = TranslationCache(cache_dir=str(tmp_path))
        try:
            assert second.get("k") == "v"
            assert second.get_stats()["type"] == "disk"
        finally:
            second.close()

    def test_init_failure_falls_back_to_memory(self, tmp_path):
        with patch("readerfirst.utils.cache.diskcache.Cache", side_effect=OSError("read-only")):
            cache = TranslationCache(cache_dir=str(tmp_path))

        assert cache.use_disk is False
        cache.put("k", "v")
        assert cache.get("k") == "v"
        assert cache.get_stats()["errors"] == 1

    def test_init_failure_without_fallback_raises(self, tmp_path):
        with patch("readerfirst.utils.cache.diskcache.Cache", side_effect=OSError("read-only")):
            with pytest.raises(CacheError):
                TranslationCache(cache_dir=str(tmp_path), fallback_to_memory=False)

    def test_put_failure_falls_back_to_memory(self, tmp_path):
        cache = TranslationCache(cache_dir=str(tmp_path))
        try:
            with patch.object(cache.disk_cache, "add", side_effect=OSError("disk full")):
                cache.put("k", "v")
            assert cache.get("k") == "v"
        finally:
            cache.close()

    def test_get_failure_is_a_miss(self, tmp_path):
        cache = TranslationCache(cache_dir=str(tmp_path))
        try:
            with patch.object(cache.disk_cache, "get", side_effect=OSError("corrupt")):
                assert cache.get("k") is None
            assert cache.misses == 1
        finally:
            cache.close()
