"""Tests for cache utilities."""

from __future__ import annotations

import time
from unittest.mock import patch

from radosgw_operator.utils.cache import (
    get_cached_object,
    invalidate_cache,
    make_cache_key,
    set_cached_object,
)


class TestCacheKey:
    """Test cases for make_cache_key function."""

    def test_make_cache_key(self):
        key = make_cache_key("RadosGWProvider", "ceph", "rgw-main")
        assert key == "RadosGWProvider:ceph:rgw-main"

    def test_namespace_distinguishes_keys(self):
        """Test that the same provider name in two namespaces gives two keys."""
        assert make_cache_key("RadosGWProvider", "ns1", "rgw") != make_cache_key(
            "RadosGWProvider", "ns2", "rgw"
        )


class TestCacheOperations:
    """Test cases for cache get/set operations."""

    def setup_method(self):
        """Clear cache before each test."""
        invalidate_cache()

    def test_set_and_get_cached_object(self):
        provider = {"metadata": {"name": "rgw"}, "status": {"connected": True}}

        set_cached_object("RadosGWProvider:ceph:rgw", provider)

        assert get_cached_object("RadosGWProvider:ceph:rgw") == provider

    def test_get_missing(self):
        assert get_cached_object("RadosGWProvider:ceph:missing") is None

    def test_expiration(self):
        """Test that cached objects expire after TTL."""
        with patch("radosgw_operator.utils.cache._cache_ttl", 0.1):
            set_cached_object("key", {"data": "test"})
            assert get_cached_object("key") == {"data": "test"}

            time.sleep(0.2)

            assert get_cached_object("key") is None

    def test_overwrite(self):
        set_cached_object("key", {"version": 1})
        set_cached_object("key", {"version": 2})

        assert get_cached_object("key") == {"version": 2}


class TestCacheInvalidation:
    """Test cases for cache invalidation."""

    def setup_method(self):
        invalidate_cache()

    def test_invalidate_all(self):
        set_cached_object("a", 1)
        set_cached_object("b", 2)

        invalidate_cache()

        assert get_cached_object("a") is None
        assert get_cached_object("b") is None

    def test_invalidate_single_provider(self):
        """Test that a provider change only drops its own entry."""
        set_cached_object("RadosGWProvider:ceph:rgw-a", {"name": "a"})
        set_cached_object("RadosGWProvider:ceph:rgw-b", {"name": "b"})

        invalidate_cache("RadosGWProvider:ceph:rgw-a")

        assert get_cached_object("RadosGWProvider:ceph:rgw-a") is None
        assert get_cached_object("RadosGWProvider:ceph:rgw-b") == {"name": "b"}

    def test_invalidate_no_match(self):
        set_cached_object("RadosGWProvider:ceph:rgw", {"name": "rgw"})

        invalidate_cache("RadosGWUser")

        assert get_cached_object("RadosGWProvider:ceph:rgw") is not None
