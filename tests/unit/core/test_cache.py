"""
Tests for the TTL cache and stream helpers.
"""

from unittest.mock import patch

import pytest

from stowage.core.cache import TTLCache
from stowage.core.streams import as_chunks, close_stream, counting, iter_bytes, read_all, rechunk


class TestTTLCache:
    """Tests for TTLCache."""

    def test_set_and_get(self):
        """Test basic storage."""
        cache = TTLCache()
        cache.set("a", 1)

        assert cache.get("a") == 1
        assert "a" in cache
        assert cache.get("missing", "default") == "default"

    def test_expired_entries_are_dropped(self):
        """Test entries past their TTL behave as missing."""
        cache = TTLCache(ttl_seconds=10)
        with patch("stowage.core.cache.time.monotonic", return_value=100.0):
            cache.set("a", 1)
        with patch("stowage.core.cache.time.monotonic", return_value=111.0):
            assert cache.get("a") is None
        assert len(cache) == 0

    def test_per_entry_ttl(self):
        """Test an explicit TTL overrides the default."""
        cache = TTLCache(ttl_seconds=1)
        with patch("stowage.core.cache.time.monotonic", return_value=0.0):
            cache.set("a", 1, ttl_seconds=100)
        with patch("stowage.core.cache.time.monotonic", return_value=50.0):
            assert cache.get("a") == 1

    def test_oldest_entry_evicted_at_capacity(self):
        """Test FIFO eviction when max_size is reached."""
        cache = TTLCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)

        assert "a" not in cache
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_delete_prefix(self):
        """Test removing every key under a prefix."""
        cache = TTLCache()
        cache.set("scope1:a", 1)
        cache.set("scope1:b", 2)
        cache.set("scope2:a", 3)

        assert cache.delete_prefix("scope1:") == 2
        assert len(cache) == 1
        assert cache.get("scope2:a") == 3

    def test_delete_and_clear(self):
        """Test single and full removal."""
        cache = TTLCache()
        cache.set("a", 1)
        cache.set("b", 2)

        cache.delete("a")
        cache.delete("never-set")
        assert len(cache) == 1

        cache.clear()
        assert len(cache) == 0


class TestStreams:
    """Tests for streamed content helpers."""

    @pytest.mark.asyncio
    async def test_iter_bytes_slices(self):
        """Test bytes are sliced into chunk_size pieces."""
        chunks = [chunk async for chunk in iter_bytes(b"abcdefg", chunk_size=3)]
        assert chunks == [b"abc", b"def", b"g"]

    @pytest.mark.asyncio
    async def test_iter_bytes_empty(self):
        """Test empty content yields nothing."""
        assert [chunk async for chunk in iter_bytes(b"")] == []

    @pytest.mark.asyncio
    async def test_as_chunks_passes_iterables_through(self):
        """Test async iterables are returned unchanged."""
        stream = iter_bytes(b"xyz")
        assert as_chunks(stream) is stream
        assert await read_all(as_chunks(bytearray(b"raw"))) == b"raw"

    @pytest.mark.asyncio
    async def test_counting_reports_sizes(self):
        """Test counting forwards chunks and reports their length."""
        sizes = []
        data = await read_all(counting(iter_bytes(b"abcdef", chunk_size=4), sizes.append))

        assert data == b"abcdef"
        assert sizes == [4, 2]

    @pytest.mark.asyncio
    async def test_rechunk(self):
        """Test re-slicing to a fixed chunk size."""

        async def uneven():
            for piece in (b"a", b"bcde", b"", b"fg", b"hijk"):
                yield piece

        chunks = [chunk async for chunk in rechunk(uneven(), 3)]
        assert chunks == [b"abc", b"def", b"ghi", b"jk"]

    @pytest.mark.asyncio
    async def test_close_stream(self):
        """Test closing a partially consumed generator."""
        stream = iter_bytes(b"abcdef", chunk_size=2)
        assert await stream.__anext__() == b"ab"

        await close_stream(stream)

        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    @pytest.mark.asyncio
    async def test_close_stream_without_aclose(self):
        """Test objects without aclose are ignored."""
        await close_stream([b"plain"])
