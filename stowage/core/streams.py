"""
Helpers for streamed file content.

File content moves between providers as async iterators of byte chunks
so a copy never needs the whole file in memory.
"""

from collections.abc import AsyncIterable, AsyncIterator, Callable

DEFAULT_CHUNK_SIZE = 64 * 1024


async def iter_bytes(data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Yield data in chunk_size slices (a single empty chunk is never yielded)."""
    view = memoryview(data)
    for offset in range(0, len(view), chunk_size):
        yield bytes(view[offset:offset + chunk_size])


def as_chunks(
    content: bytes | AsyncIterable[bytes], chunk_size: int = DEFAULT_CHUNK_SIZE
) -> AsyncIterable[bytes]:
    """Normalize raw bytes or an async iterable into an async iterable of chunks."""
    if isinstance(content, (bytes, bytearray, memoryview)):
        return iter_bytes(bytes(content), chunk_size)
    return content


async def counting(
    chunks: AsyncIterable[bytes], on_chunk: Callable[[int], None]
) -> AsyncIterator[bytes]:
    """Pass chunks through unchanged, reporting each chunk's size to on_chunk."""
    async for chunk in chunks:
        on_chunk(len(chunk))
        yield chunk


async def read_all(chunks: AsyncIterable[bytes]) -> bytes:
    """Drain an async iterable of chunks into a single bytes object."""
    buffer = bytearray()
    async for chunk in chunks:
        buffer.extend(chunk)
    return bytes(buffer)


async def rechunk(chunks: AsyncIterable[bytes], chunk_size: int) -> AsyncIterator[bytes]:
    """Re-slice a chunk stream so every chunk but the last is exactly chunk_size bytes."""
    buffer = bytearray()
    async for chunk in chunks:
        buffer.extend(chunk)
        while len(buffer) >= chunk_size:
            yield bytes(buffer[:chunk_size])
            del buffer[:chunk_size]
    if buffer:
        yield bytes(buffer)


async def close_stream(chunks: AsyncIterable[bytes]) -> None:
    """Close an async generator that may not have been fully consumed."""
    aclose = getattr(chunks, "aclose", None)
    if aclose is not None:
        await aclose()
