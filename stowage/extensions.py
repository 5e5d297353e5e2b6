"""
Convenience helpers over any provider.

Wrap the streaming read/write operations for callers that want whole
byte strings, text, JSON objects or encrypted payloads, plus a
recursive file traversal.

Usage:
    >>> from stowage.extensions import read_text, write_text
    >>>
    >>> await write_text(provider, "notes/today.md", "# Today")
    >>> result = await read_text(provider, "notes/today.md")
    >>> print(result.value)
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

from stowage.core.errors import (
    ArgumentError,
    EncryptionError,
    OperationCancelledError,
    SerializationError,
    UnexpectedError,
)
from stowage.core.logger import get_logger
from stowage.core.models import FileMetadata
from stowage.core.result import Result
from stowage.core.serialization import deserialize, serialize
from stowage.core.streams import close_stream, read_all
from stowage.interfaces.provider import FileStorageProvider

logger = get_logger(__name__)

FileAction = Callable[[str, AsyncIterator[bytes]], Awaitable[None]]


async def write_bytes(provider: FileStorageProvider, path: str, data: bytes) -> Result[None]:
    """Write raw bytes to path."""
    if data is None:
        return Result.fail(
            ArgumentError("Bytes cannot be empty", argument="data"), "Invalid bytes provided"
        )
    return await provider.write_file(path, bytes(data))


async def read_bytes(provider: FileStorageProvider, path: str) -> Result[bytes]:
    """Read a whole file into memory."""
    read_result = await provider.read_file(path)
    if read_result.is_failure:
        return Result.from_failure(read_result)

    stream = read_result.value
    try:
        data = await read_all(stream)
    except Exception as e:
        return Result.fail(UnexpectedError(e), f"Unexpected error reading bytes from '{path}'")
    finally:
        await close_stream(stream)

    return Result.ok(data, f"Read {len(data)} bytes from '{path}'")


async def write_text(
    provider: FileStorageProvider, path: str, text: str, encoding: str = "utf-8"
) -> Result[None]:
    """Encode text and write it to path."""
    if text is None:
        return Result.fail(
            ArgumentError("Text cannot be empty", argument="text"), "Invalid text provided"
        )
    try:
        data = text.encode(encoding)
    except (LookupError, UnicodeEncodeError) as e:
        return Result.fail(UnexpectedError(e), f"Failed to encode text for '{path}'")
    return await provider.write_file(path, data)


async def read_text(
    provider: FileStorageProvider, path: str, encoding: str = "utf-8"
) -> Result[str]:
    """Read a file and decode it as text."""
    result = await read_bytes(provider, path)
    if result.is_failure:
        return Result.from_failure(result)

    try:
        text = result.value.decode(encoding)
    except (LookupError, UnicodeDecodeError) as e:
        return Result.fail(UnexpectedError(e), f"Failed to decode text from '{path}'")
    return Result.ok(text, f"Read text from '{path}'")


async def write_object(provider: FileStorageProvider, path: str, obj: Any) -> Result[None]:
    """Serialize obj as JSON and write it to path."""
    try:
        data = serialize(obj)
    except SerializationError as e:
        return Result.fail(e, f"Failed to serialize object for '{path}'")
    return await provider.write_file(path, data)


async def read_object(
    provider: FileStorageProvider, path: str, object_type: type | None = None
) -> Result[Any]:
    """
    Read a JSON file written by write_object.

    When object_type is a dataclass the stored fields are used to build an
    instance; any other type only checks the decoded value.
    """
    result = await read_bytes(provider, path)
    if result.is_failure:
        return Result.from_failure(result)

    try:
        value = deserialize(result.value, object_type)
    except SerializationError as e:
        return Result.fail(e, f"Failed to deserialize object from '{path}'")
    return Result.ok(value, f"Read object from '{path}'")


def generate_key() -> bytes:
    """New random key for write_encrypted/read_encrypted."""
    return Fernet.generate_key()


def _fernet(key: bytes | str, path: str) -> Fernet:
    try:
        return Fernet(key)
    except (TypeError, ValueError) as e:
        raise EncryptionError("Invalid encryption key", path=path) from e


async def write_encrypted(
    provider: FileStorageProvider, path: str, data: bytes, key: bytes | str
) -> Result[None]:
    """
    Encrypt data with key and write the token to path.

    The whole payload is held in memory; Fernet tokens are not streamable.
    """
    if data is None:
        return Result.fail(
            ArgumentError("Bytes cannot be empty", argument="data"), "Invalid bytes provided"
        )
    try:
        token = _fernet(key, path).encrypt(bytes(data))
    except EncryptionError as e:
        return Result.fail(e, f"Failed to encrypt content for '{path}'")
    return await provider.write_file(path, token)


async def read_encrypted(
    provider: FileStorageProvider, path: str, key: bytes | str
) -> Result[bytes]:
    """Read a file written by write_encrypted and decrypt it with key."""
    result = await read_bytes(provider, path)
    if result.is_failure:
        return Result.from_failure(result)

    message = f"Failed to decrypt content from '{path}'"
    try:
        data = _fernet(key, path).decrypt(result.value)
    except EncryptionError as e:
        return Result.fail(e, message)
    except InvalidToken:
        return Result.fail(EncryptionError("Wrong key or corrupted content", path=path), message)
    return Result.ok(data, f"Decrypted {len(data)} bytes from '{path}'")


async def traverse_files(
    provider: FileStorageProvider,
    path: str,
    file_action: FileAction | None = None,
    cancel_event: asyncio.Event | None = None,
) -> Result[list[FileMetadata]]:
    """
    Collect metadata of every file under path, optionally visiting each one.

    Files whose metadata cannot be read are skipped. When file_action is
    given it receives each file's path and an open content stream.

    Args:
        provider: Provider to traverse
        path: Directory to start from ("" for the root)
        file_action: Optional coroutine called per file with (path, chunks)
        cancel_event: Cooperative cancellation signal, checked before every file
    """
    if provider is None:
        return Result.fail(
            ArgumentError("Provider cannot be empty", argument="provider"),
            "Invalid provider provided for traversing files",
        )

    list_result = await provider.list_files(path, recursive=True)
    if list_result.is_failure:
        return Result.from_failure(list_result, f"Failed to traverse files from '{path}'")

    found: list[FileMetadata] = []
    try:
        for file_path in list_result.value:
            if cancel_event is not None and cancel_event.is_set():
                return Result.fail(
                    OperationCancelledError("Operation cancelled", processed=len(found)),
                    f"Cancelled traversing files from '{path}'",
                )

            metadata = await provider.get_file_metadata(file_path)
            if metadata.is_failure:
                logger.debug(f"Skipping '{file_path}': metadata unavailable")
                continue
            found.append(metadata.value)

            if file_action is not None:
                read_result = await provider.read_file(file_path)
                if read_result.is_success:
                    try:
                        await file_action(file_path, read_result.value)
                    finally:
                        await close_stream(read_result.value)
    except Exception as e:
        logger.exception(f"Unexpected error traversing '{path}'")
        return Result.fail(UnexpectedError(e), f"Unexpected error traversing files from '{path}'")

    return Result.ok(found, f"Traversed '{path}' and found {len(found)} files")
