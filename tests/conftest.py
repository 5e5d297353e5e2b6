"""
Pytest configuration and shared fixtures for stowage tests
"""

import asyncio

import pytest

from stowage.backends.memory import InMemoryFileStorageProvider
from stowage.core.config import StowageConfig, configure
from stowage.core.errors import FileSystemError, UnexpectedError
from stowage.core.result import Result


@pytest.fixture(autouse=True)
def default_config():
    """Reset the global configuration around every test."""
    configure(StowageConfig())
    yield
    configure(StowageConfig())


@pytest.fixture
def source_files() -> dict[str, bytes]:
    """Sample tree used by transfer and tree tests."""
    return {
        "docs/readme.md": b"# Readme",
        "docs/guide.txt": b"step one\nstep two\n",
        "docs/img/logo.png": b"\x89PNG" + b"\x00" * 60,
        "notes.txt": b"remember the milk",
    }


@pytest.fixture
def source(source_files) -> InMemoryFileStorageProvider:
    """In-memory source provider seeded with source_files."""
    return InMemoryFileStorageProvider(location_name="Source", files=source_files)


@pytest.fixture
def destination() -> InMemoryFileStorageProvider:
    """Empty in-memory destination provider."""
    return InMemoryFileStorageProvider(location_name="Destination")


@pytest.fixture
def cancel_event() -> asyncio.Event:
    return asyncio.Event()


class FlakyProvider(InMemoryFileStorageProvider):
    """
    In-memory provider whose operations fail on demand.

    fail_reads/fail_writes/fail_deletes hold paths that fail permanently
    with a FileSystemError; transient_failures counts down UnexpectedError
    failures returned by file_exists before it starts succeeding.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_reads: set[str] = set()
        self.fail_writes: set[str] = set()
        self.fail_deletes: set[str] = set()
        self.fail_create_directories: set[str] = set()
        self.transient_failures = 0
        self.calls: list[tuple[str, str]] = []

    async def file_exists(self, path):
        self.calls.append(("file_exists", path))
        if self.transient_failures > 0:
            self.transient_failures -= 1
            return Result.fail(UnexpectedError(ConnectionError("connection reset")))
        return await super().file_exists(path)

    async def read_file(self, path):
        self.calls.append(("read_file", path))
        if path in self.fail_reads:
            return Result.fail(FileSystemError("Simulated read failure", path=path))
        return await super().read_file(path)

    async def write_file(self, path, content):
        self.calls.append(("write_file", path))
        if path in self.fail_writes:
            return Result.fail(FileSystemError("Simulated write failure", path=path))
        return await super().write_file(path, content)

    async def delete_file(self, path):
        self.calls.append(("delete_file", path))
        if path in self.fail_deletes:
            return Result.fail(FileSystemError("Simulated delete failure", path=path))
        return await super().delete_file(path)

    async def create_directory(self, path):
        self.calls.append(("create_directory", path))
        if path in self.fail_create_directories:
            return Result.fail(FileSystemError("Simulated create failure", path=path))
        return await super().create_directory(path)

    async def get_file_metadata(self, path):
        self.calls.append(("get_file_metadata", path))
        return await super().get_file_metadata(path)


@pytest.fixture
def flaky_source(source_files) -> FlakyProvider:
    return FlakyProvider(location_name="FlakySource", files=source_files)


@pytest.fixture
def flaky_destination() -> FlakyProvider:
    return FlakyProvider(location_name="FlakyDestination")
