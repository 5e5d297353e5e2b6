"""
Tests for the local filesystem provider.
"""

import asyncio
import dataclasses
import hashlib
from datetime import UTC, datetime

import pytest

from stowage.backends import local
from stowage.backends.local import LocalFileStorageProvider
from stowage.core.errors import FileSystemError, PartialOperationError
from stowage.core.health import HealthStatus
from stowage.core.models import FileMetadata
from stowage.core.streams import iter_bytes, read_all


@pytest.fixture
def provider(tmp_path) -> LocalFileStorageProvider:
    return LocalFileStorageProvider(tmp_path / "root", location_name="Disk", chunk_size=4)


class TestLocalFiles:
    """Tests for file operations on disk."""

    def test_root_is_created(self, tmp_path):
        """Test ensure_root creates the root directory."""
        LocalFileStorageProvider(tmp_path / "new" / "root")
        assert (tmp_path / "new" / "root").is_dir()

    @pytest.mark.asyncio
    async def test_write_and_read(self, provider):
        """Test content is written to disk and streamed back in chunks."""
        await provider.write_file("docs/a.txt", b"hello world")

        assert (provider.root_path / "docs" / "a.txt").read_bytes() == b"hello world"
        stream = (await provider.read_file("docs/a.txt")).value
        chunks = [chunk async for chunk in stream]
        assert b"".join(chunks) == b"hello world"
        assert chunks[0] == b"hell"

    @pytest.mark.asyncio
    async def test_write_stream_leaves_no_temp_files(self, provider):
        """Test the temporary file is renamed into place."""
        await provider.write_file("a.bin", iter_bytes(b"abcdefgh", chunk_size=3))

        assert sorted(p.name for p in provider.root_path.iterdir()) == ["a.bin"]

    @pytest.mark.asyncio
    async def test_failed_stream_cleans_up(self, provider):
        """Test a failing content stream leaves neither target nor temp file."""

        async def broken():
            yield b"partial"
            raise ConnectionError("source went away")

        result = await provider.write_file("a.bin", broken())

        assert result.is_failure
        assert list(provider.root_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_exists_checks(self, provider):
        """Test file and directory existence."""
        await provider.write_file("docs/a.txt", b"x")

        assert (await provider.file_exists("docs/a.txt")).is_success
        assert (await provider.file_exists("docs")).is_failure
        assert (await provider.directory_exists("docs")).is_success
        assert (await provider.directory_exists("")).is_success

    @pytest.mark.asyncio
    async def test_escape_from_root_is_rejected(self, provider):
        """Test paths containing .. are refused."""
        result = await provider.read_file("../outside.txt")

        assert result.is_failure
        assert result.has_error(FileSystemError)

    @pytest.mark.asyncio
    async def test_delete_file(self, provider):
        """Test deleting a file."""
        await provider.write_file("a.txt", b"x")

        assert (await provider.delete_file("a.txt")).is_success
        assert (await provider.delete_file("a.txt")).is_failure

    @pytest.mark.asyncio
    async def test_metadata(self, provider):
        """Test size and modification time from stat."""
        await provider.write_file("a.txt", b"12345")
        stamp = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

        await provider.set_file_metadata("a.txt", FileMetadata(path="a.txt", last_modified=stamp))
        metadata = (await provider.get_file_metadata("a.txt")).value

        assert metadata.length == 5
        assert metadata.last_modified == stamp

    @pytest.mark.asyncio
    async def test_metadata_missing_file(self, provider):
        """Test metadata of an absent file."""
        result = await provider.get_file_metadata("absent.txt")
        assert result.messages == ["Failed to retrieve metadata for 'absent.txt'"]


class TestLocalDirectories:
    """Tests for directory operations on disk."""

    @pytest.mark.asyncio
    async def test_listing(self, provider):
        """Test listing with recursion and patterns."""
        await provider.write_file("docs/a.txt", b"x")
        await provider.write_file("docs/img/logo.png", b"x")
        await provider.write_file("top.txt", b"x")

        assert (await provider.list_files("")).value == ["top.txt"]
        assert (await provider.list_files("", "*.txt", recursive=True)).value == [
            "docs/a.txt",
            "top.txt",
        ]
        assert (await provider.list_directories("", recursive=True)).value == ["docs", "docs/img"]

    @pytest.mark.asyncio
    async def test_list_missing_directory(self, provider):
        """Test listing an absent directory fails."""
        assert (await provider.list_files("absent")).has_error(FileSystemError)

    @pytest.mark.asyncio
    async def test_create_and_delete_directory(self, provider):
        """Test create, non-recursive refusal and recursive delete."""
        await provider.create_directory("a/b")
        await provider.write_file("a/b/c.txt", b"x")

        assert (await provider.delete_directory("a")).is_failure
        assert (await provider.delete_directory("a", recursive=True)).is_success
        assert not (provider.root_path / "a").exists()

    @pytest.mark.asyncio
    async def test_delete_empty_directory(self, provider):
        """Test an empty directory is removed without recursive."""
        await provider.create_directory("empty")
        assert (await provider.delete_directory("empty")).is_success

    @pytest.mark.asyncio
    async def test_root_cannot_be_deleted(self, provider):
        """Test the root is protected."""
        assert (await provider.delete_directory("", recursive=True)).is_failure
        assert provider.root_path.is_dir()

    @pytest.mark.asyncio
    async def test_create_directory_over_file(self, provider):
        """Test creating a directory where a file exists."""
        await provider.write_file("a", b"x")
        assert (await provider.create_directory("a")).is_failure


class TestLocalHealth:
    """Tests for the local health check."""

    @pytest.mark.asyncio
    async def test_healthy(self, provider):
        """Test a writable root is healthy."""
        result = await provider.check_health()

        assert result.value.status == HealthStatus.HEALTHY
        assert result.value.details["root_path"] == str(provider.root_path)

    @pytest.mark.asyncio
    async def test_missing_root_is_unhealthy(self, tmp_path):
        """Test a missing root is unhealthy."""
        provider = LocalFileStorageProvider(tmp_path / "never", ensure_root=False)
        result = await provider.check_health()

        assert result.value.status == HealthStatus.UNHEALTHY


class TestLocalProperties:
    """Tests for metadata properties kept in the hidden sidecar."""

    @pytest.mark.asyncio
    async def test_properties_survive_a_new_provider(self, provider):
        """Test properties are persisted to disk and read back by another instance."""
        await provider.write_file("docs/a.txt", b"x")
        await provider.set_file_metadata(
            "docs/a.txt", FileMetadata(path="docs/a.txt", properties={"owner": "ops"})
        )

        reopened = LocalFileStorageProvider(provider.root_path)
        metadata = (await reopened.get_file_metadata("docs/a.txt")).value

        assert metadata.properties == {"owner": "ops"}
        assert (provider.root_path / "docs" / ".a.txt.props.json").is_file()

    @pytest.mark.asyncio
    async def test_sidecar_is_hidden_from_listings(self, provider):
        """Test the sidecar never shows up as a file."""
        await provider.write_file("a.txt", b"x")
        await provider.set_file_metadata(
            "a.txt", FileMetadata(path="a.txt", properties={"k": "v"})
        )

        assert (await provider.list_files("", recursive=True)).value == ["a.txt"]

    @pytest.mark.asyncio
    async def test_clearing_properties_removes_sidecar(self, provider):
        """Test empty properties drop the sidecar."""
        await provider.write_file("a.txt", b"x")
        await provider.set_file_metadata("a.txt", FileMetadata(path="a.txt", properties={"k": "v"}))
        await provider.set_file_metadata("a.txt", FileMetadata(path="a.txt"))

        assert sorted(p.name for p in provider.root_path.iterdir()) == ["a.txt"]

    @pytest.mark.asyncio
    async def test_delete_removes_sidecar(self, provider):
        """Test deleting a file also deletes its properties."""
        await provider.write_file("a.txt", b"x")
        await provider.set_file_metadata("a.txt", FileMetadata(path="a.txt", properties={"k": "v"}))

        await provider.delete_file("a.txt")

        assert list(provider.root_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_update_metadata(self, provider):
        """Test update_file_metadata stores the updated properties."""
        await provider.write_file("a.txt", b"x")

        result = await provider.update_file_metadata(
            "a.txt", lambda m: dataclasses.replace(m, properties={"stage": "done"})
        )

        assert result.is_success
        assert result.value.properties == {"stage": "done"}
        assert (await provider.get_file_metadata("a.txt")).value.properties == {"stage": "done"}


class TestLocalBatchAndRename:
    """Tests for delete_files, rename_file and get_checksum on disk."""

    @pytest.mark.asyncio
    async def test_delete_files_partial(self, provider):
        """Test a missing path fails the batch without stopping it."""
        await provider.write_file("a.txt", b"x")
        await provider.write_file("b.txt", b"x")

        result = await provider.delete_files(["a.txt", "missing.txt", "b.txt"])

        assert result.is_failure
        assert result.get_error(PartialOperationError).failed_paths == ["missing.txt"]
        assert list(provider.root_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_rename_moves_file_and_sidecar(self, provider):
        """Test the file and its properties move together."""
        await provider.write_file("a.txt", b"payload")
        await provider.set_file_metadata("a.txt", FileMetadata(path="a.txt", properties={"k": "v"}))

        result = await provider.rename_file("a.txt", "archive/b.txt")

        assert result.is_success
        assert (provider.root_path / "archive" / "b.txt").read_bytes() == b"payload"
        assert sorted(p.name for p in provider.root_path.iterdir()) == ["archive"]
        moved = (await provider.get_file_metadata("archive/b.txt")).value
        assert moved.properties == {"k": "v"}

    @pytest.mark.asyncio
    async def test_rename_drops_stale_destination_properties(self, provider):
        """Test the replaced file's properties do not leak onto the renamed one."""
        await provider.write_file("a.txt", b"new")
        await provider.write_file("b.txt", b"old")
        await provider.set_file_metadata("b.txt", FileMetadata(path="b.txt", properties={"k": "v"}))

        await provider.rename_file("a.txt", "b.txt")

        metadata = (await provider.get_file_metadata("b.txt")).value
        assert metadata.properties == {}
        assert (provider.root_path / "b.txt").read_bytes() == b"new"

    @pytest.mark.asyncio
    async def test_rename_missing_source(self, provider):
        """Test renaming an absent file fails."""
        result = await provider.rename_file("absent.txt", "b.txt")
        assert result.get_error(FileSystemError).message == "Source file not found"

    @pytest.mark.asyncio
    async def test_rename_onto_directory(self, provider):
        """Test renaming onto an existing directory fails."""
        await provider.write_file("a.txt", b"x")
        await provider.create_directory("dir")

        assert (await provider.rename_file("a.txt", "dir")).is_failure
        assert (provider.root_path / "a.txt").is_file()

    @pytest.mark.asyncio
    async def test_checksum_streams_whole_file(self, provider):
        """Test the chunked checksum equals sha256 of the full content."""
        content = b"0123456789" * 7
        await provider.write_file("a.bin", content)

        result = await provider.get_checksum("a.bin")

        assert result.value == hashlib.sha256(content).hexdigest()

    @pytest.mark.asyncio
    async def test_checksum_missing_file(self, provider):
        """Test a checksum of an absent file fails."""
        result = await provider.get_checksum("absent.bin")
        assert result.messages == ["Failed to get checksum for 'absent.bin'"]


class TestLocalWorkerThreads:
    """Tests that blocking filesystem calls leave the event loop."""

    @pytest.fixture
    def offloaded(self, monkeypatch):
        calls = []
        real = asyncio.to_thread

        async def recording(func, *args, **kwargs):
            calls.append(getattr(func, "__name__", repr(func)))
            return await real(func, *args, **kwargs)

        monkeypatch.setattr(local.asyncio, "to_thread", recording)
        return calls

    @pytest.mark.asyncio
    async def test_listing_scans_in_thread(self, provider, offloaded):
        """Test directory scans run through asyncio.to_thread."""
        await provider.write_file("a.txt", b"x")
        await provider.list_files("", recursive=True)
        assert "_scan" in offloaded

    @pytest.mark.asyncio
    async def test_timestamp_update_in_thread(self, provider, offloaded):
        """Test os.utime runs through asyncio.to_thread."""
        await provider.write_file("a.txt", b"x")
        stamp = datetime(2024, 1, 1, tzinfo=UTC)
        await provider.set_file_metadata("a.txt", FileMetadata(path="a.txt", last_modified=stamp))
        assert "utime" in offloaded

    @pytest.mark.asyncio
    async def test_recursive_delete_in_thread(self, provider, offloaded):
        """Test shutil.rmtree runs through asyncio.to_thread."""
        await provider.write_file("a/b/c.txt", b"x")
        await provider.delete_directory("a", recursive=True)
        assert "rmtree" in offloaded
