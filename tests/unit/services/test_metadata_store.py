"""Unit tests for MetadataStore."""

import aiofiles.os
import pytest

from qullqa.exceptions import ArtifactNotFoundError, StorageIOError
from qullqa.schemas.artifact import ArtifactMetadata, ArtifactVersion
from qullqa.services.metadata_store import MetadataStore
from qullqa.services.paths import PathResolver


def make_metadata(current_version: int = 1, description: str | None = None) -> ArtifactMetadata:
    return ArtifactMetadata(
        id="widget",
        workspace="demo",
        description=description,
        created_at=1000,
        updated_at=1000 + current_version,
        current_version=current_version,
        versions=[
            ArtifactVersion(version=n, timestamp=1000 + n, changelog=f"Version {n}", size=10)
            for n in range(1, current_version + 1)
        ],
    )


@pytest.fixture
def store(tmp_path) -> MetadataStore:
    return MetadataStore(PathResolver(tmp_path))


class TestMetadataStore:
    """Tests for MetadataStore."""

    @pytest.mark.asyncio
    async def test_read_missing(self, store):
        """Test reading a record that was never written."""
        with pytest.raises(ArtifactNotFoundError):
            await store.read("demo", "widget")
        assert await store.exists("demo", "widget") is False

    @pytest.mark.asyncio
    async def test_write_then_read(self, store):
        """Test that a written record reads back identically."""
        metadata = make_metadata(current_version=2, description="A widget")
        await store.write("demo", "widget", metadata)

        assert await store.exists("demo", "widget") is True
        assert await store.read("demo", "widget") == metadata

    @pytest.mark.asyncio
    async def test_on_disk_format_uses_camel_case(self, store, tmp_path):
        """Test the JSON field names of metadata.json."""
        await store.write("demo", "widget", make_metadata())

        raw = (tmp_path / "demo" / "widget" / "metadata.json").read_text()
        assert '"currentVersion": 1' in raw
        assert '"createdAt"' in raw
        assert '"updatedAt"' in raw
        # Absent description is omitted
        assert "description" not in raw

    @pytest.mark.asyncio
    async def test_write_replaces_wholesale(self, store):
        """Test that write replaces the previous record."""
        await store.write("demo", "widget", make_metadata(current_version=1))
        await store.write("demo", "widget", make_metadata(current_version=3))

        metadata = await store.read("demo", "widget")
        assert metadata.current_version == 3
        assert len(metadata.versions) == 3

    @pytest.mark.asyncio
    async def test_corrupt_record(self, store, tmp_path):
        """Test that malformed JSON is reported as a storage failure."""
        path = tmp_path / "demo" / "widget" / "metadata.json"
        path.parent.mkdir(parents=True)
        path.write_text("{not json")

        with pytest.raises(StorageIOError):
            await store.read("demo", "widget")

    @pytest.mark.asyncio
    async def test_inconsistent_record(self, store, tmp_path):
        """Test that a record whose current version has no history entry is rejected."""
        path = tmp_path / "demo" / "widget" / "metadata.json"
        path.parent.mkdir(parents=True)
        path.write_text(
            '{"id": "widget", "workspace": "demo", "createdAt": 1, "updatedAt": 1,'
            ' "currentVersion": 2, "versions": [{"version": 1, "timestamp": 1, "size": 0}]}'
        )

        with pytest.raises(StorageIOError):
            await store.read("demo", "widget")

    @pytest.mark.asyncio
    async def test_failed_write_keeps_previous_record(self, store, tmp_path, monkeypatch):
        """Test that a failed replace leaves the old record and no temp files."""
        original = make_metadata(current_version=1)
        await store.write("demo", "widget", original)

        async def failing_replace(src, dst):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(aiofiles.os, "replace", failing_replace)

        with pytest.raises(StorageIOError) as exc_info:
            await store.write("demo", "widget", make_metadata(current_version=2))

        assert isinstance(exc_info.value.__cause__, OSError)
        assert await store.read("demo", "widget") == original
        leftovers = [p.name for p in (tmp_path / "demo" / "widget").iterdir()]
        assert leftovers == ["metadata.json"]
