"""Pytest configuration and fixtures for Qullqa tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from qullqa.config import Settings
from qullqa.main import create_app
from qullqa.services.repository import ArtifactRepository


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a temporary data directory."""
    settings = Settings(
        data_dir=tmp_path / "data",
        log_to_file=False,
        public_base_url="http://test",
    )
    settings.ensure_directories()
    return settings


@pytest.fixture
def storage_root(test_settings: Settings) -> Path:
    """Root directory holding all workspaces."""
    return test_settings.artifacts_dir


@pytest.fixture
def repository(storage_root: Path) -> ArtifactRepository:
    """Repository over the temporary storage root."""
    return ArtifactRepository(storage_root)


@pytest_asyncio.fixture(scope="function")
async def test_client(
    test_settings: Settings,
    repository: ArtifactRepository,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client bound to the temporary repository."""
    app = create_app(test_settings, repository)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def fake_clock(monkeypatch):
    """Make repository timestamps strictly increasing and predictable."""
    ticks = iter(range(1_700_000_000_000, 1_700_000_000_000 + 10_000_000, 1000))
    monkeypatch.setattr("qullqa.services.repository._now_ms", lambda: next(ticks))


# --- Factory fixtures ---


@pytest_asyncio.fixture
async def artifact_factory(repository: ArtifactRepository):
    """Factory for creating artifacts with a number of versions."""

    async def _create_artifact(
        workspace: str = "demo",
        artifact_id: str = "widget",
        versions: int = 1,
        description: str | None = "Test artifact",
    ) -> list[bytes]:
        contents = [f"<h1>v{n}</h1>".encode() for n in range(1, versions + 1)]
        await repository.create(workspace, artifact_id, contents[0], description=description)
        for n, content in enumerate(contents[1:], start=2):
            await repository.update(workspace, artifact_id, content, f"change {n}")
        return contents

    yield _create_artifact
