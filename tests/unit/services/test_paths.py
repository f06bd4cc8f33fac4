"""Unit tests for PathResolver."""

from pathlib import Path

from qullqa.services.paths import PathResolver, artifact_locator


class TestPathResolver:
    """Tests for PathResolver."""

    def test_layout(self):
        """Test the on-disk layout of an artifact."""
        paths = PathResolver(Path("/store"))

        assert paths.artifact_root("demo", "widget") == Path("/store/demo/widget")
        assert paths.metadata_location("demo", "widget") == Path(
            "/store/demo/widget/metadata.json"
        )
        assert paths.latest_location("demo", "widget") == Path(
            "/store/demo/widget/latest/index.html"
        )
        assert paths.version_location("demo", "widget", 3) == Path(
            "/store/demo/widget/versions/v3/index.html"
        )

    def test_distinct_triples_never_collide(self):
        """Test that different identities resolve to different locations."""
        paths = PathResolver(Path("/store"))
        locations = set()
        for workspace in ("demo", "other"):
            for artifact_id in ("widget", "gadget"):
                for version in (1, 2, 10):
                    locations.add(paths.version_location(workspace, artifact_id, version))
        assert len(locations) == 12

    def test_metadata_distinct_from_content(self):
        """Test that the metadata record never shares a path with content."""
        paths = PathResolver(Path("/store"))
        metadata = paths.metadata_location("demo", "widget")
        assert metadata != paths.latest_location("demo", "widget")
        assert metadata != paths.version_location("demo", "widget", 1)

    def test_no_io(self, tmp_path):
        """Test that resolving paths does not touch the filesystem."""
        paths = PathResolver(tmp_path / "missing")
        paths.version_location("demo", "widget", 1)
        assert not (tmp_path / "missing").exists()


class TestArtifactLocator:
    """Tests for public locators."""

    def test_latest_locator(self):
        assert artifact_locator("demo", "widget") == "/a/demo/widget/"

    def test_version_locator(self):
        assert artifact_locator("demo", "widget", 2) == "/a/demo/widget/v2/"
