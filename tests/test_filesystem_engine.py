"""Tests for the filesystem extraction engine."""

import hashlib
import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import write_archive
from game_asset_onboarding.core.archives import PLACEHOLDER_PATTERN, REQUIRED_ARCHIVES
from game_asset_onboarding.core.validator import validate_asset_manifest
from game_asset_onboarding.engine import MANIFEST_FILENAME, FilesystemExtractionEngine
from game_asset_onboarding.engine.base import NetworkProtocol


@pytest.fixture
def engine() -> FilesystemExtractionEngine:
    return FilesystemExtractionEngine()


class TestExtract:
    """Test copying archives into the asset directory."""

    def test_copies_all_archives(
        self, engine: FilesystemExtractionEngine, game_dir: Path, tmp_path: Path
    ) -> None:
        """Test a successful extraction."""
        destination = tmp_path / "assets"

        assert engine.extract(str(game_dir), str(destination)) is True

        for name in REQUIRED_ARCHIVES:
            assert (destination / name).read_bytes() == (game_dir / name).read_bytes()
        assert engine.current_progress() == 1.0
        assert engine.current_file_name() == ""
        assert engine.missing_files() == []
        assert engine.last_error() == ""

    def test_writes_manifest(
        self, engine: FilesystemExtractionEngine, game_dir: Path, tmp_path: Path
    ) -> None:
        """Test that a valid checksum manifest is written next to the archives."""
        destination = tmp_path / "assets"
        engine.extract(str(game_dir), str(destination))

        manifest = json.loads((destination / MANIFEST_FILENAME).read_text(encoding="utf-8"))
        validate_asset_manifest(manifest)

        assert manifest["source_path"] == str(game_dir)
        entries = {entry["name"]: entry for entry in manifest["assets"]}
        assert set(entries) == set(REQUIRED_ARCHIVES)

        data = (game_dir / "d2data.mpq").read_bytes()
        assert entries["d2data.mpq"]["size_bytes"] == len(data)
        assert entries["d2data.mpq"]["sha256"] == hashlib.sha256(data).hexdigest()

    def test_archive_names_are_case_insensitive(
        self, engine: FilesystemExtractionEngine, game_dir: Path, tmp_path: Path
    ) -> None:
        """Test that upper-case archive names are found and stored lower-case."""
        (game_dir / "d2data.mpq").rename(game_dir / "D2DATA.MPQ")
        destination = tmp_path / "assets"

        assert engine.extract(str(game_dir), str(destination)) is True
        assert "d2data.mpq" in os.listdir(destination)

    def test_copies_optional_archives(
        self, engine: FilesystemExtractionEngine, game_dir: Path, tmp_path: Path
    ) -> None:
        """Test that extra archives such as patches are copied too."""
        write_archive(game_dir, "patch_d2.mpq")
        (game_dir / "readme.txt").write_text("not an archive")
        destination = tmp_path / "assets"

        engine.extract(str(game_dir), str(destination))

        assert (destination / "patch_d2.mpq").exists()
        assert not (destination / "readme.txt").exists()

    def test_damaged_optional_archive_skipped(
        self, engine: FilesystemExtractionEngine, game_dir: Path, tmp_path: Path
    ) -> None:
        """Test that a stray archive with a bad header does not fail the job."""
        (game_dir / "notes.mpq").write_bytes(b"hello world")
        destination = tmp_path / "assets"

        assert engine.extract(str(game_dir), str(destination)) is True

        assert not (destination / "notes.mpq").exists()
        manifest = json.loads((destination / MANIFEST_FILENAME).read_text(encoding="utf-8"))
        assert sorted(entry["name"] for entry in manifest["assets"]) == sorted(REQUIRED_ARCHIVES)

    def test_progress_callback_is_monotonic(self, game_dir: Path, tmp_path: Path) -> None:
        """Test that pushed progress never decreases and ends at 1.0."""
        reports: list[tuple[float, str]] = []
        engine = FilesystemExtractionEngine(
            chunk_size=16, progress_callback=lambda p, f: reports.append((p, f))
        )

        engine.extract(str(game_dir), str(tmp_path / "assets"))

        values = [p for p, _ in reports]
        assert len(values) > len(REQUIRED_ARCHIVES)
        assert values == sorted(values)
        assert values[-1] == 1.0
        assert {f for _, f in reports if f} <= set(REQUIRED_ARCHIVES)

    def test_no_temp_files_left(
        self, engine: FilesystemExtractionEngine, game_dir: Path, tmp_path: Path
    ) -> None:
        """Test that only archives and the manifest end up in the destination."""
        destination = tmp_path / "assets"
        engine.extract(str(game_dir), str(destination))

        assert sorted(os.listdir(destination)) == sorted([*REQUIRED_ARCHIVES, MANIFEST_FILENAME])


class TestExtractFailures:
    """Test rejected sources."""

    def test_missing_archive(
        self, engine: FilesystemExtractionEngine, game_dir: Path, tmp_path: Path
    ) -> None:
        """Test that absent archives are reported and nothing is copied."""
        (game_dir / "d2exp.mpq").unlink()
        destination = tmp_path / "assets"

        assert engine.extract(str(game_dir), str(destination)) is False
        assert engine.missing_files() == ["d2exp.mpq"]
        assert not destination.exists()

    def test_placeholder_counts_as_missing(
        self, engine: FilesystemExtractionEngine, game_dir: Path, tmp_path: Path
    ) -> None:
        """Test that a placeholder archive is reported as missing."""
        write_archive(game_dir, "d2sfx.mpq", header=PLACEHOLDER_PATTERN)

        assert engine.extract(str(game_dir), str(tmp_path / "assets")) is False
        assert engine.missing_files() == ["d2sfx.mpq"]

    def test_invalid_header_counts_as_missing(
        self, engine: FilesystemExtractionEngine, game_dir: Path, tmp_path: Path
    ) -> None:
        """Test that a required archive with a foreign header is reported missing."""
        write_archive(game_dir, "d2music.mpq", header=b"ABCD")

        assert engine.extract(str(game_dir), str(tmp_path / "assets")) is False
        assert engine.missing_files() == ["d2music.mpq"]

    def test_empty_archive_counts_as_missing(
        self, engine: FilesystemExtractionEngine, game_dir: Path, tmp_path: Path
    ) -> None:
        """Test that a truncated required archive is reported missing."""
        (game_dir / "d2sfx.mpq").write_bytes(b"")
        destination = tmp_path / "assets"

        assert engine.extract(str(game_dir), str(destination)) is False
        assert engine.missing_files() == ["d2sfx.mpq"]
        assert "d2sfx.mpq" in engine.last_error()
        assert not destination.exists()

    def test_source_not_a_directory(
        self, engine: FilesystemExtractionEngine, tmp_path: Path
    ) -> None:
        assert engine.extract(str(tmp_path / "nope"), str(tmp_path / "assets")) is False
        assert "not a directory" in engine.last_error()

    def test_state_reset_between_runs(
        self, engine: FilesystemExtractionEngine, game_dir: Path, tmp_path: Path
    ) -> None:
        """Test that a previous run's missing list does not leak into the next."""
        missing = game_dir / "d2exp.mpq"
        data = missing.read_bytes()
        missing.unlink()
        engine.extract(str(game_dir), str(tmp_path / "assets"))
        assert engine.missing_files()

        missing.write_bytes(data)
        assert engine.extract(str(game_dir), str(tmp_path / "assets")) is True
        assert engine.missing_files() == []


class TestValidate:
    """Test the pre-flight check."""

    def test_valid_installation(self, engine: FilesystemExtractionEngine, game_dir: Path) -> None:
        assert engine.validate(str(game_dir)) is True

    def test_missing_archive(self, engine: FilesystemExtractionEngine, game_dir: Path) -> None:
        (game_dir / "d2video.mpq").unlink()
        assert engine.validate(str(game_dir)) is False

    def test_damaged_required_archive(self, engine: FilesystemExtractionEngine, game_dir: Path) -> None:
        (game_dir / "d2char.mpq").write_bytes(b"")
        assert engine.validate(str(game_dir)) is False

    def test_damaged_extra_archive_ignored(
        self, engine: FilesystemExtractionEngine, game_dir: Path
    ) -> None:
        (game_dir / "notes.mpq").write_bytes(b"hello world")
        assert engine.validate(str(game_dir)) is True

    def test_not_a_directory(self, engine: FilesystemExtractionEngine, tmp_path: Path) -> None:
        assert engine.validate(str(tmp_path / "missing")) is False


class TestNetworkPaths:
    """Test translating UNC paths to local mounts."""

    def test_plain_paths_unchanged(self, engine: FilesystemExtractionEngine) -> None:
        assert engine.local_path("/media/usb") == Path("/media/usb")

    def test_mapped_share(self, tmp_path: Path) -> None:
        """Test that host and share match case-insensitively and the rest keeps its case."""
        engine = FilesystemExtractionEngine(network_mounts={"\\\\NAS\\Games": tmp_path})

        assert engine.local_path("\\\\nas\\games") == tmp_path
        assert engine.local_path("\\\\nas\\games\\Diablo II") == tmp_path / "Diablo II"
        assert engine.local_path("//nas/games/Diablo II") == tmp_path / "Diablo II"

    @pytest.mark.skipif(os.name == "nt", reason="UNC paths open natively on Windows")
    def test_other_share_not_matched(self, tmp_path: Path) -> None:
        engine = FilesystemExtractionEngine(network_mounts={"\\\\nas\\games": tmp_path})
        assert engine.local_path("\\\\nas\\gamesextra") is None

    @pytest.mark.skipif(os.name == "nt", reason="UNC paths open natively on Windows")
    def test_unmapped_share_fails_extraction(
        self, engine: FilesystemExtractionEngine, tmp_path: Path
    ) -> None:
        assert engine.local_path("\\\\nas\\games") is None
        assert engine.extract("\\\\nas\\games", str(tmp_path / "assets")) is False
        assert "No local mount" in engine.last_error()

    def test_extract_from_mapped_share(self, game_dir: Path, tmp_path: Path) -> None:
        """Test extraction from a network source mounted locally."""
        engine = FilesystemExtractionEngine(network_mounts={"\\\\nas\\games": game_dir.parent})

        assert engine.extract("\\\\nas\\games\\Diablo II", str(tmp_path / "assets")) is True


class TestDiscoveryPrimitives:
    """Test delegation to device enumeration and network probes."""

    def test_connect_network(self) -> None:
        """Test that connect parses the protocol and passes the timeout."""
        engine = FilesystemExtractionEngine(network_timeout=2.5)
        with patch(
            "game_asset_onboarding.engine.filesystem.probe_network", return_value=True
        ) as connect:
            assert engine.connect_network("ftp", "nas", "games", "me", "pw") is True

        connect.assert_called_once_with(
            NetworkProtocol.FTP, "nas", "games", "me", "pw", timeout=2.5
        )

    def test_list_usb_devices(self) -> None:
        engine = FilesystemExtractionEngine(removable_roots=("/media",))
        with patch(
            "game_asset_onboarding.engine.filesystem.enumerate_removable_storage",
            return_value=["/media/usb0|usb0|10|5"],
        ) as enumerate_storage:
            assert engine.list_usb_devices() == ["/media/usb0|usb0|10|5"]

        enumerate_storage.assert_called_once_with(("/media",))
