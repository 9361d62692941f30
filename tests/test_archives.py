"""Tests for archive discovery, header checks and filename safety."""

import tempfile
from pathlib import Path

import pytest

from conftest import write_archive
from game_asset_onboarding.core.archives import (
    MPQ_USER_DATA_MAGIC,
    PLACEHOLDER_PATTERN,
    find_archives,
    has_required_files,
    inspect_archive,
    sanitize_filename,
    validate_path_safety,
)


class TestSanitizeFilename:
    """Test filename sanitization."""

    def test_removes_dangerous_characters(self) -> None:
        """Test that dangerous characters are removed."""
        assert sanitize_filename("d2<data>.mpq") == "d2data.mpq"
        assert sanitize_filename('d2"exp".mpq') == "d2exp.mpq"
        assert sanitize_filename("d2|sfx.mpq") == "d2sfx.mpq"

    def test_removes_path_separators(self) -> None:
        """Test that path separators are removed."""
        assert sanitize_filename("../../../etc/passwd") == "......etcpasswd"
        assert sanitize_filename("..\\..\\d2data.mpq") == "....d2data.mpq"

    def test_safe_filenames_unchanged(self) -> None:
        """Test that safe filenames pass through unchanged."""
        assert sanitize_filename("d2data.mpq") == "d2data.mpq"
        assert sanitize_filename("patch_d2.mpq") == "patch_d2.mpq"


class TestValidatePathSafety:
    """Test path traversal prevention."""

    def test_allows_paths_within_base(self) -> None:
        """Test that paths within base directory are allowed."""
        with tempfile.TemporaryDirectory() as tmpdir:
            base = Path(tmpdir)
            # Should not raise
            validate_path_safety(base / "d2data.mpq", base)

    def test_rejects_path_traversal(self) -> None:
        """Test that path traversal attempts are rejected."""
        with tempfile.TemporaryDirectory() as tmpdir:
            base = Path(tmpdir)
            dangerous_path = base / ".." / ".." / "etc" / "passwd"

            with pytest.raises(ValueError, match="escapes base directory"):
                validate_path_safety(dangerous_path, base)


class TestFindArchives:
    """Test locating archives in a source directory."""

    def test_maps_lowercase_names(self, tmp_path: Path) -> None:
        """Test that names are matched case-insensitively."""
        write_archive(tmp_path, "D2Data.MPQ")
        write_archive(tmp_path, "d2exp.mpq")

        archives = find_archives(tmp_path)

        assert archives == {
            "d2data.mpq": tmp_path / "D2Data.MPQ",
            "d2exp.mpq": tmp_path / "d2exp.mpq",
        }

    def test_skips_other_entries(self, tmp_path: Path) -> None:
        """Test that hidden files, other files and subdirectories are ignored."""
        write_archive(tmp_path, ".d2data.mpq")
        (tmp_path / "Game.exe").write_bytes(b"MZ")
        write_archive(tmp_path / "sub", "d2exp.mpq")
        (tmp_path / "folder.mpq").mkdir()

        assert find_archives(tmp_path) == {}


class TestInspectArchive:
    """Test MPQ header checks."""

    def test_valid_header(self, tmp_path: Path) -> None:
        check = inspect_archive(write_archive(tmp_path, "d2data.mpq", size=100))

        assert check.is_valid
        assert check.error == ""
        assert check.size_bytes == 100

    def test_user_data_header(self, tmp_path: Path) -> None:
        """Test that archives with a user data block are accepted."""
        assert inspect_archive(write_archive(tmp_path, "d2data.mpq", header=MPQ_USER_DATA_MAGIC)).is_valid

    def test_placeholder(self, tmp_path: Path) -> None:
        check = inspect_archive(write_archive(tmp_path, "d2data.mpq", header=PLACEHOLDER_PATTERN))

        assert not check.is_valid
        assert check.is_placeholder
        assert "placeholder" in check.error

    def test_invalid_header(self, tmp_path: Path) -> None:
        check = inspect_archive(write_archive(tmp_path, "d2data.mpq", header=b"PK\x03\x04"))

        assert not check.is_valid
        assert not check.is_placeholder
        assert check.error == "Invalid MPQ header"

    def test_short_file(self, tmp_path: Path) -> None:
        path = tmp_path / "d2data.mpq"
        path.write_bytes(b"MP")

        assert inspect_archive(path).error == "Failed to read file header"

    def test_missing_file(self, tmp_path: Path) -> None:
        check = inspect_archive(tmp_path / "d2data.mpq")

        assert not check.is_valid
        assert check.error.startswith("Failed to open file")


class TestHasRequiredFiles:
    """Test the asset directory marker check."""

    def test_markers_present(self, tmp_path: Path) -> None:
        write_archive(tmp_path, "d2data.mpq")
        write_archive(tmp_path, "D2EXP.MPQ")

        assert has_required_files(tmp_path)

    def test_marker_missing(self, tmp_path: Path) -> None:
        write_archive(tmp_path, "d2data.mpq")

        assert not has_required_files(tmp_path)

    def test_directory_missing(self, tmp_path: Path) -> None:
        assert not has_required_files(tmp_path / "gone")
