"""Unit tests for crypttab reading."""

from __future__ import annotations

import errno
import logging
from unittest.mock import MagicMock, patch

import pytest

from cryptsetup_generator.crypttab import CrypttabEntry, parse_line, read_crypttab


class TestParseLine:
    """Test parsing of single crypttab lines."""

    def test_two_fields(self):
        """Test name and device alone are enough."""
        assert parse_line("data /dev/sdb1", 3) == CrypttabEntry(3, "data", "/dev/sdb1")

    def test_four_fields(self):
        """Test all four fields separated by mixed whitespace."""
        entry = parse_line("  swap\t/dev/sda3  /dev/urandom swap,cipher=aes  ", 1)
        assert entry == CrypttabEntry(1, "swap", "/dev/sda3", "/dev/urandom", "swap,cipher=aes")

    def test_blank_and_comment(self):
        """Test blank and comment lines produce no entry."""
        assert parse_line("   \n", 1) is None
        assert parse_line("# data /dev/sdb1", 1) is None
        assert parse_line("   # indented comment", 1) is None

    @pytest.mark.parametrize("line", ["onlyname", "a b c d e"])
    def test_wrong_field_count(self, line):
        """Test lines outside 2 to 4 fields are rejected."""
        with pytest.raises(ValueError):
            parse_line(line, 1)


class TestReadCrypttab:
    """Test reading whole tables."""

    def test_reads_entries_with_line_numbers(self, temp_dir, logger):
        """Test entries carry their line numbers."""
        path = temp_dir / "crypttab"
        path.write_text("# comment\n\nhome UUID=abc none luks\nswap /dev/sda3 /dev/urandom swap\n")

        entries = list(read_crypttab(str(path), logger))

        assert [e.line for e in entries] == [3, 4]
        assert entries[0].name == "home"
        assert entries[0].keyfile == "none"
        assert entries[1].options == "swap"

    def test_malformed_lines_are_skipped(self, temp_dir, logger, caplog):
        """Test malformed lines are logged and the rest is read."""
        path = temp_dir / "crypttab"
        path.write_text("good /dev/sdb1\nbad\nfive a b c d\nalso-good /dev/sdc1 - nofail\n")

        with caplog.at_level(logging.ERROR):
            entries = list(read_crypttab(str(path), logger))

        assert [e.name for e in entries] == ["good", "also-good"]
        assert f"{path}:2, ignoring" in caplog.text
        assert f"{path}:3, ignoring" in caplog.text

    def test_missing_file_is_empty(self, temp_dir, logger, caplog):
        """Test a missing table is silently empty."""
        with caplog.at_level(logging.DEBUG):
            entries = list(read_crypttab(str(temp_dir / "missing"), logger))
        assert entries == []
        assert caplog.text == ""

    def test_unreadable_file_is_logged_and_empty(self, temp_dir, logger, caplog):
        """Test a table that cannot be opened is logged and empty."""
        # a directory cannot be opened as a file
        with caplog.at_level(logging.ERROR):
            entries = list(read_crypttab(str(temp_dir), logger))
        assert entries == []
        assert "Failed to open" in caplog.text

    def test_read_error_is_logged(self, logger, caplog):
        """Test an I/O error while reading ends the table with an error log."""
        handle = MagicMock()
        handle.__enter__.return_value = handle
        handle.__iter__.side_effect = OSError(errno.EIO, "Input/output error")

        with patch("cryptsetup_generator.crypttab.open", return_value=handle, create=True):
            with caplog.at_level(logging.ERROR):
                entries = list(read_crypttab("/etc/crypttab", logger))

        assert entries == []
        assert "Failed to read /etc/crypttab" in caplog.text
