"""Tests for directive module."""

import pytest
from pathlib import Path

from hotswap.directive import DirectiveSource, parse_lines
from hotswap.exceptions import DirectiveEmptyError, DirectiveUnreadableError


class TestParseLines:
    """Tests for parse_lines()."""

    def test_single_and_group_lines(self):
        config = parse_lines([
            "switch=on",
            "app.models.Player",
            "app.models.Player;app.models.Player.Stats",
        ])

        assert config.enabled is True
        assert len(config.lines) == 2
        assert config.lines[0].units == ("app.models.Player",)
        assert config.lines[0].is_group is False
        assert config.lines[1].units == ("app.models.Player", "app.models.Player.Stats")
        assert config.lines[1].is_group is True

    def test_switch_missing_disables(self):
        config = parse_lines(["app.models"])

        assert config.enabled is False
        assert config.switch_lines == []

    def test_switch_off_disables(self):
        config = parse_lines(["switch=off", "app.models"])

        assert config.enabled is False
        assert config.switch_lines == ["switch=off"]

    def test_switch_value_is_exact(self):
        assert parse_lines(["switch=ON"]).enabled is False
        assert parse_lines(["switch=onward"]).enabled is False

    def test_switch_lines_never_become_units(self):
        config = parse_lines(["app.a", "switch=off", "switch=on", "app.b"])

        assert config.enabled is True
        assert config.switch_lines == ["switch=off", "switch=on"]
        assert config.unit_ids() == ["app.a", "app.b"]

    def test_group_members_trimmed(self):
        config = parse_lines(["switch=on", " app.a ;  app.b "])

        assert config.lines[0].units == ("app.a", "app.b")

    def test_group_empty_members_dropped(self):
        config = parse_lines(["switch=on", "app.a;;app.b;"])

        assert config.lines[0].units == ("app.a", "app.b")
        assert config.lines[0].is_group is True

    def test_single_member_group_stays_group(self):
        config = parse_lines(["switch=on", "app.a;"])

        assert config.lines[0].units == ("app.a",)
        assert config.lines[0].is_group is True

    def test_group_without_members_skipped(self):
        config = parse_lines(["switch=on", ";", " ; ; ", "app.a"])

        assert len(config.lines) == 1
        assert config.lines[0].units == ("app.a",)

    def test_blank_and_comment_lines_ignored(self):
        config = parse_lines(["", "   ", "# app.hidden", "switch=on", "app.a"])

        assert config.unit_ids() == ["app.a"]

    def test_line_text_kept(self):
        config = parse_lines(["app.a ; app.b"])
        assert config.lines[0].text == "app.a ; app.b"


class TestDirectiveSource:
    """Tests for DirectiveSource class."""

    def test_read_lines(self, tmp_path):
        path = tmp_path / "hotswap.txt"
        path.write_text("# header\n\n  switch=on  \napp.models\n", encoding="utf-8")

        source = DirectiveSource(path)

        assert source.read_lines() == ["switch=on", "app.models"]

    def test_load_with_byte_order_mark(self, tmp_path):
        path = tmp_path / "hotswap.txt"
        path.write_text("switch=on\napp.a\n", encoding="utf-8-sig")

        config = DirectiveSource(path).load()

        assert config.enabled is True
        assert config.switch_lines == ["switch=on"]

    def test_load(self, tmp_path):
        path = tmp_path / "hotswap.txt"
        path.write_text("switch=on\napp.a;app.b\n", encoding="utf-8")

        config = DirectiveSource(path).load()

        assert config.enabled is True
        assert config.lines[0].is_group is True

    def test_windows_line_endings(self, tmp_path):
        path = tmp_path / "hotswap.txt"
        path.write_bytes(b"switch=on\r\napp.models\r\n")

        config = DirectiveSource(path).load()

        assert config.enabled is True
        assert config.unit_ids() == ["app.models"]

    def test_missing_file_unreadable(self, tmp_path):
        source = DirectiveSource(tmp_path / "missing.txt")

        with pytest.raises(DirectiveUnreadableError):
            source.read_lines()

    def test_directory_unreadable(self, tmp_path):
        with pytest.raises(DirectiveUnreadableError):
            DirectiveSource(tmp_path).load()

    def test_invalid_utf8_unreadable(self, tmp_path):
        path = tmp_path / "hotswap.txt"
        path.write_bytes(b"switch=on\n\xff\xfe\xfa\n")

        with pytest.raises(DirectiveUnreadableError):
            DirectiveSource(path).load()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "hotswap.txt"
        path.write_text("", encoding="utf-8")

        with pytest.raises(DirectiveEmptyError):
            DirectiveSource(path).load()

    def test_only_comments_is_empty(self, tmp_path):
        path = tmp_path / "hotswap.txt"
        path.write_text("# nothing to do\n\n", encoding="utf-8")

        with pytest.raises(DirectiveEmptyError):
            DirectiveSource(path).load()

    def test_path_accepts_string(self, tmp_path):
        source = DirectiveSource(str(tmp_path / "hotswap.txt"))
        assert source.path == tmp_path / "hotswap.txt"
