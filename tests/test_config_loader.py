"""Tests for config_loader — comment stripping, default creation, load errors."""

import json
from pathlib import Path

import pytest

from magpatcher.errors import LoadError
from magpatcher.loaders.config_loader import (
    DEFAULT_COMMENTS,
    load_or_create_config,
    render_config,
    strip_comments,
    write_config,
)
from magpatcher.models.patch_config import default_document


class TestStripComments:
    """Comment removal from the raw config text."""

    def test_line_comments(self):
        text = '{\n  "debug": true // turn on\n}\n// trailing'
        assert json.loads(strip_comments(text)) == {"debug": True}

    def test_block_comments(self):
        text = '/* header\n spans lines */ {"a": /* inline */ 1}'
        assert json.loads(strip_comments(text)) == {"a": 1}

    def test_markers_inside_strings_survive(self):
        text = '{"url": "http://example.com/*x*/"} // note'
        assert json.loads(strip_comments(text)) == {"url": "http://example.com/*x*/"}

    def test_escaped_quote_in_string(self):
        text = r'{"a": "say \"hi\" // not a comment"}'
        assert json.loads(strip_comments(text)) == {"a": 'say "hi" // not a comment'}


class TestRender:
    """Rendering a document with its guidance comments."""

    def test_two_space_indent_and_comment_lines(self):
        text = render_config({"debug": False}, ["first", "second"])
        assert text == '{\n  "debug": false\n}\n// first\n// second\n'

    def test_rendered_file_parses_back(self):
        doc = default_document()
        text = render_config(doc, DEFAULT_COMMENTS)
        assert json.loads(strip_comments(text)) == doc


class TestLoadOrCreate:
    """Loading an existing config or bootstrapping the default file."""

    def test_missing_file_creates_default(self, tmp_path: Path):
        path = tmp_path / "config" / "config.jsonc"
        doc, created = load_or_create_config(path)
        assert created is True
        assert doc == default_document()
        assert path.exists()

    def test_created_file_contains_guidance(self, tmp_path: Path):
        path = tmp_path / "config.jsonc"
        load_or_create_config(path)
        text = path.read_text(encoding="utf-8")
        assert "// Default config created. Adjust values as needed." in text
        assert "// Vanilla Timings are 0.85 (baseLoadTime) and 0.3 (baseUnloadTime)" in text
        assert '\n  "ammo.loadspeed": 0.85,' in text

    def test_nested_directory_created(self, tmp_path: Path):
        path = tmp_path / "a" / "b" / "c" / "config.jsonc"
        load_or_create_config(path)
        assert path.parent.is_dir()

    def test_second_load_reads_created_file(self, tmp_path: Path):
        path = tmp_path / "config.jsonc"
        load_or_create_config(path)
        doc, created = load_or_create_config(path)
        assert created is False
        assert doc == default_document()

    def test_existing_file_with_comments(self, tmp_path: Path):
        path = tmp_path / "config.jsonc"
        path.write_text('// mine\n{\n  "debug": true, /* on */\n  "min.MagazineSize": 20\n}\n')
        doc, created = load_or_create_config(path)
        assert created is False
        assert doc == {"debug": True, "min.MagazineSize": 20}

    def test_partial_document_is_returned_as_is(self, tmp_path: Path):
        path = tmp_path / "config.jsonc"
        path.write_text('{"ammo.loadspeed": "0,75"}')
        doc, _ = load_or_create_config(path)
        assert doc == {"ammo.loadspeed": "0,75"}

    def test_empty_file_raises(self, tmp_path: Path):
        path = tmp_path / "config.jsonc"
        path.write_text("   \n")
        with pytest.raises(LoadError, match="empty"):
            load_or_create_config(path)

    def test_comments_only_raises(self, tmp_path: Path):
        path = tmp_path / "config.jsonc"
        path.write_text("// nothing here\n")
        with pytest.raises(LoadError, match="not valid JSON"):
            load_or_create_config(path)

    def test_malformed_json_raises(self, tmp_path: Path):
        path = tmp_path / "config.jsonc"
        path.write_text('{"debug": true,,}')
        with pytest.raises(LoadError):
            load_or_create_config(path)

    def test_non_object_raises(self, tmp_path: Path):
        path = tmp_path / "config.jsonc"
        path.write_text("[1, 2, 3]")
        with pytest.raises(LoadError, match="JSON object"):
            load_or_create_config(path)

    def test_undecodable_bytes_raise(self, tmp_path: Path):
        path = tmp_path / "config.jsonc"
        path.write_bytes(b"\xff\xfe\x00garbage")
        with pytest.raises(LoadError):
            load_or_create_config(path)

    def test_empty_file_is_not_replaced_with_defaults(self, tmp_path: Path):
        path = tmp_path / "config.jsonc"
        path.write_text("")
        with pytest.raises(LoadError):
            load_or_create_config(path)
        assert path.read_text() == ""


class TestWriteConfig:
    """Atomic config writes."""

    def test_write_leaves_no_temp_file(self, tmp_path: Path):
        path = tmp_path / "config.jsonc"
        write_config(path, {"debug": True}, ["x"])
        assert path.exists()
        assert list(tmp_path.iterdir()) == [path]

    def test_write_into_missing_directory_raises(self, tmp_path: Path):
        with pytest.raises(OSError):
            write_config(tmp_path / "missing" / "config.jsonc", {"debug": True})
