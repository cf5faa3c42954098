"""Tests for the table dump loader / saver used by the file-backed host."""

import json
from pathlib import Path

import pytest
import yaml

from magpatcher.loaders.table_loader import FileTableProvider, load_tables
from magpatcher.persistence.table_save import save_tables

_DUMP = (
    "templates:\n"
    "  items:\n"
    "    mag1:\n"
    "      _id: mag1\n"
    "      _parent: 5448bc234bdc2d3c308b4569\n"
    "      _props:\n"
    "        Cartridges:\n"
    "        - _max_count: 30\n"
    "        Height: 3\n"
    "        Width: 1\n"
    "globals:\n"
    "  config:\n"
    "    SkillsSettings:\n"
    "      Reloading:\n"
    "        BaseLoadTime: 0.85\n"
    "        BaseUnloadTime: 0.3\n"
)


class TestLoadTables:
    """Reading YAML and JSON table dumps."""

    def test_yaml_dump(self, tmp_path: Path):
        f = tmp_path / "tables.yaml"
        f.write_text(_DUMP)
        tables = load_tables(f)
        assert tables["templates"]["items"]["mag1"]["_props"]["Cartridges"][0]["_max_count"] == 30
        assert tables["globals"]["config"]["SkillsSettings"]["Reloading"]["BaseUnloadTime"] == 0.3

    def test_json_dump(self, tmp_path: Path):
        f = tmp_path / "tables.json"
        f.write_text(json.dumps(yaml.safe_load(_DUMP)))
        assert load_tables(f) == yaml.safe_load(_DUMP)

    def test_empty_file(self, tmp_path: Path):
        f = tmp_path / "tables.yaml"
        f.write_text("")
        assert load_tables(f) == {}

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_tables(tmp_path / "nonexistent.yaml")

    def test_non_mapping_raises(self, tmp_path: Path):
        f = tmp_path / "tables.yaml"
        f.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_tables(f)


class TestSaveTables:
    """Atomic table dump writes."""

    def test_yaml_round_trip(self, tmp_path: Path):
        tables = yaml.safe_load(_DUMP)
        out = tmp_path / "out" / "tables.yaml"
        save_tables(tables, out)
        assert load_tables(out) == tables
        assert list(out.parent.iterdir()) == [out]

    def test_json_target(self, tmp_path: Path):
        tables = yaml.safe_load(_DUMP)
        out = tmp_path / "tables.json"
        save_tables(tables, out)
        assert json.loads(out.read_text()) == tables


class TestFileTableProvider:
    """File-backed table provider."""

    def test_none_until_file_exists(self, tmp_path: Path):
        f = tmp_path / "tables.yaml"
        provider = FileTableProvider(f)
        assert provider.get_tables() is None
        f.write_text(_DUMP)
        assert provider.get_tables()["templates"]["items"]["mag1"]["_id"] == "mag1"

    def test_tables_are_cached(self, tmp_path: Path):
        f = tmp_path / "tables.yaml"
        f.write_text(_DUMP)
        provider = FileTableProvider(f)
        first = provider.get_tables()
        first["templates"]["items"]["mag1"]["_props"]["Height"] = 2
        assert provider.get_tables() is first

    def test_save_writes_mutations(self, tmp_path: Path):
        f = tmp_path / "tables.yaml"
        f.write_text(_DUMP)
        provider = FileTableProvider(f)
        provider.get_tables()["templates"]["items"]["mag1"]["_props"]["Height"] = 2
        provider.save()
        assert load_tables(f)["templates"]["items"]["mag1"]["_props"]["Height"] == 2

    def test_save_before_load_raises(self, tmp_path: Path):
        with pytest.raises(RuntimeError):
            FileTableProvider(tmp_path / "tables.yaml").save()

    def test_save_to_other_path_leaves_source(self, tmp_path: Path):
        f = tmp_path / "tables.yaml"
        f.write_text(_DUMP)
        provider = FileTableProvider(f)
        provider.get_tables()["templates"]["items"]["mag1"]["_props"]["Height"] = 2
        out = tmp_path / "patched.yaml"
        provider.save(out)
        assert load_tables(out)["templates"]["items"]["mag1"]["_props"]["Height"] == 2
        assert load_tables(f)["templates"]["items"]["mag1"]["_props"]["Height"] == 3
