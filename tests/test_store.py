#!/usr/bin/env python3
"""Tests for key-value stores."""

import yaml

from carcare import DEFAULT_SETTINGS, MemoryStore, YamlFileStore, load_settings


class TestMemoryStore:
    """Tests for MemoryStore."""

    def test_get_default(self):
        assert MemoryStore().get("missing") is None
        assert MemoryStore().get("missing", {}) == {}

    def test_put_get(self):
        store = MemoryStore()
        store.put("k", {"a": 1})
        assert store.get("k") == {"a": 1}

    def test_initial_data_copied(self):
        data = {"k": 1}
        store = MemoryStore(data)
        store.put("k", 2)
        assert data == {"k": 1}


class TestYamlFileStore:
    """Tests for YamlFileStore."""

    def test_missing_file_is_empty(self, tmp_path):
        store = YamlFileStore(tmp_path / "state.yaml")
        assert store.get("anything") is None

    def test_put_creates_file_and_parents(self, tmp_path):
        path = tmp_path / "nested" / "state.yaml"
        YamlFileStore(path).put("carcare_settings", {"priceEssence": 2.6})
        assert yaml.safe_load(path.read_text()) == {"carcare_settings": {"priceEssence": 2.6}}

    def test_put_keeps_other_keys(self, tmp_path):
        store = YamlFileStore(tmp_path / "state.yaml")
        store.put("a", 1)
        store.put("b", {"t1": True})
        assert store.get("a") == 1
        assert store.get("b") == {"t1": True}

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "state.yaml"
        path.write_text("a: [unclosed\n")
        assert YamlFileStore(path).get("a") is None

    def test_non_mapping_document_reads_as_empty(self, tmp_path):
        path = tmp_path / "state.yaml"
        path.write_text("- 1\n- 2\n")
        assert YamlFileStore(path).get("a", "default") == "default"

    def test_unicode_survives(self, tmp_path):
        store = YamlFileStore(tmp_path / "state.yaml")
        store.put("note", "Électrique")
        assert store.get("note") == "Électrique"

    def test_undecodable_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "state.yaml"
        path.write_bytes(b"carcare_settings:\n  priceEssence: \xff\xfe\n")
        assert YamlFileStore(path).get("carcare_settings") is None

    def test_undecodable_file_yields_default_settings(self, tmp_path):
        path = tmp_path / "state.yaml"
        path.write_bytes(b"carcare_settings:\n  priceEssence: \xff\xfe\n")
        assert load_settings(YamlFileStore(path)) == DEFAULT_SETTINGS

    def test_written_as_utf8(self, tmp_path):
        path = tmp_path / "state.yaml"
        YamlFileStore(path).put("note", "Électrique")
        assert "Électrique" in path.read_bytes().decode("utf-8")
