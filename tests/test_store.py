"""Tests for the layered ConfigStore."""

import logging
from pathlib import Path

import orjson
import pytest

from layerconf import (
    BOOLEAN,
    DOUBLE,
    INTEGER,
    STRING,
    VALUE_LIST,
    VALUE_MAP,
    ConfigCreateError,
    ConfigLoadError,
    ConfigStore,
    ConverterRegistry,
    JsonValue,
    LoadStatus,
)


def _read(path: Path) -> dict:
    return orjson.loads(path.read_bytes())


@pytest.fixture
def store(config_dir: Path, default_file: Path) -> ConfigStore:
    """ConfigStore generated from the shared default file."""
    return ConfigStore.in_directory(config_dir, "settings", default_file)


class TestBootstrap:
    """Test construction from the different default sources."""

    def test_generates_config_from_default_file(
        self, store: ConfigStore, config_dir: Path, default_file: Path
    ):
        """Test a missing config file is created identical to the default."""
        config_file = config_dir / "settings.json"

        assert store.config_file == config_file
        assert config_file.exists()
        assert _read(config_file) == _read(default_file)
        assert store.status is LoadStatus.CREATED
        assert store.is_broken() is False
        assert store.failure is None

    def test_generated_file_is_pretty_printed_with_nulls(
        self, store: ConfigStore
    ):
        """Test the generated document is indented and keeps nulls."""
        text = store.config_file.read_text(encoding="utf-8")

        assert '\n  "var1": 10' in text
        assert '"unset": null' in text

    def test_var1_example(self, store: ConfigStore):
        """Test the shipped default example decodes var1 to 10."""
        assert store.get_as("var1", INTEGER) == 10

    def test_loads_existing_config(self, config_dir: Path, default_file: Path):
        """Test an existing config file is read, not regenerated."""
        config_file = config_dir / "settings.json"
        config_file.write_bytes(orjson.dumps({"var1": 42, "extra": "yes"}))

        store = ConfigStore(config_file, default_file)

        assert store.status is LoadStatus.LOADED
        assert store.get_raw("var1") == 42
        assert store.get_raw("extra") == "yes"
        assert store.get_raw("name") is None
        assert store.get_raw_from_default("name") == "example"
        assert _read(config_file) == {"var1": 42, "extra": "yes"}

    def test_default_mapping_is_wrapped_shallow(self, config_dir: Path):
        """Test mapping defaults wrap top-level entries only."""
        store = ConfigStore(
            config_dir / "map.json", {"nested": {"a": [1, 2]}, 7: "seven"}
        )

        defaults = store.snapshot_default()
        assert set(defaults) == {"nested", "7"}
        assert defaults["nested"].value == {"a": [1, 2]}
        assert not isinstance(defaults["nested"].value["a"], JsonValue)
        assert _read(config_dir / "map.json") == {
            "nested": {"a": [1, 2]},
            "7": "seven",
        }

    def test_file_documents_are_wrapped_deep(self, store: ConfigStore):
        """Test values loaded from disk are JsonValue trees."""
        limits = store.get_raw("limits")

        assert isinstance(limits["high"], JsonValue)
        assert isinstance(limits["high"].value["soft"], JsonValue)
        assert store.get("limits").to_python() == {
            "low": 1,
            "high": {"soft": 5, "hard": 9},
        }

    def test_string_paths_are_accepted(self, config_dir: Path):
        """Test str paths work like Path objects."""
        store = ConfigStore(str(config_dir / "s.json"), {"a": 1})

        assert store.config_file == config_dir / "s.json"
        assert store.get_raw("a") == 1

    def test_empty_config_file_loads_as_empty(
        self, config_dir: Path, default_file: Path
    ):
        """Test an empty file is an empty config, not a failure."""
        config_file = config_dir / "empty.json"
        config_file.write_bytes(b"  \n")

        store = ConfigStore(config_file, default_file)

        assert store.is_broken() is False
        assert len(store) == 0
        assert store.get_raw_or_default("var1") == 10


class TestBrokenRecovery:
    """Test recovery when the config file cannot be created or read."""

    def test_malformed_config_marks_broken(
        self, config_dir: Path, default_file: Path, caplog
    ):
        """Test invalid JSON falls back to a copy of the defaults."""
        config_file = config_dir / "bad.json"
        config_file.write_text("{not json", encoding="utf-8")

        with caplog.at_level(logging.ERROR):
            store = ConfigStore(config_file, default_file)

        assert store.is_broken() is True
        assert store.broken is True
        assert store.status is LoadStatus.RECOVERED
        assert isinstance(store.failure, ConfigLoadError)
        assert store.snapshot_current() == store.snapshot_default()
        assert store.get_as("var1", 0) == 10
        assert "Failed to load config file" in caplog.text

    def test_unreadable_config_marks_broken(
        self, config_dir: Path, default_file: Path
    ):
        """Test a path that cannot be read as a file marks the store broken."""
        config_file = config_dir / "dir.json"
        config_file.mkdir()

        store = ConfigStore(config_file, default_file)

        assert store.is_broken() is True
        assert isinstance(store.failure, ConfigLoadError)
        assert store.snapshot_current() == store.snapshot_default()

    def test_non_object_document_marks_broken(self, config_dir: Path):
        """Test a top-level array is rejected."""
        config_file = config_dir / "list.json"
        config_file.write_bytes(b"[1, 2, 3]")

        store = ConfigStore(config_file, {"a": 1})

        assert store.is_broken() is True
        assert "must be an object" in str(store.failure)
        assert store.get_raw("a") == 1

    def test_uncreatable_config_marks_broken(
        self, tmp_path: Path, default_file: Path
    ):
        """Test a config in a missing directory cannot be generated."""
        config_file = tmp_path / "missing" / "settings.json"

        store = ConfigStore(config_file, default_file)

        assert store.is_broken() is True
        assert isinstance(store.failure, ConfigCreateError)
        assert not config_file.exists()
        assert store.get_raw("name") == "example"

    def test_unusable_config_path_marks_broken(self, tmp_path: Path):
        """Test an invalid file name never escapes the constructor."""
        config_file = tmp_path / ("x" * 300 + ".json")

        store = ConfigStore(config_file, {"a": 1})

        assert store.is_broken() is True
        assert store.status is LoadStatus.RECOVERED
        assert isinstance(store.failure, ConfigCreateError)
        assert store.get_raw("a") == 1
        assert store.save() is False
        assert store.delete() is False

    def test_bad_default_file_leaves_defaults_empty(
        self, config_dir: Path, tmp_path: Path, caplog
    ):
        """Test an unreadable default is reported but not fatal by itself."""
        config_file = config_dir / "settings.json"
        config_file.write_bytes(orjson.dumps({"a": 1}))

        with caplog.at_level(logging.ERROR):
            store = ConfigStore(config_file, tmp_path / "nope.json")

        assert store.is_broken() is False
        assert store.snapshot_default() == {}
        assert store.get_raw("a") == 1
        assert "Failed to load default config" in caplog.text

    def test_bad_default_file_and_missing_config(
        self, config_dir: Path, tmp_path: Path
    ):
        """Test a config cannot be generated without default content."""
        bad_default = tmp_path / "bad_default.json"
        bad_default.write_text("{", encoding="utf-8")
        config_file = config_dir / "settings.json"

        store = ConfigStore(config_file, bad_default)

        assert store.is_broken() is True
        assert isinstance(store.failure, ConfigCreateError)
        assert not config_file.exists()
        assert len(store) == 0


class TestLookup:
    """Test layered lookups."""

    def test_get_returns_last_put(self, store: ConfigStore):
        """Test get() reflects the latest put()."""
        store.put("var1", 11)
        store.put("var1", 12)

        assert store.get("var1") == JsonValue(12)
        assert store.get_raw("var1") == 12

    def test_get_or_default_falls_back_to_default_layer(
        self, config_dir: Path, default_file: Path
    ):
        """Test keys missing from current come from the defaults."""
        config_file = config_dir / "partial.json"
        config_file.write_bytes(orjson.dumps({"var1": 1}))
        store = ConfigStore(config_file, default_file)

        assert store.get_or_default("name") == store.get_from_default("name")
        assert store.get_or_default("name") == JsonValue("example")
        assert store.get_raw_or_default("name") == "example"
        assert store.get_or_default("var1") == JsonValue(1)

    def test_explicit_default_when_key_missing_everywhere(
        self, store: ConfigStore
    ):
        """Test explicit defaults and the absent wrapper."""
        assert store.get_or_default("missing", 5) == JsonValue(5)
        assert store.get_raw_or_default("missing", "d") == "d"
        assert store.get_or_default("missing") == JsonValue(None)
        assert store.get_or_default("missing").is_null
        assert store.get("missing") == JsonValue(None)
        assert store.get_raw("missing") is None
        assert store.get_from_default("missing") == JsonValue(None)

    def test_explicit_default_wins_over_default_layer(
        self, config_dir: Path, default_file: Path
    ):
        """Test an explicit default replaces the default-layer fallback."""
        config_file = config_dir / "partial.json"
        config_file.write_bytes(orjson.dumps({}))
        store = ConfigStore(config_file, default_file)

        assert store.get_raw_or_default("name", "other") == "other"

    def test_membership_and_keys(self, store: ConfigStore):
        """Test container helpers reflect current values."""
        assert "var1" in store
        assert "missing" not in store
        assert store.keys()[0] == "var1"
        assert len(store) == 7

    def test_raw_containers_are_copies(self, store: ConfigStore):
        """Test mutating a returned list or mapping leaves the store alone."""
        store.get_raw("tags").append(JsonValue("c"))
        store.get_raw("limits")["low"] = JsonValue(0)
        store.get_raw_from_default("tags").clear()

        assert store.get("tags").to_python() == ["a", "b"]
        assert store.get("limits").to_python()["low"] == 1
        assert store.get_from_default("tags").to_python() == ["a", "b"]


class TestTypedLookup:
    """Test get_as with probe and explicit conversions."""

    def test_probe_truncates_float(self, store: ConfigStore):
        """Test a float decodes to an int fallback by truncation."""
        store.put("n", 10.9)

        assert store.get_as("n", 0) == 10

    def test_probe_degrades_to_fallback(self, store: ConfigStore):
        """Test a shape mismatch returns the fallback."""
        assert store.get_as("name", 0) == 0
        assert store.get_as("missing", "fallback") == "fallback"
        assert store.get_as("enabled", False) is True

    def test_probe_ignores_default_layer(
        self, config_dir: Path, default_file: Path
    ):
        """Test probe conversion reads the current layer only."""
        config_file = config_dir / "partial.json"
        config_file.write_bytes(orjson.dumps({}))
        store = ConfigStore(config_file, default_file)

        assert store.get_as("var1", -1) == -1

    def test_explicit_converter_uses_default_layer(
        self, config_dir: Path, default_file: Path
    ):
        """Test explicit converters fall back to the converted default."""
        config_file = config_dir / "partial.json"
        config_file.write_bytes(orjson.dumps({"ratio": "high"}))
        store = ConfigStore(config_file, default_file)

        assert store.get_as("var1", INTEGER) == 10
        assert store.get_as("ratio", DOUBLE) == 0.75
        assert store.get_as("missing", STRING) is None

    def test_builtin_converters_on_store(self, store: ConfigStore):
        """Test each built-in converter against the default document."""
        assert store.get_as("name", STRING) == "example"
        assert store.get_as("ratio", DOUBLE) == 0.75
        assert store.get_as("enabled", BOOLEAN) is True
        tags = store.get_as("tags", VALUE_LIST)
        assert [tag.value for tag in tags] == ["a", "b"]
        limits = store.get_as("limits", VALUE_MAP)
        assert limits["low"] == JsonValue(1)

    def test_store_uses_its_registry(self, config_dir: Path):
        """Test probe conversion goes through the injected registry."""
        registry = ConverterRegistry()
        store = ConfigStore(
            config_dir / "r.json", {"n": 3.5}, registry=registry
        )

        assert store.registry is registry
        assert store.get_as("n", 0) == 0
        registry.register("INTEGER", INTEGER)
        assert store.get_as("n", 0) == 3


class TestPersistence:
    """Test put/save/delete."""

    def test_put_does_not_persist(self, store: ConfigStore):
        """Test put() only changes memory."""
        store.put("var1", 99)

        assert _read(store.config_file)["var1"] == 10

    def test_save_round_trip(self, store: ConfigStore, default_file: Path):
        """Test saved values are read back by a fresh store."""
        store.put("a", 1)
        store.put("b", 2)

        assert store.save() is True

        fresh = ConfigStore(store.config_file, default_file)
        assert fresh.status is LoadStatus.LOADED
        assert fresh.get_as("a", 0) == 1
        assert fresh.get_as("b", 0) == 2
        assert fresh.get("limits") == store.get("limits")

    def test_save_keeps_insertion_order(self, config_dir: Path):
        """Test keys are written in insertion order."""
        store = ConfigStore(config_dir / "order.json", {"first": 1})
        store.put("second", 2)
        store.put("third", None)
        store.put("first", 10)

        assert store.save() is True

        document = _read(store.config_file)
        assert list(document) == ["first", "second", "third"]
        assert document == {"first": 10, "second": 2, "third": None}

    def test_save_writes_nested_values(self, store: ConfigStore):
        """Test wrapped and plain nested values serialize as JSON."""
        store.put("wrapped", JsonValue([JsonValue(1), {"k": JsonValue(2)}]))
        store.put_all({"plain": {"x": [True, None]}})

        assert store.save() is True

        document = _read(store.config_file)
        assert document["wrapped"] == [1, {"k": 2}]
        assert document["plain"] == {"x": [True, None]}
        assert document["limits"]["high"] == {"soft": 5, "hard": 9}

    def test_save_is_silent_about_delete(self, store: ConfigStore, caplog):
        """Test save() does not emit the delete() warnings."""
        with caplog.at_level(logging.DEBUG):
            assert store.save() is True

        assert "was deleted" not in caplog.text
        assert "already deleted" not in caplog.text
        assert "Saved config" in caplog.text

    def test_save_recreates_deleted_file(self, store: ConfigStore):
        """Test save() works when the file is gone."""
        store.delete()

        assert store.save() is True
        assert store.config_file.exists()

    def test_save_failure_returns_false(
        self, store: ConfigStore, caplog
    ):
        """Test a write failure is reported and returned, not raised."""
        store.config_file.unlink()
        store.config_file.mkdir()
        store.put("var1", 5)

        with caplog.at_level(logging.ERROR):
            assert store.save() is False

        assert store.get_raw("var1") == 5
        assert "Failed to save config file" in caplog.text

    def test_save_unserializable_value_returns_false(
        self, store: ConfigStore
    ):
        """Test values orjson cannot encode fail the save."""
        store.put("bad", {1, 2})

        assert store.save() is False
        assert store.config_file.exists()
        assert _read(store.config_file)["var1"] == 10
        assert "bad" not in _read(store.config_file)

    def test_put_and_save_helpers(self, store: ConfigStore):
        """Test the combined helpers persist immediately."""
        assert store.put_and_save("var1", 3) is True
        assert _read(store.config_file)["var1"] == 3

        assert store.put_all_and_save({"x": "y", "var1": 4}) is True
        document = _read(store.config_file)
        assert document["x"] == "y"
        assert document["var1"] == 4

    def test_delete(self, store: ConfigStore, caplog):
        """Test delete() removes the file and keeps memory intact."""
        with caplog.at_level(logging.WARNING):
            assert store.delete() is True
            assert store.delete() is False

        assert not store.config_file.exists()
        assert store.get_raw("var1") == 10
        assert "regenerate it" in caplog.text
        assert "already deleted" in caplog.text

    def test_save_while_broken(self, tmp_path: Path, default_file: Path):
        """Test a broken store still reports save failures cleanly."""
        store = ConfigStore(tmp_path / "missing" / "c.json", default_file)

        assert store.is_broken() is True
        assert store.save() is False


class TestCopy:
    """Test copy() independence."""

    def test_copy_is_independent(self, store: ConfigStore):
        """Test mutating a copy leaves the original untouched."""
        store.put("x", 1)
        clone = store.copy()
        clone.put("x", 2)

        assert store.get_as("x", 0) == 1
        assert clone.get_as("x", 0) == 2
        assert clone.config_file == store.config_file
        assert clone.registry is store.registry

    def test_copy_does_not_share_nested_values(self, store: ConfigStore):
        """Test nested containers are copied too."""
        clone = store.copy()
        clone.get_raw("limits")["high"].value["soft"] = JsonValue(0)

        assert store.get("limits").to_python()["high"]["soft"] == 5
        assert clone.get("limits").to_python()["high"]["soft"] == 0
        assert clone.snapshot_default() == store.snapshot_default()

    def test_copy_inherits_broken_flag(
        self, config_dir: Path, default_file: Path
    ):
        """Test copies of a broken store are broken as well."""
        config_file = config_dir / "bad.json"
        config_file.write_text("oops", encoding="utf-8")
        store = ConfigStore(config_file, default_file)

        clone = store.copy()

        assert clone.is_broken() is True
        assert clone.status is LoadStatus.RECOVERED
        assert clone.failure is store.failure

    def test_snapshots_are_defensive(self, store: ConfigStore):
        """Test snapshot mutation does not leak into the store."""
        snapshot = store.snapshot_current()
        snapshot["var1"] = JsonValue(0)
        snapshot["tags"].value.clear()

        assert store.get_raw("var1") == 10
        assert len(store.get_raw("tags")) == 2
