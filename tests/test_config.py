"""Tests for BridgeConfig and JSON persistence."""

import json
from pathlib import Path

import pytest
from pydantic import BaseModel, ValidationError

from tourbridge.exceptions import ConfigFileInvalidError, ConfigValidationError
from tourbridge.models import BridgeConfig, ModelFile


class RecordModel(BaseModel):
    """Simple model for testing."""

    name: str = "test"
    value: int = 42


@pytest.mark.unit
class TestBridgeConfig:
    """Defaults and validation."""

    def test_defaults(self):
        config = BridgeConfig()
        assert config.port == 50500
        assert config.bind_address == "127.0.0.1"
        assert config.backlog == 5
        assert config.recv_size == 1024
        assert config.read_timeout is None
        assert config.accept_timeout == 0.5
        assert config.join_timeout == 2.0

    def test_port_zero_allowed(self):
        assert BridgeConfig(port=0).port == 0

    @pytest.mark.parametrize("port", [-1, 65536])
    def test_port_out_of_range(self, port):
        with pytest.raises(ValidationError):
            BridgeConfig(port=port)

    def test_all_interfaces(self):
        assert BridgeConfig(bind_address="0.0.0.0").bind_address == "0.0.0.0"

    @pytest.mark.parametrize("address", ["localhost", "::1", "256.0.0.1", ""])
    def test_bind_address_must_be_ipv4(self, address):
        with pytest.raises(ValidationError):
            BridgeConfig(bind_address=address)

    def test_recv_size_positive(self):
        with pytest.raises(ValidationError):
            BridgeConfig(recv_size=0)

    def test_read_timeout_positive(self):
        assert BridgeConfig(read_timeout=1.5).read_timeout == 1.5
        with pytest.raises(ValidationError):
            BridgeConfig(read_timeout=0)


@pytest.mark.unit
class TestConfigFiles:
    """Loading and saving config files."""

    def test_missing_file_gives_defaults(self, tmp_path: Path):
        config = BridgeConfig.load_or_default(tmp_path / "missing.json")
        assert config == BridgeConfig()

    def test_save_and_load(self, tmp_path: Path):
        path = tmp_path / "nested" / "config.json"
        BridgeConfig(port=6000, bind_address="0.0.0.0", read_timeout=2.0).save(path)

        loaded = BridgeConfig.load_or_default(path)
        assert loaded.port == 6000
        assert loaded.bind_address == "0.0.0.0"
        assert loaded.read_timeout == 2.0

    def test_partial_file_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"port": 7000}))

        config = BridgeConfig.load_or_default(path)
        assert config.port == 7000
        assert config.recv_size == 1024

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text("{ not json")

        with pytest.raises(ConfigFileInvalidError):
            BridgeConfig.load_or_default(path)

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text("   ")

        with pytest.raises(ConfigFileInvalidError):
            BridgeConfig.load_or_default(path)

    def test_invalid_value(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"port": 70000}))

        with pytest.raises(ConfigValidationError) as exc_info:
            BridgeConfig.load_or_default(path)

        assert exc_info.value.field == "port"
        assert exc_info.value.recovery_hint


@pytest.mark.unit
class TestModelFile:
    """Backups and atomic writes."""

    def test_write_keeps_backup(self, tmp_path: Path):
        stored = ModelFile(tmp_path / "record.json", RecordModel)
        stored.write(RecordModel(name="original", value=1))
        stored.write(RecordModel(name="modified", value=2))

        assert ModelFile(stored.backup_path, RecordModel).read().name == "original"
        assert stored.read().name == "modified"

    def test_first_write_has_no_backup(self, tmp_path: Path):
        stored = ModelFile(tmp_path / "record.json", RecordModel)
        stored.write(RecordModel())
        assert stored.backup_path.name == "record.json.bak"
        assert not stored.backup_path.exists()

    def test_staging_file_removed(self, tmp_path: Path):
        ModelFile(tmp_path / "record.json", RecordModel).write(RecordModel())
        assert [p.name for p in tmp_path.iterdir()] == ["record.json"]

    def test_failed_write_leaves_original(self, tmp_path: Path, monkeypatch):
        stored = ModelFile(tmp_path / "record.json", RecordModel)
        stored.write(RecordModel(name="original"))

        def refuse(self, target):
            raise OSError("disk full")

        monkeypatch.setattr(Path, "replace", refuse)
        with pytest.raises(OSError):
            stored.write(RecordModel(name="lost"))
        monkeypatch.undo()

        assert stored.read().name == "original"
        assert not (tmp_path / "record.json.tmp").exists()

    def test_read_missing_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            ModelFile(tmp_path / "missing.json", RecordModel).read()

    def test_read_or_default(self, tmp_path: Path):
        stored = ModelFile(tmp_path / "missing.json", RecordModel)
        assert stored.read_or_default() == RecordModel()
        assert not stored.exists()

    def test_save_returns_path(self, tmp_path: Path):
        path = tmp_path / "config.json"
        assert BridgeConfig().save(path) == path
