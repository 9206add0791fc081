from pathlib import Path

import pytest

from photon_replication.config import load_settings
from photon_replication.replication.writer import build_replication_writer


@pytest.mark.unit
def test_defaults(monkeypatch):
    settings = load_settings()

    assert settings.replication_dir == Path("replication")
    assert settings.segment_suffix == ".json.gz"
    assert settings.sequence_width == 9
    assert settings.compression_level == 9
    assert settings.fsync is False
    assert settings.create_dir is True
    assert settings.log_level == "INFO"


@pytest.mark.unit
def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("REPLICATION_DIR", str(tmp_path))
    monkeypatch.setenv("REPLICATION_SEGMENT_SUFFIX", "json.gz")
    monkeypatch.setenv("REPLICATION_SEQUENCE_WIDTH", "6")
    monkeypatch.setenv("REPLICATION_COMPRESSION_LEVEL", "42")
    monkeypatch.setenv("REPLICATION_FSYNC", "yes")
    monkeypatch.setenv("REPLICATION_CREATE_DIR", "0")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.replication_dir == tmp_path
    assert settings.segment_suffix == ".json.gz"
    assert settings.sequence_width == 6
    assert settings.compression_level == 9
    assert settings.fsync is True
    assert settings.create_dir is False
    assert settings.log_level == "DEBUG"


@pytest.mark.unit
def test_invalid_values_fall_back(monkeypatch):
    monkeypatch.setenv("REPLICATION_SEQUENCE_WIDTH", "wide")
    monkeypatch.setenv("REPLICATION_COMPRESSION_LEVEL", "-3")
    monkeypatch.setenv("LOG_LEVEL", "chatty")

    settings = load_settings()

    assert settings.sequence_width == 9
    assert settings.compression_level == 0
    assert settings.log_level == "INFO"


@pytest.mark.unit
def test_writer_built_from_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("REPLICATION_DIR", str(tmp_path / "log"))
    monkeypatch.setenv("REPLICATION_SEQUENCE_WIDTH", "4")

    writer = build_replication_writer(load_settings())
    writer.delete("n1")
    writer.finish()

    assert (tmp_path / "log" / "segment-0000.json.gz").exists()
    assert (tmp_path / "log" / "checkpoint-0000.state.json").exists()
