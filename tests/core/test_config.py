"""Tests for the Config system."""

from pathlib import Path

import pytest
from kvdoc.core.config import KvDocConfig, _deep_merge, _substitute_env_vars
from kvdoc.core.errors import ConfigError


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    """Keep user/project config files and KVDOC_* env out of these tests."""
    monkeypatch.setattr(Path, "home", lambda: tmp_path / "home")
    monkeypatch.chdir(tmp_path)
    for var in ["KVDOC_STORAGE_BACKEND", "KVDOC_STORAGE_PATH", "KVDOC_LOG_LEVEL", "KVDOC_LOG_DIR", "KVDOC_LOG_FILE"]:
        monkeypatch.delenv(var, raising=False)


def test_default_config():
    config = KvDocConfig()

    assert config.storage.backend == "sqlite"
    assert config.storage.path == "~/.kvdoc/store.db"
    assert config.logging.level == "WARNING"
    assert config.logging.file_enabled is True


def test_load_with_overrides():
    config = KvDocConfig.load(overrides={"storage": {"backend": "memory"}})

    assert config.storage.backend == "memory"
    # Defaults still work for non-overridden values
    assert config.storage.path == "~/.kvdoc/store.db"


def test_env_var_loading(monkeypatch):
    monkeypatch.setenv("KVDOC_STORAGE_PATH", "/data/kv.db")
    monkeypatch.setenv("KVDOC_LOG_LEVEL", "debug")
    monkeypatch.setenv("KVDOC_LOG_FILE", "false")

    config = KvDocConfig.load()

    assert config.storage.path == "/data/kv.db"
    assert config.logging.level == "DEBUG"
    assert config.logging.file_enabled is False


def test_numeric_looking_path_stays_string(monkeypatch):
    monkeypatch.setenv("KVDOC_STORAGE_PATH", "2024")
    assert KvDocConfig.load().storage.path == "2024"


def test_project_toml_overrides_user_toml(tmp_path):
    user = tmp_path / "user.toml"
    user.write_text('[storage]\nbackend = "memory"\npath = "/user.db"\n')
    project = tmp_path / "project.toml"
    project.write_text('[storage]\npath = "/project.db"\n')

    config = KvDocConfig.load(project_path=project, user_path=user)

    assert config.storage.backend == "memory"
    assert config.storage.path == "/project.db"


def test_env_beats_toml_and_overrides_beat_env(tmp_path, monkeypatch):
    project = tmp_path / "project.toml"
    project.write_text('[storage]\npath = "/project.db"\n')
    monkeypatch.setenv("KVDOC_STORAGE_PATH", "/env.db")

    assert KvDocConfig.load(project_path=project).storage.path == "/env.db"
    assert (
        KvDocConfig.load(project_path=project, overrides={"storage": {"path": "/code.db"}}).storage.path
        == "/code.db"
    )


def test_invalid_backend_raises():
    with pytest.raises(ConfigError, match="Invalid configuration"):
        KvDocConfig.load(overrides={"storage": {"backend": "redis"}})


def test_broken_toml_raises(tmp_path):
    bad = tmp_path / "bad.toml"
    bad.write_text("[storage\n")
    with pytest.raises(ConfigError, match="Failed to load config"):
        KvDocConfig.load(project_path=bad)


def test_env_var_substitution(monkeypatch):
    monkeypatch.setenv("MY_DATA", "/srv")
    monkeypatch.delenv("MISSING_VAR", raising=False)
    data = {"storage": {"path": "${MY_DATA}/kv.db"}, "logging": {"log_dir": "${MISSING_VAR}logs"}}

    _substitute_env_vars(data)

    assert data["storage"]["path"] == "/srv/kv.db"
    assert data["logging"]["log_dir"] == "logs"


def test_deep_merge():
    base = {"a": 1, "b": {"c": 2, "d": 3}, "e": 5}
    override = {"b": {"c": 20, "f": 6}, "g": 7}

    _deep_merge(base, override)

    assert base == {"a": 1, "b": {"c": 20, "d": 3, "f": 6}, "e": 5, "g": 7}


def test_resolved_path_expands_home():
    resolved = KvDocConfig().storage.resolved_path()
    assert "~" not in str(resolved)
    assert resolved.parts[-2:] == (".kvdoc", "store.db")


def test_load_substitutes_env_vars_in_toml(tmp_path, monkeypatch):
    monkeypatch.setenv("MY_DATA", "/srv")
    project = tmp_path / "project.toml"
    project.write_text('[storage]\npath = "${MY_DATA}/kv.db"\n')

    assert KvDocConfig.load(project_path=project).storage.path == "/srv/kv.db"
