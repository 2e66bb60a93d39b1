"""Tests for codebottle.config -- XDG paths, atomic writes, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from codebottle.config import (
    _atomic_write,
    config_path,
    get_config_dir,
    load_global_config,
    resolve_config,
    resolve_credential,
    save_global_config,
)
from codebottle.exceptions import ConfigError
from codebottle.models import DEFAULT_BASE_URL, ClientConfig, GlobalConfig


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestConfigDir:
    def test_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("codebottle.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "codebottle"
        assert result.is_dir()

    def test_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("codebottle.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "custom"))
        assert get_config_dir() == tmp_path / "custom" / "codebottle"

    def test_non_xdg_platform(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("codebottle.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert get_config_dir() == tmp_path / ".codebottle"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "file.json"
        _atomic_write(target, '{"a": 1}')
        assert target.read_text(encoding="utf-8") == '{"a": 1}'

    def test_leaves_no_temp_files(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        _atomic_write(target, "one")
        _atomic_write(target, "two")
        assert [p.name for p in tmp_path.iterdir()] == ["file.json"]
        assert target.read_text(encoding="utf-8") == "two"


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_missing_file_gives_defaults(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config == GlobalConfig()
        assert config.client.base_url == DEFAULT_BASE_URL
        assert config.client.parallel_threshold == 200

    def test_round_trip(self, isolated_config: Path) -> None:
        config = GlobalConfig(client=ClientConfig(base_url="http://localhost:9000/", max_workers=2))
        save_global_config(config)
        assert load_global_config() == config
        assert config_path().parent == isolated_config / "config" / "codebottle"

    def test_invalid_json(self, isolated_config: Path) -> None:
        config_path().write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_global_config()

    def test_invalid_values(self, isolated_config: Path) -> None:
        _write_json(config_path(), {"client": {"max_workers": 0}})
        with pytest.raises(ConfigError):
            load_global_config()

    def test_unknown_output_format(self, isolated_config: Path) -> None:
        _write_json(config_path(), {"output": {"format": "yaml"}})
        with pytest.raises(ConfigError):
            load_global_config()


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        config, token = resolve_config()
        assert config.client.base_url == DEFAULT_BASE_URL
        assert token is None

    def test_file_over_defaults(self, isolated_config: Path) -> None:
        _write_json(config_path(), {"client": {"base_url": "http://file/"}})
        config, _ = resolve_config()
        assert config.client.base_url == "http://file/"

    def test_env_over_file(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(config_path(), {"client": {"base_url": "http://file/"}})
        monkeypatch.setenv("CODEBOTTLE_BASE_URL", "http://env/")
        config, _ = resolve_config()
        assert config.client.base_url == "http://env/"

    def test_cli_over_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CODEBOTTLE_BASE_URL", "http://env/")
        monkeypatch.setenv("CODEBOTTLE_TOKEN", "env-token")
        config, token = resolve_config(cli_base_url="http://cli/", cli_token="cli-token")
        assert config.client.base_url == "http://cli/"
        assert token == "cli-token"

    def test_env_token(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CODEBOTTLE_TOKEN", "env-token")
        _, token = resolve_config()
        assert token == "env-token"

    def test_token_source_used_as_fallback(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("MY_TOKEN", "from-source")
        _write_json(config_path(), {"client": {"token_source": "env:MY_TOKEN"}})
        _, token = resolve_config()
        assert token == "from-source"


# ---------------------------------------------------------------------------
# Credential sources
# ---------------------------------------------------------------------------


class TestResolveCredential:
    def test_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CB_TOKEN", "abc")
        assert resolve_credential("env:CB_TOKEN") == "abc"

    def test_env_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CB_TOKEN", raising=False)
        with pytest.raises(ConfigError, match="CB_TOKEN"):
            resolve_credential("env:CB_TOKEN")

    def test_file_is_stripped(self, tmp_path: Path) -> None:
        token_file = tmp_path / "token"
        token_file.write_text("  secret\n", encoding="utf-8")
        assert resolve_credential(f"file:{token_file}") == "secret"

    def test_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            resolve_credential(f"file:{tmp_path / 'nope'}")

    def test_prompt_requires_tty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin.isatty", lambda: False)
        with pytest.raises(ConfigError, match="not a TTY"):
            resolve_credential("prompt")

    def test_unknown_source(self) -> None:
        with pytest.raises(ConfigError, match="Unknown credential source"):
            resolve_credential("vault:secret")
