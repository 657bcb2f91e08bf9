"""Unit tests for configuration loading."""

from pathlib import Path

import pytest

from wilson.config import (
    DEFAULT_CONFIG,
    Config,
    ConfigLoadError,
    ConfigSourceName,
    ConfigValidationError,
    LogFormat,
    LogLevel,
    deep_merge,
    discover_sources,
    parse_env_vars,
    read_toml_file,
    safe_load_config,
    set_nested_key,
)


@pytest.fixture
def user_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point user config discovery at a file under tmp_path (not created)."""
    from wilson.config import _discovery

    path = tmp_path / "user" / "config.toml"
    monkeypatch.setattr(_discovery, "get_user_config_file", lambda: path)
    return path


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    _ = path.write_text(content)
    return path


class TestReadTomlFile:
    def test_parses_file(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "c.toml", '[logging]\nlevel = "debug"\n')

        assert read_toml_file(path) == {"logging": {"level": "debug"}}

    def test_invalid_toml_raises_load_error(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "bad.toml", "[logging\nlevel = 1\n")

        with pytest.raises(ConfigLoadError) as exc_info:
            _ = read_toml_file(path)

        assert exc_info.value.path == path
        assert "Failed to parse TOML file" in str(exc_info.value)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            _ = read_toml_file(tmp_path / "missing.toml")


class TestDeepMerge:
    def test_nested_merge(self) -> None:
        base = {"a": {"x": 1, "y": 2}, "b": [1, 2]}
        override = {"a": {"y": 3}, "b": [9]}

        assert deep_merge(base, override) == {"a": {"x": 1, "y": 3}, "b": [9]}

    def test_inputs_not_modified(self) -> None:
        base = {"a": {"x": 1}}
        override = {"a": {"x": 2}}

        merged = deep_merge(base, override)
        merged["a"]["x"] = 99

        assert base == {"a": {"x": 1}}
        assert override == {"a": {"x": 2}}


class TestSetNestedKey:
    def test_creates_intermediate_dicts(self) -> None:
        d: dict[str, object] = {}

        set_nested_key(d, "supervisor.health_interval", 5)

        assert d == {"supervisor": {"health_interval": 5}}


class TestParseEnvVars:
    def test_nested_keys_and_types(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WILSON_SUPERVISOR__HEALTH_INTERVAL", "12.5")
        monkeypatch.setenv("WILSON_SUPERVISOR__STOP_TIMEOUT", "7")
        monkeypatch.setenv("WILSON_LOGGING__FORMAT", "text")

        result = parse_env_vars()

        assert result["supervisor"] == {"health_interval": 12.5, "stop_timeout": 7}
        assert result["logging"] == {"format": "text"}

    def test_ignores_reserved_switches(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WILSON_DEBUG", "1")
        monkeypatch.setenv("WILSON_STRICT_CONFIG", "1")
        monkeypatch.setenv("WILSON_LOG_LEVEL", "debug")

        assert parse_env_vars() == {}

    def test_parses_booleans_and_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WILSON_X__FLAG", "TRUE")
        monkeypatch.setenv("WILSON_X__LIST", '["a", "b"]')

        assert parse_env_vars()["x"] == {"flag": True, "list": ["a", "b"]}


class TestConfig:
    def test_defaults(self) -> None:
        config = Config.from_dict({})

        assert config.logging.level == LogLevel.INFO
        assert config.logging.format == LogFormat.JSON
        assert config.supervisor.health_interval == 30.0
        assert config.supervisor.update_interval == 60.0
        assert config.supervisor.restart_backoff == 3.0
        assert config.updates.api_url == DEFAULT_CONFIG["updates"]["api_url"]

    def test_from_dict_overrides(self) -> None:
        config = Config.from_dict({"supervisor": {"stop_timeout": 2}})

        assert config.supervisor.stop_timeout == 2.0
        assert config.supervisor.start_timeout == 30.0

    def test_get_by_dotted_key(self) -> None:
        config = Config.from_dict({})

        assert config.get("supervisor.health_interval") == 30.0
        assert config.get("nope.nothing", "fallback") == "fallback"

    def test_validation_error(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = Config.from_dict({"supervisor": {"health_interval": -1}})

        assert exc_info.value.key == "supervisor.health_interval"
        assert exc_info.value.value == -1

    def test_validation_error_names_file(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "c.toml", '[logging]\nlevel = "loud"\n')

        with pytest.raises(ConfigValidationError) as exc_info:
            _ = Config.from_file(path)

        assert exc_info.value.source == str(path)
        assert str(path) in str(exc_info.value)

    def test_resolved_paths(self, tmp_path: Path) -> None:
        config = Config.from_dict(
            {
                "logging": {"file": str(tmp_path / "s.log")},
                "updates": {"token_file": str(tmp_path / "token")},
            }
        )

        assert config.logging.resolved_file() == tmp_path / "s.log"
        assert config.updates.resolved_token_file() == tmp_path / "token"


class TestConfigLoad:
    def test_precedence(
        self,
        tmp_path: Path,
        user_config: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        _ = _write(
            user_config,
            "[supervisor]\nhealth_interval = 10\nupdate_interval = 20\n"
            "stop_timeout = 4\n",
        )
        monkeypatch.setenv("WILSON_SUPERVISOR__UPDATE_INTERVAL", "15")
        monkeypatch.setenv("WILSON_SUPERVISOR__STOP_TIMEOUT", "3")
        explicit = _write(tmp_path / "explicit.toml", "[supervisor]\nstop_timeout = 2\n")

        config = Config.load(config_path=explicit)

        assert config.supervisor.health_interval == 10.0
        assert config.supervisor.update_interval == 15.0
        assert config.supervisor.stop_timeout == 2.0
        assert config.supervisor.probe_timeout == 3.0

    def test_sources_highest_first(self, tmp_path: Path, user_config: Path) -> None:
        explicit = _write(tmp_path / "explicit.toml", "")

        config = Config.load(config_path=explicit)

        assert [source.name for source in config.sources] == [
            ConfigSourceName.EXPLICIT,
            ConfigSourceName.ENV,
            ConfigSourceName.USER,
            ConfigSourceName.DEFAULT,
        ]

    def test_missing_user_file_uses_defaults(self, user_config: Path) -> None:
        config = Config.load(include_env=False)

        assert config.supervisor.health_interval == 30.0

    def test_missing_explicit_file(self, tmp_path: Path, user_config: Path) -> None:
        with pytest.raises(FileNotFoundError):
            _ = Config.load(config_path=tmp_path / "missing.toml")

    def test_discover_sources_without_env(self, user_config: Path) -> None:
        sources = discover_sources(include_env=False)

        assert [source.name for source in sources] == [
            ConfigSourceName.USER,
            ConfigSourceName.DEFAULT,
        ]
        assert sources[0].path == user_config
        assert not sources[0].exists


class TestSafeLoadConfig:
    def test_success(self, user_config: Path) -> None:
        config, error = safe_load_config()

        assert error is None
        assert config.supervisor.health_interval == 30.0

    def test_invalid_user_config_falls_back(
        self, user_config: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _ = _write(user_config, "[supervisor\n")

        config, error = safe_load_config()

        assert error is not None
        assert config.supervisor.health_interval == 30.0
        assert "Warning: Failed to load config" in capsys.readouterr().err

    def test_strict_mode_exits(
        self, user_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _ = _write(user_config, '[supervisor]\nhealth_interval = "soon"\n')
        monkeypatch.setenv("WILSON_STRICT_CONFIG", "1")

        with pytest.raises(SystemExit) as exc_info:
            _ = safe_load_config()

        assert exc_info.value.code == 1

    def test_missing_explicit_path_exits(
        self, tmp_path: Path, user_config: Path
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _ = safe_load_config(config_path=tmp_path / "missing.toml")

        assert exc_info.value.code == 1
