"""Unit tests for supervisor wiring."""

from pathlib import Path

from tests.fakes import FakeInstaller, FakeReleaseSource, FakeRunner
from wilson.config import Config, SupervisorSettings
from wilson.services import ServiceRegistry
from wilson.supervisor import (
    AnyioProcessRunner,
    ControlAction,
    Installer,
    ProcessRunner,
    ReleaseSource,
    Supervisor,
    build_control,
    build_supervisor,
    load_token,
)


class TestBuildControl:
    def test_uses_configured_timeouts(self) -> None:
        config = Config.from_dict(
            {"supervisor": {"start_timeout": 9, "stop_timeout": 1, "restart_timeout": 4}}
        )

        control = build_control(config, runner=FakeRunner())

        assert control.default_timeout(ControlAction.START) == 9.0
        assert control.default_timeout(ControlAction.STOP) == 1.0
        assert control.default_timeout(ControlAction.RESTART) == 4.0


class TestLoadToken:
    def test_reads_configured_token_file(self, tmp_path: Path) -> None:
        token_file = tmp_path / "token"
        _ = token_file.write_text("ghp_secret\n")
        config = Config.from_dict({"updates": {"token_file": str(token_file)}})

        assert load_token(config) == "ghp_secret"

    def test_missing_token_file(self, tmp_path: Path) -> None:
        config = Config.from_dict({"updates": {"token_file": str(tmp_path / "none")}})

        assert load_token(config) is None


class TestBuildSupervisor:
    def test_builds_supervisor_with_settings(
        self, registry: ServiceRegistry, tmp_path: Path
    ) -> None:
        config = Config.from_dict(
            {
                "supervisor": {"health_interval": 5},
                "updates": {"token_file": str(tmp_path / "none")},
            }
        )

        supervisor = build_supervisor(config, registry)

        assert isinstance(supervisor, Supervisor)
        assert supervisor.registry is registry
        assert supervisor.cursor == 0
        assert config.supervisor == SupervisorSettings(health_interval=5)


class TestProtocols:
    def test_implementations_satisfy_protocols(self) -> None:
        assert isinstance(AnyioProcessRunner(), ProcessRunner)
        assert isinstance(FakeRunner(), ProcessRunner)
        assert isinstance(FakeReleaseSource(), ReleaseSource)
        assert isinstance(FakeInstaller(), Installer)
