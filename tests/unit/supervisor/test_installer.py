"""Unit tests for install script invocation."""

from pathlib import Path

import pytest

from tests.fakes import FakeRunner, make_descriptor
from wilson.exceptions import UpdateError, UpdateErrorKind
from wilson.services import ServiceDescriptor
from wilson.supervisor import (
    ProcessResult,
    ScriptInstaller,
    install_command,
    install_environment,
)


@pytest.fixture
def descriptor(tmp_path: Path) -> ServiceDescriptor:
    return make_descriptor(tmp_path, "engram")


class TestInstallCommand:
    def test_pipes_install_script_into_bash(self) -> None:
        assert install_command("shetty4l/engram") == [
            "bash",
            "-c",
            "curl -fsSL https://raw.githubusercontent.com/shetty4l/engram"
            "/main/scripts/install.sh | bash",
        ]


class TestInstallEnvironment:
    def test_minimal_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PATH", "/usr/bin")
        monkeypatch.setenv("HOME", "/home/wilson")
        monkeypatch.setenv("UNRELATED", "leak")

        env = install_environment()

        assert env == {"PATH": "/usr/bin", "HOME": "/home/wilson"}

    def test_token_and_skip_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PATH", "/usr/bin")
        monkeypatch.setenv("HOME", "/home/wilson")

        env = install_environment(token="ghp_secret", skip_platform_reload=True)

        assert env["GITHUB_TOKEN"] == "ghp_secret"
        assert env["SKIP_LAUNCHAGENT_RELOAD"] == "1"

    def test_skip_flag_absent_by_default(self) -> None:
        assert "SKIP_LAUNCHAGENT_RELOAD" not in install_environment(token="t")


@pytest.mark.anyio
class TestScriptInstaller:
    async def test_runs_script_with_environment(
        self, descriptor: ServiceDescriptor
    ) -> None:
        runner = FakeRunner()

        await ScriptInstaller(runner, timeout=42.0).install(
            descriptor, token="ghp_secret", skip_platform_reload=True
        )

        command, timeout, env = runner.calls[0]
        assert command == install_command("owner/engram")
        assert timeout == 42.0
        assert env is not None
        assert env["GITHUB_TOKEN"] == "ghp_secret"
        assert env["SKIP_LAUNCHAGENT_RELOAD"] == "1"

    async def test_non_zero_exit_is_install_failure(
        self, descriptor: ServiceDescriptor
    ) -> None:
        runner = FakeRunner(results=[ProcessResult(exit_code=22, stderr="404\n")])

        with pytest.raises(UpdateError) as exc_info:
            await ScriptInstaller(runner).install(descriptor)

        assert exc_info.value.kind == UpdateErrorKind.INSTALL_FAILURE
        assert str(exc_info.value) == "install failed for engram (exit 22): 404"

    @pytest.mark.parametrize("error", [TimeoutError("slow"), OSError("no bash")])
    async def test_runner_errors_are_install_failures(
        self, descriptor: ServiceDescriptor, error: Exception
    ) -> None:
        runner = FakeRunner(results=[error])

        with pytest.raises(UpdateError) as exc_info:
            await ScriptInstaller(runner).install(descriptor)

        assert exc_info.value.kind == UpdateErrorKind.INSTALL_FAILURE
