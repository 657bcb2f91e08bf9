"""Unit tests for per-service update checks."""

from pathlib import Path

import pytest

from tests.fakes import (
    FakeControl,
    FakeInstaller,
    FakeReleaseSource,
    make_descriptor,
)
from wilson.exceptions import UpdateErrorKind
from wilson.services import ServiceDescriptor
from wilson.supervisor import ControlAction, UpdateChecker, UpdateOutcome


def _install_version(descriptor: ServiceDescriptor, version: str) -> None:
    descriptor.current_version_file.parent.mkdir(parents=True, exist_ok=True)
    _ = descriptor.current_version_file.write_text(f"{version}\n")


@pytest.fixture
def service(tmp_path: Path) -> ServiceDescriptor:
    descriptor = make_descriptor(tmp_path, "engram")
    _install_version(descriptor, "0.3.0")
    return descriptor


@pytest.fixture
def supervisor_service(tmp_path: Path) -> ServiceDescriptor:
    descriptor = make_descriptor(tmp_path, "wilson", is_supervisor=True)
    _install_version(descriptor, "0.3.0")
    return descriptor


@pytest.mark.anyio
class TestUpdateChecker:
    async def test_already_current_after_tag_normalization(
        self, service: ServiceDescriptor
    ) -> None:
        releases = FakeReleaseSource(version="0.3.0")
        installer = FakeInstaller()
        control = FakeControl()
        checker = UpdateChecker(releases, installer, control)

        outcome = await checker.check(service, token="ghp_secret")

        assert outcome == UpdateOutcome.current("0.3.0")
        assert releases.calls == [("engram", "ghp_secret")]
        assert installer.calls == []
        assert control.calls == []

    async def test_installs_and_restarts_newer_version(
        self, service: ServiceDescriptor
    ) -> None:
        installer = FakeInstaller()
        control = FakeControl()
        checker = UpdateChecker(FakeReleaseSource(version="0.4.0"), installer, control)

        outcome = await checker.check(service, token="ghp_secret")

        assert outcome == UpdateOutcome(
            updated=True, from_version="0.3.0", to_version="0.4.0"
        )
        assert installer.calls == [("engram", "ghp_secret", False)]
        assert control.calls == [("engram", ControlAction.RESTART)]

    async def test_unknown_current_version_updates(self, tmp_path: Path) -> None:
        descriptor = make_descriptor(tmp_path, "fresh")
        checker = UpdateChecker(
            FakeReleaseSource(version="1.0.0"), FakeInstaller(), FakeControl()
        )

        outcome = await checker.check(descriptor)

        assert outcome.updated
        assert outcome.from_version == ""
        assert outcome.to_version == "1.0.0"

    async def test_supervisor_installs_without_restart(
        self, supervisor_service: ServiceDescriptor
    ) -> None:
        installer = FakeInstaller()
        control = FakeControl()
        checker = UpdateChecker(FakeReleaseSource(version="0.4.0"), installer, control)

        outcome = await checker.check(supervisor_service)

        assert outcome.updated
        assert installer.calls == [("wilson", None, True)]
        assert control.calls == []

    async def test_lookup_failure(self, service: ServiceDescriptor) -> None:
        installer = FakeInstaller()
        checker = UpdateChecker(
            FakeReleaseSource(error_kind=UpdateErrorKind.LOOKUP_FAILURE),
            installer,
            FakeControl(),
        )

        outcome = await checker.check(service)

        assert not outcome.updated
        assert outcome.error_kind == UpdateErrorKind.LOOKUP_FAILURE
        assert outcome.from_version == "0.3.0"
        assert installer.calls == []

    async def test_missing_tag(self, service: ServiceDescriptor) -> None:
        checker = UpdateChecker(
            FakeReleaseSource(error_kind=UpdateErrorKind.MISSING_VERSION_TAG),
            FakeInstaller(),
            FakeControl(),
        )

        outcome = await checker.check(service)

        assert outcome.error_kind == UpdateErrorKind.MISSING_VERSION_TAG

    async def test_install_failure_skips_restart(
        self, service: ServiceDescriptor
    ) -> None:
        control = FakeControl()
        checker = UpdateChecker(
            FakeReleaseSource(version="0.4.0"), FakeInstaller(fail=True), control
        )

        outcome = await checker.check(service)

        assert not outcome.updated
        assert outcome.error_kind == UpdateErrorKind.INSTALL_FAILURE
        assert outcome.to_version == "0.4.0"
        assert control.calls == []

    async def test_restart_failure_after_install(
        self, service: ServiceDescriptor
    ) -> None:
        control = FakeControl(failures={("engram", ControlAction.RESTART)})
        checker = UpdateChecker(
            FakeReleaseSource(version="0.4.0"), FakeInstaller(), control
        )

        outcome = await checker.check(service)

        assert not outcome.updated
        assert outcome.error_kind == UpdateErrorKind.RESTART_FAILURE
        assert outcome.error is not None
        assert outcome.error.startswith("installed 0.4.0 but restart failed: ")


class TestUpdateOutcome:
    def test_applied_update_cannot_carry_error(self) -> None:
        with pytest.raises(ValueError, match="cannot carry an error"):
            _ = UpdateOutcome(
                updated=True,
                from_version="1",
                to_version="2",
                error="boom",
            )

    def test_applied_update_requires_versions(self) -> None:
        with pytest.raises(ValueError, match="must carry"):
            _ = UpdateOutcome(updated=True, from_version="1")

    def test_failed_outcome(self) -> None:
        outcome = UpdateOutcome.failed(
            "boom", UpdateErrorKind.INSTALL_FAILURE, from_version="1"
        )

        assert not outcome.updated
        assert outcome.error == "boom"
        assert outcome.to_version is None
