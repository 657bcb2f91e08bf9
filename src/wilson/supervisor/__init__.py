"""Supervisor package for keeping managed services alive and current.

Key Components:
    - HealthProbe: Bounded-time, classified health queries
    - ProcessRunner / AnyioProcessRunner: Subprocess execution with kill-on-timeout
    - ProcessControl: start/stop/restart through each service's control command
    - ReleaseSource / GitHubReleaseSource: Latest released version lookup
    - Installer / ScriptInstaller: Install script invocation
    - UpdateChecker: Compare, install and restart one service
    - Supervisor: Startup pass, health loop, round-robin update loop,
      shutdown and self-update handoff
    - build_supervisor: Wires all of the above from configuration

Example:
    >>> from wilson.config import Config
    >>> from wilson.services import default_registry
    >>> from wilson.supervisor import build_supervisor
    >>> supervisor = build_supervisor(Config.load(), default_registry())
    >>> await supervisor.run()  # Blocks until shutdown or self-update
"""

from ._control import ProcessControl
from ._factory import (
    build_control,
    build_probe,
    build_supervisor,
    build_updater,
    load_token,
)
from ._health import HealthProbe, classify_payload
from ._installer import ScriptInstaller, install_command, install_environment
from ._models import (
    ControlAction,
    HealthResult,
    HealthStatus,
    ProcessResult,
    SupervisorExit,
    SupervisorState,
    UpdateOutcome,
    UpdateTick,
)
from ._process import AnyioProcessRunner, truncate_output
from ._protocol import Installer, ProcessRunner, ReleaseSource, RestartEscalation
from ._releases import (
    GitHubReleaseSource,
    normalize_version,
    read_auth_token,
    read_current_version,
)
from ._supervisor import Supervisor
from ._updater import UpdateChecker

__all__ = [
    "AnyioProcessRunner",
    "ControlAction",
    "GitHubReleaseSource",
    "HealthProbe",
    "HealthResult",
    "HealthStatus",
    "Installer",
    "ProcessControl",
    "ProcessResult",
    "ProcessRunner",
    "ReleaseSource",
    "RestartEscalation",
    "ScriptInstaller",
    "Supervisor",
    "SupervisorExit",
    "SupervisorState",
    "UpdateChecker",
    "UpdateOutcome",
    "UpdateTick",
    "build_control",
    "build_probe",
    "build_supervisor",
    "build_updater",
    "classify_payload",
    "install_command",
    "install_environment",
    "load_token",
    "normalize_version",
    "read_auth_token",
    "read_current_version",
    "truncate_output",
]
