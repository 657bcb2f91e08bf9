"""Release version lookup against the GitHub releases API."""

from pathlib import Path
from typing import TYPE_CHECKING, final

import httpx
import structlog

from wilson.exceptions import UpdateError, UpdateErrorKind

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from wilson.services import ServiceDescriptor

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_LOOKUP_TIMEOUT: float = 10.0
GITHUB_ACCEPT = "application/vnd.github.v3+json"


def normalize_version(tag: str) -> str:
    """Normalize a release tag to a bare version string.

    Strips surrounding whitespace and exactly one leading ``v``.

    Examples:
        >>> normalize_version("v0.3.0")
        '0.3.0'
        >>> normalize_version("0.3.0")
        '0.3.0'
    """
    tag = tag.strip()
    return tag.removeprefix("v")


def _read_trimmed(path: Path) -> str | None:
    try:
        content = path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        return None
    return content or None


def read_current_version(descriptor: "ServiceDescriptor") -> str:
    """Read the installed version of a service.

    Args:
        descriptor: The service whose version file to read.

    Returns:
        The trimmed version string, or ``""`` when the file is absent,
        unreadable or empty.
    """
    return _read_trimmed(descriptor.current_version_file) or ""


def read_auth_token(path: Path | None) -> str | None:
    """Read a GitHub token from a file.

    Args:
        path: Token file, or None.

    Returns:
        The trimmed token, or None when absent, empty or unreadable.
    """
    if path is None:
        return None
    return _read_trimmed(path)


@final
class GitHubReleaseSource:
    """Looks up ``/repos/{repo}/releases/latest`` on the GitHub API."""

    __slots__ = ("_api_url", "_client", "_logger", "_timeout")

    def __init__(
        self,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_LOOKUP_TIMEOUT,
        client: httpx.AsyncClient | None = None,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize the release source.

        Args:
            api_url: Base URL of the GitHub API.
            timeout: Seconds to wait for the lookup.
            client: Optional shared HTTP client.
            logger: Optional logger (defaults to a module logger).
        """
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._client = client
        self._logger = logger or structlog.get_logger(__name__)

    def release_url(self, descriptor: "ServiceDescriptor") -> str:
        """Return the latest-release URL for a service."""
        return f"{self._api_url}/repos/{descriptor.repo}/releases/latest"

    async def _get(self, url: str, headers: dict[str, str]) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, headers=headers, timeout=self._timeout)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.get(url, headers=headers)

    async def latest_version(
        self,
        descriptor: "ServiceDescriptor",
        token: str | None = None,
    ) -> str:
        """Return the normalized latest released version of a service.

        Args:
            descriptor: The service to look up.
            token: Optional bearer token.

        Returns:
            The latest version with one leading ``v`` stripped.

        Raises:
            UpdateError: LOOKUP_FAILURE on transport errors, timeouts,
                non-2xx responses or invalid JSON; MISSING_VERSION_TAG when
                the release has no ``tag_name``.
        """
        headers = {"Accept": GITHUB_ACCEPT}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = self.release_url(descriptor)
        try:
            response = await self._get(url, headers)
        except httpx.HTTPError as e:
            msg = f"release lookup failed: {type(e).__name__}: {e}"
            raise UpdateError(
                msg, kind=UpdateErrorKind.LOOKUP_FAILURE, service_name=descriptor.name
            ) from e

        if not response.is_success:
            msg = f"release lookup failed: HTTP {response.status_code}"
            raise UpdateError(
                msg, kind=UpdateErrorKind.LOOKUP_FAILURE, service_name=descriptor.name
            )

        try:
            data = response.json()
        except ValueError as e:
            msg = "release lookup failed: invalid JSON"
            raise UpdateError(
                msg, kind=UpdateErrorKind.LOOKUP_FAILURE, service_name=descriptor.name
            ) from e

        tag = data.get("tag_name") if isinstance(data, dict) else None
        if not isinstance(tag, str) or not normalize_version(tag):
            msg = "latest release has no tag_name"
            raise UpdateError(
                msg,
                kind=UpdateErrorKind.MISSING_VERSION_TAG,
                service_name=descriptor.name,
            )

        version = normalize_version(tag)
        self._logger.debug(
            "latest_version_resolved",
            service=descriptor.name,
            tag=tag,
            version=version,
        )
        return version
