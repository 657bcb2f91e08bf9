"""Bounded-time health probing of managed services."""

from typing import TYPE_CHECKING, Any, final

import httpx
import structlog

from wilson.exceptions import ProbeError, ProbeErrorKind

from ._models import HealthResult, HealthStatus

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from wilson.services import ServiceDescriptor

DEFAULT_PROBE_TIMEOUT: float = 3.0


def _decode_payload(response: httpx.Response) -> dict[str, Any]:
    if not response.is_success:
        msg = f"HTTP {response.status_code}"
        raise ProbeError(msg, kind=ProbeErrorKind.BAD_RESPONSE)
    try:
        data = response.json()
    except ValueError as e:
        msg = "Invalid JSON"
        raise ProbeError(msg, kind=ProbeErrorKind.BAD_RESPONSE) from e
    if not isinstance(data, dict):
        msg = f"Unexpected payload: {data!r}"
        raise ProbeError(msg, kind=ProbeErrorKind.BAD_RESPONSE)
    return data


def classify_payload(payload: dict[str, Any]) -> HealthResult:
    """Classify a decoded health payload.

    Args:
        payload: The JSON object returned by the health endpoint.

    Returns:
        HEALTHY if ``status == "healthy"``, DEGRADED otherwise.
    """
    status = payload.get("status")
    if status == "healthy":
        return HealthResult(status=HealthStatus.HEALTHY, payload=payload)
    return HealthResult(
        status=HealthStatus.DEGRADED,
        message=f"reported status {status!r}",
        payload=payload,
    )


@final
class HealthProbe:
    """Queries service health endpoints with a time bound.

    ``probe`` never raises: every failure is folded into the returned
    HealthResult. An ``httpx.AsyncClient`` may be injected; otherwise a
    short-lived client is opened for each probe.
    """

    __slots__ = ("_client", "_logger", "_timeout")

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        client: httpx.AsyncClient | None = None,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize the probe.

        Args:
            timeout: Default seconds to wait for a health response.
            client: Optional shared HTTP client.
            logger: Optional logger (defaults to a module logger).
        """
        self._timeout = timeout
        self._client = client
        self._logger = logger or structlog.get_logger(__name__)

    async def _fetch(self, url: str, timeout: float) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, timeout=timeout)
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=False) as client:
            return await client.get(url)

    async def probe(
        self,
        descriptor: "ServiceDescriptor",
        timeout: float | None = None,
    ) -> HealthResult:
        """Probe one service's health endpoint.

        Args:
            descriptor: The service to probe.
            timeout: Seconds to wait (defaults to the probe's timeout).

        Returns:
            The classified health result.
        """
        effective_timeout = timeout if timeout is not None else self._timeout
        try:
            try:
                response = await self._fetch(descriptor.health_url, effective_timeout)
            except httpx.TimeoutException as e:
                msg = f"request timed out after {effective_timeout}s"
                raise ProbeError(msg, kind=ProbeErrorKind.TIMEOUT) from e
            except httpx.ConnectError as e:
                msg = "connection refused"
                raise ProbeError(msg, kind=ProbeErrorKind.UNREACHABLE) from e
            except httpx.HTTPError as e:
                msg = f"{type(e).__name__}: {e}"
                raise ProbeError(msg, kind=ProbeErrorKind.UNREACHABLE) from e
            result = classify_payload(_decode_payload(response))
        except ProbeError as e:
            self._logger.debug(
                "health_probe_failed",
                service=descriptor.name,
                error=str(e),
                kind=e.kind.value,
            )
            return HealthResult(
                status=HealthStatus.UNREACHABLE,
                message=str(e),
                error=e.kind,
            )

        self._logger.debug(
            "health_probe_completed",
            service=descriptor.name,
            status=result.status.value,
        )
        return result
