"""Unit tests for the health probe."""

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
from structlog.testing import capture_logs

from tests.fakes import make_descriptor
from wilson.exceptions import ProbeErrorKind
from wilson.services import ServiceDescriptor
from wilson.supervisor import HealthProbe, HealthStatus, classify_payload

pytestmark = pytest.mark.anyio


@pytest.fixture
def descriptor(tmp_path: Path) -> ServiceDescriptor:
    return make_descriptor(tmp_path, "engram", port=7749)


def _probe(handler: Callable[[httpx.Request], httpx.Response]) -> HealthProbe:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HealthProbe(timeout=1.0, client=client)


def _raise(error: Exception) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        raise error

    return handler


class TestClassifyPayload:
    def test_healthy(self) -> None:
        result = classify_payload({"status": "healthy", "version": "0.3.0"})

        assert result.status == HealthStatus.HEALTHY
        assert result.healthy
        assert result.version == "0.3.0"

    def test_other_status_is_degraded(self) -> None:
        result = classify_payload({"status": "starting"})

        assert result.status == HealthStatus.DEGRADED
        assert not result.healthy
        assert result.message == "reported status 'starting'"

    def test_missing_status_is_degraded(self) -> None:
        result = classify_payload({})

        assert result.status == HealthStatus.DEGRADED
        assert result.version is None


class TestHealthProbe:
    async def test_healthy_response(self, descriptor: ServiceDescriptor) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"status": "healthy", "version": "1.2.0"})

        result = await _probe(handler).probe(descriptor)

        assert seen == ["http://127.0.0.1:7749/health"]
        assert result.status == HealthStatus.HEALTHY
        assert result.payload == {"status": "healthy", "version": "1.2.0"}
        assert result.error is None

    async def test_degraded_response(self, descriptor: ServiceDescriptor) -> None:
        result = await _probe(
            lambda _: httpx.Response(200, json={"status": "degraded"})
        ).probe(descriptor)

        assert result.status == HealthStatus.DEGRADED
        assert result.error is None

    async def test_non_2xx_is_bad_response(self, descriptor: ServiceDescriptor) -> None:
        result = await _probe(
            lambda _: httpx.Response(503, json={"status": "healthy"})
        ).probe(descriptor)

        assert result.status == HealthStatus.UNREACHABLE
        assert result.error == ProbeErrorKind.BAD_RESPONSE
        assert result.message == "HTTP 503"

    async def test_invalid_json_is_bad_response(
        self, descriptor: ServiceDescriptor
    ) -> None:
        result = await _probe(lambda _: httpx.Response(200, text="not json")).probe(
            descriptor
        )

        assert result.status == HealthStatus.UNREACHABLE
        assert result.error == ProbeErrorKind.BAD_RESPONSE
        assert result.message == "Invalid JSON"

    async def test_non_object_payload_is_bad_response(
        self, descriptor: ServiceDescriptor
    ) -> None:
        result = await _probe(lambda _: httpx.Response(200, json=["healthy"])).probe(
            descriptor
        )

        assert result.status == HealthStatus.UNREACHABLE
        assert result.error == ProbeErrorKind.BAD_RESPONSE

    async def test_timeout(self, descriptor: ServiceDescriptor) -> None:
        result = await _probe(_raise(httpx.ReadTimeout("slow"))).probe(descriptor)

        assert result.status == HealthStatus.UNREACHABLE
        assert result.error == ProbeErrorKind.TIMEOUT
        assert result.message == "request timed out after 1.0s"

    async def test_timeout_override(self, descriptor: ServiceDescriptor) -> None:
        result = await _probe(_raise(httpx.ConnectTimeout("slow"))).probe(
            descriptor, timeout=0.25
        )

        assert result.error == ProbeErrorKind.TIMEOUT
        assert result.message == "request timed out after 0.25s"

    async def test_connection_refused(self, descriptor: ServiceDescriptor) -> None:
        result = await _probe(_raise(httpx.ConnectError("refused"))).probe(descriptor)

        assert result.status == HealthStatus.UNREACHABLE
        assert result.error == ProbeErrorKind.UNREACHABLE
        assert result.message == "connection refused"

    async def test_other_transport_error(self, descriptor: ServiceDescriptor) -> None:
        result = await _probe(_raise(httpx.RemoteProtocolError("eof"))).probe(
            descriptor
        )

        assert result.status == HealthStatus.UNREACHABLE
        assert result.error == ProbeErrorKind.UNREACHABLE
        assert result.message == "RemoteProtocolError: eof"

    async def test_logs_failures_at_debug(self, descriptor: ServiceDescriptor) -> None:
        with capture_logs() as logs:
            _ = await _probe(_raise(httpx.ConnectError("refused"))).probe(descriptor)

        assert logs == [
            {
                "event": "health_probe_failed",
                "log_level": "debug",
                "service": "engram",
                "error": "connection refused",
                "kind": "unreachable",
            }
        ]
