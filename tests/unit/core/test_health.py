"""
Tests for health check infrastructure.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from stowage.core.errors import UnexpectedError
from stowage.core.health import HealthCheckResult, HealthStatus, check_health_with_timeout
from stowage.core.result import Result


class TestHealthCheckResult:
    """Tests for HealthCheckResult."""

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (HealthStatus.HEALTHY, True),
            (HealthStatus.DEGRADED, True),
            (HealthStatus.UNHEALTHY, False),
            (HealthStatus.UNKNOWN, False),
        ],
    )
    def test_is_healthy(self, status, expected):
        """Test degraded providers still count as operational."""
        assert HealthCheckResult(status=status, latency_ms=1.0).is_healthy is expected

    def test_to_dict(self):
        """Test dictionary conversion."""
        result = HealthCheckResult(
            status=HealthStatus.HEALTHY, latency_ms=1.2345, message="ok", details={"files": 3}
        )
        data = result.to_dict()

        assert data["status"] == "healthy"
        assert data["latency_ms"] == 1.23
        assert data["details"] == {"files": 3}


class TestCheckHealthWithTimeout:
    """Tests for check_health_with_timeout."""

    @pytest.mark.asyncio
    async def test_returns_provider_report(self):
        """Test the provider's own report is returned."""
        report = HealthCheckResult(status=HealthStatus.HEALTHY, latency_ms=0.5)
        provider = MagicMock()
        provider.check_health = AsyncMock(return_value=Result.ok(report))

        assert await check_health_with_timeout(provider) is report

    @pytest.mark.asyncio
    async def test_timeout_is_unhealthy(self):
        """Test a hanging check reports UNHEALTHY."""

        async def hang():
            await asyncio.sleep(10)

        provider = MagicMock()
        provider.check_health = hang

        result = await check_health_with_timeout(provider, timeout_seconds=0.01)

        assert result.status == HealthStatus.UNHEALTHY
        assert "timed out" in result.message

    @pytest.mark.asyncio
    async def test_exception_is_unhealthy(self):
        """Test a raising check reports UNHEALTHY with the error type."""
        provider = MagicMock()
        provider.check_health = AsyncMock(side_effect=RuntimeError("boom"))

        result = await check_health_with_timeout(provider)

        assert result.status == HealthStatus.UNHEALTHY
        assert result.details["error_type"] == "RuntimeError"

    @pytest.mark.asyncio
    async def test_failed_result_is_unhealthy(self):
        """Test a failed Result reports UNHEALTHY with its messages."""
        provider = MagicMock()
        provider.check_health = AsyncMock(
            return_value=Result.fail(UnexpectedError(OSError("down")), "check failed")
        )

        result = await check_health_with_timeout(provider)

        assert result.status == HealthStatus.UNHEALTHY
        assert result.message == "check failed"
