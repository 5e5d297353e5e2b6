"""
Health check infrastructure for storage providers.

Provides a consistent health report across provider types, plus a
timeout-guarded runner that never raises.
"""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stowage.interfaces.provider import FileStorageProvider


class HealthStatus(Enum):
    """Provider health status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"  # Working but with issues
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


@dataclass
class HealthCheckResult:
    """
    Result of a health check operation.

    Attributes:
        status: Overall health status
        latency_ms: Time taken for health check in milliseconds
        message: Human-readable status message
        details: Additional provider-specific details
        checked_at: Timestamp of the check
    """

    status: HealthStatus
    latency_ms: float
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)
    checked_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_healthy(self) -> bool:
        """Check if status is healthy or degraded (still operational)."""
        return self.status in (HealthStatus.HEALTHY, HealthStatus.DEGRADED)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "status": self.status.value,
            "is_healthy": self.is_healthy,
            "latency_ms": round(self.latency_ms, 2),
            "message": self.message,
            "details": self.details,
            "checked_at": self.checked_at.isoformat(),
        }


async def check_health_with_timeout(
    provider: "FileStorageProvider",
    timeout_seconds: float = 5.0,
) -> HealthCheckResult:
    """
    Perform a provider health check with timeout protection.

    Args:
        provider: The provider to check
        timeout_seconds: Maximum time to wait

    Returns:
        HealthCheckResult (UNHEALTHY on timeout, failure or exception)
    """
    start = time.perf_counter()

    try:
        result = await asyncio.wait_for(provider.check_health(), timeout=timeout_seconds)
    except TimeoutError:
        elapsed_ms = (time.perf_counter() - start) * 1000
        return HealthCheckResult(
            status=HealthStatus.UNHEALTHY,
            latency_ms=elapsed_ms,
            message=f"Health check timed out after {timeout_seconds}s",
        )
    except Exception as e:
        elapsed_ms = (time.perf_counter() - start) * 1000
        return HealthCheckResult(
            status=HealthStatus.UNHEALTHY,
            latency_ms=elapsed_ms,
            message=f"Health check failed: {e}",
            details={"error": str(e), "error_type": type(e).__name__},
        )

    if result.is_success and result.value is not None:
        return result.value

    elapsed_ms = (time.perf_counter() - start) * 1000
    return HealthCheckResult(
        status=HealthStatus.UNHEALTHY,
        latency_ms=elapsed_ms,
        message="; ".join(result.messages) or "Health check failed",
        details={"errors": [str(error) for error in result.errors]},
    )
