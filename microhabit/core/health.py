"""
Health check utilities for the Micro-Habit API.

Reports the state of the key-value store and the LLM configuration.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from microhabit.core.config import settings
from microhabit.core.storage import JsonFileStore, RedisStore, get_store


class HealthStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"
    CRITICAL = "critical"
    NOT_CONFIGURED = "not_configured"


class HealthCheckResult(BaseModel):
    component: str
    status: HealthStatus
    details: str = ""
    latency_ms: Optional[float] = Field(default=None, ge=0)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class HealthReport(BaseModel):
    status: HealthStatus
    version: str
    environment: str
    timestamp: datetime
    checks: List[HealthCheckResult]


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


async def _check_storage() -> HealthCheckResult:
    component = "storage"
    start = time.perf_counter()
    store = get_store()

    try:
        if isinstance(store, RedisStore):
            await asyncio.to_thread(store.client.ping)
            return HealthCheckResult(
                component=component,
                status=HealthStatus.OK,
                details="Redis reachable",
                latency_ms=_elapsed_ms(start),
                metadata={"backend": "redis"},
            )

        await asyncio.to_thread(store.get, "user_profile")
        metadata = {"backend": "json_file"}
        if isinstance(store, JsonFileStore):
            metadata["path"] = str(store.path)

        # A configured but unreachable Redis means we are on the file fallback
        status = HealthStatus.DEGRADED if settings.REDIS_URL else HealthStatus.OK
        return HealthCheckResult(
            component=component,
            status=status,
            details="JSON file store readable",
            latency_ms=_elapsed_ms(start),
            metadata=metadata,
        )
    except Exception as exc:  # pragma: no cover - I/O failures
        return HealthCheckResult(
            component=component,
            status=HealthStatus.CRITICAL,
            details=f"Storage check failed: {exc}",
            latency_ms=_elapsed_ms(start),
        )


async def _check_llm() -> HealthCheckResult:
    component = "llm"

    if not settings.has_llm_key:
        return HealthCheckResult(
            component=component,
            status=HealthStatus.NOT_CONFIGURED,
            details="LLM API key is not configured; keyword and rule fallbacks in use",
        )

    # No live request; configuration is enough
    return HealthCheckResult(
        component=component,
        status=HealthStatus.OK,
        details="LLM API key configured",
        metadata={"model": settings.LLM_MODEL},
    )


async def _check_environment() -> HealthCheckResult:
    return HealthCheckResult(
        component="environment",
        status=HealthStatus.OK,
        details="Environment variables loaded",
        metadata={
            "environment": settings.ENVIRONMENT,
            "debug": settings.DEBUG,
            "warnings": settings.validate_configuration(),
        },
    )


async def gather_health_checks() -> List[HealthCheckResult]:
    checks = await asyncio.gather(
        _check_environment(),
        _check_storage(),
        _check_llm(),
    )
    return list(checks)


def _aggregate_status(checks: List[HealthCheckResult]) -> HealthStatus:
    if any(check.status == HealthStatus.CRITICAL for check in checks):
        return HealthStatus.CRITICAL

    if any(check.status == HealthStatus.DEGRADED for check in checks):
        return HealthStatus.DEGRADED

    return HealthStatus.OK


async def build_health_report(api_version: str) -> HealthReport:
    checks = await gather_health_checks()
    return HealthReport(
        status=_aggregate_status(checks),
        version=api_version,
        environment=settings.ENVIRONMENT,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )
