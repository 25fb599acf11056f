from __future__ import annotations

import asyncio
import json
import logging
import sys
import time
from collections import deque
from contextlib import contextmanager
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional
from uuid import uuid4

import pydantic

from travel_desk.core.clock import utcnow
from travel_desk.core.errors import PersistenceError
from travel_desk.models.domain import (
    HealthChecks,
    HealthMetrics,
    HealthStatus,
    LogEntry,
    LogLevel,
    SystemHealth,
)
from travel_desk.storage.backends import KeyValueBackend

logger = logging.getLogger(__name__)

ERRORS_KEY = "system_errors"
HEALTH_KEY = "system_health"
PROBE_KEY = "health_check_test"

_PY_LEVELS = {
    LogLevel.info: logging.INFO,
    LogLevel.warning: logging.WARNING,
    LogLevel.error: logging.ERROR,
    LogLevel.critical: logging.CRITICAL,
}


def resident_memory_mb() -> float:
    """Peak resident set size of this process, 0.0 where unsupported."""
    try:
        import resource
    except ImportError:  # pragma: no cover - windows
        return 0.0
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # linux reports KiB, macOS bytes
    divisor = 1024 * 1024 if sys.platform == "darwin" else 1024
    return peak / divisor


class SystemMonitor:
    """
    Diagnostics for the admin dashboard: a bounded log of recent entries
    (newest first) and a health check over the store, the key-value backend
    and the payment registry. Losing it loses diagnostics only.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        max_entries: int = 100,
        persisted_entries: int = 20,
        memory_warning_mb: float = 512.0,
        memory_gauge: Callable[[], float] = resident_memory_mb,
        clock: Callable = utcnow,
    ) -> None:
        self.backend = backend
        self.persisted_entries = persisted_entries
        self.memory_warning_mb = memory_warning_mb
        self.memory_gauge = memory_gauge
        self.clock = clock
        self.entries: Deque[LogEntry] = deque(maxlen=max_entries)
        self.store = None
        self.payments = None

    def bind(self, store=None, payments=None) -> None:
        if store is not None:
            self.store = store
        if payments is not None:
            self.payments = payments

    def log(
        self,
        level: LogLevel | str,
        component: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        stack: Optional[str] = None,
    ) -> LogEntry:
        level = LogLevel(level)
        entry = LogEntry(
            id=f"ERR_{uuid4().hex}",
            timestamp=self.clock(),
            level=level,
            component=component,
            message=message,
            context=context,
            stack=stack,
        )
        self.entries.appendleft(entry)
        logger.log(_PY_LEVELS[level], "[%s] %s", component, message, extra={"context": context})
        self._persist_entries()
        return entry

    def _persist_entries(self) -> None:
        recent = [e.to_document() for e in list(self.entries)[: self.persisted_entries]]
        try:
            self.backend.set_item(ERRORS_KEY, json.dumps(recent))
        except PersistenceError as exc:
            logger.warning("Failed to store monitor entries: %s", exc)

    def get_errors(self, level: LogLevel | str | None = None) -> List[LogEntry]:
        if level is None:
            return list(self.entries)
        level = LogLevel(level)
        return [e for e in self.entries if e.level == level]

    def clear_errors(self) -> None:
        self.entries.clear()
        try:
            self.backend.remove_item(ERRORS_KEY)
        except PersistenceError as exc:
            logger.warning("Failed to clear monitor entries: %s", exc)

    def error_count(self) -> int:
        return sum(1 for e in self.entries if e.level in (LogLevel.error, LogLevel.critical))

    def _check_store(self) -> tuple[bool, HealthMetrics]:
        if self.store is None:
            return False, HealthMetrics()
        try:
            trips = self.store.get_trips()
            bookings = self.store.get_bookings()
            customers = self.store.get_customers()
            blogs = self.store.get_blogs()
            raw = self.backend.get_item(self.store.storage_key) or ""
        except Exception as exc:  # noqa: BLE001
            self.log(
                LogLevel.error,
                "DataStore",
                "Data store health check failed",
                {"error": str(exc)},
            )
            return False, HealthMetrics()
        return True, HealthMetrics(
            total_trips=len(trips),
            total_bookings=len(bookings),
            total_customers=len(customers),
            total_blogs=len(blogs),
            data_size=len(raw),
        )

    def _check_backend(self) -> bool:
        try:
            self.backend.set_item(PROBE_KEY, "test")
            self.backend.remove_item(PROBE_KEY)
        except PersistenceError as exc:
            self.log(
                LogLevel.warning,
                "LocalStorage",
                "Key-value storage not available",
                {"error": str(exc)},
            )
            return False
        return True

    def _check_payments(self) -> bool:
        if self.payments is None:
            return False
        try:
            return len(self.payments.get_available_gateways()) > 0
        except Exception as exc:  # noqa: BLE001
            self.log(
                LogLevel.warning,
                "PaymentService",
                "Payment service check failed",
                {"error": str(exc)},
            )
            return False

    def perform_health_check(self) -> SystemHealth:
        store_ok, metrics = self._check_store()
        backend_ok = self._check_backend()
        payments_ok = self._check_payments()
        checks = HealthChecks(
            data_store=store_ok,
            local_storage=backend_ok,
            payment_service=payments_ok,
            memory_usage=self.memory_gauge(),
            error_count=self.error_count(),
        )

        status = HealthStatus.healthy
        if not checks.data_store or not checks.local_storage or checks.error_count > 10:
            status = HealthStatus.critical
        elif (
            not checks.payment_service
            or checks.memory_usage > self.memory_warning_mb
            or checks.error_count > 5
        ):
            status = HealthStatus.warning

        health = SystemHealth(status=status, timestamp=self.clock(), checks=checks, metrics=metrics)
        try:
            self.backend.set_item(HEALTH_KEY, json.dumps(health.to_document()))
        except PersistenceError as exc:
            logger.warning("Failed to store health status: %s", exc)
        return health

    def get_health_status(self) -> Optional[SystemHealth]:
        try:
            stored = self.backend.get_item(HEALTH_KEY)
            return SystemHealth.model_validate_json(stored) if stored else None
        except (PersistenceError, pydantic.ValidationError):
            return None

    async def run_periodic_checks(self, interval: float) -> None:
        """Run until cancelled; a failing check is logged and the loop goes on."""
        while True:
            await asyncio.sleep(interval)
            try:
                health = self.perform_health_check()
                logger.debug("Health check: %s", health.status.value)
            except Exception:  # noqa: BLE001
                logger.exception("Periodic health check failed")


class PerformanceMonitor:
    """Duration samples per named operation; slow calls are reported to the monitor."""

    def __init__(
        self,
        monitor: SystemMonitor,
        threshold_ms: float = 1000.0,
        max_samples: int = 100,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.monitor = monitor
        self.threshold_ms = threshold_ms
        self.max_samples = max_samples
        self.clock = clock
        self.samples: Dict[str, Deque[float]] = {}

    def start_timing(self, operation: str) -> Callable[[], float]:
        started = self.clock()

        def stop() -> float:
            duration_ms = (self.clock() - started) * 1000
            self.record(operation, duration_ms)
            return duration_ms

        return stop

    @contextmanager
    def timed(self, operation: str) -> Iterator[None]:
        stop = self.start_timing(operation)
        try:
            yield
        finally:
            stop()

    def record(self, operation: str, duration_ms: float) -> None:
        samples = self.samples.setdefault(operation, deque(maxlen=self.max_samples))
        samples.append(duration_ms)
        if duration_ms > self.threshold_ms:
            self.monitor.log(
                LogLevel.warning,
                "Performance",
                f"Slow operation detected: {operation}",
                {"duration": f"{duration_ms:.2f}ms"},
            )

    def get_metrics(self, operation: Optional[str] = None) -> Dict[str, Dict[str, float]]:
        operations = [operation] if operation else list(self.samples)
        result: Dict[str, Dict[str, float]] = {}
        for op in operations:
            samples = self.samples.get(op)
            if not samples:
                continue
            result[op] = {
                "avg": sum(samples) / len(samples),
                "min": min(samples),
                "max": max(samples),
                "count": len(samples),
            }
        return result

    def clear_metrics(self) -> None:
        self.samples.clear()
