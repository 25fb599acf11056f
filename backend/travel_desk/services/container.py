from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from travel_desk.core.config import Settings
from travel_desk.services.auth import AuthService
from travel_desk.services.booking_service import BookingService
from travel_desk.services.monitor import PerformanceMonitor, SystemMonitor
from travel_desk.services.payments import Decision, PaymentService, random_decision
from travel_desk.storage.backends import KeyValueBackend, build_backend
from travel_desk.storage.repository import DataStore


@dataclass
class Services:
    settings: Settings
    backend: KeyValueBackend
    monitor: SystemMonitor
    timer: PerformanceMonitor
    store: DataStore
    payments: PaymentService
    auth: AuthService
    bookings: BookingService


def build_services(
    settings: Settings,
    backend: Optional[KeyValueBackend] = None,
    decide: Optional[Decision] = None,
) -> Services:
    backend = backend or build_backend(settings.storage_backend, settings.storage_dir)
    monitor = SystemMonitor(
        backend,
        max_entries=settings.max_log_entries,
        persisted_entries=settings.persisted_log_entries,
        memory_warning_mb=settings.memory_warning_mb,
    )
    timer = PerformanceMonitor(
        monitor,
        threshold_ms=settings.slow_operation_threshold_ms,
        max_samples=settings.max_timing_samples,
    )
    store = DataStore(backend, monitor, timer, storage_key=settings.storage_key)
    payments = PaymentService(
        default_gateway=settings.payment_default_gateway,
        decide=decide or random_decision(settings.payment_seed),
        init_delay=settings.payment_init_delay_seconds,
        process_delay=settings.payment_process_delay_seconds,
    )
    monitor.bind(store=store, payments=payments)
    auth = AuthService(backend, settings.admin_username, settings.admin_password)
    if settings.seed_sample_data:
        store.seed_sample_data()
    return Services(
        settings=settings,
        backend=backend,
        monitor=monitor,
        timer=timer,
        store=store,
        payments=payments,
        auth=auth,
        bookings=BookingService(store, payments, monitor),
    )
