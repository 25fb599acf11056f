from typing import Dict, List, Optional

from fastapi import APIRouter, Depends

from travel_desk.api import get_monitor, get_timer, require_admin
from travel_desk.models.domain import LogLevel
from travel_desk.models.schemas import LogEntrySchema, SystemHealthSchema
from travel_desk.services.monitor import PerformanceMonitor, SystemMonitor

router = APIRouter()


@router.get("/health")
def healthcheck() -> dict:
    return {"status": "ok"}


@router.get("/health/system", response_model=SystemHealthSchema, dependencies=[Depends(require_admin)])
def system_health(monitor: SystemMonitor = Depends(get_monitor)) -> SystemHealthSchema:
    return SystemHealthSchema.from_domain(monitor.perform_health_check())


@router.get("/health/errors", response_model=List[LogEntrySchema], dependencies=[Depends(require_admin)])
def list_errors(
    level: Optional[LogLevel] = None, monitor: SystemMonitor = Depends(get_monitor)
) -> List[LogEntrySchema]:
    return [LogEntrySchema.from_domain(e) for e in monitor.get_errors(level)]


@router.delete("/health/errors", status_code=204, dependencies=[Depends(require_admin)])
def clear_errors(monitor: SystemMonitor = Depends(get_monitor)) -> None:
    monitor.clear_errors()


@router.get("/health/metrics", dependencies=[Depends(require_admin)])
def performance_metrics(
    operation: Optional[str] = None, timer: PerformanceMonitor = Depends(get_timer)
) -> Dict[str, Dict[str, float]]:
    return timer.get_metrics(operation)


@router.delete("/health/metrics", status_code=204, dependencies=[Depends(require_admin)])
def clear_metrics(timer: PerformanceMonitor = Depends(get_timer)) -> None:
    timer.clear_metrics()
