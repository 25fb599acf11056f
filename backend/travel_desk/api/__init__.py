from fastapi import Depends, HTTPException
from starlette.requests import Request

from travel_desk.services.auth import AuthService
from travel_desk.services.booking_service import BookingService
from travel_desk.services.container import Services
from travel_desk.services.monitor import PerformanceMonitor, SystemMonitor
from travel_desk.storage.repository import DataStore


def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=500, detail="Services not initialized")
    return services


def get_store(services: Services = Depends(get_services)) -> DataStore:
    return services.store


def get_monitor(services: Services = Depends(get_services)) -> SystemMonitor:
    return services.monitor


def get_timer(services: Services = Depends(get_services)) -> PerformanceMonitor:
    return services.timer


def get_auth(services: Services = Depends(get_services)) -> AuthService:
    return services.auth


def get_booking_service(services: Services = Depends(get_services)) -> BookingService:
    return services.bookings


def require_admin(auth: AuthService = Depends(get_auth)) -> str:
    state = auth.get_auth_state()
    if not state.is_authenticated:
        raise HTTPException(status_code=401, detail="Admin login required")
    return state.username
