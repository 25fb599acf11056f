import asyncio
import contextlib
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from travel_desk.api import routes_admin, routes_booking, routes_content, routes_health, routes_trips
from travel_desk.core.config import Settings, settings as default_settings
from travel_desk.core.errors import (
    DuplicateError,
    NotFoundError,
    PaymentError,
    PersistenceError,
    ValidationError,
)
from travel_desk.core.logging import configure_logging
from travel_desk.services.container import Services, build_services

_ERROR_STATUS = {
    ValidationError: 422,
    DuplicateError: 409,
    NotFoundError: 404,
    PersistenceError: 503,
    PaymentError: 502,
}


def _register_error_handlers(app: FastAPI) -> None:
    async def handle(request: Request, exc: Exception) -> JSONResponse:
        status = next(code for cls, code in _ERROR_STATUS.items() if isinstance(exc, cls))
        body = {"detail": str(exc)}
        if isinstance(exc, ValidationError):
            body["errors"] = exc.errors
        return JSONResponse(status_code=status, content=body)

    for error_cls in _ERROR_STATUS:
        app.add_exception_handler(error_cls, handle)


@asynccontextmanager
async def lifespan(app: FastAPI):
    services: Services = app.state.services
    interval = services.settings.health_check_interval_seconds
    task = None
    if interval > 0:
        task = asyncio.create_task(services.monitor.run_periodic_checks(interval))
    yield
    if task is not None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)
    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(routes_trips.router, prefix="/trips", tags=["trips"])
    app.include_router(routes_content.blogs_router, prefix="/blogs", tags=["blogs"])
    app.include_router(
        routes_content.testimonials_router, prefix="/testimonials", tags=["testimonials"]
    )
    app.include_router(routes_booking.router, prefix="/bookings", tags=["bookings"])
    app.include_router(routes_admin.router, prefix="/admin", tags=["admin"])
    _register_error_handlers(app)

    # Services are built once and shared through app.state for dependencies
    app.state.services = services or build_services(settings)
    app.state.settings = settings
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
