"""
FastAPI app factory for the booking API.

Wires middleware, error handlers and the four public routers: run inventory and
holds, promo quotes, orders, and payment provider callbacks.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from src.platform.config.core_setting import settings
from src.platform.exception.exception_handlers import register_exception_handlers
from src.platform.observability.tracing import TracingConfig
from src.service.inventory.driving_adapter.http_controller.run_controller import (
    router as run_router,
)
from src.service.ordering.driving_adapter.http_controller.order_controller import (
    router as order_router,
)
from src.service.ordering.driving_adapter.http_controller.payment_controller import (
    router as payment_router,
)
from src.service.promotion.driving_adapter.http_controller.promo_controller import (
    router as promo_router,
)


API_ROUTERS: tuple[tuple[APIRouter, str, str], ...] = (
    (run_router, '/api/run', 'run'),
    (promo_router, '/api/promo', 'promo'),
    (order_router, '/api/order', 'order'),
    (payment_router, '/api/payment', 'payment'),
)


def create_app(
    *,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]],
    title_suffix: str = '',
    service_name: str = 'coach-booking',
) -> FastAPI:
    app = FastAPI(
        title=f'{settings.PROJECT_NAME}{title_suffix}',
        description='Seat holds, checkout and payment for intercity coach runs',
        version=settings.VERSION,
        lifespan=lifespan,
    )

    # Instrument before routes are mounted
    TracingConfig(service_name=service_name).instrument_fastapi(app=app)

    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        # Anonymous holds are keyed by a cookie
        allow_credentials=True,
        allow_methods=['GET', 'POST', 'DELETE', 'OPTIONS'],
        allow_headers=['*'],
    )

    register_exception_handlers(app)

    for router, prefix, tag in API_ROUTERS:
        app.include_router(router, prefix=prefix, tags=[tag])

    _register_ops_endpoints(app, service_name=service_name)
    return app


def _register_ops_endpoints(app: FastAPI, *, service_name: str) -> None:
    @app.get('/health', include_in_schema=False)
    async def health_check() -> dict[str, Any]:
        return {
            'status': 'healthy',
            'service': service_name,
            'reaper_enabled': settings.ENABLE_REAPER,
        }

    @app.get('/metrics', include_in_schema=False)
    async def get_metrics() -> PlainTextResponse:
        return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
