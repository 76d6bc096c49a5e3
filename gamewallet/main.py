"""
GameWallet FastAPI Application
Main entry point for the application
"""

import os
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

# Sentry integration
if os.getenv("SENTRY_DSN"):
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
    from sentry_sdk.integrations.redis import RedisIntegration

    sentry_sdk.init(
        dsn=os.getenv("SENTRY_DSN"),
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
            RedisIntegration(),
        ],
        traces_sample_rate=0.1,
        environment=os.getenv("APP_ENV", "development"),
    )

from gamewallet.api.health import router as health_router
from gamewallet.api.v1.admin import router as admin_router
from gamewallet.api.v1.bets import router as bets_router
from gamewallet.api.v1.games import router as games_router
from gamewallet.api.v1.staking import router as staking_router
from gamewallet.api.v1.wallet import router as wallet_router
from gamewallet.core.config import settings
from gamewallet.core.exceptions import GamingError
from gamewallet.core.metrics import ACTIVE_CONNECTIONS, REQUEST_COUNT, REQUEST_DURATION
from gamewallet.core.redis_client import get_redis_client
from gamewallet.middleware.rate_limit import RateLimitMiddleware


def create_app(redis_client=None) -> FastAPI:
    """
    Build the application.

    Args:
        redis_client: Enables wager rate limiting when given
    """
    app = FastAPI(
        title=settings.app_name,
        description="Multi-currency gaming wallet and wagering ledger",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RateLimitMiddleware, redis_client=redis_client)

    @app.exception_handler(GamingError)
    async def gaming_error_handler(request: Request, exc: GamingError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        start_time = time.time()
        ACTIVE_CONNECTIONS.inc()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration = time.time() - start_time
            ACTIVE_CONNECTIONS.dec()
            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=request.url.path,
                status=status_code
            ).inc()
            REQUEST_DURATION.labels(
                method=request.method,
                endpoint=request.url.path
            ).observe(duration)

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint"""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(health_router, tags=["health"])
    app.include_router(wallet_router, prefix=settings.api_v1_prefix, tags=["wallet"])
    app.include_router(bets_router, prefix=settings.api_v1_prefix, tags=["bets"])
    app.include_router(games_router, prefix=settings.api_v1_prefix, tags=["games"])
    app.include_router(staking_router, prefix=settings.api_v1_prefix, tags=["staking"])
    app.include_router(admin_router, prefix=f"{settings.api_v1_prefix}/admin", tags=["admin"])

    return app


app = create_app(redis_client=get_redis_client() if settings.rate_limit_enabled else None)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "gamewallet.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
