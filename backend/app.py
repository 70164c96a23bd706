"""FastAPI application entry point for the bitcoin monitor API."""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from errors import register_error_handlers
from services.bitcoin import fetch_bitcoin_info
from services.cache import StaleTolerantCache

# Structured logging: JSON for production, human-readable for local
if settings.is_production:
    logging.basicConfig(
        level=settings.log_level,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def build_bitcoin_cache() -> StaleTolerantCache[dict]:
    return StaleTolerantCache(
        fetch=fetch_bitcoin_info,
        ttl_ms=settings.bitcoin_cache_ttl_ms,
        name="bitcoin info",
        single_flight=settings.bitcoin_single_flight,
    )


@asynccontextmanager
async def lifespan(_app: FastAPI):
    missing = settings.validate()
    if missing:
        logger.warning("Missing env vars (upstream calls may be rejected): %s", ", ".join(missing))
    yield


def create_app(bitcoin_cache: StaleTolerantCache[dict] | None = None) -> FastAPI:
    app = FastAPI(title="Bitcoin Monitor API", version="1.0.0", lifespan=lifespan)

    # One cache per app instance; injectable for tests.
    app.state.bitcoin_cache = bitcoin_cache if bitcoin_cache is not None else build_bitcoin_cache()

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.bitcoin import router as bitcoin_router
    from routes.health import router as health_router

    app.include_router(health_router)
    app.include_router(bitcoin_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
