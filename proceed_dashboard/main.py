# === proceed_dashboard/main.py ===
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from proceed_dashboard.api.v1.api import api_router
from proceed_dashboard.core.config import Settings, settings as default_settings
from proceed_dashboard.core.errors import error_response, internal_error_response, register_exception_handlers
from proceed_dashboard.store.base import VersionStore
from proceed_dashboard.store.factory import build_store
import time
import logging

#logging
logging.basicConfig(level=default_settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

BODY_METHODS = {"POST", "PUT", "PATCH"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up...")
    owns_store = getattr(app.state, "store", None) is None
    if owns_store:
        app.state.store = await build_store(app.state.settings)
    logger.info(f"Serving with {app.state.store.kind} version store")
    yield
    logger.info("Shutting down...")
    if owns_store:
        await app.state.store.close()
        app.state.store = None


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[VersionStore] = None,
    api_prefix: Optional[str] = None,
) -> FastAPI:
    settings = settings or default_settings
    api_prefix = settings.API_PREFIX if api_prefix is None else api_prefix

    app = FastAPI(
        lifespan=lifespan,
        title="PROCEED Dashboard API",
        description="Excel-driven dashboard service for portfolio management",
        version="1.0.0"
    )
    app.state.settings = settings
    app.state.store = store

    @app.middleware("http")
    async def limit_upload_size(request: Request, call_next):
        length = request.headers.get("content-length")
        if request.method in BODY_METHODS and length and length.isdigit():
            if int(length) > settings.MAX_UPLOAD_BYTES:
                logger.warning(f"Rejected {request.method} {request.url.path}: body of {length} bytes")
                return error_response(
                    413,
                    f"File too large. Maximum upload size is {settings.MAX_UPLOAD_BYTES} bytes.",
                    {"size": int(length), "maxBytes": settings.MAX_UPLOAD_BYTES},
                )
        return await call_next(request)

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        if not settings.is_production:
            logger.info(f"Request received: {request.method} {request.url.path}")
        try:
            response = await call_next(request)
        except Exception as exc:
            # 500s must still pass back through CORS
            response = internal_error_response(request, exc, settings)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        # Log slow requests
        if process_time > settings.SLOW_REQUEST_SECONDS:
            logger.warning(f"Slow request: {request.method} {request.url} took {process_time:.2f}s")

        return response

    #CORS middleware
    if settings.is_production:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins(),
            allow_origin_regex=settings.cors_origin_regex(),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
            expose_headers=["Content-Disposition"],
            max_age=86400,  # 24 hours
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["Content-Disposition"],
            max_age=86400,
        )

    register_exception_handlers(app, settings)

    #API router
    app.include_router(api_router, prefix=api_prefix)

    #root
    @app.get("/")
    async def root():
        return {
            "message": "PROCEED Dashboard API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": f"{api_prefix}/health"
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "proceed_dashboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.is_development,
        log_level=default_settings.LOG_LEVEL.lower()
    )
