import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, ORJSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from routeplanner.api.router import api_router
from routeplanner.core.config import Settings, settings
from routeplanner.core.logging import (
    TRACE_HEADER,
    configure_logging,
    get_trace_id,
    trace_context,
    trace_id_from_headers,
)
from routeplanner.domain.assembly import RouteAssembler
from routeplanner.domain.estimates import build_estimate_provider
from routeplanner.services.cache import LookupCache
from routeplanner.services.google_maps import GoogleMapsClient
from routeplanner.services.short_links import ShortLinkResolver

logger = configure_logging("routeplanner", settings.LOG_LEVEL)


# Endpoints answering {message, error: true}; the rest answer {error: "..."}.
ROUTE_ERROR_PATHS = ("/optimize-route",)
URL_BODY_PATHS = ("/parse-map-url", "/parse-map-url/details")


def _body_missing(exc: RequestValidationError) -> bool:
    return any(tuple(error.get("loc", ())) == ("body",) for error in exc.errors())


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings

    maps_config = app_settings.maps_config()
    lookup_cache = LookupCache(app_settings.REDIS_URL)
    maps_client = GoogleMapsClient(maps_config, cache=lookup_cache)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s", app_settings.PROJECT_NAME)
        logger.info("Environment: %s", app_settings.ENVIRONMENT)
        logger.info("Estimate provider: %s", app_settings.ESTIMATE_PROVIDER)

        if not app_settings.GOOGLE_MAPS_API_KEY:
            logger.warning("No Google Maps API key configured! Map links will not resolve.")

        if app_settings.REDIS_URL:
            try:
                await lookup_cache.connect()
            except Exception as exc:
                logger.warning("Lookup cache disabled, Redis unavailable: %s", exc)
        else:
            logger.info("REDIS_URL not set, lookup cache disabled")

        logger.info("%s ready", app_settings.PROJECT_NAME)
        try:
            yield
        finally:
            logger.info("Shutting down %s", app_settings.PROJECT_NAME)
            await lookup_cache.close()

    app = FastAPI(
        title=app_settings.PROJECT_NAME,
        version=app_settings.VERSION,
        openapi_url=f"{app_settings.API_V1_STR}/openapi.json",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.lookup_cache = lookup_cache
    app.state.maps_client = maps_client
    app.state.short_link_resolver = ShortLinkResolver(maps_config, maps_client)
    app.state.route_assembler = RouteAssembler(build_estimate_provider(app_settings))

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        logger.info(
            "%s %s - status=%s duration=%.3fs",
            request.method,
            request.url.path,
            response.status_code,
            duration,
        )
        return response

    @app.middleware("http")
    async def trace_middleware(request: Request, call_next):
        with trace_context(trace_id_from_headers(request.headers.items())) as trace_id:
            response = await call_next(request)
        response.headers.setdefault(TRACE_HEADER, trace_id)
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Invalid request to %s: %s", request.url.path, exc.errors())
        message = _validation_message(exc)
        if request.url.path.endswith(ROUTE_ERROR_PATHS):
            return JSONResponse(
                {
                    "message": message,
                    "error": True,
                    "detail": jsonable_encoder(exc.errors()),
                },
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        if request.url.path.endswith(URL_BODY_PATHS) and _body_missing(exc):
            message = "URL is required"
        return JSONResponse({"error": message}, status_code=status.HTTP_400_BAD_REQUEST)

    Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

    app.include_router(api_router, prefix=app_settings.API_V1_STR)

    @app.get("/health")
    @app.get("/healthz")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": app_settings.VERSION,
            "environment": app_settings.ENVIRONMENT,
            "maps_configured": bool(app_settings.GOOGLE_MAPS_API_KEY),
            "trace_id": get_trace_id(),
        }

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": app_settings.PROJECT_NAME,
            "version": app_settings.VERSION,
            "docs": "/docs",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "routeplanner.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
    )
