import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from prometheus_client import make_asgi_app

from api.v1.endpoints import cars, listings
from core.config import settings
from core.exceptions import ListingException, ValidationError
from core.logging import setup_logging
from services.cache.cache_service import CacheService
from services.fetch.gateway import FetchGateway, HttpxFetcher
from services.listings.listing_service import ListingService
from services.sources.config_loader import get_source_profile
from services.store.car_store import CarStore

# Prometheus metrics endpoint
metrics_app = make_asgi_app()


# ------------------------------------------------------------------
# App lifecycle
# ------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    logger.info("Initializing application...")

    profile = get_source_profile(settings.SOURCE_NAME)
    fetcher = HttpxFetcher(timeout=settings.TIMEOUT, max_attempts=settings.FETCH_RETRIES)
    gateway = FetchGateway(
        fetcher,
        profile,
        api_key=settings.FINN_API_KEY,
        user_agent=settings.DEFAULT_USER_AGENT,
        accept_language=settings.ACCEPT_LANGUAGE,
    )

    cache_service = None
    if settings.REDIS_URL:
        cache_service = CacheService(settings.REDIS_URL)
        await cache_service.connect()

    app.state.listing_service = ListingService(
        gateway,
        profile,
        default_org_id=settings.DEFAULT_ORG_ID,
        cache_service=cache_service,
        cache_ttl=settings.CACHE_TTL,
    )
    app.state.car_store = CarStore(settings.CARS_DATA_PATH)
    logger.info(f"Serving source '{settings.SOURCE_NAME}' (api key configured: {gateway.has_api_key})")

    try:
        yield
    finally:
        logger.info("Shutting down application...")
        await fetcher.aclose()
        if cache_service is not None:
            await cache_service.disconnect()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Dealer car listings extracted from FINN.no",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(listings.router, tags=["listings"])
app.include_router(cars.router, prefix="/api/cars", tags=["cars"])


@app.middleware("http")
async def add_timing_header(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = time.perf_counter() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ValidationError(errors=jsonable_encoder(exc.errors())).to_dict(),
    )


@app.exception_handler(ListingException)
async def listing_exception_handler(request: Request, exc: ListingException):
    logger.error(f"{request.url.path} failed with {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"ok": False, "items": [], "error": "An unexpected error occurred"},
    )


app.mount("/metrics", metrics_app)


@app.get("/ping")
async def ping():
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


@app.get("/health")
async def health_check():
    return {"status": "healthy", "timestamp": time.time()}


@app.get("/")
async def root():
    return {
        "name": settings.PROJECT_NAME,
        "version": "1.0.0",
        "description": "Dealer car listings extracted from FINN.no",
        "docs_url": "/docs",
        "health_check": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=settings.WORKERS,
        log_level=settings.LOG_LEVEL.lower(),
    )
