"""
Gym Roster — FastAPI Application Entry Point
Member roster REST API over a single client collection.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Match

from app.config import get_settings
from app.core.errors import RosterError
from app.core.store_provider import StoreProvider
from app.utils.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    settings = get_settings()
    logger.info(f"🚀 Gym Roster starting in {settings.app_env} mode...")
    logger.info(f"🗄️ Supabase: {'✅' if settings.has_supabase_config else '❌'}")
    logger.info(f"🕒 Roster timezone: {settings.roster_timezone}")

    provider = getattr(app.state, "store_provider", None)
    if provider is None:
        provider = StoreProvider.from_settings(settings)
        app.state.store_provider = provider
    provider.startup()

    yield

    provider.shutdown()
    app.state.store_provider = None
    logger.info("👋 Gym Roster shutting down...")


app = FastAPI(
    title="Gym Roster",
    description="Gym membership client roster: contacts, fees and membership expiry.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Middleware Stack ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


METHOD_ORDER = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _allowed_methods(request: Request) -> list[str]:
    """Methods of every route whose path matches this request."""
    methods: set[str] = set()
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.PARTIAL:
            methods.update(getattr(route, "methods", None) or ())
    order = {m: i for i, m in enumerate(METHOD_ORDER)}
    return sorted(methods, key=lambda m: (order.get(m, len(order)), m))


# --- Error Handlers ---
@app.exception_handler(RosterError)
async def roster_error_handler(request: Request, exc: RosterError):
    if exc.status_code >= 500:
        logger.error(f"❌ {exc.error} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"⚠️ {exc.error} on {request.method} {request.url.path}: {exc.message}")
    headers = {"Retry-After": "5"} if exc.retryable else None
    return JSONResponse(
        status_code=exc.status_code,
        content={**exc.to_dict(), "timestamp": _timestamp()},
        headers=headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        allowed = _allowed_methods(request)
        return JSONResponse(
            status_code=405,
            content={"message": "Method Not Allowed", "error": "MethodNotAllowed", "allowed": allowed},
            headers={"Allow": ", ".join(allowed)},
        )
    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content={"message": "Not found", "error": "NotFoundError", "path": str(request.url.path)},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail), "error": "HTTPError"},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "message": "Something went wrong. Please try again later.",
            "error": "UnknownError",
            "path": str(request.url.path),
            "timestamp": _timestamp(),
        },
    )


# --- Health Check ---
@app.get("/", tags=["Health"])
async def root():
    return {
        "status": "healthy",
        "service": "Gym Roster",
        "version": "1.0.0",
        "message": "Gym Client Manager API is running!",
    }


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    settings = get_settings()
    store = request.app.state.store_provider.health()
    return {
        "status": "healthy" if store["healthy"] else "degraded",
        "environment": settings.app_env,
        "store": store,
    }


# --- Register Routers ---
from app.api import clients

app.include_router(clients.router, prefix="/api/clients", tags=["Clients"])


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug,
    )
