from __future__ import annotations

import os
import platform
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

from fastapi import FastAPI

from app.config import settings
from app.funding.allowlist import load_allowed_clients
from app.funding.models import AllowList
from app.funding.router import build_router
from app.metrics import MetricsMiddleware, metrics_endpoint
from app.observability import RequestIdMiddleware, setup_json_logging
from app.ops import router as ops_router

APP_NAME = "funding-memory"
APP_DESC = "Remembers shopper funding-source choices in the SDK cookie for smart payment buttons."
APP_VERSION_FILE = Path(__file__).resolve().parents[1] / "VERSION"


def read_version_fallback() -> str:
    try:
        return APP_VERSION_FILE.read_text(encoding="utf-8").strip()
    except OSError:
        return "0.0.0"


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


log = setup_json_logging()


def _route_paths(routes) -> set[str]:
    return {
        path for path in (getattr(r, "path", None) for r in routes) if path and path.startswith("/")
    }


def create_app(allowed_clients: AllowList | None = None) -> FastAPI:
    """Application factory. The allow-list is loaded once and never mutated."""
    allowed_clients = allowed_clients if allowed_clients is not None else load_allowed_clients()

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        application.state.allowed_client_count = len(allowed_clients)
        application.state.is_ready = True
        log.info("startup allowed_clients=%d", len(allowed_clients))
        yield
        application.state.is_ready = False

    application = FastAPI(
        title=APP_NAME,
        description=APP_DESC,
        version=read_version_fallback(),
        lifespan=lifespan,
    )

    application.add_middleware(MetricsMiddleware, skip_predicate=lambda r: r.url.path == "/metrics")
    application.add_middleware(RequestIdMiddleware, logger=log)

    # Paths are recorded per router at mount time; how FastAPI exposes
    # included routes on application.routes varies between releases.
    mounted_paths: set[str] = set()
    for router in (ops_router, build_router(allowed_clients)):
        application.include_router(router)
        mounted_paths.update(_route_paths(router.routes))
    application.add_api_route("/metrics", metrics_endpoint, methods=["GET"], tags=["core"])

    @application.get("/health", tags=["core"])
    def health():
        return {"status": "ok"}

    @application.get("/version", tags=["core"])
    def version():
        return {
            "service": APP_NAME,
            "version": read_version_fallback(),
            "host": settings.APP_HOST,
            "port": settings.APP_PORT,
            "workers": settings.APP_WORKERS,
        }

    @application.get("/__meta", tags=["core"])
    def meta():
        return {
            "service": APP_NAME,
            "version": read_version_fallback(),
            "git": {
                "sha": os.getenv("GIT_SHA", os.getenv("GIT_COMMIT", "unknown")),
                "branch": os.getenv("GIT_BRANCH", "unknown"),
            },
            "runtime": {
                "python": platform.python_version(),
                "pid": os.getpid(),
                "as_of": utc_now_iso(),
            },
            "provider_domain": settings.PROVIDER_DOMAIN,
            "endpoints": sorted(mounted_paths | _route_paths(application.routes)),
        }

    return application


app = create_app()
