from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.env import env_list, load_dotenv_if_available
from core.logging import setup_logging

load_dotenv_if_available()
setup_logging()

from web import routers  # noqa: E402
from web.middleware.auth_context import auth_context_middleware  # noqa: E402

try:  # pragma: no cover - optional dependency
    from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
except ImportError:  # pragma: no cover
    CONTENT_TYPE_LATEST = "text/plain"
    generate_latest = None

app = FastAPI(
    title="Trusty Platform API",
    description="Business financing and M&A marketplace backend.",
    version="0.1.0",
)

origins = env_list("CORS_ALLOWED_ORIGINS", ("http://localhost:3000",))

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def attach_auth_context(request: Request, call_next):
    """Resolve bearer tokens into request.state.user."""
    return await auth_context_middleware(request, call_next)


@app.get("/", summary="Health Check", tags=["Default"])
def health_check():
    return {"status": "ok", "message": "Trusty Platform API is running."}


@app.get("/healthz", include_in_schema=False)
def cloud_run_health_check():
    """Lightweight Cloud Run friendly health check."""
    db_ok, db_error = routers.health.ping_database()
    payload = {"status": "ok" if db_ok else "unhealthy", "database": {"ok": db_ok}}
    if db_error:
        payload["database"]["error"] = db_error
    status_code = status.HTTP_200_OK if db_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=payload)


@app.get("/metrics", include_in_schema=False)
def prometheus_metrics():
    """Expose Prometheus metrics."""
    if generate_latest is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": "metrics.unavailable", "message": "prometheus_client is not installed"},
        )
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(routers.auth.router, prefix="/api")
app.include_router(routers.admin_users.router, prefix="/api")
app.include_router(routers.media.router, prefix="/api")
app.include_router(routers.companies.router, prefix="/api")
app.include_router(routers.financial_metrics.router, prefix="/api")
app.include_router(routers.calculator.router, prefix="/api")
app.include_router(routers.onboarding.router, prefix="/api")
app.include_router(routers.financing.router, prefix="/api")
app.include_router(routers.languages.router, prefix="/api")
app.include_router(routers.dashboard.router, prefix="/api")
app.include_router(routers.health.router, prefix="/api")
