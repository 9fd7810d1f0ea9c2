import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from aadsso.api.v1 import api_router
from aadsso.core.config import settings
from aadsso.core.logging_config import RequestLoggingMiddleware, request_id_var, setup_logging
from aadsso.core.sso.resolver import build_settings_resolver
from aadsso.db.session import check_db_connection, init_db

setup_logging()
logger = logging.getLogger("aadsso")


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    request_id: Optional[str] = None
    path: Optional[str] = None
    timestamp: str


class HealthResponse(BaseModel):
    status: str
    service: str
    environment: str
    sso_settings: str
    checks: dict[str, bool]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create the option table and the settings resolver.

    Settings are resolved lazily on the first request so a slow or unreachable
    discovery endpoint never blocks startup.
    """
    await init_db()
    app.state.settings_resolver = build_settings_resolver()
    logger.info("SSO settings resolver ready")
    yield
    app.state.settings_resolver = None


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Azure AD single sign-on settings resolution",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Return a JSON error for anything the routes did not handle.

    Exception details are only returned outside production; the request ID
    ties the response to the logged traceback.
    """
    request_id = request_id_var.get()
    logger.exception(
        f"Unhandled {exc.__class__.__name__} on {request.method} {request.url.path}",
        exc_info=exc,
    )

    if settings.is_production:
        error, detail = "Internal server error", "An unexpected error occurred."
    else:
        error, detail = exc.__class__.__name__, str(exc)

    content = ErrorResponse(
        error=error,
        detail=detail,
        request_id=request_id,
        path=request.url.path,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content.model_dump(),
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Liveness of the option store. Returns 503 when the database is unreachable.

    The SSO resolver state is reported but not checked: unresolved settings
    are normal until the first status request.
    """
    db_healthy = await check_db_connection()
    resolver = getattr(app.state, "settings_resolver", None)

    response = HealthResponse(
        status="healthy" if db_healthy else "unhealthy",
        service="aadsso",
        environment=settings.ENVIRONMENT,
        sso_settings=resolver.state.value if resolver is not None else "unavailable",
        checks={"database": db_healthy},
    )

    if not db_healthy:
        logger.warning(f"Health check failed: {response.checks}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(),
        )
    return response
