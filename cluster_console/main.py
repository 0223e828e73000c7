from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from cluster_console.core import config
from cluster_console.core.database.engine import init_db
from cluster_console.core.errors import ConsoleError, ErrorKind
from cluster_console.core.rate_limit import limiter
from cluster_console.features.users.routes import router as user_router
from cluster_console.features.tenants.routes import router as tenant_router
from cluster_console.features.roles.routes import router as role_router
from cluster_console.features.role_bindings.routes import router as role_binding_router
from cluster_console.features.federation.routes import router as federation_router
from cluster_console.utils import get_logger


log = get_logger(__name__)
log.info("Initializing server")
app = FastAPI(
    title="Cluster Console",
    description="Management console backend for a multi-tenant messaging cluster",
    version="0.1.0",
    docs_url="/docs" if config.ENABLE_DOCS else None,
    redoc_url="/redoc" if config.ENABLE_DOCS else None,
    openapi_url="/openapi.json" if config.ENABLE_DOCS else None
)
app.state.limiter = limiter


class PrintTimings(TimingClient):
    def timing(self, metric_name, timing, tags):
        log.debug(dict(route=metric_name.removeprefix("main.cluster_console.features."), timing=timing, tags=tags))


app.add_middleware(TimingMiddleware, client=PrintTimings(), metric_namer=StarletteScopeToName("main", app))


def warn_on_default_secret() -> None:
    if config.JWT_SECRET == config.DEFAULT_JWT_SECRET:
        log.warning("JWT_SECRET is not set, session tokens are signed with the default secret")


warn_on_default_secret()
if config.ENABLE_DOCS:
    log.warning("Docs enabled")
if config.ALLOW_ORIGIN:
    log.warning("Setting allow origin to %s", config.ALLOW_ORIGIN)
    origins = [config.ALLOW_ORIGIN]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


ERROR_STATUS = {
    ErrorKind.USER_NOT_FOUND: 404,
    ErrorKind.ROLE_NOT_FOUND: 404,
    ErrorKind.ILLEGAL_OPERATION: 403,
    ErrorKind.DUPLICATE_BINDING: 409,
    ErrorKind.DUPLICATE_ROLE: 409,
    ErrorKind.AUTHENTICATION_FAILED: 401,
}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    errors = dict()
    for error in exc.errors():
        if "loc" not in error or "msg" not in error:
            continue
        key = error["loc"][-1]
        if key == "__root__":
            key = "root"
        errors[key] = error["msg"]
    log.info("Request validation error %s", errors)
    return JSONResponse(status_code=400, content=jsonable_encoder(errors))


@app.exception_handler(ConsoleError)
async def console_error_handler(_request: Request, exc: ConsoleError) -> Response:
    log.info("%s: %s", exc.kind.value, exc.message)
    return JSONResponse({"error": exc.message}, status_code=ERROR_STATUS.get(exc.kind, 400))


@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_handler(_request: Request, _exc: RateLimitExceeded) -> Response:
    return JSONResponse({"error": "You are going too fast"}, status_code=429)


@app.on_event("startup")
async def startup():
    """Initialize database on application startup."""
    log.info("Initializing database...")
    await init_db()
    log.info("Database initialized successfully")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


app.include_router(user_router, prefix="/users", tags=["users"])
app.include_router(tenant_router, prefix="/tenants", tags=["tenants"])
app.include_router(role_router, prefix="/roles", tags=["roles"])
app.include_router(role_binding_router, prefix="/role-binding", tags=["role-binding"])
app.include_router(federation_router, prefix="/third-party-login", tags=["third-party-login"])
