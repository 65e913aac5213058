import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from saas_core.api import auth, users, organizations, subscriptions, health
from saas_core.config import get_settings, configure_logging
from saas_core.db.postgres import engine, Base, AsyncSessionLocal
from saas_core.db.seed import seed_plans
from saas_core.errors import ServiceError, Unauthenticated, InternalError
from saas_core.services.notifications import get_dispatcher

settings = get_settings()
configure_logging(settings)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables and default plans
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.seed_plans:
        async with AsyncSessionLocal() as session:
            await seed_plans(session)

    yield

    # Shutdown: drain queued emails
    get_dispatcher().shutdown(wait=True)
    await engine.dispose()


app = FastAPI(
    title="SaaS Core API",
    description="Multi-tenant identity, organizations and subscriptions",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(error: ServiceError, extra: dict | None = None) -> JSONResponse:
    content = {"detail": error.message, "code": error.code}
    if extra:
        content.update(extra)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(error, Unauthenticated) else None
    return JSONResponse(status_code=error.status_code, content=content, headers=headers)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s", exc.code, request.method, request.url.path, exc_info=exc)
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err["loc"][1:]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request body", "code": "validation_error", "errors": errors},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return error_response(InternalError())


app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])
app.include_router(users.router, prefix=f"{settings.api_prefix}/users", tags=["users"])
app.include_router(organizations.router, prefix=f"{settings.api_prefix}/organizations", tags=["organizations"])
app.include_router(subscriptions.plans_router, prefix=f"{settings.api_prefix}/plans", tags=["subscriptions"])
app.include_router(subscriptions.router, prefix=f"{settings.api_prefix}/subscriptions", tags=["subscriptions"])
app.include_router(health.router, tags=["health"])
