import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from store_rating import __version__
from store_rating.api import auth, ratings, stores, users
from store_rating.core.config import settings
from store_rating.core.exceptions import ServiceError
from store_rating.db.base import async_session_factory, create_tables
from store_rating.services.users import ensure_bootstrap_admin

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.CREATE_TABLES_ON_STARTUP:
        await create_tables()
        logger.info("Database tables verified")

    if settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD:
        async with async_session_factory() as session:
            await ensure_bootstrap_admin(
                session, settings.ADMIN_NAME, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD
            )
            await session.commit()
    yield


app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    description="Store rating platform: admins manage stores, users rate them",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Routers
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(stores.router, prefix="/api")
app.include_router(ratings.router, prefix="/api")


@app.get("/health")
async def health_check():
    return {"status": "ok", "version": __version__}
