import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from videohub.config import Settings, get_settings
from videohub.database import database
from videohub.errors import VideoHubError
from videohub.routers import auth, health, videos
from videohub.services.storage import LocalDiskStorage, StorageBackend, build_storage_backend

logger = logging.getLogger(__name__)


class PublicStaticFiles(StaticFiles):
    """Uploaded media is fetched by <video> tags on any origin."""

    async def get_response(self, path: str, scope):
        response = await super().get_response(path, scope)
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET"
        response.headers["Cross-Origin-Resource-Policy"] = "cross-origin"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Lazy: a failed connection here does not block startup; /health reports it
    if database.ping():
        logger.info("Datastore reachable")
    try:
        yield
    finally:
        database.dispose()


def create_app(settings: Settings | None = None, storage_backend: StorageBackend | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.log_level.upper(),
    )
    # Raises ConfigurationError (e.g. production without SECRET_KEY); the process must not start
    settings.validate_for_startup()

    backend = storage_backend or build_storage_backend(settings)
    logger.info("Storage backend: %s", backend.name)

    app = FastAPI(title="VideoHub API", version="1.0.0", lifespan=lifespan)
    app.state.storage_backend = backend

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(auth.router)
    app.include_router(videos.router)
    app.include_router(health.router)

    if isinstance(backend, LocalDiskStorage):
        backend.upload_dir.mkdir(parents=True, exist_ok=True)
        app.mount(backend.url_prefix, PublicStaticFiles(directory=backend.upload_dir), name="uploads")

    @app.exception_handler(VideoHubError)
    async def videohub_error_handler(request: Request, exc: VideoHubError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
        else:
            logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Something went wrong!"},
        )

    @app.get("/")
    def root():
        return {"message": "VideoHub API", "docs": "/docs"}

    return app


app = create_app()
