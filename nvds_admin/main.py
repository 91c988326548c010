# nvds_admin/main.py

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from nvds_admin.config import Settings, settings as default_settings
from nvds_admin.dependencies import build_content_store, build_database, build_image_store
from nvds_admin.routers import content_router, health_router, images_router

logger = logging.getLogger(__name__)


class SiteStaticFiles(StaticFiles):
    """Archivos estáticos sin dotfiles (.env, .git, ...): responden 404."""

    async def get_response(self, path: str, scope):
        segments = path.replace("\\", "/").split("/")
        if any(segment.startswith(".") and segment not in (".", "") for segment in segments):
            raise StarletteHTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return await super().get_response(path, scope)


class UploadStaticFiles(SiteStaticFiles):
    """Archivos subidos, cacheados un día en el navegador."""

    def file_response(self, *args, **kwargs):
        response = super().file_response(*args, **kwargs)
        response.headers["Cache-Control"] = "public, max-age=86400"
        return response


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    database = build_database(settings)
    content_store = build_content_store(settings, database)
    image_store = build_image_store(settings, database)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        settings.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"NVDS admin backend escuchando en http://localhost:{settings.PORT}")
        await run_in_threadpool(image_store.sync_mirrors)
        yield
        if database is not None:
            database.dispose()

    app = FastAPI(
        title="NVDS Admin API",
        description="API para editar textos e imágenes del sitio",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.content_store = content_store
    app.state.image_store = image_store

    # Configuración CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()))
            message = f"Invalid request: {location}: {errors[0].get('msg')}"
        else:
            message = "Invalid request."
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Error inesperado en {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error."},
        )

    # Routers
    app.include_router(health_router, prefix="/api", tags=["Estado"])
    app.include_router(content_router, prefix="/api/content", tags=["Contenido"])
    app.include_router(images_router, prefix="/api/images", tags=["Imágenes"])

    # Archivos estáticos: subidas primero, luego la raíz del sitio
    app.mount("/assets/uploads", UploadStaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")
    app.mount("/", SiteStaticFiles(directory=settings.site_root, html=True, check_dir=False), name="site")

    return app


app = create_app()
