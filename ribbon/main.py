import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from ribbon.api_routers.v1 import api_router
from ribbon.features.health.routes.health import router as health_router
from ribbon.features.links.routes.pages import router as pages_router
from ribbon.features.links.services.flow_registry import FlowRegistry
from ribbon.features.links.services.link_store import LinkStore
from ribbon.middlewares.session import SessionMiddleware
from ribbon.platform.config import settings
from ribbon.platform.db.session import SessionLocal, init_models
from ribbon.platform.exceptions import add_exception_handlers
from ribbon.platform.logger import LOG_FORMAT, get_logger
from ribbon.platform.utils.file_upload import CachedStaticFiles, LocalIconStorage

logging.basicConfig(level=settings.LOG_LEVEL, format=LOG_FORMAT)

logger = get_logger(__name__)

PACKAGE_STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.CREATE_TABLES_ON_STARTUP:
        await init_models()
    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Ribbon API",
        description="Create a \"will you be mine\" link, share it, and see the answer.",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    store = LinkStore(SessionLocal, conditional_update=settings.CONDITIONAL_RESPONSE_UPDATE)
    storage = LocalIconStorage(
        settings.ICON_STORAGE_DIR,
        public_base_url=settings.PUBLIC_ORIGIN.rstrip("/") + settings.ICON_PUBLIC_PATH,
    )
    app.state.flow_registry = FlowRegistry(
        store,
        storage,
        origin=settings.PUBLIC_ORIGIN,
        reveal_delay=settings.REVEAL_DELAY_SECONDS,
        min_interval=settings.MIN_SUBMIT_INTERVAL_SECONDS,
        max_image_bytes=settings.MAX_IMAGE_BYTES,
        max_sessions=settings.MAX_TRACKED_SESSIONS,
        max_links_per_session=settings.MAX_LINKS_PER_SESSION,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SessionMiddleware)

    add_exception_handlers(app)

    # Uploaded icons, then bundled assets; the more specific mount goes first
    icon_dir = Path(settings.ICON_STORAGE_DIR)
    icon_dir.mkdir(parents=True, exist_ok=True)
    app.mount(
        settings.ICON_PUBLIC_PATH,
        CachedStaticFiles(directory=str(icon_dir), max_age=settings.ICON_CACHE_CONTROL_SECONDS),
        name="icons",
    )
    app.mount("/static", StaticFiles(directory=str(PACKAGE_STATIC_DIR)), name="static")

    app.include_router(health_router)
    app.include_router(api_router, prefix="/api/v1")
    app.include_router(pages_router)

    return app


app = create_app()
