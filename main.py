from contextlib import asynccontextmanager
from fastapi import FastAPI
from api.main import app_router
from core.config import get_settings
from core.logging import setup_logging
import logging

from catalog.loader import load_catalog
from store.actions import StoreActions
from store.sessions import SessionRegistry


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)
    logger.info("Application startup: Logging initialized")

    # The catalog is read once and never mutated
    products = load_catalog(settings.catalog_path)
    app.state.store_actions = StoreActions(products, search_limit=settings.search_result_limit)
    app.state.sessions = SessionRegistry(
        products,
        storage_dir=settings.storage_dir,
        search_limit=settings.search_result_limit,
        max_sessions=settings.max_sessions,
    )
    if settings.storage_dir is None:
        logger.info("STORAGE_DIR not set; carts are kept in memory only")

    yield

    logger.info("Application shutdown")

app = FastAPI(title="Store Pilot AI Shopkeeper", lifespan=lifespan)

from fastapi.middleware.cors import CORSMiddleware

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(app_router)
