import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.dependencies import get_sessions, get_store_actions
from store.actions import StoreActions
from store.sessions import SessionRegistry

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/products")
async def list_products(actions: StoreActions = Depends(get_store_actions)):
    """The read-only catalog."""
    return [p.model_dump(mode="json") for p in actions.products]


@router.get("/state")
async def store_state(sessionId: Optional[str] = None, sessions: SessionRegistry = Depends(get_sessions)):
    """Current store state of a session, e.g. a cart restored from storage."""
    logger.info(f"State requested for session '{sessionId}'")
    return sessions.get(sessionId).store.snapshot()
