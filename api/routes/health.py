from fastapi import APIRouter, Request

import logging

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/health", tags=["Health"])
async def health_check(request: Request):
    logger.info("Health check endpoint called")
    return {
        "status": "ok",
        "products": len(request.app.state.store_actions.products),
        "sessions": len(request.app.state.sessions),
    }
