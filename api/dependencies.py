import logging
from typing import Optional

from fastapi import Request

from core.config import Settings, get_settings
from llm.base import BaseLLMClient
from llm.factory import get_llm_client
from store.actions import StoreActions
from store.sessions import SessionRegistry

logger = logging.getLogger(__name__)


def get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_store_actions(request: Request) -> StoreActions:
    return request.app.state.store_actions


def get_llm(request: Request) -> Optional[BaseLLMClient]:
    """The shared chat-model client, or None when it cannot be configured."""
    client = getattr(request.app.state, "llm_client", None)
    if client is None:
        try:
            client = get_llm_client()
        except ValueError as e:
            logger.error(f"LLM client unavailable: {e}")
            return None
        request.app.state.llm_client = client
    return client


def get_app_settings() -> Settings:
    return get_settings()
