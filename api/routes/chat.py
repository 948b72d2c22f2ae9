import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_app_settings, get_llm, get_sessions, get_store_actions
from core.config import Settings
from core.errors import ExternalServiceError
from llm.base import BaseLLMClient
from schemas.chat import ChatRequest, ChatResponse
from store.actions import StoreActions
from store.commands import CommandExecutor
from store.sessions import SessionRegistry

router = APIRouter()
logger = logging.getLogger(__name__)

APOLOGY = "Sorry, I ran into a problem reaching my brain just now. Please try again in a moment."
BUSY_DETAIL = "Still working on your previous message. Please wait for my reply."


@router.post("/", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    sessions: SessionRegistry = Depends(get_sessions),
    actions: StoreActions = Depends(get_store_actions),
    client: Optional[BaseLLMClient] = Depends(get_llm),
    settings: Settings = Depends(get_app_settings),
):
    logger.info(f"Received chat message: {request.message}")
    session = sessions.get(request.sessionId)

    # Two overlapping turns would interleave their cart mutations
    if session.busy:
        logger.warning(f"Session '{request.sessionId}' is busy, rejecting message")
        raise HTTPException(status_code=409, detail=BUSY_DETAIL)

    session.busy = True
    try:
        if client is None:
            return ChatResponse(message=APOLOGY)

        history = [m.model_dump() for m in request.conversationHistory]
        history = history[-settings.chat_history_limit:] if settings.chat_history_limit > 0 else []
        try:
            response_data = await client.generate_response(
                request.message,
                conversation_history=history,
                tool_executor=actions.execute,
            )
        except ExternalServiceError as e:
            logger.error(f"Error generating response: {e}")
            return ChatResponse(message=APOLOGY)

        executed = response_data.get("executedFunction")
        updated_state = None
        if executed is not None:
            results = CommandExecutor(session.store).execute_chain(executed)
            for result in results:
                if not result.get("success"):
                    logger.warning(f"Function could not be applied to the store: {result.get('error')}")
            updated_state = session.store.snapshot()

        logger.info(f"Assistant response: {response_data.get('message', '')}")
        return ChatResponse(
            message=response_data.get("message", ""),
            executedFunction=executed,
            updatedState=updated_state,
        )
    finally:
        session.busy = False
