from typing import Literal

from pydantic import BaseModel, Field

from store.commands import ExecutedFunction


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, description="The user's chat message.", examples=["Find me a blue jacket"])
    conversationHistory: list[ChatMessage] = Field(default_factory=list, description="Earlier turns, oldest first.")
    sessionId: str | None = Field(None, description="Shopping session (cart) identifier.", examples=["a1b2c3d4"])


class ChatResponse(BaseModel):
    message: str = Field(..., description="The shopkeeper's reply.")
    executedFunction: ExecutedFunction | None = Field(
        None, description="Last function executed this turn, linked to earlier ones via previousFunction."
    )
    updatedState: dict | None = Field(None, description="Store state after the functions were applied.")
