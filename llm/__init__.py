from .base import BaseLLMClient, ToolExecutor
from .factory import get_llm_client

__all__ = ["BaseLLMClient", "ToolExecutor", "get_llm_client"]
