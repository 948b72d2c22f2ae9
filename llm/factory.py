from core.config import get_settings

from .base import BaseLLMClient
from .openai_client import OpenAIClient


def get_llm_client() -> BaseLLMClient:
    """
    Factory function to get the LLM client instance.
    For now, it defaults to OpenAIClient.
    """
    return OpenAIClient(settings=get_settings())
