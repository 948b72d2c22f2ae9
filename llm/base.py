from abc import ABC, abstractmethod
from typing import Callable, Optional

# (function name, arguments) -> JSON-ready result
ToolExecutor = Callable[[str, dict], dict]


class BaseLLMClient(ABC):
    @abstractmethod
    async def generate_response(
        self,
        message: str,
        conversation_history: list = None,
        tool_executor: Optional[ToolExecutor] = None,
    ) -> dict:
        """
        Generate a reply to the message, calling store functions through tool_executor.

        Returns {"message": str, "executedFunction": ExecutedFunction | None}.
        """
        raise NotImplementedError
