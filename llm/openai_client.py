import asyncio
import json
import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from core.config import Settings, get_settings
from core.errors import ExternalServiceError
from llm.base import BaseLLMClient, ToolExecutor
from llm.functions import get_store_tools
from llm.prompts import SYSTEM_PROMPT
from store.commands import link_chain

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I've updated the store for you!"


class OpenAIClient(BaseLLMClient):
    def __init__(self, settings: Optional[Settings] = None, client: Optional[OpenAI] = None):
        settings = settings or get_settings()
        if client is None and not settings.openai_api_key:
            logger.error("OPENAI_API_KEY is missing from environment variables")
            raise ValueError("OPENAI_API_KEY is not set in environment variables.")

        self.model = settings.llm_model
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self.max_function_steps = settings.llm_max_function_steps
        logger.info(f"Initializing OpenAIClient with model: {self.model}")
        self.client = client or OpenAI(api_key=settings.openai_api_key)

    async def _complete(self, messages: list, tools: Optional[list], allow_calls: bool = True):
        kwargs = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto" if allow_calls else "none"
        try:
            response = await asyncio.to_thread(self.client.chat.completions.create, **kwargs)
        except OpenAIError as e:
            logger.error(f"Error calling OpenAI API: {e}")
            raise ExternalServiceError(f"Chat completion failed: {e}") from e
        return response.choices[0].message

    @staticmethod
    def _parse_arguments(tool_call) -> dict:
        raw = tool_call.function.arguments or "{}"
        try:
            args = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Malformed arguments for {tool_call.function.name}: {raw!r}")
            raise ExternalServiceError(f"Malformed arguments for {tool_call.function.name}") from e
        if not isinstance(args, dict):
            raise ExternalServiceError(f"Arguments for {tool_call.function.name} are not an object")
        return args

    async def generate_response(
        self,
        message: str,
        conversation_history: list = None,
        tool_executor: Optional[ToolExecutor] = None,
    ) -> dict:
        messages = [{"role": "system", "content": SYSTEM_PROMPT}]
        if conversation_history:
            messages.extend(conversation_history)
        messages.append({"role": "user", "content": message})

        tools = get_store_tools() if tool_executor else None
        logger.info(f"Sending request to OpenAI with {len(tools or [])} tools")

        executed = []  # (name, params), oldest first
        steps = 0
        response_message = await self._complete(messages, tools)

        while tool_executor and response_message.tool_calls and steps < self.max_function_steps:
            messages.append({
                "role": "assistant",
                "content": response_message.content,
                "tool_calls": [
                    {
                        "id": tool_call.id,
                        "type": "function",
                        "function": {
                            "name": tool_call.function.name,
                            "arguments": tool_call.function.arguments,
                        },
                    }
                    for tool_call in response_message.tool_calls
                ],
            })

            for tool_call in response_message.tool_calls:
                function_name = tool_call.function.name
                function_args = self._parse_arguments(tool_call)
                logger.info(f"Executing tool: {function_name}")

                result = tool_executor(function_name, function_args)
                if result.get("success"):
                    executed.append((function_name, function_args))
                else:
                    logger.info(f"Tool {function_name} failed: {result.get('error')}")

                messages.append({
                    "tool_call_id": tool_call.id,
                    "role": "tool",
                    "content": json.dumps(result),
                })

            steps += 1
            # Once the step budget is spent, ask for a plain-text reply
            response_message = await self._complete(
                messages, tools, allow_calls=steps < self.max_function_steps
            )

        final_content = response_message.content or FALLBACK_REPLY
        logger.info(f"Raw LLM Content: {final_content}")
        return {
            "message": final_content,
            "executedFunction": link_chain(executed),
        }
