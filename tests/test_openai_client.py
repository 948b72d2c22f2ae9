"""
OpenAIClient against a stubbed completions endpoint.

The stub returns canned assistant messages in order and records the keyword
arguments of every call.
"""

import asyncio
import json
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from core.config import Settings
from core.errors import ExternalServiceError
from llm.openai_client import FALLBACK_REPLY, OpenAIClient
from store.actions import StoreActions


def assistant(content=None, tool_calls=None):
    return SimpleNamespace(content=content, tool_calls=tool_calls)


def tool_call(call_id, name, arguments):
    raw = arguments if isinstance(arguments, str) else json.dumps(arguments)
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=raw))


class StubCompletions:
    def __init__(self, *replies, error=None):
        self.replies = list(replies)
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append({k: v for k, v in kwargs.items() if k != "messages"})
        if self.error:
            raise self.error
        return SimpleNamespace(choices=[SimpleNamespace(message=self.replies.pop(0))])


def make_client(completions, **overrides):
    settings = Settings(openai_api_key="test-key", **overrides)
    stub = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return OpenAIClient(settings=settings, client=stub)


@pytest.fixture
def actions(products):
    return StoreActions(products)


class TestOpenAIClient:
    def test_missing_api_key(self):
        with pytest.raises(ValueError):
            OpenAIClient(settings=Settings(openai_api_key=None))

    def test_plain_reply_without_tools(self):
        completions = StubCompletions(assistant("Hello there!"))
        result = asyncio.run(make_client(completions).generate_response("hi"))
        assert result == {"message": "Hello there!", "executedFunction": None}
        assert "tools" not in completions.calls[0]

    def test_search_then_add_is_chained(self, actions):
        completions = StubCompletions(
            assistant(tool_calls=[tool_call("c1", "searchProducts", {"query": "blue jacket"})]),
            assistant(tool_calls=[tool_call("c2", "addToCart", {"productId": 1})]),
            assistant("Added the Blue Jacket to your cart."),
        )
        result = asyncio.run(make_client(completions).generate_response(
            "add the blue jacket", tool_executor=actions.execute
        ))
        chain = result["executedFunction"]
        assert chain.name == "addToCart"
        assert chain.params == {"productId": 1}
        assert chain.previousFunction.name == "searchProducts"
        assert chain.previousFunction.previousFunction is None
        assert result["message"] == "Added the Blue Jacket to your cart."

    def test_final_call_disables_tools(self, actions):
        completions = StubCompletions(
            assistant(tool_calls=[tool_call("c1", "searchProducts", {"query": "jacket"})]),
            assistant(tool_calls=[tool_call("c2", "addToCart", {"productId": 1})]),
            assistant(None),
        )
        result = asyncio.run(make_client(completions).generate_response(
            "buy a jacket", tool_executor=actions.execute
        ))
        assert [call["tool_choice"] for call in completions.calls] == ["auto", "auto", "none"]
        assert result["message"] == FALLBACK_REPLY

    def test_failed_calls_are_not_chained(self, actions):
        completions = StubCompletions(
            assistant(tool_calls=[tool_call("c1", "addToCart", {"productId": 99})]),
            assistant("Sorry, I couldn't find that product."),
        )
        result = asyncio.run(make_client(completions).generate_response(
            "add product 99", tool_executor=actions.execute
        ))
        assert result["executedFunction"] is None

    def test_malformed_arguments(self, actions):
        completions = StubCompletions(
            assistant(tool_calls=[tool_call("c1", "addToCart", "{productId: 1")]),
        )
        with pytest.raises(ExternalServiceError):
            asyncio.run(make_client(completions).generate_response("add", tool_executor=actions.execute))

    def test_api_error_is_wrapped(self):
        completions = StubCompletions(error=OpenAIError("service unavailable"))
        with pytest.raises(ExternalServiceError):
            asyncio.run(make_client(completions).generate_response("hi"))

    def test_settings_reach_the_request(self):
        completions = StubCompletions(assistant("ok"))
        asyncio.run(make_client(completions, llm_model="gpt-test", llm_max_tokens=50).generate_response("hi"))
        assert completions.calls[0]["model"] == "gpt-test"
        assert completions.calls[0]["max_tokens"] == 50
