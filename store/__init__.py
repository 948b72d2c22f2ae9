from .state import CartLine, Coupon, NegotiationRecord, StoreStateMachine
from .persistence import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from .commands import CommandExecutor, CommandName, ExecutedFunction, flatten_chain, link_chain
from .actions import StoreActions
from .sessions import ChatSession, SessionRegistry

__all__ = [
    "CartLine",
    "Coupon",
    "NegotiationRecord",
    "StoreStateMachine",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "CommandExecutor",
    "CommandName",
    "ExecutedFunction",
    "flatten_chain",
    "link_chain",
    "StoreActions",
    "ChatSession",
    "SessionRegistry",
]
