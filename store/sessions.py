import logging
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

from catalog.models import Product
from store.persistence import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from store.state import StoreStateMachine

logger = logging.getLogger(__name__)

ANONYMOUS_SESSION = "anonymous"
DEFAULT_MAX_SESSIONS = 1000


@dataclass
class ChatSession:
    store: StoreStateMachine
    busy: bool = False


class SessionRegistry:
    """
    One store per chat session.

    Lives on app.state and is handed to the chat route as a dependency. At
    most `max_sessions` are kept; the least recently used idle session is
    dropped first. With a storage_dir its cart and coupon come back from disk
    when the session returns.
    """

    def __init__(
        self,
        products: Sequence[Product],
        storage_dir: Optional[Path] = None,
        search_limit: int = 8,
        store_factory: Optional[Callable[[str], StoreStateMachine]] = None,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ):
        self.products = tuple(products)
        self.storage_dir = storage_dir
        self.search_limit = search_limit
        self.max_sessions = max_sessions
        self._store_factory = store_factory or self._default_store
        self._sessions: OrderedDict[str, ChatSession] = OrderedDict()

    def _storage_for(self, session_id: str) -> KeyValueStore:
        if self.storage_dir is None:
            return InMemoryKeyValueStore()
        return JsonFileKeyValueStore(self.storage_dir, namespace=session_id)

    def _default_store(self, session_id: str) -> StoreStateMachine:
        return StoreStateMachine(
            self.products,
            storage=self._storage_for(session_id),
            search_limit=self.search_limit,
        )

    def _evict(self):
        while len(self._sessions) >= self.max_sessions:
            idle = next((sid for sid, s in self._sessions.items() if not s.busy), None)
            if idle is None:
                break
            logger.info(f"Dropping idle store session '{idle}'")
            del self._sessions[idle]

    def get(self, session_id: Optional[str]) -> ChatSession:
        session_id = session_id or ANONYMOUS_SESSION
        session = self._sessions.get(session_id)
        if session is None:
            self._evict()
            logger.info(f"Starting store session '{session_id}'")
            session = ChatSession(store=self._store_factory(session_id))
            self._sessions[session_id] = session
        else:
            self._sessions.move_to_end(session_id)
        return session

    def __len__(self):
        return len(self._sessions)

    def __contains__(self, session_id):
        return session_id in self._sessions
