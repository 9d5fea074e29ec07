"""Application state store, the single owner of the journey aggregate.

The store holds one ``AppState`` for the process lifetime. It starts from
the documented default, loads a persisted blob once, and after that load
has finished persists the whole aggregate after every dispatched action.
Storage failures are logged and never propagate to callers.
"""

from __future__ import annotations

import asyncio
import logging

from korastor.core.storage import KeyValueStore
from korastor.domains.cessation.domain_logic.models import AppState, default_app_state
from korastor.domains.cessation.state.actions import Action, LoadState, reduce
from korastor.domains.cessation.state.serializer import StateDecodeError, StateSerializer

logger = logging.getLogger(__name__)

STATE_KEY = "korastor_app_state"
HEALTH_SYSTEMS_KEY = "korastor_health_systems"


class AppStateStore:
    """Holds, mutates and persists the journey state.

    Usage::

        store = AppStateStore(InMemoryKeyValueStore())
        await store.load()
        await store.dispatch(SetUserProfile(profile))
        store.state.user_profile
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        serializer: StateSerializer | None = None,
        *,
        state_key: str = STATE_KEY,
        health_systems_key: str = HEALTH_SYSTEMS_KEY,
    ) -> None:
        self._kv = kv_store
        self._serializer = serializer or StateSerializer()
        self._state_key = state_key
        self._health_systems_key = health_systems_key
        self._state = default_app_state()
        self._load_done: asyncio.Event | None = None
        self._loaded = False

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def is_loading(self) -> bool:
        """True until the initial load has finished, successfully or not."""
        return not self._loaded

    @property
    def encrypted(self) -> bool:
        return self._serializer.encrypted

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """Replace the in-memory state with the persisted blob, if any.

        Returns True if a stored state was applied. On a missing or
        unreadable blob the current (default) state stands. A caller that
        arrives while the load is in flight waits for it and gets False.
        """
        if self._loaded:
            return False
        if self._load_done is not None:
            await self._load_done.wait()
            return False

        self._load_done = asyncio.Event()
        try:
            return await self._read()
        finally:
            self._loaded = True
            self._load_done.set()

    async def _read(self) -> bool:
        try:
            blob = await self._kv.get(self._state_key)
            if not blob:
                logger.info("No persisted app state under %s; using defaults", self._state_key)
                return False
            self._state = reduce(self._state, LoadState(self._serializer.load_state(blob)))
        except StateDecodeError as exc:
            logger.warning("Discarding unreadable app state: %s", exc)
            await self._discard(self._state_key)
            return False
        except Exception:
            logger.exception("Failed to load app state")
            return False
        logger.info("Loaded persisted app state from %s", self._state_key)
        return True

    async def _discard(self, key: str) -> None:
        try:
            await self._kv.delete(key)
        except Exception:
            logger.exception("Failed to delete unreadable blob %s", key)

    async def ensure_loaded(self) -> None:
        """Return once the initial load has finished, starting it if needed."""
        if not self._loaded:
            await self.load()

    async def flush(self) -> bool:
        """Persist the current state; called on shutdown."""
        ok = await self.save()
        if ok:
            logger.info("App state flushed")
        return ok

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    async def dispatch(self, action: Action) -> AppState:
        """Apply ``action`` and persist the result (best effort)."""
        self._state = reduce(self._state, action)
        logger.debug("Dispatched %s", type(action).__name__)
        if self._loaded:
            await self._persist()
        return self._state

    async def save(self) -> bool:
        """Persist the current state. Never writes before the initial load."""
        if not self._loaded:
            logger.debug("Skipping save: initial load has not finished")
            return False
        return await self._persist()

    async def _persist(self) -> bool:
        state = self._state
        try:
            await self._kv.set(self._state_key, self._serializer.dump_state(state))
            await self._kv.set(
                self._health_systems_key,
                self._serializer.dump_health_systems(state.health_systems),
            )
        except Exception:
            logger.exception("Failed to save app state")
            return False
        return True
