"""Korastor MCP Server — application factory.

This module provides:
- create_context() to build the single owner of the journey state
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from fastmcp import FastMCP

from korastor.core.clock import Clock, SystemClock
from korastor.core.config.settings import Settings, get_settings
from korastor.core.storage import KeyValueStore
from korastor.core.storage.database import StateDatabase
from korastor.core.storage.encryption import BlobEncryptor, EncryptionError
from korastor.core.storage.kv_store import InMemoryKeyValueStore, SQLiteKeyValueStore
from korastor.domains.cessation.cravings.dampener import CravingDampener
from korastor.domains.cessation.domain_logic.catalog import (
    load_craving_tasks,
    load_trigger_advice,
)
from korastor.domains.cessation.onboarding.draft import OnboardingDraft
from korastor.domains.cessation.state.serializer import StateSerializer
from korastor.domains.cessation.state.store import AppStateStore
from korastor.domains.cessation.tools.craving_tools import register_craving_tools
from korastor.domains.cessation.tools.journey_tools import register_journey_tools
from korastor.domains.cessation.tools.onboarding_tools import register_onboarding_tools

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@dataclass
class AppContext:
    """Everything the tools share, created once per process."""

    settings: Settings
    store: AppStateStore
    clock: Clock
    draft: OnboardingDraft
    dampener: CravingDampener
    trigger_advice: dict[str, str]
    database: StateDatabase | None = None

    async def shutdown(self) -> None:
        """Flush state to storage and release the database."""
        await self.store.flush()
        if self.database is not None:
            self.database.close()


def create_context(
    settings: Settings | None = None,
    *,
    kv_store_override: KeyValueStore | None = None,
    clock_override: Clock | None = None,
    rng: random.Random | None = None,
) -> AppContext:
    """Wire storage, clock, draft and craving catalog together."""
    settings = settings or get_settings()

    # --- Storage ---
    database: StateDatabase | None = None
    if kv_store_override is not None:
        kv_store = kv_store_override
    elif settings.db_path == ":memory:":
        kv_store = InMemoryKeyValueStore()
        logger.info("Using in-memory state store; progress will not survive a restart")
    else:
        database = StateDatabase(settings.db_path)
        database.initialize()
        kv_store = SQLiteKeyValueStore(database)
        logger.info(
            "State bank initialized: %s (schema v%d)",
            settings.db_path,
            database.get_schema_version(),
        )

    # --- Encryption (optional) ---
    encryptor: BlobEncryptor | None = None
    if settings.encryption_key:
        try:
            encryptor = BlobEncryptor(settings.encryption_key)
        except EncryptionError as exc:
            logger.error("Invalid ENCRYPTION_KEY: %s", exc)
            logger.warning("Continuing with unencrypted state blobs")
    else:
        logger.info("No ENCRYPTION_KEY configured; state blobs are stored as plain JSON")

    store = AppStateStore(
        kv_store,
        StateSerializer(encryptor),
        state_key=settings.state_key,
        health_systems_key=settings.health_systems_key,
    )

    return AppContext(
        settings=settings,
        store=store,
        clock=clock_override or SystemClock(),
        draft=OnboardingDraft(),
        dampener=CravingDampener(load_craving_tasks(), rng=rng),
        trigger_advice=load_trigger_advice(),
        database=database,
    )


def create_app(
    *,
    context: AppContext | None = None,
    kv_store_override: KeyValueStore | None = None,
    clock_override: Clock | None = None,
) -> FastMCP:
    """Create and configure the Korastor MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Builds (or accepts) the shared AppContext
    3. Registers onboarding, journey and craving tools
    """
    if context is None:
        context = create_context(
            kv_store_override=kv_store_override,
            clock_override=clock_override,
        )
    settings = context.settings
    store = context.store

    # --- Server instance ---
    server = FastMCP(
        "Korastor",
        instructions=(
            "Korastor — nicotine cessation companion. Tracks time since quitting, "
            "money saved, life regained and simulated health recovery, logs "
            "slip-ups with reflection, and awards points for riding out cravings."
        ),
    )

    # --- Register tools ---
    @server.tool
    async def health_check() -> dict:
        """Check server health and return basic status information."""
        await store.ensure_loaded()
        return {
            "status": "ok",
            "server": "Korastor",
            "version": VERSION,
            "journey_active": store.state.user_profile is not None,
            "storage": "sqlite" if context.database is not None else "memory",
            "encrypted": store.encrypted,
        }

    register_onboarding_tools(server, store, context.draft, context.clock)
    logger.info("Onboarding tools registered")

    register_journey_tools(
        server,
        store,
        context.clock,
        trigger_advice=context.trigger_advice,
        currency_locale=settings.currency_locale,
    )
    logger.info("Journey tools registered")

    register_craving_tools(
        server,
        store,
        context.dampener,
        context.clock,
        points_per_craving=settings.points_per_craving,
    )
    logger.info("Craving dampener tools registered")

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
