"""Granola local cache MCP server: FastMCP v2 implementation."""

import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from .cache import CacheReader
from .config import Config
from .repository import CacheRepository
from .sync_state import InMemorySyncStateStore, JsonFileSyncStateStore, SyncStateStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Lifespan: configure logging and build the repository
# ---------------------------------------------------------------------------


def build_repository(config: Config) -> CacheRepository:
    sync_state: SyncStateStore
    if config.sync_state_path:
        sync_state = JsonFileSyncStateStore(config.sync_state_path)
    else:
        sync_state = InMemorySyncStateStore()
    return CacheRepository(CacheReader(config.cache_path), sync_state)


@asynccontextmanager
async def lifespan(server: FastMCP):
    config = Config()
    logging.basicConfig(level=config.log_level.upper())
    logger.info("Serving Granola cache from %s", config.cache_path)

    yield {
        "config": config,
        "repository": build_repository(config),
    }


# ---------------------------------------------------------------------------
# Server instance
# ---------------------------------------------------------------------------

mcp = FastMCP("granola-localcache", lifespan=lifespan)

# Importing tool modules triggers @mcp.tool() registration
from granola_localcache.tools import meeting_ops  # noqa: E402, F401

# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    mcp.run()
