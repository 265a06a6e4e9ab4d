"""Entry point for the FINRA MCP server.

This module wires together the FastMCP app and registers tools. The FINRA
client itself lives in ``finra_client.client``; the server only exposes it.

Registered tools:
- ``query_short_interest``: query consolidated short interest records
"""

import logging
import os
import signal
import sys
from types import SimpleNamespace

from fastmcp import FastMCP

from .client.finra import Finra
from .config import FinraConfig
from .tools.query_short_interest import register as register_query_short_interest

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(name)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("finra_client.server")

app = FastMCP(
    name="finra-client",
    instructions="Expose tools that query FINRA datasets such as the consolidated short interest.",
)

_finra: Finra | None = None


def get_finra() -> Finra:
    """Return the process-wide ``Finra`` instance, creating it from the environment on first use."""
    global _finra  # noqa: PLW0603
    if _finra is None:
        _finra = Finra.from_config(FinraConfig.from_env())
    return _finra


def _register_capabilities() -> None:
    """Register tools with the app instance."""
    deps = SimpleNamespace(get_finra=get_finra)
    register_query_short_interest(app, deps=deps)


# Register all capabilities with the app instance (after function is defined)
_register_capabilities()


def handle_interrupt(signum: int, frame: object) -> None:  # noqa: ARG001
    """Handle keyboard interrupt gracefully."""
    logger.info("Received interrupt signal, shutting down...")
    sys.exit(0)


def main() -> None:
    """Entry point for the finra-mcp console script."""
    signal.signal(signal.SIGINT, handle_interrupt)
    signal.signal(signal.SIGTERM, handle_interrupt)
    app.run()


__all__ = ["app", "get_finra", "handle_interrupt", "main"]


if __name__ == "__main__":
    main()
