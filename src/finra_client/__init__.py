"""FINRA data API client package.

This package contains an asyncio client for the FINRA REST API with transparent
OAuth2 login and pagination, plus an MCP server exposing the datasets as tools.
"""

# Intentionally do not re-export symbols from submodules to avoid importing
# the server stack and loading the environment at package import time.
# Import ``finra_client.client.finra`` and ``finra_client.models`` directly.

__all__: list[str] = []
