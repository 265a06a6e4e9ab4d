"""Tools package for the MCP server.

Contains MCP tool registration modules:
- ``query_short_interest``: Query FINRA consolidated short interest records
"""
