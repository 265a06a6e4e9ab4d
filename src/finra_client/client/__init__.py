"""Client package for the FINRA data API.

Provides authentication and client lifecycle management:
- ``credentials``: OAuth2 client-credentials login producing a bearer client
- ``client_cache``: Shared authenticated client with lazy refresh on expiry
- ``finra``: The ``Finra`` entry point exposing the datasets
"""
