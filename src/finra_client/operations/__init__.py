"""Data retrieval helpers shared by all datasets.

- ``pager``: Lazy page-by-page retrieval driven by the ``Record-Total`` header
- ``decoding``: Permissive CSV page decoding into typed records
"""
