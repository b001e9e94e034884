"""Repository adapters for author and post persistence.

Implementations support multiple backends:
- SQLite (zero-config, single-file)
- PostgreSQL (distributed, scalable)
"""
