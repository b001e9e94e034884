"""External adapters for the Scribe author service.

This package contains all external dependencies (SQLite, PostgreSQL,
Prometheus, HTTP servers, etc.) and provides implementations of the core
port interfaces.

Adapter Organization:

- store/: Repositories for author and post persistence (SQLite, PostgreSQL)
- metrics/: Author creation metrics (Prometheus)
- notification/: Announcements of new authors (stdout, webhook)
- http/: HTTP request handling and server
"""
