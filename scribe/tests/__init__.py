"""Test suite for the Scribe author service.

Organized into four categories:

1. core/: Unit tests for core domain logic
   - Minimal dependencies, fast execution
   - Uses in-memory fakes for ports

2. adapters/: Integration tests for adapter implementations
   - Tests against real SQLite files or mocked external systems
   - Validates constraint-to-domain-error translation

3. integration/: End-to-end HTTP workflows against a live server

4. fakes/: Port implementations for testing
   - In-memory implementations of AuthorRepository, AuthorMetrics, etc.
   - Used by core unit tests
"""
