"""Fake/mock implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without external dependencies:

- FakeAuthorRepository: In-memory author persistence with name uniqueness
- FakePostRepository: In-memory post persistence checking author ids
- FakeAuthorMetrics: Counted success/failure recordings
- FakeAuthorNotifier: Captured notifications for assertion
- FakeAuthorService / FakePostService: Canned driving-port responses
"""

from .metrics import FakeAuthorMetrics
from .notification import FakeAuthorNotifier
from .repository import FakeAuthorRepository, FakePostRepository
from .service import FakeAuthorService, FakePostService

__all__ = [
    "FakeAuthorMetrics",
    "FakeAuthorNotifier",
    "FakeAuthorRepository",
    "FakeAuthorService",
    "FakePostRepository",
    "FakePostService",
]
