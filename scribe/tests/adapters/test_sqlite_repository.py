"""Integration tests for the SQLite repository adapter."""

import asyncio
import sqlite3
import uuid
from pathlib import Path
from unittest.mock import AsyncMock

import aiosqlite
import pytest

from scribe.adapters.store.sqlite import (
    SQLiteRepository,
    is_foreign_key_violation,
    is_unique_constraint_violation,
    sqlite_path_from_url,
)
from scribe.core.errors import (
    AuthorNotFoundError,
    DuplicateAuthorError,
    UnknownAuthorError,
    UnknownPostError,
)
from scribe.core.models import (
    AuthorName,
    CreateAuthorRequest,
    CreatePostRequest,
    EmailAddress,
    PostTitle,
)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "scribe.db"


@pytest.fixture
async def repo(db_path: Path) -> SQLiteRepository:
    """Create a SQLite repository backed by a temporary database file."""
    repository = SQLiteRepository(db_path=str(db_path))
    yield repository
    await repository.close_pool()


def count_rows(db_path: Path, sql: str, params: tuple = ()) -> int:
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute(sql, params).fetchone()[0]
    finally:
        conn.close()


def request(name: str, email: str | None = None) -> CreateAuthorRequest:
    return CreateAuthorRequest(
        name=AuthorName(name),
        email=EmailAddress(email) if email is not None else None,
    )


class CommitFailingConnection:
    """Wraps a real connection and fails every COMMIT."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def execute(self, sql: str, parameters=None):
        if sql == "COMMIT":
            raise sqlite3.OperationalError("disk I/O error")
        return await self._conn.execute(sql, parameters)

    @property
    def in_transaction(self) -> bool:
        return self._conn.in_transaction

    async def close(self) -> None:
        await self._conn.close()


# ============================================================================
# Author creation
# ============================================================================


class TestCreateAuthor:
    """Tests for SQLiteRepository.create_author."""

    @pytest.mark.asyncio
    async def test_creates_author_row(self, repo: SQLiteRepository, db_path: Path) -> None:
        author = await repo.create_author(request("  Angus  "))

        assert isinstance(author.id, uuid.UUID)
        assert author.id.version == 4
        assert str(author.name) == "Angus"
        assert count_rows(
            db_path,
            "SELECT COUNT(*) FROM authors WHERE id = ? AND name = ?",
            (str(author.id), "Angus"),
        ) == 1

    @pytest.mark.asyncio
    async def test_stores_email(self, repo: SQLiteRepository, db_path: Path) -> None:
        author = await repo.create_author(request("Bon", "bon@example.com"))

        conn = sqlite3.connect(db_path)
        try:
            row = conn.execute(
                "SELECT email FROM authors WHERE id = ?", (str(author.id),)
            ).fetchone()
        finally:
            conn.close()
        assert row == ("bon@example.com",)
        assert author.email == EmailAddress("bon@example.com")

    @pytest.mark.asyncio
    async def test_missing_email_stored_as_null(
        self, repo: SQLiteRepository, db_path: Path
    ) -> None:
        await repo.create_author(request("Angus"))
        assert count_rows(db_path, "SELECT COUNT(*) FROM authors WHERE email IS NULL") == 1

    @pytest.mark.asyncio
    async def test_duplicate_name_raises_and_leaves_one_row(
        self, repo: SQLiteRepository, db_path: Path
    ) -> None:
        first = await repo.create_author(request("Angus"))

        with pytest.raises(DuplicateAuthorError) as exc_info:
            await repo.create_author(request("Angus"))

        assert exc_info.value.name == AuthorName("Angus")
        assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)
        assert count_rows(db_path, "SELECT COUNT(*) FROM authors") == 1
        assert count_rows(
            db_path, "SELECT COUNT(*) FROM authors WHERE id = ?", (str(first.id),)
        ) == 1

    @pytest.mark.asyncio
    async def test_duplicate_after_trimming(self, repo: SQLiteRepository) -> None:
        await repo.create_author(request("Angus"))
        with pytest.raises(DuplicateAuthorError):
            await repo.create_author(request("   Angus "))

    @pytest.mark.asyncio
    async def test_names_are_case_sensitive(self, repo: SQLiteRepository) -> None:
        await repo.create_author(request("Angus"))
        await repo.create_author(request("angus"))

    @pytest.mark.asyncio
    async def test_repository_usable_after_duplicate(
        self, repo: SQLiteRepository, db_path: Path
    ) -> None:
        await repo.create_author(request("Angus"))
        with pytest.raises(DuplicateAuthorError):
            await repo.create_author(request("Angus"))

        await repo.create_author(request("Malcolm"))
        assert count_rows(db_path, "SELECT COUNT(*) FROM authors") == 2

    @pytest.mark.asyncio
    async def test_data_survives_new_repository_instance(self, db_path: Path) -> None:
        first = SQLiteRepository(db_path=str(db_path))
        await first.create_author(request("Angus"))
        await first.close_pool()

        second = SQLiteRepository(db_path=str(db_path))
        try:
            with pytest.raises(DuplicateAuthorError):
                await second.create_author(request("Angus"))
        finally:
            await second.close_pool()


class TestConcurrentCreates:
    """Uniqueness is enforced by the store under concurrent writers."""

    @pytest.mark.asyncio
    async def test_same_name_exactly_one_succeeds(
        self, repo: SQLiteRepository, db_path: Path
    ) -> None:
        results = await asyncio.gather(
            *(repo.create_author(request("Angus")) for _ in range(10)),
            return_exceptions=True,
        )

        successes = [r for r in results if not isinstance(r, BaseException)]
        duplicates = [r for r in results if isinstance(r, DuplicateAuthorError)]
        assert len(successes) == 1
        assert len(duplicates) == 9
        assert count_rows(db_path, "SELECT COUNT(*) FROM authors WHERE name = 'Angus'") == 1

    @pytest.mark.asyncio
    async def test_distinct_names_all_succeed(
        self, repo: SQLiteRepository, db_path: Path
    ) -> None:
        names = [f"Author {i}" for i in range(10)]

        authors = await asyncio.gather(*(repo.create_author(request(n)) for n in names))

        assert sorted(str(a.name) for a in authors) == sorted(names)
        assert len({a.id for a in authors}) == 10
        assert count_rows(db_path, "SELECT COUNT(*) FROM authors") == 10


class TestStorageFailures:
    """Failures unrelated to uniqueness surface as UnknownAuthorError."""

    @pytest.mark.asyncio
    async def test_dropped_connection_is_unknown_not_duplicate(
        self, repo: SQLiteRepository, db_path: Path
    ) -> None:
        await repo.create_author(request("Angus"))

        dropped = await aiosqlite.connect(str(db_path))
        await dropped.close()
        repo._get_connection = AsyncMock(return_value=dropped)  # type: ignore[method-assign]

        with pytest.raises(UnknownAuthorError) as exc_info:
            await repo.create_author(request("Angus"))

        assert not isinstance(exc_info.value, DuplicateAuthorError)
        assert str(exc_info.value) == "failed to start transaction"

    @pytest.mark.asyncio
    async def test_connect_failure_is_unknown(self, repo: SQLiteRepository) -> None:
        await repo.create_author(request("Angus"))
        repo._get_connection = AsyncMock(  # type: ignore[method-assign]
            side_effect=sqlite3.OperationalError("unable to open database file")
        )

        with pytest.raises(UnknownAuthorError) as exc_info:
            await repo.create_author(request("Bon"))

        assert isinstance(exc_info.value.cause, sqlite3.OperationalError)

    @pytest.mark.asyncio
    async def test_commit_failure_is_unknown_and_rolled_back(
        self, repo: SQLiteRepository, db_path: Path
    ) -> None:
        await repo.create_author(request("Angus"))
        real_conn = await repo._get_connection()
        repo._get_connection = AsyncMock(  # type: ignore[method-assign]
            return_value=CommitFailingConnection(real_conn)
        )

        with pytest.raises(UnknownAuthorError) as exc_info:
            await repo.create_author(request("Bon"))

        assert str(exc_info.value) == "failed to commit transaction"
        assert count_rows(db_path, "SELECT COUNT(*) FROM authors WHERE name = 'Bon'") == 0

    @pytest.mark.asyncio
    async def test_cancelled_while_waiting_for_lock_does_not_poison_pool(
        self, db_path: Path
    ) -> None:
        # Cancellation waits for the pending BEGIN, bounded by the busy timeout
        repo = SQLiteRepository(db_path=str(db_path), busy_timeout=1.0)
        await repo.create_author(request("Malcolm"))

        blocker = sqlite3.connect(db_path, isolation_level=None)
        blocker.execute("BEGIN IMMEDIATE")
        try:
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(repo.create_author(request("Angus")), 0.2)
        finally:
            blocker.execute("ROLLBACK")
            blocker.close()

        try:
            await repo.create_author(request("Bon"))
            assert all(not conn.in_transaction for conn in repo._pool)
        finally:
            await repo.close_pool()

        assert count_rows(db_path, "SELECT COUNT(*) FROM authors WHERE name = 'Bon'") == 1
        assert count_rows(db_path, "SELECT COUNT(*) FROM authors WHERE name = 'Angus'") == 0

    @pytest.mark.asyncio
    async def test_schema_failure_is_unknown(self, tmp_path: Path) -> None:
        # A directory where the database file should be cannot be opened
        db_dir = tmp_path / "scribe.db"
        db_dir.mkdir()
        repository = SQLiteRepository(db_path=str(db_dir))

        with pytest.raises(UnknownAuthorError):
            await repository.create_author(request("Angus"))

        await repository.close_pool()


# ============================================================================
# Post creation
# ============================================================================


class TestCreatePost:
    """Tests for SQLiteRepository.create_post."""

    @pytest.mark.asyncio
    async def test_creates_post_for_existing_author(
        self, repo: SQLiteRepository, db_path: Path
    ) -> None:
        author = await repo.create_author(request("Angus"))

        post = await repo.create_post(
            CreatePostRequest(title=PostTitle(" Riffs "), content="Body", author_id=author.id)
        )

        assert post.author_id == author.id
        assert str(post.title) == "Riffs"
        assert count_rows(
            db_path,
            "SELECT COUNT(*) FROM posts WHERE id = ? AND author_id = ?",
            (str(post.id), str(author.id)),
        ) == 1

    @pytest.mark.asyncio
    async def test_unknown_author_raises_and_writes_nothing(
        self, repo: SQLiteRepository, db_path: Path
    ) -> None:
        missing = uuid.uuid4()

        with pytest.raises(AuthorNotFoundError) as exc_info:
            await repo.create_post(
                CreatePostRequest(title=PostTitle("Riffs"), content="", author_id=missing)
            )

        assert exc_info.value.author_id == missing
        assert count_rows(db_path, "SELECT COUNT(*) FROM posts") == 0

    @pytest.mark.asyncio
    async def test_connect_failure_is_unknown(self, repo: SQLiteRepository) -> None:
        author = await repo.create_author(request("Angus"))
        repo._get_connection = AsyncMock(  # type: ignore[method-assign]
            side_effect=sqlite3.OperationalError("unable to open database file")
        )

        with pytest.raises(UnknownPostError):
            await repo.create_post(
                CreatePostRequest(title=PostTitle("Riffs"), content="", author_id=author.id)
            )


# ============================================================================
# Constraint classification and URL parsing
# ============================================================================


class TestConstraintPredicates:
    """The predicates key on SQLite's extended result codes."""

    @pytest.fixture
    def conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(":memory:")
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("CREATE TABLE a (id TEXT PRIMARY KEY, name TEXT UNIQUE NOT NULL)")
        conn.execute("CREATE TABLE b (id TEXT PRIMARY KEY, a_id TEXT NOT NULL REFERENCES a(id))")
        conn.execute("INSERT INTO a VALUES ('1', 'Angus')")
        yield conn
        conn.close()

    def _error_from(self, conn: sqlite3.Connection, sql: str) -> sqlite3.IntegrityError:
        with pytest.raises(sqlite3.IntegrityError) as exc_info:
            conn.execute(sql)
        return exc_info.value

    def test_unique_violation(self, conn: sqlite3.Connection) -> None:
        error = self._error_from(conn, "INSERT INTO a VALUES ('2', 'Angus')")
        assert is_unique_constraint_violation(error)
        assert not is_foreign_key_violation(error)

    def test_primary_key_violation_is_not_unique_violation(
        self, conn: sqlite3.Connection
    ) -> None:
        error = self._error_from(conn, "INSERT INTO a VALUES ('1', 'Bon')")
        assert not is_unique_constraint_violation(error)

    def test_not_null_violation_is_not_unique_violation(
        self, conn: sqlite3.Connection
    ) -> None:
        error = self._error_from(conn, "INSERT INTO a VALUES ('3', NULL)")
        assert not is_unique_constraint_violation(error)

    def test_foreign_key_violation(self, conn: sqlite3.Connection) -> None:
        error = self._error_from(conn, "INSERT INTO b VALUES ('1', 'missing')")
        assert is_foreign_key_violation(error)
        assert not is_unique_constraint_violation(error)

    def test_other_exceptions(self) -> None:
        assert not is_unique_constraint_violation(ValueError("Connection closed"))
        assert not is_unique_constraint_violation(sqlite3.OperationalError("database is locked"))


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("sqlite:///var/lib/scribe.db", "var/lib/scribe.db"),
        ("sqlite:////var/lib/scribe.db", "/var/lib/scribe.db"),
        ("sqlite://data/scribe.db", "data/scribe.db"),
        ("sqlite:data/scribe.db?mode=rwc", "data/scribe.db"),
        ("data/scribe.db", "data/scribe.db"),
    ],
)
def test_sqlite_path_from_url(url: str, expected: str) -> None:
    assert sqlite_path_from_url(url) == expected


def test_sqlite_path_from_url_rejects_empty_path() -> None:
    with pytest.raises(ValueError):
        sqlite_path_from_url("sqlite://")
