"""SQLite repository adapter.

Implements AuthorRepository and PostRepository using SQLite with aiosqlite
for async access. Name uniqueness and author references are enforced by
the schema (UNIQUE and FOREIGN KEY constraints); this module only
translates the resulting constraint violations into domain errors.
"""

import asyncio
import logging
import sqlite3
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from scribe.core.errors import (
    AuthorNotFoundError,
    DuplicateAuthorError,
    UnknownAuthorError,
    UnknownPostError,
)
from scribe.core.models import Author, CreateAuthorRequest, CreatePostRequest, Post
from scribe.core.ports import AuthorRepository, PostRepository

logger = logging.getLogger(__name__)

# Extended result codes, see https://www.sqlite.org/rescode.html
SQLITE_CONSTRAINT_UNIQUE = 2067
SQLITE_CONSTRAINT_FOREIGNKEY = 787

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS authors (
        id TEXT PRIMARY KEY,
        name TEXT UNIQUE NOT NULL,
        email TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS posts (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        content TEXT NOT NULL,
        author_id TEXT NOT NULL REFERENCES authors(id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_posts_author_id ON posts(author_id)",
)


def is_unique_constraint_violation(error: BaseException) -> bool:
    """Return True if error is SQLite's UNIQUE constraint violation.

    PRIMARY KEY collisions carry a different extended code and are not
    treated as duplicates.
    """
    return (
        isinstance(error, sqlite3.IntegrityError)
        and getattr(error, "sqlite_errorcode", None) == SQLITE_CONSTRAINT_UNIQUE
    )


def is_foreign_key_violation(error: BaseException) -> bool:
    """Return True if error is SQLite's FOREIGN KEY constraint violation."""
    return (
        isinstance(error, sqlite3.IntegrityError)
        and getattr(error, "sqlite_errorcode", None) == SQLITE_CONSTRAINT_FOREIGNKEY
    )


def sqlite_path_from_url(database_url: str) -> str:
    """Extract the database file path from a SQLite URL.

    Accepts ``sqlite:///abs/or/rel.db``, ``sqlite://path.db``,
    ``sqlite:path.db`` and plain file paths. Query parameters are dropped.

    Raises:
        ValueError: If no path remains.
    """
    path = database_url
    for prefix in ("sqlite:///", "sqlite://", "sqlite:"):
        if path.startswith(prefix):
            path = path[len(prefix):]
            break
    path = path.split("?", 1)[0]
    if not path:
        raise ValueError(f"invalid database path {database_url!r}")
    return path


class TransactionError(Exception):
    """A transaction could not be opened or committed.

    Adapter-internal: never escapes this module.
    """


class SQLiteRepository(AuthorRepository, PostRepository):
    """SQLite-backed repository with connection pooling and async access.

    Each create runs in its own ``BEGIN IMMEDIATE`` transaction on a pooled
    connection. Connections wait up to ``busy_timeout`` seconds for the
    write lock, so concurrent writers are serialized by SQLite rather than
    failing with "database is locked".
    """

    def __init__(self, db_path: str, pool_size: int = 5, busy_timeout: float = 5.0):
        """Initialize SQLite repository with connection pooling.

        Args:
            db_path: Path to SQLite database file.
            pool_size: Number of idle connections to keep in the pool.
            busy_timeout: Seconds a connection waits for a lock.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._pool: list[aiosqlite.Connection] = []
        self._pool_lock = asyncio.Lock()
        self._pool_size = pool_size
        self._busy_timeout = busy_timeout
        self._schema_lock = asyncio.Lock()
        self._schema_initialized = False

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get a connection from the pool or create a new one."""
        async with self._pool_lock:
            if self._pool:
                return self._pool.pop()

        # Autocommit mode: transactions are opened explicitly
        conn = await aiosqlite.connect(
            str(self.db_path),
            timeout=self._busy_timeout,
            isolation_level=None,
        )
        try:
            await conn.execute("PRAGMA foreign_keys = ON")
        except Exception:
            await self._discard_connection(conn)
            raise
        return conn

    async def _return_connection(self, conn: aiosqlite.Connection) -> None:
        """Return a connection to the pool."""
        async with self._pool_lock:
            if len(self._pool) < self._pool_size:
                self._pool.append(conn)
                return
        await conn.close()

    async def _discard_connection(self, conn: aiosqlite.Connection) -> None:
        """Close a connection whose transaction state is unknown."""
        try:
            await conn.close()
        except Exception as e:
            logger.warning(f"Failed to close discarded connection: {e}")

    async def close_pool(self) -> None:
        """Close all pooled connections."""
        async with self._pool_lock:
            for conn in self._pool:
                await conn.close()
            self._pool.clear()

    async def _init_schema(self) -> None:
        """Initialize database schema on first use.

        Only runs once per instance. Subsequent calls are no-ops.
        Uses a dedicated _schema_lock to avoid contention with pool operations.
        """
        if self._schema_initialized:
            return

        async with self._schema_lock:
            if self._schema_initialized:
                return

            conn = await self._get_connection()
            try:
                for statement in _SCHEMA:
                    await conn.execute(statement)
                self._schema_initialized = True
            finally:
                await self._return_connection(conn)

    async def _rollback(self, conn: aiosqlite.Connection) -> bool:
        """Roll back the open transaction.

        Returns:
            True if the connection is clean and may be pooled again.
        """
        try:
            await conn.execute("ROLLBACK")
            return True
        except Exception as e:
            logger.warning(f"Rollback failed, discarding connection: {e}")
            return False

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Run the body in a write transaction on a pooled connection.

        Commits when the body completes, rolls back when it raises.
        Exceptions from the body propagate unchanged; failures to open or
        commit the transaction are raised as TransactionError.
        """
        try:
            conn = await self._get_connection()
        except Exception as e:
            raise TransactionError("failed to open database connection") from e

        reusable = True
        try:
            try:
                await conn.execute("BEGIN IMMEDIATE")
            except Exception as e:
                reusable = False
                raise TransactionError("failed to start transaction") from e
            except BaseException:
                # Cancelled while waiting for the write lock; the worker
                # thread may still open the transaction after we return
                reusable = False
                raise

            try:
                yield conn
            except BaseException:
                reusable = await self._rollback(conn)
                raise

            try:
                await conn.execute("COMMIT")
            except Exception as e:
                # The write may or may not have been applied
                reusable = await self._rollback(conn)
                raise TransactionError("failed to commit transaction") from e
            except BaseException:
                reusable = False
                raise
        finally:
            if reusable and not conn.in_transaction:
                await self._return_connection(conn)
            else:
                await self._discard_connection(conn)

    async def create_author(self, req: CreateAuthorRequest) -> Author:
        """Insert a new author in its own transaction.

        Raises:
            DuplicateAuthorError: If the name is already taken.
            UnknownAuthorError: For any other failure.
        """
        try:
            await self._init_schema()
        except Exception as e:
            raise UnknownAuthorError(e, "failed to initialize database schema") from e

        author_id = uuid.uuid4()
        email = str(req.email) if req.email is not None else None

        try:
            async with self._transaction() as conn:
                await conn.execute(
                    "INSERT INTO authors (id, name, email) VALUES (?, ?, ?)",
                    (str(author_id), str(req.name), email),
                )
        except TransactionError as e:
            raise UnknownAuthorError(e.__cause__ or e, str(e)) from e
        except Exception as e:
            if is_unique_constraint_violation(e):
                raise DuplicateAuthorError(req.name) from e
            raise UnknownAuthorError(e, f"failed to save author {req.name}") from e

        return Author(id=author_id, name=req.name, email=req.email)

    async def create_post(self, req: CreatePostRequest) -> Post:
        """Insert a new post in its own transaction.

        Raises:
            AuthorNotFoundError: If req.author_id does not exist.
            UnknownPostError: For any other failure.
        """
        try:
            await self._init_schema()
        except Exception as e:
            raise UnknownPostError(e, "failed to initialize database schema") from e

        post_id = uuid.uuid4()

        try:
            async with self._transaction() as conn:
                await conn.execute(
                    "INSERT INTO posts (id, title, content, author_id) VALUES (?, ?, ?, ?)",
                    (str(post_id), str(req.title), req.content, str(req.author_id)),
                )
        except TransactionError as e:
            raise UnknownPostError(e.__cause__ or e, str(e)) from e
        except Exception as e:
            if is_foreign_key_violation(e):
                raise AuthorNotFoundError(req.author_id) from e
            raise UnknownPostError(e, "failed to save post") from e

        return Post(
            id=post_id,
            title=req.title,
            content=req.content,
            author_id=req.author_id,
        )
