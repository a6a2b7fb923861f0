"""
accounts/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_user is the mapper. Service and route
code never touches SQL directly.

Invariants enforced by the schema:
  UNIQUE(email)              -- one account per address.
  UNIQUE(verification_code)  -- a verification link resolves to one account.

verification_code and password_hash are written on insert only. There is no
method that updates either of them, and mark_verified() can only set
verified to 1.

Security:
  All queries use bound parameters. No f-strings in SQL.

DB URL: supplied by the caller (Settings.database_url in production).
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import SingletonThreadPool

from accounts.models import User
from core.errors import InvalidInput

# Profile columns that update_profile() may write. Checked before any SQL
# is built so callers cannot reach email, password_hash or verification_code.
PROFILE_FIELDS: frozenset[str] = frozenset({"name", "headline", "about", "type", "area", "contact"})

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(320), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("verification_code", String(36), nullable=False, unique=True),
    Column("verified", Boolean, nullable=False, server_default="0"),
    Column("name", Text),
    Column("headline", Text),
    Column("about", Text),
    Column("type", String(64)),
    Column("area", String(16)),  # ISO 3166-1 alpha-2 or ISO 3166-2 code
    Column("contact", Text),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_sqlite_memory(db_url: str) -> bool:
    return db_url.startswith("sqlite") and (":memory:" in db_url or "mode=memory" in db_url)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore("sqlite:///accounts.db")
        store.create_user(User(email="a@b.co", password_hash=..., verification_code=...))
        user = store.get_by_email("a@b.co")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        engine_kwargs: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        if _is_sqlite_memory(db_url):
            # One connection per thread; a shared-cache memory DB lives as long as any of them.
            engine_kwargs["poolclass"] = SingletonThreadPool
        self.engine: Engine = create_engine(db_url, connect_args=connect_args, **engine_kwargs)
        if db_url.startswith("sqlite") and not _is_sqlite_memory(db_url):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> User:
        """Insert a new user and return it with id and created_at filled in.

        The UNIQUE constraints are the source of truth for email uniqueness:
        a concurrent registration that slips past any earlier check still
        fails here, and is reported as InvalidInput.
        """
        created_at = _now_iso()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.insert().values(
                        email=user.email,
                        password_hash=user.password_hash,
                        verification_code=user.verification_code,
                        verified=user.verified,
                        name=user.name,
                        headline=user.headline,
                        about=user.about,
                        type=user.type,
                        area=user.area,
                        contact=user.contact,
                        created_at=created_at,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise InvalidInput("Email is already registered") from exc
        user.id = result.inserted_primary_key[0]
        user.created_at = created_at
        return user

    def update_profile(self, email: str, **fields: str) -> bool:
        """Write the given profile fields for one user in a single statement.

        Only keys in PROFILE_FIELDS are accepted. Unknown keys raise
        ValueError rather than being ignored.

        Returns True if a row was updated, False if the email was not found.
        """
        unknown = set(fields) - PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Unknown profile fields: {sorted(unknown)!r}")
        if not fields:
            return self.get_by_email(email) is not None
        with self.engine.connect() as conn:
            result = conn.execute(_users.update().where(_users.c.email == email).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def mark_verified(self, user_id: int) -> None:
        with self.engine.connect() as conn:
            conn.execute(_users.update().where(_users.c.id == user_id).values(verified=True))
            conn.commit()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_verification_code(self, code: str) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.verification_code == code)).fetchone()
        return _row_to_user(row) if row is not None else None

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        verification_code=row.verification_code,
        verified=bool(row.verified),
        name=row.name,
        headline=row.headline,
        about=row.about,
        type=row.type,
        area=row.area,
        contact=row.contact,
        created_at=row.created_at,
    )
