# storefront/db.py
from __future__ import annotations

import importlib
import re
import sqlite3
from contextlib import closing, contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional
from urllib.parse import unquote, urlsplit

from storefront.config import Settings
from storefront.errors import BackendError, DriverUnavailable, Timeout
from storefront.logging_config import get_logger, log_exception

logger = get_logger(__name__)

DEFAULT_DB_URL = "sqlite:///data/store.db"
SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

_NAMED_PARAM = re.compile(r"(?<![:\w]):(\w+)")
_TIMEOUT_MARKERS = ("database is locked", "database table is locked", "busy", "timed out", "timeout")


# -------------------------
# Endpoint / driver resolution
# -------------------------

@dataclass(frozen=True)
class Endpoint:
    scheme: str
    database: str
    host: Optional[str] = None
    port: Optional[int] = None


@dataclass(frozen=True)
class Driver:
    name: str
    error: Any  # exception class or tuple of them
    open: Callable[[Endpoint, Settings], Any]
    pyformat: bool = False  # True -> %(name)s placeholders instead of :name


def parse_url(url: str) -> Endpoint:
    """
    sqlite:///relative/path.db, sqlite:////absolute/path.db, a bare path,
    or mysql://host[:port]/database. A leading "jdbc:" is dropped so
    connection strings written for Connector/J keep working.
    """
    if url[:5].lower() == "jdbc:":
        url = url[5:]
    if "://" not in url:
        if url[:7].lower() == "sqlite:":
            url = url[7:]
        return Endpoint(scheme="sqlite", database=url)

    parts = urlsplit(url)
    scheme = parts.scheme.lower().split("+", 1)[0]
    if scheme == "sqlite":
        # one leading slash belongs to the URL, the rest to the path
        path = parts.path[1:] if parts.path.startswith("/") else parts.path
        if not path:
            raise BackendError(f"No database path in {url!r}")
        return Endpoint(scheme="sqlite", database=unquote(path))

    database = parts.path.lstrip("/")
    if not parts.hostname or not database:
        raise BackendError(f"Expected {scheme}://host[:port]/database, got {url!r}")
    return Endpoint(scheme=scheme, database=unquote(database), host=parts.hostname, port=parts.port)


def _open_sqlite(endpoint: Endpoint, settings: Settings) -> sqlite3.Connection:
    if endpoint.database != ":memory:":
        try:
            Path(endpoint.database).parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackendError(f"Cannot create database directory: {e}") from e
    conn = sqlite3.connect(endpoint.database, timeout=settings.db_timeout)
    conn.row_factory = sqlite3.Row
    return conn


def _mysql_driver() -> Driver:
    try:
        pymysql = importlib.import_module("pymysql")
    except ImportError as e:
        raise DriverUnavailable(f"MySQL driver not found: {e}") from e

    def _open(endpoint: Endpoint, settings: Settings):
        return pymysql.connect(
            host=endpoint.host,
            port=endpoint.port or 3306,
            user=settings.db_user,
            password=settings.db_password,
            database=endpoint.database,
            connect_timeout=settings.db_timeout,
            read_timeout=settings.db_timeout,
            write_timeout=settings.db_timeout,
            cursorclass=pymysql.cursors.DictCursor,
            autocommit=False,
        )

    return Driver(name="mysql", error=pymysql.Error, open=_open, pyformat=True)


def resolve_driver(endpoint: Endpoint) -> Driver:
    if endpoint.scheme == "sqlite":
        # sqlite3 raises OverflowError for ints beyond 64 bits
        return Driver(name="sqlite", error=(sqlite3.Error, OverflowError), open=_open_sqlite)
    if endpoint.scheme in ("mysql", "mariadb"):
        return _mysql_driver()
    raise DriverUnavailable(f"No driver for scheme {endpoint.scheme!r}")


def _translate(e: Exception) -> BackendError:
    msg = str(e) or type(e).__name__
    if any(marker in msg.lower() for marker in _TIMEOUT_MARKERS):
        return Timeout(msg)
    return BackendError(msg)


# -------------------------
# Connection scope
# -------------------------

@dataclass
class Connection:
    raw: Any
    driver: Driver

    def sql(self, statement: str) -> str:
        if self.driver.pyformat:
            return _NAMED_PARAM.sub(r"%(\1)s", statement.replace("%", "%%"))
        return statement


@contextmanager
def connect(settings: Settings) -> Iterator[Connection]:
    """
    Fresh connection per call. Commits if the block completes, rolls back if
    it raises, and always closes. Driver errors come out as BackendError.
    """
    endpoint = parse_url(settings.db_url)
    driver = resolve_driver(endpoint)

    try:
        raw = driver.open(endpoint, settings)
    except driver.error as e:
        raise _translate(e) from e

    try:
        yield Connection(raw=raw, driver=driver)
        raw.commit()
    except driver.error as e:
        _rollback(raw, driver)
        raise _translate(e) from e
    except BaseException:
        _rollback(raw, driver)
        raise
    finally:
        raw.close()


def _rollback(raw: Any, driver: Driver) -> None:
    try:
        raw.rollback()
    except driver.error as e:
        log_exception(logger, "Rollback failed", e)


# -------------------------
# Statement helpers
# -------------------------

def exec_all(conn: Connection, sql: str, params: Optional[Dict[str, Any]] = None) -> list[Dict[str, Any]]:
    with closing(conn.raw.cursor()) as cur:
        cur.execute(conn.sql(sql), params or {})
        return [dict(r) for r in cur.fetchall()]


def exec_one(conn: Connection, sql: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    with closing(conn.raw.cursor()) as cur:
        cur.execute(conn.sql(sql), params or {})
        row = cur.fetchone()
        return dict(row) if row else None


def exec_update(conn: Connection, sql: str, params: Optional[Dict[str, Any]] = None) -> int:
    """Run a write statement and return the affected-row count."""
    with closing(conn.raw.cursor()) as cur:
        cur.execute(conn.sql(sql), params or {})
        return cur.rowcount


# -------------------------
# Setup / health
# -------------------------

def init_db(settings: Settings) -> None:
    schema = SCHEMA_PATH.read_text(encoding="utf-8")
    with connect(settings) as conn:
        for statement in schema.split(";"):
            if statement.strip():
                exec_update(conn, statement)
    logger.info("Schema ready at %s", settings.db_url)


def check_connection(settings: Settings) -> bool:
    """Open and close one connection; log the outcome instead of raising."""
    try:
        with connect(settings) as conn:
            exec_one(conn, "SELECT 1")
    except DriverUnavailable as e:
        log_exception(logger, "Database driver unavailable", e)
        return False
    except BackendError as e:
        log_exception(logger, "Database connection failed", e)
        return False
    logger.info("Database connection successful (%s)", settings.db_url)
    return True
