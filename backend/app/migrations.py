"""Apply the Alembic revisions of the document store on start-up."""

from __future__ import annotations

import errno
import logging
import os
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Sequence

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import inspect
from sqlalchemy.engine.reflection import Inspector

from .database import SQLALCHEMY_DATABASE_URL, build_engine

LOGGER = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
LOCK_FILENAME = ".alembic-migration.lock"
LOCK_RETRY_DELAY = 0.25
LOCK_TIMEOUT_ENV = "ALEMBIC_MIGRATION_LOCK_TIMEOUT"
DEFAULT_LOCK_TIMEOUT = 30.0

if os.name == "posix":  # pragma: no cover - platform specific
    import fcntl
else:  # pragma: no cover - platform specific
    import msvcrt

RevisionSentinel = tuple[str, Callable[[Inspector], bool]]

# Newest first; the first match is the revision an unversioned schema is at.
REVISION_SENTINELS: Sequence[RevisionSentinel] = (
    ("20261017_0001", lambda inspector: inspector.has_table("documents")),
)


def _read_lock_timeout() -> float:
    raw = os.getenv(LOCK_TIMEOUT_ENV)
    if not raw:
        return DEFAULT_LOCK_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        LOGGER.warning(
            "Invalid %s=%s; falling back to %.1f seconds", LOCK_TIMEOUT_ENV, raw, DEFAULT_LOCK_TIMEOUT
        )
        return DEFAULT_LOCK_TIMEOUT
    if value <= 0:
        LOGGER.warning(
            "%s must be positive; using %.1f seconds", LOCK_TIMEOUT_ENV, DEFAULT_LOCK_TIMEOUT
        )
        return DEFAULT_LOCK_TIMEOUT
    return value


def _is_lock_conflict(error: OSError) -> bool:
    if getattr(error, "errno", None) in {errno.EACCES, errno.EAGAIN, errno.EBUSY}:
        return True
    # Windows reports sharing (32) and lock (33) violations instead.
    return getattr(error, "winerror", None) in {32, 33}


def _try_lock(fileobj) -> None:
    if os.name == "posix":  # pragma: no cover - platform specific
        fcntl.flock(fileobj.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    else:  # pragma: no cover - platform specific
        msvcrt.locking(fileobj.fileno(), msvcrt.LK_NBLCK, 1)


def _unlock(fileobj) -> None:
    if os.name == "posix":  # pragma: no cover - platform specific
        fcntl.flock(fileobj.fileno(), fcntl.LOCK_UN)
    else:  # pragma: no cover - platform specific
        msvcrt.locking(fileobj.fileno(), msvcrt.LK_UNLCK, 1)


@contextmanager
def _migration_lock(path: Path, *, timeout: float) -> Iterator[None]:
    """Hold an exclusive file lock so concurrent workers migrate one at a time."""

    path.parent.mkdir(parents=True, exist_ok=True)
    deadline = time.monotonic() + timeout
    with path.open("a+") as handle:
        while True:
            try:
                _try_lock(handle)
                break
            except OSError as error:
                if not isinstance(error, BlockingIOError) and not _is_lock_conflict(error):
                    raise
                if time.monotonic() >= deadline:
                    raise TimeoutError("Timed out waiting for the migration lock") from error
                time.sleep(LOCK_RETRY_DELAY)
        LOGGER.debug("Acquired migration lock at %s", path)
        try:
            yield
        finally:
            _unlock(handle)
            LOGGER.debug("Released migration lock at %s", path)


def _detect_revision(
    inspector: Inspector, sentinels: Iterable[RevisionSentinel]
) -> Optional[str]:
    for revision, check in sentinels:
        if check(inspector):
            return revision
    return None


def build_alembic_config(database_url: Optional[str] = None) -> Config:
    config = Config(str(BASE_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(BASE_DIR / "alembic"))
    config.set_main_option(
        "sqlalchemy.url",
        database_url or os.getenv("DATABASE_URL") or SQLALCHEMY_DATABASE_URL,
    )
    return config


def run_database_migrations(database_url: Optional[str] = None) -> None:
    """Bring the document store schema to the latest revision.

    Databases created without Alembic (for example by ``create_all``) are
    stamped with the revision their tables correspond to before upgrading.
    """

    if str(BASE_DIR) not in sys.path:
        sys.path.insert(0, str(BASE_DIR))

    config = build_alembic_config(database_url)
    final_url = config.get_main_option("sqlalchemy.url")
    LOGGER.info("Running database migrations at %s", final_url)

    with _migration_lock(BASE_DIR / LOCK_FILENAME, timeout=_read_lock_timeout()):
        engine = build_engine(final_url)
        try:
            inspector = inspect(engine)
            if not inspector.has_table("alembic_version"):
                detected = _detect_revision(inspector, REVISION_SENTINELS)
                if detected:
                    LOGGER.info(
                        "Existing tables match revision %s; stamping before upgrade", detected
                    )
                    command.stamp(config, detected)
                    head = ScriptDirectory.from_config(config).get_current_head()
                    if detected == head:
                        return
            command.upgrade(config, "head")
        finally:
            engine.dispose()
