import logging

from django.conf import settings
from django.db.utils import OperationalError

log = logging.getLogger(__name__)


def enable_sqlite_pragmas(sender, connection, **kwargs):
    if connection.vendor != "sqlite":
        return

    busy_ms = int(getattr(settings, "SQLITE_BUSY_TIMEOUT_MS", 30000))
    use_wal = bool(getattr(settings, "SQLITE_WAL", True))

    try:
        with connection.cursor() as cursor:
            # CASCADE / SET NULL on hard delete rely on enforced foreign keys
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.execute(f"PRAGMA busy_timeout={busy_ms};")

            # In-memory databases cannot switch journal mode
            if use_wal and connection.settings_dict.get("NAME") != ":memory:":
                cursor.execute("PRAGMA journal_mode=WAL;")

    except OperationalError as e:
        if "database is locked" in str(e).lower():
            log.warning("SQLite locked while applying PRAGMAs; continuing: %s", e)
            return
        raise
