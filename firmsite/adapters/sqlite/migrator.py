"""
Schema migrations for the content database.

Each ``NNNN_name.sql`` file holds an Up script, optionally followed by a
``-- Down`` marker and its rollback. Only the Up part is ever executed; the
names of applied files are recorded in ``_migrations``.
"""

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path

from firmsite.domain.errors import DependencyError

logger = logging.getLogger(__name__)

DEFAULT_MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"
DOWN_MARKER = "-- Down"

LEDGER_DDL = """
CREATE TABLE IF NOT EXISTS _migrations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    filename TEXT UNIQUE NOT NULL,
    applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""


@dataclass(frozen=True)
class Migration:
    filename: str
    up: str
    down: str = ""

    @classmethod
    def from_file(cls, path: Path) -> "Migration":
        up, _, down = path.read_text().partition(DOWN_MARKER)
        return cls(filename=path.name, up=up, down=down.strip())


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str | Path = DEFAULT_MIGRATIONS_DIR):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.executescript(LEDGER_DDL)
        return conn

    def discover(self) -> list[Migration]:
        """All migration files, in filename order."""
        return [Migration.from_file(p) for p in sorted(self.migrations_dir.glob("*.sql"))]

    def _applied(self, conn: sqlite3.Connection) -> set[str]:
        return {row[0] for row in conn.execute("SELECT filename FROM _migrations")}

    def pending(self) -> list[str]:
        conn = self._connect()
        try:
            done = self._applied(conn)
        finally:
            conn.close()
        return [m.filename for m in self.discover() if m.filename not in done]

    def run_migrations(self) -> list[str]:
        """Apply pending migrations in order. Returns the filenames applied."""
        conn = self._connect()
        applied_now: list[str] = []
        try:
            done = self._applied(conn)
            for migration in self.discover():
                if migration.filename in done:
                    continue
                logger.info("Applying migration: %s", migration.filename)
                self._apply(conn, migration)
                applied_now.append(migration.filename)
        finally:
            conn.close()
        return applied_now

    def _apply(self, conn: sqlite3.Connection, migration: Migration) -> None:
        try:
            conn.executescript(migration.up)
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (migration.filename,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise DependencyError(f"Migration {migration.filename} failed: {e}") from e
