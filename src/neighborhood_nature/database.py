"""
SQLite persistence for session entities, consume-once flags and stored routes.

Session entities are keyed by ``(entity_type, session_id)`` and hold named
string properties; every write overwrites in place. Stored routes are
append-only records published for discovery by other users.
"""

import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .config import get_config
from .models import Coordinate, StoredRoute

logger = logging.getLogger(__name__)


class NatureDatabase:
    """SQLite database manager with thread-local connections."""

    def __init__(self, db_path: Optional[str] = None):
        self._config = get_config()

        # Database file location
        if db_path:
            self._db_path = Path(db_path)
        elif self._config.database_path:
            self._db_path = Path(self._config.database_path)
        else:
            data_dir = Path(__file__).parent / "data"
            data_dir.mkdir(exist_ok=True)
            self._db_path = data_dir / "nature.db"

        # Thread safety
        self._lock = threading.RLock()
        self._thread_local = threading.local()

        self._init_database()

        if self._config.debug_mode:
            logger.info(f"Initialized nature database: {self._db_path}")

    @property
    def path(self) -> Path:
        return self._db_path

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if not hasattr(self._thread_local, 'connection'):
            self._thread_local.connection = sqlite3.connect(
                str(self._db_path),
                check_same_thread=False
            )
            self._thread_local.connection.row_factory = sqlite3.Row
        return self._thread_local.connection

    def _init_database(self):
        """Initialize database schema."""
        with self._lock:
            conn = self._get_connection()

            conn.execute("""
                CREATE TABLE IF NOT EXISTS entity_properties (
                    entity_type TEXT NOT NULL,
                    session_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    value TEXT,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (entity_type, session_id, name)
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS session_flags (
                    session_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    fetched INTEGER NOT NULL DEFAULT 0,
                    PRIMARY KEY (session_id, name)
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS stored_routes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    text TEXT NOT NULL,
                    waypoints_json TEXT NOT NULL DEFAULT '[]',
                    center_x REAL,
                    center_y REAL,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("CREATE INDEX IF NOT EXISTS idx_entity_session ON entity_properties(session_id)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_stored_routes_center ON stored_routes(center_x, center_y)")

            conn.commit()

    # =====================================================================
    # SESSION ENTITIES
    # =====================================================================

    def put_property(self, entity_type: str, session_id: str, name: str, value: Optional[str]) -> None:
        """Create or overwrite one property of a session entity."""
        with self._lock:
            conn = self._get_connection()
            conn.execute("""
                INSERT INTO entity_properties (entity_type, session_id, name, value, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (entity_type, session_id, name)
                DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """, (entity_type, session_id, name, value, datetime.now().isoformat()))
            conn.commit()

    def get_property(self, entity_type: str, session_id: str, name: str) -> Optional[str]:
        with self._lock:
            conn = self._get_connection()
            row = conn.execute(
                "SELECT value FROM entity_properties WHERE entity_type = ? AND session_id = ? AND name = ?",
                (entity_type, session_id, name)
            ).fetchone()
            return row['value'] if row else None

    def get_entity(self, entity_type: str, session_id: str) -> Dict[str, Optional[str]]:
        """All properties of one session entity (empty when it does not exist)."""
        with self._lock:
            conn = self._get_connection()
            rows = conn.execute(
                "SELECT name, value FROM entity_properties WHERE entity_type = ? AND session_id = ?",
                (entity_type, session_id)
            ).fetchall()
            return {row['name']: row['value'] for row in rows}

    # =====================================================================
    # CONSUME-ONCE FLAGS
    # =====================================================================

    def reset_flags(self, session_id: str, names: Iterable[str]) -> None:
        """Mark flags unfetched so the next read of each is served."""
        with self._lock:
            conn = self._get_connection()
            conn.executemany("""
                INSERT INTO session_flags (session_id, name, fetched) VALUES (?, ?, 0)
                ON CONFLICT (session_id, name) DO UPDATE SET fetched = 0
            """, [(session_id, name) for name in names])
            conn.commit()

    def consume_property(self, session_id: str, flag: str, entity_type: str, name: str) -> Optional[str]:
        """Mark ``flag`` fetched and return the property, in one transaction.

        Returns None when the flag was already fetched or was never reset.
        """
        with self._lock:
            conn = self._get_connection()
            try:
                cursor = conn.execute(
                    "UPDATE session_flags SET fetched = 1 WHERE session_id = ? AND name = ? AND fetched = 0",
                    (session_id, flag)
                )
                if cursor.rowcount != 1:
                    conn.rollback()
                    return None
                row = conn.execute(
                    "SELECT value FROM entity_properties WHERE entity_type = ? AND session_id = ? AND name = ?",
                    (entity_type, session_id, name)
                ).fetchone()
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise
            return row['value'] if row else None

    # =====================================================================
    # STORED ROUTES
    # =====================================================================

    def create_stored_route(self, text: str, waypoints_json: str, center: Optional[Coordinate] = None) -> int:
        with self._lock:
            conn = self._get_connection()
            cursor = conn.execute("""
                INSERT INTO stored_routes (text, waypoints_json, center_x, center_y, created_at)
                VALUES (?, ?, ?, ?, ?)
            """, (
                text,
                waypoints_json or '[]',
                center.x if center else None,
                center.y if center else None,
                datetime.now().isoformat(),
            ))
            conn.commit()
            route_id = int(cursor.lastrowid)
            logger.info(f"Stored route {route_id}")
            return route_id

    def get_stored_route(self, route_id: int) -> Optional[StoredRoute]:
        with self._lock:
            conn = self._get_connection()
            row = conn.execute("SELECT * FROM stored_routes WHERE id = ?", (route_id,)).fetchone()
            return self._row_to_route(row) if row else None

    def list_stored_routes(self) -> List[StoredRoute]:
        """All stored routes in storage order (ascending id)."""
        with self._lock:
            conn = self._get_connection()
            rows = conn.execute("SELECT * FROM stored_routes ORDER BY id").fetchall()
            return [self._row_to_route(row) for row in rows]

    def _row_to_route(self, row: sqlite3.Row) -> StoredRoute:
        center = None
        if row['center_x'] is not None and row['center_y'] is not None:
            center = Coordinate(float(row['center_x']), float(row['center_y']), "center-of-mass")
        return StoredRoute(
            id=int(row['id']),
            text=row['text'],
            waypoints_json=row['waypoints_json'],
            center=center,
        )

    # =====================================================================
    # MAINTENANCE
    # =====================================================================

    def get_statistics(self) -> Dict[str, Any]:
        with self._lock:
            conn = self._get_connection()
            routes = conn.execute("SELECT COUNT(*) AS count FROM stored_routes").fetchone()['count']
            sessions = conn.execute(
                "SELECT COUNT(DISTINCT session_id) AS count FROM entity_properties"
            ).fetchone()['count']
            return {
                'stored_routes': routes,
                'active_sessions': sessions,
                'database_path': str(self._db_path),
            }

    def close(self):
        """Close this thread's database connection."""
        if hasattr(self._thread_local, 'connection'):
            try:
                self._thread_local.connection.close()
                delattr(self._thread_local, 'connection')
                logger.info("Database connection closed successfully")
            except sqlite3.Error as e:
                logger.warning(f"Error closing database connection: {e}")


__all__ = ['NatureDatabase']
