"""
SQLite storage for the translation cache.
"""

import sqlite3
import os
from datetime import datetime
from typing import Optional, Dict, List, Any, Iterable
import threading

from booktrans.core.exceptions import CacheStorageError

# Stay well below SQLite's bound-parameter limit
_MAX_IN_PARAMS = 500


class Database:
    """
    Manages the SQLite table behind the translation cache.
    Thread-safe for concurrent access.

    Every failing statement is re-raised as CacheStorageError; callers
    decide whether the failure matters.
    """

    def __init__(self, db_path: str = "data/translations.db"):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._local = threading.local()
        self._lock = threading.RLock()

        # Ensure directory exists
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        self._initialize_schema()

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if not hasattr(self._local, 'connection') or self._local.connection is None:
            self._local.connection = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                timeout=30.0
            )
            self._local.connection.row_factory = sqlite3.Row
        return self._local.connection

    def _initialize_schema(self):
        """Create database tables if they don't exist."""
        with self._lock:
            try:
                conn = self._get_connection()
                cursor = conn.cursor()

                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS translations (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        owner_id TEXT NOT NULL,
                        content_hash TEXT NOT NULL,
                        original_text TEXT NOT NULL,
                        translated_text TEXT NOT NULL,
                        source_language TEXT,
                        target_language TEXT,
                        created_at TIMESTAMP NOT NULL,
                        updated_at TIMESTAMP NOT NULL,
                        UNIQUE (owner_id, content_hash)
                    )
                """)

                cursor.execute("""
                    CREATE INDEX IF NOT EXISTS idx_translations_owner
                    ON translations(owner_id)
                """)

                cursor.execute("""
                    CREATE INDEX IF NOT EXISTS idx_translations_created
                    ON translations(created_at)
                """)

                conn.commit()
            except sqlite3.Error as e:
                raise CacheStorageError(f"Cannot initialize cache schema at {self.db_path}: {e}") from e

    @staticmethod
    def _row_to_dict(row: sqlite3.Row) -> Dict[str, Any]:
        return {key: row[key] for key in row.keys()}

    def find(self, owner_id: str, content_hash: str) -> Optional[Dict[str, Any]]:
        """
        Point lookup by (owner, hash).

        Returns:
            Row dictionary or None if not found
        """
        with self._lock:
            try:
                cursor = self._get_connection().cursor()
                cursor.execute(
                    "SELECT * FROM translations WHERE owner_id = ? AND content_hash = ?",
                    (owner_id, content_hash)
                )
                row = cursor.fetchone()
                return self._row_to_dict(row) if row else None
            except sqlite3.Error as e:
                raise CacheStorageError(f"Lookup failed for owner {owner_id}: {e}") from e

    def find_many(self, owner_id: str, content_hashes: Iterable[str]) -> List[Dict[str, Any]]:
        """
        Owner-scoped bulk lookup filtered by a candidate hash set.

        Args:
            owner_id: Cache owner
            content_hashes: Candidate hashes (duplicates allowed)

        Returns:
            Matching rows, in no particular order
        """
        hashes = sorted(set(content_hashes))
        rows: List[Dict[str, Any]] = []
        if not hashes:
            return rows

        with self._lock:
            try:
                cursor = self._get_connection().cursor()
                for start in range(0, len(hashes), _MAX_IN_PARAMS):
                    batch = hashes[start:start + _MAX_IN_PARAMS]
                    placeholders = ', '.join('?' for _ in batch)
                    cursor.execute(
                        f"SELECT * FROM translations WHERE owner_id = ? AND content_hash IN ({placeholders})",
                        [owner_id, *batch]
                    )
                    rows.extend(self._row_to_dict(row) for row in cursor.fetchall())
                return rows
            except sqlite3.Error as e:
                raise CacheStorageError(f"Bulk lookup failed for owner {owner_id}: {e}") from e

    def upsert(
        self,
        owner_id: str,
        content_hash: str,
        original_text: str,
        translated_text: str,
        source_language: Optional[str] = None,
        target_language: Optional[str] = None
    ) -> int:
        """
        Insert a translation or update the existing (owner, hash) row.

        An update replaces text, translation, languages and updated_at and
        keeps created_at.

        Returns:
            Row id
        """
        now = datetime.now().isoformat()
        with self._lock:
            conn = self._get_connection()
            try:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT id FROM translations WHERE owner_id = ? AND content_hash = ?",
                    (owner_id, content_hash)
                )
                existing = cursor.fetchone()

                if existing:
                    cursor.execute("""
                        UPDATE translations
                        SET original_text = ?, translated_text = ?, source_language = ?,
                            target_language = ?, updated_at = ?
                        WHERE id = ?
                    """, (original_text, translated_text, source_language,
                          target_language, now, existing['id']))
                    row_id = existing['id']
                else:
                    cursor.execute("""
                        INSERT INTO translations
                        (owner_id, content_hash, original_text, translated_text,
                         source_language, target_language, created_at, updated_at)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """, (owner_id, content_hash, original_text, translated_text,
                          source_language, target_language, now, now))
                    row_id = cursor.lastrowid

                conn.commit()
                return row_id
            except sqlite3.Error as e:
                conn.rollback()
                raise CacheStorageError(f"Saving translation failed for owner {owner_id}: {e}") from e

    def delete_owner(self, owner_id: str) -> int:
        """
        Delete every row of one owner.

        Returns:
            Number of deleted rows
        """
        with self._lock:
            conn = self._get_connection()
            try:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM translations WHERE owner_id = ?", (owner_id,))
                conn.commit()
                return cursor.rowcount
            except sqlite3.Error as e:
                conn.rollback()
                raise CacheStorageError(f"Deleting owner {owner_id} failed: {e}") from e

    def delete_all(self) -> int:
        """Delete every row. Returns the number of deleted rows."""
        with self._lock:
            conn = self._get_connection()
            try:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM translations")
                conn.commit()
                return cursor.rowcount
            except sqlite3.Error as e:
                conn.rollback()
                raise CacheStorageError(f"Clearing translations failed: {e}") from e

    def counts(self) -> Dict[str, int]:
        """
        Aggregate counts.

        Returns:
            {'entries': int, 'owners': int}
        """
        with self._lock:
            try:
                cursor = self._get_connection().cursor()
                cursor.execute(
                    "SELECT COUNT(*) AS entries, COUNT(DISTINCT owner_id) AS owners FROM translations"
                )
                row = cursor.fetchone()
                return {'entries': row['entries'], 'owners': row['owners']}
            except sqlite3.Error as e:
                raise CacheStorageError(f"Counting translations failed: {e}") from e

    def close(self):
        """Close database connection."""
        if hasattr(self._local, 'connection') and self._local.connection:
            self._local.connection.close()
            self._local.connection = None
