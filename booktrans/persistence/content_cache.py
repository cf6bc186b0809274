"""
Content-addressed translation cache.

Maps (owner, hash of original text) to a translation. The cache outlives
jobs and is shared by every run for the same owner.

Storage failures never escape: a failed read is a cache miss and a failed
write only costs a later re-translation.
"""

import hashlib
from typing import Dict, Iterable, Optional

from booktrans.core.exceptions import CacheStorageError
from booktrans.core.models import CacheEntry, CacheStats
from booktrans.utils.unified_logger import debug, error, info, LogType
from .database import Database


def content_hash(text: str) -> str:
    """
    Deterministic 64-bit fingerprint of a text, as 16 hex characters.

    Stable across processes and platforms. Not meant for integrity checks.
    """
    return hashlib.blake2b(text.encode('utf-8'), digest_size=8).hexdigest()


class ContentCache:
    """
    Owner-scoped translation cache on top of Database.
    """

    def __init__(self, db_path: str = "data/translations.db", database: Optional[Database] = None):
        """
        Initialize cache.

        Args:
            db_path: Path to SQLite database (ignored when database is given)
            database: Existing Database instance to use
        """
        self.db = database or Database(db_path)

    def get(self, owner_id: str, text: str) -> Optional[CacheEntry]:
        """
        Look up the translation of one text.

        Args:
            owner_id: Cache owner
            text: Original text

        Returns:
            CacheEntry, or None when missing or unreadable
        """
        try:
            row = self.db.find(owner_id, content_hash(text))
        except CacheStorageError as e:
            error(f"Cache read failed, treating as miss: {e}", LogType.CACHE)
            return None

        # A hash collision must not hand back another sentence's translation
        if not row or row['original_text'] != text:
            return None
        return self._to_entry(row)

    def batch_get(self, owner_id: str, texts: Iterable[str]) -> Dict[str, str]:
        """
        Look up many texts of one owner at once.

        Args:
            owner_id: Cache owner
            texts: Original texts (duplicates allowed)

        Returns:
            Mapping original text -> translated text, only for texts found
        """
        wanted = set(texts)
        if not wanted:
            return {}

        try:
            rows = self.db.find_many(owner_id, (content_hash(t) for t in wanted))
        except CacheStorageError as e:
            error(f"Cache bulk read failed, treating all as misses: {e}", LogType.CACHE)
            return {}

        hits = {}
        for row in rows:
            if row['original_text'] in wanted:
                hits[row['original_text']] = row['translated_text']

        debug(f"Cache lookup for {owner_id}: {len(hits)}/{len(wanted)} distinct texts found", LogType.CACHE)
        return hits

    def put(
        self,
        owner_id: str,
        original_text: str,
        translated_text: str,
        source_language: Optional[str] = None,
        target_language: Optional[str] = None
    ) -> Optional[int]:
        """
        Save a translation, replacing any previous one for the same text.

        Returns:
            Row id, or None if the write failed
        """
        try:
            return self.db.upsert(
                owner_id,
                content_hash(original_text),
                original_text,
                translated_text,
                source_language,
                target_language
            )
        except CacheStorageError as e:
            error(f"Cache write failed, translation not stored: {e}", LogType.CACHE)
            return None

    def delete_by_owner(self, owner_id: str) -> int:
        """
        Purge every translation of one owner.

        Returns:
            Number of deleted entries (0 on failure)
        """
        try:
            deleted = self.db.delete_owner(owner_id)
        except CacheStorageError as e:
            error(f"Deleting cached translations failed: {e}", LogType.CACHE)
            return 0
        info(f"Deleted {deleted} cached translations for {owner_id}", LogType.CACHE)
        return deleted

    def clear_all(self) -> int:
        """
        Purge the whole cache.

        Returns:
            Number of deleted entries (0 on failure)
        """
        try:
            deleted = self.db.delete_all()
        except CacheStorageError as e:
            error(f"Clearing translation cache failed: {e}", LogType.CACHE)
            return 0
        info(f"All cached translations cleared ({deleted} entries)", LogType.CACHE)
        return deleted

    def stats(self) -> CacheStats:
        """Entry and distinct owner counts (zeros on failure)."""
        try:
            counts = self.db.counts()
        except CacheStorageError as e:
            error(f"Reading cache stats failed: {e}", LogType.CACHE)
            return CacheStats()
        return CacheStats(entry_count=counts['entries'], distinct_owner_count=counts['owners'])

    def close(self):
        self.db.close()

    @staticmethod
    def _to_entry(row) -> CacheEntry:
        return CacheEntry(
            id=row['id'],
            owner_id=row['owner_id'],
            content_hash=row['content_hash'],
            original_text=row['original_text'],
            translated_text=row['translated_text'],
            source_language=row['source_language'],
            target_language=row['target_language'],
            created_at=row['created_at'],
            updated_at=row['updated_at']
        )
