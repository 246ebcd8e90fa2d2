# ABOUTME: Versioned aggregate cache with TTL
# ABOUTME: Stores JSON snapshots keyed by prefix, document, parameter and version; fails soft

import json
import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import sessionmaker

from classlog.models.database import CacheEntry

logger = logging.getLogger(__name__)

DATA_PREFIX = "data"
COUNTS_PREFIX = "counts"
BATHROOM_STATUS_PREFIX = "bath_status"
BATHROOM_ANALYTICS_PREFIX = "bath_analytics"

INVALIDATE_BATCH_SIZE = 100


def cache_key(prefix: str, doc_id: str, version: int, param: Optional[str] = None) -> str:
    """Build a cache key; the embedded version makes every bump a full invalidation."""
    return f"{prefix}:{doc_id}:{'' if param is None else param}:v{version}"


def _version_stem(key: str) -> Optional[str]:
    """Everything up to and including ":v" in a versioned key, or None."""
    head, sep, version = key.rpartition(":v")
    if not sep or not version.isdigit():
        return None
    return head + sep


class Cache:
    """
    Key/value snapshot cache in the database.

    Every failure is logged and treated as a miss. Callers never depend on
    the cache for correctness.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on miss, expiry or any error."""
        try:
            session = self.session_factory()
            try:
                row = session.query(CacheEntry).filter(CacheEntry.cache_key == key).first()
                if row is None:
                    return None
                if row.expires_at <= datetime.utcnow():
                    logger.debug("Cache expired: %s", key)
                    return None
                return json.loads(row.payload_json)
            finally:
                session.close()
        except Exception:
            logger.warning("Cache read failed for %s", key, exc_info=True)
            return None

    def put(self, key: str, value: Any, ttl_seconds: int, doc_id: Optional[str] = None) -> None:
        """
        Store a value for ttl_seconds. Errors are swallowed.

        Expired rows and rows for the same key under any other version are
        pruned in the same transaction, so the table stays bounded.
        """
        try:
            payload = json.dumps(value, default=str)
            now = datetime.utcnow()
            expires_at = now + timedelta(seconds=ttl_seconds)
            session = self.session_factory()
            try:
                self._prune(session, key, doc_id, now)
                row = session.query(CacheEntry).filter(CacheEntry.cache_key == key).first()
                if row:
                    row.payload_json = payload
                    row.expires_at = expires_at
                else:
                    session.add(CacheEntry(cache_key=key, doc_id=doc_id, payload_json=payload, expires_at=expires_at))
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()
        except Exception:
            logger.warning("Cache write failed for %s", key, exc_info=True)

    def _prune(self, session, key: str, doc_id: Optional[str], now: datetime) -> None:
        stale = [CacheEntry.expires_at <= now]
        stem = _version_stem(key)
        if doc_id is not None and stem is not None:
            stale.append(and_(
                CacheEntry.doc_id == doc_id,
                CacheEntry.cache_key.startswith(stem, autoescape=True),
                CacheEntry.cache_key != key,
            ))
        removed = session.query(CacheEntry).filter(or_(*stale)).delete(synchronize_session=False)
        if removed:
            logger.debug("Pruned %d stale cache entries before writing %s", removed, key)

    def invalidate_all(self, doc_id: str) -> int:
        """
        Best-effort removal of every entry owned by a document.

        Deletes in batches of INVALIDATE_BATCH_SIZE. Returns how many entries
        were removed; errors stop the sweep and are swallowed.
        """
        removed = 0
        try:
            session = self.session_factory()
            try:
                while True:
                    ids = [
                        row.id for row in session.query(CacheEntry.id)
                        .filter(CacheEntry.doc_id == doc_id)
                        .limit(INVALIDATE_BATCH_SIZE)
                        .all()
                    ]
                    if not ids:
                        break
                    session.query(CacheEntry).filter(CacheEntry.id.in_(ids)).delete(synchronize_session=False)
                    session.commit()
                    removed += len(ids)
            finally:
                session.close()
        except Exception:
            logger.warning("Cache sweep for document %s stopped after %d entries", doc_id, removed, exc_info=True)
        logger.info("Removed %d cache entries for document %s", removed, doc_id)
        return removed
