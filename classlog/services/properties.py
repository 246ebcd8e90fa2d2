# ABOUTME: Durable key/value property storage at user and document scope
# ABOUTME: Backs remembered document ids, version counters and deployment settings

import logging
from typing import Optional

from sqlalchemy.orm import sessionmaker

from classlog.models.database import Property

logger = logging.getLogger(__name__)

USER_SCOPE = "user"
DOCUMENT_SCOPE = "document"

BATHROOM_LIMIT_KEY = "bathroom_limit"


class PropertyStore:
    """String properties for one scope, persisted through SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker, scope: str):
        self.session_factory = session_factory
        self.scope = scope

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        session = self.session_factory()
        try:
            prop = session.query(Property).filter_by(scope=self.scope, key=key).first()
            return prop.value if prop is not None and prop.value is not None else default
        finally:
            session.close()

    def set(self, key: str, value) -> None:
        session = self.session_factory()
        try:
            prop = session.query(Property).filter_by(scope=self.scope, key=key).first()
            if prop is None:
                session.add(Property(scope=self.scope, key=key, value=str(value)))
            else:
                prop.value = str(value)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def delete(self, key: str) -> None:
        session = self.session_factory()
        try:
            session.query(Property).filter_by(scope=self.scope, key=key).delete()
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


def get_bathroom_limit(settings_store: PropertyStore, default: int) -> int:
    """
    Read the per-deployment bathroom trip limit.

    The first read seeds the default so the value is visible and editable afterwards.
    A stored value that is not a positive integer falls back to the default.
    """
    raw = settings_store.get(BATHROOM_LIMIT_KEY)
    if raw is None:
        settings_store.set(BATHROOM_LIMIT_KEY, default)
        return default
    try:
        limit = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid bathroom limit %r, using %d", raw, default)
        return default
    return limit if limit > 0 else default
