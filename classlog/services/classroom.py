# ABOUTME: Wires the class log components for one deployment
# ABOUTME: Builds property stores, cache, locks, attachment, queries and writes from settings

from datetime import datetime
from pathlib import Path
from typing import Callable

from sqlalchemy.orm import sessionmaker

from classlog.config import Settings
from classlog.services.attachment import AttachmentResolver
from classlog.services.cache import Cache
from classlog.services.locks import LockManager
from classlog.services.properties import PropertyStore, USER_SCOPE, DOCUMENT_SCOPE
from classlog.services.queries import Queries
from classlog.services.versions import VersionStore
from classlog.services.workbook import WorkbookStore
from classlog.services.writes import WriteCoordinator


class Classroom:
    """All components sharing one database, one documents directory and one lock manager."""

    def __init__(
        self,
        session_factory: sessionmaker,
        settings: Settings,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings
        self.user_properties = PropertyStore(session_factory, USER_SCOPE)
        self.document_properties = PropertyStore(session_factory, DOCUMENT_SCOPE)
        self.versions = VersionStore(self.document_properties)
        self.cache = Cache(session_factory)
        self.workbooks = WorkbookStore(Path(settings.documents_dir))
        self.locks = LockManager()
        self.attachment = AttachmentResolver(
            self.workbooks,
            self.user_properties,
            self.document_properties,
            self.versions,
            self.cache,
            active_document_id=settings.active_document_id,
        )
        self.queries = Queries(
            self.attachment,
            self.workbooks,
            self.versions,
            self.cache,
            ttl_seconds=settings.cache_ttl_seconds,
            bathroom_ttl_seconds=settings.bathroom_cache_ttl_seconds,
            clock=clock,
        )
        self.writes = WriteCoordinator(
            self.attachment,
            self.workbooks,
            self.versions,
            self.locks,
            settings_store=self.document_properties,
            bathroom_limit_default=settings.bathroom_limit_default,
            lock_timeout_ms=settings.lock_timeout_ms,
            batch_lock_timeout_ms=settings.batch_lock_timeout_ms,
            clock=clock,
        )
