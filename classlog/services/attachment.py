# ABOUTME: Resolves which workbook backs the class log
# ABOUTME: Remembers the attached document, recovers from trashed ones, and creates new ones

import logging
from typing import Optional

from classlog.models.errors import NotAttached
from classlog.services.cache import Cache
from classlog.services.properties import PropertyStore
from classlog.services.versions import VersionStore
from classlog.services.workbook import Document, WorkbookStore

logger = logging.getLogger(__name__)

DOCUMENT_ID_KEY = "document_id"


class AttachmentResolver:
    """
    Finds the attached document.

    The remembered id is stored in both the user and the document property
    scopes; the user scope wins when both are set.
    """

    def __init__(
        self,
        workbooks: WorkbookStore,
        user_properties: PropertyStore,
        document_properties: PropertyStore,
        versions: VersionStore,
        cache: Cache,
        active_document_id: Optional[str] = None,
    ):
        self.workbooks = workbooks
        self.user_properties = user_properties
        self.document_properties = document_properties
        self.versions = versions
        self.cache = cache
        self.active_document_id = active_document_id

    def remembered_id(self) -> Optional[str]:
        return self.user_properties.get(DOCUMENT_ID_KEY) or self.document_properties.get(DOCUMENT_ID_KEY)

    def remember(self, doc: Document) -> None:
        self.user_properties.set(DOCUMENT_ID_KEY, doc.id)
        self.document_properties.set(DOCUMENT_ID_KEY, doc.id)

    def forget(self, doc_id: str) -> None:
        """Drop a document's cache entries, version and remembered id."""
        self.cache.invalidate_all(doc_id)
        self.versions.clear(doc_id)
        for store in (self.user_properties, self.document_properties):
            if store.get(DOCUMENT_ID_KEY) == doc_id:
                store.delete(DOCUMENT_ID_KEY)
        logger.info("Forgot document %s", doc_id)

    def resolve(self) -> Optional[Document]:
        doc_id = self.remembered_id()
        if doc_id:
            trashed = self.workbooks.is_trashed(doc_id)
            if trashed:
                logger.info("Remembered document %s was trashed; detaching", doc_id)
                self.forget(doc_id)
            else:
                # Unknown trash status counts as usable.
                doc = self.workbooks.open(doc_id)
                if doc is not None:
                    return doc
                if trashed is None:
                    return Document(id=doc_id, name=doc_id, path=self.workbooks.path_for(doc_id))

        return self._resolve_ambient()

    def resolve_or_fail(self) -> Document:
        doc = self.resolve()
        if doc is None:
            raise NotAttached()
        return doc

    def create(self, name: str, sheets=None) -> Document:
        """Create a workbook, remember it and bump its version past any stale cache."""
        doc = self.workbooks.create(name, sheets)
        self.remember(doc)
        self.versions.bump_version(doc.id)
        return doc

    def _resolve_ambient(self) -> Optional[Document]:
        doc_id = self.active_document_id
        if not doc_id or self.workbooks.is_trashed(doc_id):
            return None
        doc = self.workbooks.open(doc_id)
        if doc is not None:
            self.remember(doc)
            logger.info("Attached active document %s", doc_id)
        return doc
