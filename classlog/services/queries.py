# ABOUTME: Cached read operations for the class log
# ABOUTME: Looks up aggregates under the current document version and computes them on a miss

import logging
from datetime import datetime
from typing import Callable, Optional

from classlog.models.records import (
    ROSTER_SHEET,
    ISSUES_SHEET,
    LOG_SHEET,
    COUNTS_SHEET,
    load_roster,
    load_issues,
    load_log,
    load_bathroom,
)
from classlog.services.aggregates import (
    compute_roster_and_issues,
    compute_count_snapshot,
    compute_bathroom_status,
    compute_bathroom_analytics,
)
from classlog.services.attachment import AttachmentResolver
from classlog.services.cache import (
    Cache,
    cache_key,
    DATA_PREFIX,
    COUNTS_PREFIX,
    BATHROOM_STATUS_PREFIX,
    BATHROOM_ANALYTICS_PREFIX,
)
from classlog.services.versions import VersionStore
from classlog.services.workbook import Document, WorkbookStore

logger = logging.getLogger(__name__)


class Queries:
    """Read side of the class log. Never takes the write lock."""

    def __init__(
        self,
        attachment: AttachmentResolver,
        workbooks: WorkbookStore,
        versions: VersionStore,
        cache: Cache,
        ttl_seconds: int,
        bathroom_ttl_seconds: int,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.attachment = attachment
        self.workbooks = workbooks
        self.versions = versions
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.bathroom_ttl_seconds = bathroom_ttl_seconds
        self.clock = clock

    def get_app_state(self) -> dict:
        """Attachment status and which sheets exist and hold data."""
        doc = self.attachment.resolve()
        state = {
            "attached": False,
            "doc_id": None,
            "doc_url": None,
            "sheets_present": {"roster": False, "issues": False, "log": False, "counts": False},
            "has_data": {"roster": False, "issues": False, "log": False},
        }
        if doc is None:
            return state

        state.update({"attached": True, "doc_id": doc.id, "doc_url": doc.url})
        try:
            sheet = self.workbooks.load(doc)
        except Exception:
            logger.warning("Attached document %s could not be opened", doc.id, exc_info=True)
            return state

        for key, name in (("roster", ROSTER_SHEET), ("issues", ISSUES_SHEET), ("log", LOG_SHEET), ("counts", COUNTS_SHEET)):
            state["sheets_present"][key] = sheet.has_sheet(name)
        for key, name in (("roster", ROSTER_SHEET), ("issues", ISSUES_SHEET), ("log", LOG_SHEET)):
            state["has_data"][key] = sheet.has_sheet(name) and sheet.last_row(name) > 1
        return state

    def get_data(self) -> dict:
        """Periods, students per period and issue labels."""
        def compute(doc: Document) -> dict:
            sheet = self.workbooks.load(doc)
            return compute_roster_and_issues(load_roster(sheet), load_issues(sheet))

        return self._cached(DATA_PREFIX, None, self.ttl_seconds, compute)

    def get_counts_snapshot(self, period: str) -> dict:
        period = (period or "").strip()

        def compute(doc: Document) -> dict:
            sheet = self.workbooks.load(doc)
            return compute_count_snapshot(load_roster(sheet), load_issues(sheet), load_log(sheet), period)

        return self._cached(COUNTS_PREFIX, period, self.ttl_seconds, compute)

    def get_bathroom_status(self, period: Optional[str] = None) -> dict:
        period = (period or "").strip() or None
        today = self.clock().date()

        def compute(doc: Document) -> dict:
            return compute_bathroom_status(load_bathroom(self.workbooks.load(doc)), today, period)

        return self._cached(BATHROOM_STATUS_PREFIX, f"{today.isoformat()}:{period or ''}", self.bathroom_ttl_seconds, compute)

    def get_bathroom_analytics(self) -> dict:
        today = self.clock().date()

        def compute(doc: Document) -> dict:
            return compute_bathroom_analytics(load_bathroom(self.workbooks.load(doc)), today)

        return self._cached(BATHROOM_ANALYTICS_PREFIX, today.isoformat(), self.bathroom_ttl_seconds, compute)

    def _cached(self, prefix: str, param: Optional[str], ttl_seconds: int, compute: Callable[[Document], dict]) -> dict:
        doc = self.attachment.resolve_or_fail()
        version = self.versions.get_version(doc.id)
        key = cache_key(prefix, doc.id, version, param)

        value = self.cache.get(key)
        if value is not None:
            return value

        logger.debug("Cache miss: %s", key)
        value = compute(doc)
        self.cache.put(key, value, ttl_seconds, doc_id=doc.id)
        return value
