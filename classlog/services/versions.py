# ABOUTME: Per-document monotonic version counter
# ABOUTME: Supplies the generation number embedded in every cache key

import logging

from classlog.services.properties import PropertyStore

logger = logging.getLogger(__name__)


def _version_key(doc_id: str) -> str:
    return f"version:{doc_id}"


class VersionStore:
    """
    Version counters kept in durable properties.

    bump_version is a plain read-then-write; callers hold the document's
    write lock so bumps never interleave.
    """

    def __init__(self, properties: PropertyStore):
        self.properties = properties

    def get_version(self, doc_id: str) -> int:
        raw = self.properties.get(_version_key(doc_id))
        try:
            return max(int(raw), 0) if raw is not None else 0
        except ValueError:
            return 0

    def bump_version(self, doc_id: str) -> int:
        version = self.get_version(doc_id) + 1
        self.properties.set(_version_key(doc_id), version)
        logger.debug("Document %s now at version %d", doc_id, version)
        return version

    def clear(self, doc_id: str) -> None:
        self.properties.delete(_version_key(doc_id))
