"""Holder for the single document whose mocks are being served."""

import logging
import threading

from mock_rest.models import Document

logger = logging.getLogger(__name__)


class ActiveDocumentRegistry:
    """Process-wide slot holding at most one active document.

    Writers replace the reference as a whole; readers always get either the
    previous or the new document, never a partially updated one.
    """

    def __init__(self, document: Document | None = None):
        self._document = document
        self._lock = threading.Lock()

    def get_active(self) -> Document | None:
        with self._lock:
            return self._document

    def set_active(self, document: Document | None) -> None:
        """Replace the active document. Passing None deactivates."""
        with self._lock:
            self._document = document
        if document is None:
            logger.info("Mock server deactivated")
        else:
            logger.info("Active document set to %r (%d endpoints)", document.title, len(document.endpoints))
