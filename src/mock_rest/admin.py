"""Admin operations: the imported document library and activation."""

import logging
import threading

from pydantic import BaseModel

from mock_rest.models import Document, EndpointDefinition
from mock_rest.state import ActiveDocumentRegistry

logger = logging.getLogger(__name__)


class DocumentNotFound(KeyError):
    """No imported document has the requested id."""


class EndpointNotFound(KeyError):
    """The document has no endpoint with the requested id."""


class ActivationResult(BaseModel):
    success: bool
    message: str
    active_doc_id: str | None


def activate_document(registry: ActiveDocumentRegistry, document: Document | None) -> ActivationResult:
    """Make a document the one being served, or deactivate with None.

    Failures are reported through ``success`` rather than raised.
    """
    try:
        registry.set_active(document)
    except Exception as e:
        logger.exception("Error updating active mock")
        current = registry.get_active()
        return ActivationResult(
            success=False,
            message=str(e) or "An unknown error occurred.",
            active_doc_id=current.id if current else None,
        )

    if document is None:
        return ActivationResult(success=True, message="Mock server is now deactivated.", active_doc_id=None)
    return ActivationResult(
        success=True,
        message=f'Mock server now active for "{document.title}".',
        active_doc_id=document.id,
    )


class DocumentLibrary:
    """Imported documents, keyed by id, in import order.

    Keeps the registry in step: whenever the active document is replaced or
    edited, the new copy is activated so the next mock request sees it.
    """

    def __init__(self, registry: ActiveDocumentRegistry):
        self.registry = registry
        self._documents: dict[str, Document] = {}
        self._lock = threading.Lock()

    def list(self) -> list[Document]:
        with self._lock:
            return list(self._documents.values())

    def get(self, doc_id: str) -> Document:
        with self._lock:
            try:
                return self._documents[doc_id]
            except KeyError:
                raise DocumentNotFound(doc_id) from None

    def add(self, document: Document) -> Document:
        """Add a document, replacing any earlier import with the same id."""
        with self._lock:
            replaced = document.id in self._documents
            self._documents[document.id] = document
            self._follow_active(document)
        logger.info(
            "%s document %r with %d endpoint(s)",
            "Replaced" if replaced else "Added",
            document.title,
            len(document.endpoints),
        )
        return document

    def update_mock_response(self, doc_id: str, endpoint_id: str, body: str) -> Document:
        with self._lock:
            try:
                document = self._documents[doc_id]
            except KeyError:
                raise DocumentNotFound(doc_id) from None
            try:
                updated = document.with_mock_response(endpoint_id, body)
            except KeyError:
                raise EndpointNotFound(endpoint_id) from None
            self._documents[doc_id] = updated
            self._follow_active(updated)
        logger.info("Mock response updated for endpoint %s in %r", endpoint_id, updated.title)
        return updated

    def get_endpoint(self, doc_id: str, endpoint_id: str) -> EndpointDefinition:
        for endpoint in self.get(doc_id).endpoints:
            if endpoint.id == endpoint_id:
                return endpoint
        raise EndpointNotFound(endpoint_id)

    def activate(self, doc_id: str | None) -> ActivationResult:
        """Activate a library document by id; None deactivates."""
        document = self.get(doc_id) if doc_id is not None else None
        return activate_document(self.registry, document)

    def _follow_active(self, document: Document) -> None:
        active = self.registry.get_active()
        if active is not None and active.id == document.id:
            self.registry.set_active(document)
