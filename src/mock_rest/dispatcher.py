"""Resolves inbound mock requests against the active document."""

import json
import logging
from dataclasses import dataclass, field
from urllib.parse import quote

from mock_rest.content import CONTENT_TYPES, BodyKind, classify_body
from mock_rest.models import HTTP_METHODS, Document
from mock_rest.state import ActiveDocumentRegistry

logger = logging.getLogger(__name__)

SOURCE_HEADER = "X-MockREST-Source-Document"

DEFAULT_ALLOW = ", ".join(HTTP_METHODS)

# Characters left unescaped by JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"


@dataclass
class MockResponse:
    """Framework-independent response produced by the dispatcher."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None

    def json(self):
        return json.loads(self.body) if self.body else None


def normalize_request_path(path: str) -> str:
    if not path:
        return "/"
    if not path.startswith("/"):
        return "/" + path
    return path


def _json_response(status_code: int, payload: dict, headers: dict[str, str] | None = None) -> MockResponse:
    all_headers = {"Content-Type": CONTENT_TYPES[BodyKind.JSON]}
    all_headers.update(headers or {})
    return MockResponse(status_code, all_headers, json.dumps(payload, ensure_ascii=False))


def _source_header(document: Document) -> dict[str, str]:
    return {SOURCE_HEADER: quote(document.title, safe=_URI_COMPONENT_SAFE)}


class MockDispatcher:
    """Turns (method, path) into the stored mock response or a structured 404."""

    def __init__(self, registry: ActiveDocumentRegistry):
        self.registry = registry

    def handle(self, method: str, path: str) -> MockResponse:
        method = method.upper()
        response = self._resolve(method, normalize_request_path(path))
        if method == "HEAD":
            response.body = None
        return response

    def _resolve(self, method: str, path: str) -> MockResponse:
        document = self.registry.get_active()
        logger.debug("Mock request %s %s", method, path)

        if method == "OPTIONS":
            explicit = document.find_endpoint(method, path) if document else None
            if explicit is None:
                return self._allow_response(document, path)

        if document is None:
            return _json_response(404, {
                "error": "No mock server is currently active in MockREST.",
                "message": "Please activate a document in MockREST to enable its mock endpoints.",
                "requestedMethod": method,
                "requestedPath": path,
            })

        endpoint = document.find_endpoint(method, path)
        if endpoint is None:
            logger.info("No mock for %s %s in %r", method, path, document.title)
            return _json_response(404, {
                "error": f"Mock endpoint not found for {method} {path}",
                "message": (
                    f'The active document "{document.title}" does not have a mock '
                    "defined for this specific method and path."
                ),
                "activeDocument": document.title,
                "requestedMethod": method,
                "requestedPath": path,
                "availableEndpointsInActiveDocument": document.endpoint_labels(),
            })

        classified = classify_body(endpoint.mock_response)
        headers = {"Content-Type": classified.content_type, **_source_header(document)}
        return MockResponse(200, headers, classified.render())

    def _allow_response(self, document: Document | None, path: str) -> MockResponse:
        methods = document.methods_for_path(path) if document else set()
        if methods:
            allow = ", ".join(sorted(methods | {"OPTIONS"}))
            headers = {"Allow": allow, **_source_header(document)}
        else:
            headers = {"Allow": DEFAULT_ALLOW}
        return MockResponse(204, headers)
