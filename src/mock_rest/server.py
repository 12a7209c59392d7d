"""FastAPI application: mock namespace plus the admin API.

The registry, library and dispatcher are created once per app and kept on
``app.state``; route handlers reach them through the request.
"""

import logging

from fastapi import APIRouter, FastAPI, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from mock_rest.admin import ActivationResult, DocumentLibrary, DocumentNotFound, EndpointNotFound
from mock_rest.config import ServerConfig
from mock_rest.dispatcher import MockDispatcher
from mock_rest.importer import DocumentImportError, InvalidSourceUrl, parse_documentation
from mock_rest.models import HTTP_METHODS, Document, EndpointDefinition
from mock_rest.state import ActiveDocumentRegistry

logger = logging.getLogger(__name__)


class ImportRequest(BaseModel):
    url: str


class ResponseUpdate(BaseModel):
    doc_id: str
    endpoint_id: str
    mock_response: str


class ActivateRequest(BaseModel):
    doc_id: str | None = None


class DocumentSummary(BaseModel):
    id: str
    title: str
    source_url: str
    endpoint_count: int
    active: bool


class ActiveStatus(BaseModel):
    active_doc_id: str | None
    title: str | None


def _library(request: Request) -> DocumentLibrary:
    return request.app.state.library


def _summary(document: Document, active: Document | None) -> DocumentSummary:
    return DocumentSummary(
        id=document.id,
        title=document.title,
        source_url=document.source_url,
        endpoint_count=len(document.endpoints),
        active=active is not None and active.id == document.id,
    )


def _dispatch(request: Request, path: str) -> Response:
    result = request.app.state.dispatcher.handle(request.method, path)
    content = result.body.encode("utf-8", errors="replace") if result.body is not None else None
    return Response(content=content, status_code=result.status_code, headers=result.headers)


def _admin_router() -> APIRouter:
    router = APIRouter(tags=["admin"])

    @router.get("/documents", response_model=list[DocumentSummary])
    def list_documents(request: Request) -> list[DocumentSummary]:
        library = _library(request)
        active = library.registry.get_active()
        return [_summary(doc, active) for doc in library.list()]

    @router.post("/documents", response_model=Document, status_code=201)
    def add_document(document: Document, request: Request) -> Document:
        return _library(request).add(document)

    @router.post("/documents/import", response_model=Document, status_code=201)
    async def import_document(payload: ImportRequest, request: Request) -> Document:
        model = request.app.state.config.model
        try:
            document = await run_in_threadpool(parse_documentation, payload.url, model)
        except InvalidSourceUrl as e:
            raise HTTPException(status_code=422, detail=str(e))
        except DocumentImportError as e:
            logger.warning("Import of %s failed: %s", payload.url, e)
            raise HTTPException(status_code=502, detail=str(e))
        return _library(request).add(document)

    @router.put("/documents/response", response_model=EndpointDefinition)
    def update_response(payload: ResponseUpdate, request: Request) -> EndpointDefinition:
        library = _library(request)
        try:
            library.update_mock_response(payload.doc_id, payload.endpoint_id, payload.mock_response)
            return library.get_endpoint(payload.doc_id, payload.endpoint_id)
        except DocumentNotFound:
            raise HTTPException(status_code=404, detail="Document not found")
        except EndpointNotFound:
            raise HTTPException(status_code=404, detail="Endpoint not found")

    @router.get("/active", response_model=ActiveStatus)
    def get_active(request: Request) -> ActiveStatus:
        active = _library(request).registry.get_active()
        return ActiveStatus(
            active_doc_id=active.id if active else None,
            title=active.title if active else None,
        )

    @router.put("/active", response_model=ActivationResult)
    def set_active(payload: ActivateRequest, request: Request) -> ActivationResult:
        try:
            return _library(request).activate(payload.doc_id)
        except DocumentNotFound:
            raise HTTPException(status_code=404, detail="Document not found")

    return router


def create_app(
    config: ServerConfig | None = None,
    registry: ActiveDocumentRegistry | None = None,
    library: DocumentLibrary | None = None,
) -> FastAPI:
    """Build the FastAPI app with its own registry unless one is given."""
    config = config or ServerConfig.from_env()
    registry = registry or (library.registry if library else ActiveDocumentRegistry())
    library = library or DocumentLibrary(registry)

    app = FastAPI(title="MockREST", description="Serves editable mock responses for imported API docs.")
    app.state.config = config
    app.state.registry = registry
    app.state.library = library
    app.state.dispatcher = MockDispatcher(registry)

    app.include_router(_admin_router(), prefix=config.admin_prefix)

    async def mock_root(request: Request) -> Response:
        return _dispatch(request, "/")

    async def mock_request(request: Request, path: str) -> Response:
        return _dispatch(request, path)

    prefix = config.mock_prefix
    methods = list(HTTP_METHODS)
    app.add_api_route(prefix or "/", mock_root, methods=methods, include_in_schema=False)
    app.add_api_route(prefix + "/{path:path}", mock_request, methods=methods, include_in_schema=False)

    logger.info("Mock endpoints served under %s/, admin API under %s", prefix, config.admin_prefix)
    return app
