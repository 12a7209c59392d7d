from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from mock_rest.config import ServerConfig
from mock_rest.dispatcher import MockResponse
from mock_rest.importer import InvalidSourceUrl, PageFetchError
from mock_rest.loader import load_document
from mock_rest.models import Document, EndpointDefinition
from mock_rest.server import create_app

FIXTURES = Path(__file__).parent / "fixtures"

PING_DOC = {
    "id": "d1",
    "title": "T",
    "endpoints": [{"id": "e1", "method": "GET", "path": "/ping", "mock_response": '{"ok":true}'}],
}


@pytest.fixture
def app():
    return create_app(ServerConfig())


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def petstore(app):
    doc = load_document(FIXTURES / "petstore.json")
    app.state.library.add(doc)
    app.state.library.activate(doc.id)
    return doc


class TestMockNamespace:
    def test_no_active_document(self, client):
        resp = client.get("/api/mock/pets")
        assert resp.status_code == 404
        assert resp.json()["error"]

    def test_scenario(self, client):
        client.post("/api/admin/documents", json=PING_DOC)
        client.put("/api/admin/active", json={"doc_id": "d1"})

        resp = client.get("/api/mock/ping")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/json")
        assert resp.headers["x-mockrest-source-document"] == "T"
        assert resp.content == b'{"ok":true}'

        resp = client.post("/api/mock/ping")
        assert resp.status_code == 404
        assert resp.json()["availableEndpointsInActiveDocument"] == ["GET /ping"]

        assert client.get("/api/mock/missing").status_code == 404

    def test_json_reserialized(self, client, petstore):
        resp = client.get("/api/mock/pets")
        assert resp.status_code == 200
        assert resp.text == '[{"id":1,"name":"Fido"}]'
        assert resp.headers["x-mockrest-source-document"] == "Petstore%20API"

    def test_json_with_lone_surrogate_is_escaped(self, app, client):
        app.state.library.add(Document(id="s", title="S", endpoints=[
            EndpointDefinition(id="e1", method="GET", path="/s", mock_response='{"s": "\\ud800"}'),
        ]))
        app.state.library.activate("s")
        resp = client.get("/api/mock/s")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/json")
        assert resp.content == b'{"s":"\\ud800"}'

    def test_text_with_lone_surrogate_is_served(self, app, client):
        app.state.dispatcher = MagicMock()
        app.state.dispatcher.handle.return_value = MockResponse(
            200, {"Content-Type": "text/plain; charset=utf-8"}, "bad \ud800 text",
        )
        resp = client.get("/api/mock/t")
        assert resp.status_code == 200
        assert resp.content == b"bad ? text"

    def test_case_insensitive(self, client, petstore):
        resp = client.post("/api/mock/PETS")
        assert resp.status_code == 200
        assert resp.json() == {"id": 2}

    def test_plain_text(self, client, petstore):
        resp = client.get("/api/mock/health")
        assert resp.headers["content-type"] == "text/plain; charset=utf-8"
        assert resp.text == "healthy"

    def test_head_has_no_body(self, app, client):
        app.state.library.add(Document(id="h", title="H", endpoints=[
            EndpointDefinition(id="e1", method="HEAD", path="/file", mock_response="<html></html>"),
        ]))
        app.state.library.activate("h")
        resp = client.head("/api/mock/file")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert resp.content == b""

    def test_options_allow(self, client, petstore):
        resp = client.options("/api/mock/pets")
        assert resp.status_code == 204
        assert resp.headers["allow"] == "GET, OPTIONS, POST"
        assert resp.content == b""

    def test_options_without_document(self, client):
        resp = client.options("/api/mock/pets")
        assert resp.status_code == 204
        assert resp.headers["allow"] == "GET, POST, PUT, DELETE, PATCH, HEAD, OPTIONS"

    def test_nested_path(self, app, client):
        app.state.library.add(Document(id="n", title="N", endpoints=[
            EndpointDefinition(id="e1", method="DELETE", path="/users/{id}/tokens", mock_response=""),
        ]))
        app.state.library.activate("n")
        assert client.delete("/api/mock/users/{id}/tokens").status_code == 200
        assert client.delete("/api/mock/users/42/tokens").status_code == 404

    def test_prefix_root(self, app, client):
        app.state.library.add(Document(id="r", title="R", endpoints=[
            EndpointDefinition(id="e1", method="GET", path="/", mock_response="root"),
        ]))
        app.state.library.activate("r")
        assert client.get("/api/mock").text == "root"
        assert client.get("/api/mock/").text == "root"

    def test_custom_prefix(self):
        app = create_app(ServerConfig(mock_prefix="/mocks"))
        client = TestClient(app)
        assert client.get("/mocks/ping").json()["requestedPath"] == "/ping"


class TestAdminApi:
    def test_list_documents(self, client, petstore):
        resp = client.get("/api/admin/documents")
        assert resp.status_code == 200
        assert resp.json() == [{
            "id": petstore.id,
            "title": "Petstore API",
            "source_url": petstore.source_url,
            "endpoint_count": 3,
            "active": True,
        }]

    def test_add_document_validates(self, client):
        resp = client.post("/api/admin/documents", json={"id": "x", "title": "X", "endpoints": [
            {"id": "e1", "method": "TRACE", "path": "/x"},
        ]})
        assert resp.status_code == 422

    def test_update_response_is_served(self, client, petstore):
        resp = client.put("/api/admin/documents/response", json={
            "doc_id": petstore.id,
            "endpoint_id": "ep_0_list",
            "mock_response": "<pets/>",
        })
        assert resp.status_code == 200
        assert resp.json()["mock_response"] == "<pets/>"

        served = client.get("/api/mock/pets")
        assert served.text == "<pets/>"
        assert served.headers["content-type"].startswith("application/xml")

    def test_update_unknown_ids(self, client, petstore):
        resp = client.put("/api/admin/documents/response", json={
            "doc_id": "https://missing", "endpoint_id": "ep_0_list", "mock_response": "x",
        })
        assert resp.status_code == 404
        resp = client.put("/api/admin/documents/response", json={
            "doc_id": petstore.id, "endpoint_id": "missing", "mock_response": "x",
        })
        assert resp.status_code == 404

    def test_active_status(self, client, petstore):
        assert client.get("/api/admin/active").json() == {"active_doc_id": petstore.id, "title": "Petstore API"}

    def test_deactivate(self, client, petstore):
        resp = client.put("/api/admin/active", json={"doc_id": None})
        assert resp.json() == {"success": True, "message": "Mock server is now deactivated.", "active_doc_id": None}
        assert client.get("/api/mock/pets").status_code == 404
        assert client.get("/api/admin/active").json()["active_doc_id"] is None

    def test_activate_unknown(self, client):
        assert client.put("/api/admin/active", json={"doc_id": "nope"}).status_code == 404

    @patch("mock_rest.server.parse_documentation")
    def test_import(self, mock_parse, client):
        mock_parse.return_value = Document(**PING_DOC)
        resp = client.post("/api/admin/documents/import", json={"url": "https://wiki.example.com/ping"})
        assert resp.status_code == 201
        assert resp.json()["title"] == "T"
        mock_parse.assert_called_once_with("https://wiki.example.com/ping", None)
        assert len(client.get("/api/admin/documents").json()) == 1

    @patch("mock_rest.server.parse_documentation")
    def test_import_invalid_url(self, mock_parse, client):
        mock_parse.side_effect = InvalidSourceUrl("bad url")
        resp = client.post("/api/admin/documents/import", json={"url": "ftp://x"})
        assert resp.status_code == 422
        assert resp.json()["detail"] == "bad url"

    @patch("mock_rest.server.parse_documentation")
    def test_import_fetch_failure(self, mock_parse, client):
        mock_parse.side_effect = PageFetchError("Failed to fetch documentation page: 500")
        resp = client.post("/api/admin/documents/import", json={"url": "https://wiki.example.com/x"})
        assert resp.status_code == 502
