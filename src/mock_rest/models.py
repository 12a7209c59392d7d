"""Data models for imported API documents.

The importer, the admin API and the dispatcher all share these models.
Documents are frozen: an edit always produces a new Document, which is
then swapped into the registry as a whole.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD"]

HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")


def normalize_path(path: str) -> str:
    """Trim whitespace and make sure the path starts with a slash."""
    path = path.strip()
    if not path.startswith("/"):
        path = "/" + path
    return path


class ExampleResponse(BaseModel):
    """One example response found in the documentation."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    body: str
    description: str = ""


class EndpointDefinition(BaseModel):
    """A single mocked endpoint with its editable response body."""

    model_config = ConfigDict(frozen=True)

    id: str
    method: HttpMethod
    path: str  # /users/{id}, matched literally
    description: str = ""
    default_response: str = ""
    example_responses: list[ExampleResponse] = []
    mock_response: str

    @model_validator(mode="before")
    @classmethod
    def _init_mock_response(cls, data):
        if isinstance(data, dict) and data.get("mock_response") is None:
            data = {**data, "mock_response": data.get("default_response", "")}
        return data

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        return normalize_path(value)

    @property
    def label(self) -> str:
        return f"{self.method} {self.path}"

    def matches(self, method: str, path: str) -> bool:
        return self.method == method.upper() and self.path.lower() == path.lower()


class Document(BaseModel):
    """An imported documentation page and its endpoints."""

    model_config = ConfigDict(frozen=True)

    id: str  # source URL
    title: str
    source_url: str = ""
    endpoints: list[EndpointDefinition] = []

    def find_endpoint(self, method: str, path: str) -> EndpointDefinition | None:
        """Return the first endpoint matching method and path, ignoring case."""
        for endpoint in self.endpoints:
            if endpoint.matches(method, path):
                return endpoint
        return None

    def methods_for_path(self, path: str) -> set[str]:
        lowered = path.lower()
        return {ep.method for ep in self.endpoints if ep.path.lower() == lowered}

    def endpoint_labels(self) -> list[str]:
        return [ep.label for ep in self.endpoints]

    def with_mock_response(self, endpoint_id: str, body: str) -> "Document":
        """Return a copy with the mock response of one endpoint replaced.

        Raises KeyError if no endpoint has the given id.
        """
        if not any(ep.id == endpoint_id for ep in self.endpoints):
            raise KeyError(endpoint_id)
        endpoints = [
            ep.model_copy(update={"mock_response": body}) if ep.id == endpoint_id else ep
            for ep in self.endpoints
        ]
        return self.model_copy(update={"endpoints": endpoints})
