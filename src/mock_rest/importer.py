"""Documentation page importer.

Fetches a documentation page (Confluence or any other HTML/text page) and
asks an LLM to extract the endpoints it describes, together with example
responses. The result is a Document ready to be served.
"""

import json
import logging
import re
import secrets
from urllib.parse import unquote, urlparse

import httpx
from pydantic import BaseModel, ValidationError, field_validator

from mock_rest.llm import LlmClient
from mock_rest.models import Document, EndpointDefinition, ExampleResponse, HttpMethod, normalize_path

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 500_000
FETCH_TIMEOUT = 30.0

SYSTEM_PROMPT = """You are an expert API documentation parser. Given the content of a documentation page (HTML or plain text), extract every API endpoint it defines.

Output a single JSON object with these fields:
- title: the main title of the page. If it is not obvious, use the last part of the URL path, formatted nicely.
- endpoints: array of endpoint objects, each with:
  - method: HTTP method (GET/POST/PUT/DELETE/PATCH/OPTIONS/HEAD)
  - path: the API path (e.g. /users/{id}). Do NOT include the base URL or hostname. Keep query parameters in the path when they define the endpoint.
  - description: short description of the endpoint, including required headers or parameters if mentioned
  - example_responses: array of {status_code (integer), body (string), description (string)}. Capture success (2xx), client error (4xx) and server error (5xx) examples where the page gives them. Keep bodies complete and preserve their original formatting.

If the page is HTML, focus on the text describing APIs: pre-formatted blocks (<pre>, <code>), tables and headings.
If no endpoints are found, return an empty "endpoints" array.

Output ONLY the JSON object, no other text."""


class DocumentImportError(Exception):
    """A documentation page could not be turned into a Document."""


class InvalidSourceUrl(DocumentImportError):
    pass


class PageFetchError(DocumentImportError):
    pass


class LlmOutputError(DocumentImportError):
    pass


class ParsedExample(BaseModel):
    status_code: int
    body: str = ""
    description: str = ""

    @field_validator("body", mode="before")
    @classmethod
    def _body_as_text(cls, value):
        # Models often return JSON bodies as objects instead of strings.
        if value is None:
            return ""
        if not isinstance(value, str):
            return json.dumps(value, indent=2, ensure_ascii=False)
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _description_or_empty(cls, value):
        return "" if value is None else value

    def to_example(self) -> ExampleResponse:
        return ExampleResponse(status_code=self.status_code, body=self.body, description=self.description)


class ParsedEndpoint(BaseModel):
    method: HttpMethod
    path: str
    description: str = ""
    example_responses: list[ParsedExample] = []

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator("description", "example_responses", mode="before")
    @classmethod
    def _null_as_empty(cls, value, info):
        if value is None:
            return "" if info.field_name == "description" else []
        return value


class ParsedPage(BaseModel):
    title: str = ""
    endpoints: list[ParsedEndpoint] = []

    @field_validator("title", mode="before")
    @classmethod
    def _title_or_empty(cls, value):
        return "" if value is None else value


def parse_documentation(url: str, model: str | None = None, client: httpx.Client | None = None) -> Document:
    """Import the documentation page at ``url`` as a Document.

    Raises a DocumentImportError subclass when the URL is invalid, the page
    cannot be fetched, or the LLM reply cannot be understood.
    """
    _validate_url(url)
    content = fetch_page(url, client=client)

    if len(content) > MAX_CONTENT_LENGTH:
        logger.warning(
            "Page content for %s is very large (%d characters). Truncating to %d for AI processing.",
            url, len(content), MAX_CONTENT_LENGTH,
        )
        content = content[:MAX_CONTENT_LENGTH]

    logger.info("Calling LLM for %s with %d characters of content", url, len(content))
    llm = LlmClient(model=model)
    response = llm.call(
        system=SYSTEM_PROMPT,
        user=f"Page URL: {url}\n\nPage content:\n```\n{content}\n```",
        json_mode=True,
    )
    page = _parse_llm_output(response)

    if not page.endpoints:
        logger.warning("LLM returned 0 endpoints for %s (title: %r)", url, page.title)

    endpoints = [_to_endpoint(index, ep) for index, ep in enumerate(page.endpoints)]
    title = page.title.strip() or title_from_url(url)
    logger.info("Parsed %d endpoint(s) from %s, title %r", len(endpoints), url, title)
    return Document(id=url, title=title, source_url=url, endpoints=endpoints)


def fetch_page(url: str, client: httpx.Client | None = None) -> str:
    """Download the page text, raising PageFetchError on any failure."""
    logger.info("Fetching %s", url)
    try:
        if client is None:
            with httpx.Client(follow_redirects=True, timeout=FETCH_TIMEOUT) as own_client:
                response = own_client.get(url)
        else:
            response = client.get(url)
    except httpx.HTTPError as e:
        raise PageFetchError(f"Failed to fetch documentation page: {e}") from e

    if response.is_error:
        logger.error(
            "Failed to fetch %s: %s %s. Body: %s",
            url, response.status_code, response.reason_phrase, response.text[:500],
        )
        raise PageFetchError(
            f"Failed to fetch documentation page: {response.status_code} {response.reason_phrase}. "
            "Check that the URL is publicly accessible and correct."
        )

    text = response.text
    if not text.strip():
        raise DocumentImportError(f"Fetched empty content from {url}")
    logger.info("Fetched %d characters from %s", len(text), url)
    return text


def title_from_url(url: str) -> str:
    """Derive a readable title from the last segment of the URL path."""
    segment = urlparse(url).path.rstrip("/").split("/")[-1]
    title = re.sub(r"[+-]", " ", unquote(segment)).strip()
    return title or "Untitled"


def select_default_response(method: str, path: str, examples: list[ExampleResponse]) -> str:
    """Pick the body served by default: first 2xx example, else the first example."""
    for example in examples:
        if 200 <= example.status_code < 300:
            return example.body
    if examples:
        logger.warning(
            "No 2xx response found for %s %s. Using the first one (status %d) as default.",
            method, path, examples[0].status_code,
        )
        return examples[0].body
    logger.warning("No example responses found for %s %s. Default response will be empty.", method, path)
    return ""


def _validate_url(url: str) -> None:
    if not url or not isinstance(url, str) or not url.startswith(("http://", "https://")):
        raise InvalidSourceUrl("Invalid or empty documentation URL. Must be a valid HTTP/HTTPS URL.")
    if not urlparse(url).netloc:
        raise InvalidSourceUrl(f"URL has no host: {url}")


def _to_endpoint(index: int, parsed: ParsedEndpoint) -> EndpointDefinition:
    path = normalize_path(parsed.path)
    examples = [example.to_example() for example in parsed.example_responses]
    return EndpointDefinition(
        id=f"ep_{index}_{secrets.token_hex(6)}",
        method=parsed.method,
        path=path,
        description=parsed.description,
        default_response=select_default_response(parsed.method, path, examples),
        example_responses=examples,
    )


def _parse_llm_output(text: str) -> ParsedPage:
    json_str = _extract_json(text)
    try:
        return ParsedPage.model_validate(json.loads(json_str))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error("Could not understand LLM output: %s", text[:500])
        raise LlmOutputError(f"LLM returned output that is not a valid endpoint list: {e}") from e


def _extract_json(text: str) -> str:
    """Extract JSON from a response that might contain Markdown code blocks."""
    match = re.search(r"```(?:json)?\s*\n(.*?)```", text, re.DOTALL)
    if match:
        return match.group(1).strip()
    return text.strip()
