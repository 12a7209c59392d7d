"""Content-type inference for stored mock bodies."""

import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any


class BodyKind(str, Enum):
    JSON = "json"
    HTML = "html"
    XML = "xml"
    TEXT = "text"


CONTENT_TYPES = {
    BodyKind.JSON: "application/json; charset=utf-8",
    BodyKind.HTML: "text/html; charset=utf-8",
    BodyKind.XML: "application/xml; charset=utf-8",
    BodyKind.TEXT: "text/plain; charset=utf-8",
}


@dataclass(frozen=True)
class ClassifiedBody:
    kind: BodyKind
    raw: str
    value: Any = None  # decoded value, JSON only

    @property
    def content_type(self) -> str:
        return CONTENT_TYPES[self.kind]

    def render(self) -> str:
        """Body as sent to the client: compact JSON, otherwise the raw text.

        JSON holding lone surrogates is rendered with ASCII escapes, since it
        cannot be encoded as UTF-8 otherwise.
        """
        if self.kind is BodyKind.JSON:
            text = json.dumps(self.value, ensure_ascii=False, separators=(",", ":"))
            try:
                text.encode("utf-8")
            except UnicodeEncodeError:
                text = json.dumps(self.value, ensure_ascii=True, separators=(",", ":"))
            return text
        return self.raw


def _reject_constant(name: str):
    raise ValueError(f"Non-standard JSON constant: {name}")


def _finite_float(literal: str) -> float:
    value = float(literal)
    if math.isinf(value):
        raise ValueError(f"Number out of range: {literal}")
    return value


def _parse_json(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)
    except (ValueError, RecursionError):
        return False, None


def classify_body(body: str) -> ClassifiedBody:
    """Classify a stored body as JSON, HTML, XML or plain text.

    Never fails: anything that is neither JSON nor tag-delimited markup is
    plain text.
    """
    ok, value = _parse_json(body)
    if ok:
        return ClassifiedBody(BodyKind.JSON, body, value)

    stripped = body.strip()
    if stripped.startswith("<") and stripped.endswith(">"):
        if "<html" in stripped.lower():
            return ClassifiedBody(BodyKind.HTML, body)
        return ClassifiedBody(BodyKind.XML, body)
    return ClassifiedBody(BodyKind.TEXT, body)
