"""Read and write Document files.

Documents are saved as JSON; hand-written ones may also be YAML.
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from mock_rest.models import Document


class DocumentFileError(ValueError):
    """A document file is unreadable or does not describe a Document."""


def load_document(file_path: Path) -> Document:
    """Load a Document from a JSON or YAML file.

    A file without an ``id`` uses its source URL, or failing that the file
    name, as the document id.
    """
    text = file_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentFileError(f"{file_path}: {e}") from e

    if not isinstance(data, dict):
        raise DocumentFileError(f"{file_path}: expected a mapping at the top level")

    data.setdefault("id", data.get("source_url") or file_path.stem)
    data.setdefault("title", file_path.stem)
    try:
        return Document.model_validate(data)
    except ValidationError as e:
        raise DocumentFileError(f"{file_path}: {e}") from e


def save_document(document: Document, file_path: Path) -> None:
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(document.model_dump_json(indent=2), encoding="utf-8")
