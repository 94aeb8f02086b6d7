"""Parse generated search artifacts into document indexes."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from docindex.models import ArtifactMetadata, DocumentIndex, DocumentRecord, Snapshot

LOGGER = logging.getLogger(__name__)

BUNDLED_ARTIFACT = "lunr-data.js"
REQUIRED_FIELDS = ("id", "title", "link")

_IDENTIFIER = r"[A-Za-z_$][\w$]*"
_ASSIGNMENT = re.compile(rf"^(?:var|let|const)\s+({_IDENTIFIER})\s*=\s*")
_BINDING = re.compile(_IDENTIFIER)


def is_valid_binding(name: str) -> bool:
    """Return whether ``name`` can be used as the assigned global."""
    return _BINDING.fullmatch(name) is not None


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """A single problem found in a decoded record."""

    position: int
    field: Optional[str]
    message: str

    def __str__(self) -> str:
        where = f"record {self.position}"
        if self.field:
            where += f" field '{self.field}'"
        return f"{where}: {self.message}"


class ArtifactError(ValueError):
    """Raised when an artifact cannot be loaded."""

    def __init__(self, message: str, issues: Sequence[ValidationIssue] = ()) -> None:
        self.issues: List[ValidationIssue] = list(issues)
        if self.issues:
            shown = "; ".join(str(issue) for issue in self.issues[:5])
            extra = len(self.issues) - 5
            if extra > 0:
                shown += f"; and {extra} more"
            message = f"{message}: {shown}"
        super().__init__(message)


def _strip_binding(text: str, binding: Optional[str]) -> str:
    body = text.lstrip("\ufeff").strip()
    match = _ASSIGNMENT.match(body)
    if match:
        name = match.group(1)
        if binding is not None and name != binding:
            raise ArtifactError(f"Artifact binds '{name}', expected '{binding}'")
        body = body[match.end():]
    elif binding is not None and not body.startswith("["):
        raise ArtifactError(f"Artifact does not assign '{binding}'")

    body = body.rstrip()
    if body.endswith(";"):
        body = body[:-1].rstrip()
    return body


def decode_artifact(text: str, *, binding: Optional[str] = None) -> List[Dict[str, Any]]:
    """Decode raw artifact text into a list of JSON objects.

    Accepts bare JSON or a ``var <binding> = [...];`` script. Only the
    structure is checked here; field contents are left to validation.
    """
    body = _strip_binding(text, binding)
    try:
        items = json.loads(body)
    except json.JSONDecodeError as exc:
        raise ArtifactError(f"Artifact is not valid JSON ({exc.msg} at line {exc.lineno} column {exc.colno})") from exc

    if not isinstance(items, list):
        raise ArtifactError(f"Artifact must be an array, got {type(items).__name__}")

    issues = [
        ValidationIssue(position, None, f"expected an object, got {type(item).__name__}")
        for position, item in enumerate(items)
        if not isinstance(item, dict)
    ]
    if issues:
        raise ArtifactError("Malformed artifact", issues)
    return items


def _is_valid_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_text(position: int, item: Dict[str, Any], field: str) -> Optional[ValidationIssue]:
    if field not in item or item[field] is None:
        return ValidationIssue(position, field, "missing")
    value = item[field]
    if not isinstance(value, str):
        return ValidationIssue(position, field, f"must be a string, got {type(value).__name__}")
    if not value:
        return ValidationIssue(position, field, "must not be empty")
    return None


def validate_records(items: Sequence[Any]) -> List[ValidationIssue]:
    """Check decoded items against the record invariants.

    Every record needs an integer ``id`` unique within the artifact and
    non-empty ``title`` and ``link`` strings. Unknown fields are ignored.
    """
    issues: List[ValidationIssue] = []
    seen: Dict[int, int] = {}

    for position, item in enumerate(items):
        if not isinstance(item, dict):
            issues.append(ValidationIssue(position, None, f"expected an object, got {type(item).__name__}"))
            continue

        if "id" not in item or item["id"] is None:
            issues.append(ValidationIssue(position, "id", "missing"))
        elif not _is_valid_id(item["id"]):
            issues.append(
                ValidationIssue(position, "id", f"must be an integer, got {type(item['id']).__name__}")
            )
        else:
            doc_id = item["id"]
            if doc_id in seen:
                issues.append(
                    ValidationIssue(
                        position, "id", f"duplicate id {doc_id} (first seen at record {seen[doc_id]})"
                    )
                )
            else:
                seen[doc_id] = position

        for field in ("title", "link"):
            issue = _check_text(position, item, field)
            if issue is not None:
                issues.append(issue)

    return issues


def _degrade_text(position: int, item: Dict[str, Any], field: str) -> str:
    value = item.get(field)
    if value is None:
        LOGGER.warning("Record %d has no %s, using empty string", position, field)
        return ""
    if not isinstance(value, str):
        LOGGER.warning("Record %d has non-string %s %r, converting", position, field, value)
        return str(value)
    return value


def _build_lenient(items: Sequence[Dict[str, Any]]) -> DocumentIndex:
    records: List[DocumentRecord] = []
    seen: set[int] = set()
    for position, item in enumerate(items):
        doc_id = item.get("id")
        if not _is_valid_id(doc_id):
            LOGGER.warning("Skipping record %d: invalid id %r", position, doc_id)
            continue
        if doc_id in seen:
            LOGGER.warning("Record %d repeats id %d", position, doc_id)
        seen.add(doc_id)
        records.append(
            DocumentRecord(
                id=doc_id,
                title=_degrade_text(position, item, "title"),
                link=_degrade_text(position, item, "link"),
            )
        )
    return DocumentIndex(records)


def build_index(items: Sequence[Dict[str, Any]], *, strict: bool = True) -> DocumentIndex:
    """Turn decoded objects into a :class:`DocumentIndex`, keeping input order."""
    if not strict:
        return _build_lenient(items)

    issues = validate_records(items)
    if issues:
        raise ArtifactError("Invalid artifact", issues)

    extra = sum(1 for item in items if set(item) - set(REQUIRED_FIELDS))
    if extra:
        LOGGER.debug("Ignoring unknown fields on %d records", extra)

    return DocumentIndex(
        DocumentRecord(id=item["id"], title=item["title"], link=item["link"]) for item in items
    )


def parse_artifact(
    text: str, *, strict: bool = True, binding: Optional[str] = None
) -> DocumentIndex:
    """Parse artifact text into an index."""
    items = decode_artifact(text, binding=binding)
    index = build_index(items, strict=strict)
    LOGGER.debug("Parsed %d records (%d in artifact)", len(index), len(items))
    return index


def load_artifact(
    path: Path, *, strict: bool = True, binding: Optional[str] = None
) -> Snapshot:
    """Load an artifact file and remember where it came from."""
    path = Path(path)
    try:
        mtime = path.stat().st_mtime
        content = path.read_bytes()
        # Hash and parse the same bytes so the snapshot matches its index.
        metadata = ArtifactMetadata.from_content(path, content, mtime=mtime)
        text = content.decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ArtifactError(f"Unable to read artifact {path}: {exc}") from exc

    index = parse_artifact(text, strict=strict, binding=binding)
    LOGGER.info("Loaded %d documents from %s", len(index), path)
    return Snapshot(index=index, metadata=metadata)


def load_bundled(*, strict: bool = True) -> DocumentIndex:
    """Load the SignServer manual index shipped with the package."""
    resource = files("docindex.data").joinpath(BUNDLED_ARTIFACT)
    return parse_artifact(resource.read_text(encoding="utf-8"), strict=strict)
