"""Core DocIndex data models."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, overload

from docindex.utils.files import compute_sha256


@dataclass(frozen=True, slots=True)
class DocumentRecord:
    """One documentation page as listed in the search artifact."""

    id: int
    title: str
    link: str

    def to_dict(self) -> Dict[str, Any]:
        # Field order matches the generated artifact.
        return {"id": self.id, "title": self.title, "link": self.link}


class DocumentIndex(Sequence[DocumentRecord]):
    """Immutable, ordered collection of document records.

    Order reflects generation order only. The index never sorts, filters or
    deduplicates what it is given.
    """

    __slots__ = ("_records", "_by_id")

    def __init__(self, records: Iterable[DocumentRecord] = ()) -> None:
        self._records: Tuple[DocumentRecord, ...] = tuple(records)
        by_id: Dict[int, DocumentRecord] = {}
        for record in self._records:
            by_id.setdefault(record.id, record)
        self._by_id = by_id

    @overload
    def __getitem__(self, item: int) -> DocumentRecord: ...

    @overload
    def __getitem__(self, item: slice) -> "DocumentIndex": ...

    def __getitem__(self, item):
        if isinstance(item, slice):
            return DocumentIndex(self._records[item])
        return self._records[item]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[DocumentRecord]:
        return iter(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DocumentIndex):
            return NotImplemented
        return self._records == other._records

    def __hash__(self) -> int:
        return hash(self._records)

    def __repr__(self) -> str:
        return f"DocumentIndex({len(self._records)} records)"

    @property
    def records(self) -> Tuple[DocumentRecord, ...]:
        return self._records

    def get(self, doc_id: int) -> Optional[DocumentRecord]:
        """Return the first record carrying ``doc_id``, or ``None``."""
        return self._by_id.get(doc_id)

    def ids(self) -> List[int]:
        return [record.id for record in self._records]

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [record.to_dict() for record in self._records]


@dataclass(frozen=True, slots=True)
class ArtifactMetadata:
    """Minimal metadata describing the artifact file a snapshot came from."""

    path: Path
    sha256: str
    mtime: float
    size: int

    @classmethod
    def from_path(cls, path: Path) -> "ArtifactMetadata":
        path = Path(path)
        stat = path.stat()
        return cls(
            path=path,
            sha256=compute_sha256(path),
            mtime=stat.st_mtime,
            size=stat.st_size,
        )

    @classmethod
    def from_content(cls, path: Path, content: bytes, *, mtime: float) -> "ArtifactMetadata":
        """Describe ``path`` from bytes already read out of it."""
        return cls(
            path=Path(path),
            sha256=hashlib.sha256(content).hexdigest(),
            mtime=mtime,
            size=len(content),
        )


@dataclass(frozen=True, slots=True)
class Snapshot:
    """A loaded index paired with the file it was read from."""

    index: DocumentIndex
    metadata: ArtifactMetadata | None = None

    def is_stale(self) -> bool:
        """Report whether the source file changed since it was loaded.

        The artifact has no version field, so the file itself is the only
        source of truth. The hash is recomputed only when size or mtime moved.
        """
        if self.metadata is None:
            return False

        path = self.metadata.path
        try:
            stat = path.stat()
        except FileNotFoundError:
            return True

        if stat.st_size == self.metadata.size and stat.st_mtime == self.metadata.mtime:
            return False
        return compute_sha256(path) != self.metadata.sha256
