"""DocIndex - typed access to generated documentation search indexes."""

from docindex.index.loader import ArtifactError, load_artifact, load_bundled, parse_artifact
from docindex.index.writer import dump_artifact, write_artifact
from docindex.models import ArtifactMetadata, DocumentIndex, DocumentRecord, Snapshot

__version__ = "0.1.0"

__all__ = [
    "ArtifactError",
    "ArtifactMetadata",
    "DocumentIndex",
    "DocumentRecord",
    "Snapshot",
    "dump_artifact",
    "load_artifact",
    "load_bundled",
    "parse_artifact",
    "write_artifact",
]
