"""Serialize document indexes back into artifact files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from docindex.config import DEFAULT_BINDING
from docindex.index.loader import is_valid_binding
from docindex.models import ArtifactMetadata, DocumentIndex
from docindex.utils.files import atomic_write_text

LOGGER = logging.getLogger(__name__)


def dump_artifact(index: DocumentIndex, *, binding: Optional[str] = DEFAULT_BINDING) -> str:
    """Render ``index`` in the compact form the documentation build emits.

    With a binding the result is a script assigning the array to a global
    (``var lunrData = [...];``). ``binding=None`` gives bare JSON.
    """
    if binding is not None and not is_valid_binding(binding):
        raise ValueError(f"Invalid binding name: {binding!r}")
    payload = json.dumps(index.to_dicts(), ensure_ascii=False, separators=(",", ":"))
    if binding is None:
        return payload + "\n"
    return f"var {binding} = {payload};\n"


def write_artifact(
    index: DocumentIndex, path: Path, *, binding: Optional[str] = DEFAULT_BINDING
) -> ArtifactMetadata:
    """Replace the artifact at ``path`` wholesale with ``index``."""
    path = Path(path)
    atomic_write_text(path, dump_artifact(index, binding=binding))
    LOGGER.info("Wrote %d documents to %s", len(index), path)
    return ArtifactMetadata.from_path(path)
