"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ARTIFACT_ENV_VAR = "DOCINDEX_ARTIFACT"
DEFAULT_BINDING = "lunrData"


def _get_default_artifact_path() -> Path | None:
    """Get the artifact path from the environment, if one is set."""
    value = os.environ.get(ARTIFACT_ENV_VAR, "").strip()
    if value:
        return Path(value).expanduser()
    # None selects the artifact bundled with the package
    return None


@dataclass(slots=True)
class AppConfig:
    artifact_path: Path | None = None
    binding: str = DEFAULT_BINDING
    strict: bool = True

    def __post_init__(self) -> None:
        if self.artifact_path is None:
            self.artifact_path = _get_default_artifact_path()
        elif not isinstance(self.artifact_path, Path):
            self.artifact_path = Path(self.artifact_path)

    @property
    def uses_bundled(self) -> bool:
        return self.artifact_path is None

    def resolve_artifact_path(self, base_dir: Path | None = None) -> Path | None:
        if self.artifact_path is None:
            return None
        if self.artifact_path.is_absolute() or base_dir is None:
            return self.artifact_path
        return base_dir / self.artifact_path
