"""Persistent storage for the current project and JSON import/export."""
from __future__ import annotations

import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Optional

from jsonschema import Draft7Validator

from .errors import ProjectImportError
from .models import Project

LOGGER = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema" / "project.schema.json"


@lru_cache(maxsize=1)
def _validator() -> Draft7Validator:
    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        schema = json.load(f)
    return Draft7Validator(schema)


def safe_title(title: str) -> str:
    """Title with whitespace runs collapsed to underscores, for file names."""

    return re.sub(r"\s+", "_", title or "")


def project_to_json(project: Project) -> str:
    return json.dumps(project.to_dict(), indent=2)


def project_from_json(text: str, *, source: str = "<string>") -> Project:
    """Parse and validate a project document."""

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProjectImportError(f"Invalid project file {source}: {exc}") from exc

    if not isinstance(payload, dict):
        raise ProjectImportError(f"Invalid project file {source}: expected a JSON object")

    errors = sorted(_validator().iter_errors(payload), key=lambda err: list(err.path))
    if errors:
        first = errors[0]
        location = "/".join(str(part) for part in first.path) or "<root>"
        raise ProjectImportError(f"Invalid project file {source}: {location}: {first.message}")

    return Project.from_dict(payload)


def import_project(path: Path) -> Project:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ProjectImportError(f"Unable to read project file {path}: {exc}") from exc
    project = project_from_json(text, source=str(path))
    LOGGER.info("Imported project '%s' (%d rooms) from %s", project.title, len(project.rooms), path)
    return project


def export_project_json(project: Project, output_dir: Path) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{safe_title(project.title)}_data.json"
    path.write_text(project_to_json(project), encoding="utf-8")
    return path


class ProjectStore:
    """Single-slot store holding the project being edited."""

    def __init__(self, state_file: Path) -> None:
        self.state_file = Path(state_file)

    @property
    def exists(self) -> bool:
        return self.state_file.exists()

    def load(self) -> Optional[Project]:
        if not self.state_file.exists():
            return None
        try:
            text = self.state_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise ProjectImportError(f"Unable to read project state {self.state_file}: {exc}") from exc
        return project_from_json(text, source=str(self.state_file))

    def save(self, project: Project) -> None:
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        self.state_file.write_text(project_to_json(project), encoding="utf-8")
        LOGGER.debug("Saved project '%s' to %s", project.title, self.state_file)

    def clear(self) -> None:
        if self.state_file.exists():
            self.state_file.unlink()


__all__ = [
    "ProjectStore",
    "export_project_json",
    "import_project",
    "project_from_json",
    "project_to_json",
    "safe_title",
]
