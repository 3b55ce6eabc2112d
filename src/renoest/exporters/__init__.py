"""Document exporters for estimates."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict

from ..errors import ExportError
from ..models import Project
from .excel import export_excel
from .pdf import export_pdf
from .word import export_word

LOGGER = logging.getLogger(__name__)

EXPORTERS: Dict[str, Callable[[Project, Path], Path]] = {
    "pdf": export_pdf,
    "excel": export_excel,
    "word": export_word,
}


def export_project(project: Project, fmt: str, output_dir: Path) -> Path:
    """Render ``project`` in the requested format and return the written path."""

    key = (fmt or "").strip().lower()
    if key not in EXPORTERS:
        available = ", ".join(sorted(EXPORTERS))
        raise ExportError(f"Unsupported export format '{fmt}'. Available formats: {available}")
    path = EXPORTERS[key](project, Path(output_dir))
    LOGGER.info("Exported %s estimate to %s", key, path)
    return path


__all__ = ["EXPORTERS", "export_excel", "export_pdf", "export_project", "export_word"]
