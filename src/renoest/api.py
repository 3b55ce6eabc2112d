from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Sequence

from .calculator import project_totals
from .exporters import EXPORTERS, export_project
from .store import export_project_json, import_project

logger = logging.getLogger(__name__)


@dataclass
class ExportOptions:
    project_file: Path
    output_dir: Optional[Path] = None
    formats: Sequence[str] = field(default_factory=lambda: tuple(EXPORTERS))
    include_json: bool = False


def export_estimate(options: ExportOptions) -> Dict[str, Path]:
    """Programmatic interface to render a saved project and return artifact paths.

    Returns a dict keyed by format name (``pdf``, ``excel``, ``word`` and,
    when requested, ``json``).
    """
    project = import_project(Path(options.project_file))
    output_dir = Path(options.output_dir) if options.output_dir else Path(options.project_file).parent

    totals = project_totals(project)
    logger.info("Grand total for '%s': $%s", project.title, f"{totals.grand_total:,.2f}")

    artifacts: Dict[str, Path] = {}
    for fmt in options.formats:
        artifacts[fmt.lower()] = export_project(project, fmt, output_dir)
    if options.include_json:
        artifacts["json"] = export_project_json(project, output_dir)
    return artifacts


__all__ = ["ExportOptions", "export_estimate"]
