"""Centralized path management for receiptsift.

This module provides a single source of truth for all project paths,
eliminating scattered path definitions across modules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


def _get_project_root() -> Path:
    """Determine the project root directory."""
    # receiptsift/runtime/paths.py -> receiptsift/runtime -> receiptsift -> project root
    return Path(__file__).parent.parent.parent


@dataclass
class ProjectPaths:
    """Container for all project-related paths.

    All paths are computed relative to the project root, ensuring consistency
    across all modules regardless of the current working directory.
    """

    root: Path = field(default_factory=_get_project_root)

    def __post_init__(self) -> None:
        # Ensure root is resolved to absolute path
        self.root = self.root.resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def parser_config(self) -> Path:
        """Parser threshold overrides TOML file."""
        return self.config / "parser.toml"

    # --- OCR paths ---
    @property
    def ocr_json(self) -> Path:
        """Raw OCR results (JSON) saved by ``scan --save-ocr``."""
        return self.root / "ocr_json"


# Module-level singleton
_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance.

    Returns:
        The global ProjectPaths instance.
    """
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths
