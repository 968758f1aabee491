"""Import boundaries between the zones listed in docs/trust_zone.md."""

from __future__ import annotations

import ast
import importlib.util
import re
from dataclasses import dataclass
from pathlib import Path

_PACKAGE_ROOT = Path(__file__).resolve().parents[1]
_ZONE_DOC = _PACKAGE_ROOT / "docs" / "trust_zone.md"
_MAPPING_HEADING = "Current Directory Mapping"
_SECTION_HEADINGS = {"Dependency Rules", "Contributor Checklist"}
_BULLET_PATTERN = re.compile(r"^\s*-\s+`([^`]+)`")

# Zone -> zones it may import from
_MAY_IMPORT = {
    "Pure": {"Pure"},
    "Privileged": {"Pure", "Privileged"},
    "Orchestrator": {"Pure", "Privileged", "Orchestrator"},
}

# Pure parsing code never touches files, the network, the environment or a server
_PURE_FORBIDDEN_MODULES = ("os", "sys", "subprocess", "tomllib", "httpx", "fastapi", "uvicorn", "starlette")


@dataclass(frozen=True)
class ZoneDir:
    zone: str
    parts: tuple[str, ...]

    def owns(self, parts: tuple[str, ...]) -> bool:
        return parts[: len(self.parts)] == self.parts


def _read_zone_dirs() -> list[ZoneDir]:
    """Parse the bullet list under the mapping heading, longest paths first."""
    zone_dirs: list[ZoneDir] = []
    zone: str | None = None
    in_mapping = False

    for line in _ZONE_DOC.read_text(encoding="utf-8").splitlines():
        heading = line.strip()
        if heading == _MAPPING_HEADING:
            in_mapping = True
            continue
        if heading in _SECTION_HEADINGS and in_mapping:
            break
        match = _BULLET_PATTERN.match(line) if in_mapping else None
        if match is None:
            continue

        token = match.group(1).strip()
        if token in _MAY_IMPORT:
            zone = token
        elif zone is not None:
            parts = tuple(part for part in token.strip("/").split("/") if part)
            zone_dirs.append(ZoneDir(zone, parts))

    return sorted(zone_dirs, key=lambda zone_dir: len(zone_dir.parts), reverse=True)


def _zone_of(parts: tuple[str, ...], zone_dirs: list[ZoneDir]) -> str | None:
    for zone_dir in zone_dirs:
        if zone_dir.owns(parts):
            return zone_dir.zone
    return None


def _module_of(path: Path) -> str:
    parts = list(path.relative_to(_PACKAGE_ROOT).with_suffix("").parts)
    if parts[-1] == "__init__":
        parts.pop()
    return ".".join(["receiptsift", *parts])


def _imports(path: Path) -> list[str]:
    """Absolute names of every module imported by ``path`` (relative imports resolved)."""
    module = _module_of(path)
    package = module if path.name == "__init__.py" else module.rpartition(".")[0]
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))

    names: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.extend(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            if node.level == 0:
                names.append(node.module or "")
            else:
                names.append(importlib.util.resolve_name("." * node.level + (node.module or ""), package))
    return [name for name in names if name]


def _zone_files(zone_dirs: list[ZoneDir]) -> list[tuple[Path, str]]:
    files: list[tuple[Path, str]] = []
    for zone_dir in zone_dirs:
        for path in sorted((_PACKAGE_ROOT / Path(*zone_dir.parts)).rglob("*.py")):
            zone = _zone_of(path.relative_to(_PACKAGE_ROOT).parts, zone_dirs)
            if zone == zone_dir.zone:
                files.append((path, zone))
    return files


def test_every_zone_maps_to_existing_directories() -> None:
    zone_dirs = _read_zone_dirs()

    assert {zone_dir.zone for zone_dir in zone_dirs} == set(_MAY_IMPORT)
    missing = [
        "/".join(zone_dir.parts) for zone_dir in zone_dirs if not (_PACKAGE_ROOT / Path(*zone_dir.parts)).is_dir()
    ]
    assert not missing, f"{_ZONE_DOC.name} lists missing directories: {missing}"


def test_zones_only_import_allowed_zones() -> None:
    zone_dirs = _read_zone_dirs()
    violations: list[str] = []

    for path, zone in _zone_files(zone_dirs):
        for name in _imports(path):
            if not name.startswith("receiptsift."):
                continue
            target = _zone_of(tuple(name.split(".")[1:]), zone_dirs)
            if target is not None and target not in _MAY_IMPORT[zone]:
                violations.append(f"{path.relative_to(_PACKAGE_ROOT)}: {zone} imports {name} ({target})")

    assert not violations, "Trust-zone import violations:\n" + "\n".join(violations)


def test_pure_zone_has_no_io_imports() -> None:
    violations: list[str] = []

    for path, zone in _zone_files(_read_zone_dirs()):
        if zone != "Pure":
            continue
        for name in _imports(path):
            if name.split(".")[0] in _PURE_FORBIDDEN_MODULES:
                violations.append(f"{path.relative_to(_PACKAGE_ROOT)}: imports {name}")

    assert not violations, "Pure modules doing I/O:\n" + "\n".join(violations)
