"""
Small filesystem helpers shared by config and scripts.
"""

from pathlib import Path


def get_project_root() -> Path:
    """Return the repository root (the directory holding pyproject.toml)"""

    return Path(__file__).resolve().parents[2]


def ensure_directory(path: Path) -> Path:
    """Create the directory (and parents) if it does not exist yet"""

    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def resolve_path(path: str) -> Path:
    """Resolve a possibly relative path against the project root"""

    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return get_project_root() / candidate
