"""Small filesystem helpers used by the adapters and the CLI."""

import os


def file_exists(path: str) -> bool:
    """True when *path* exists and is not a directory."""
    return os.path.exists(path) and not os.path.isdir(path)


def ensure_parent_dir(path: str) -> None:
    """Create the directory that will hold *path* if it is missing."""
    parent = os.path.dirname(os.path.abspath(path))
    if os.path.exists(parent) and not os.path.isdir(parent):
        raise NotADirectoryError(f"Path exists but is not a directory: {parent}")
    os.makedirs(parent, exist_ok=True)
