# src/rpcbuild/utils/utils_paths.py


import shutil
from pathlib import Path


def resolve_against(path: Path | str, root: Path) -> Path:
    """Return `path` as an absolute path, treating relative paths as under `root`."""
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return root / candidate


def remove_path(path: Path) -> bool:
    """Delete a file, symlink or directory tree; return False if it was absent.

    Symlinks are unlinked, never followed.
    """
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return True
    if path.exists() or path.is_symlink():
        path.unlink()
        return True
    return False
