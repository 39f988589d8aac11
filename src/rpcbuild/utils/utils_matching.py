# src/rpcbuild/utils/utils_matching.py


from pathlib import Path

from apathetic_utils import get_glob_root, has_glob_chars

from rpcbuild.logs import getAppLogger


def split_glob(path: Path) -> tuple[Path, str]:
    """Split an absolute pattern into its literal directory and glob remainder.

    >>> split_glob(Path("/abs/src/**/*.wit"))
    (PosixPath('/abs/src'), '**/*.wit')
    """
    root = get_glob_root(str(path))
    return root, "/".join(path.parts[len(root.parts) :])


def expand_pattern(pattern: str, root: Path) -> list[Path]:
    """Expand a path or glob pattern into the existing paths it names.

    - Relative patterns are taken relative to `root`; absolute ones as-is.
    - Glob patterns (`*`, `?`, `[...]`, `**`) only match files.
    - Literal paths match if they exist, whether file or directory.

    The result is sorted so expansion is deterministic across platforms.
    """
    logger = getAppLogger()
    pattern = pattern.replace("\\", "/")
    full = Path(pattern) if Path(pattern).is_absolute() else root / pattern

    if not has_glob_chars(pattern):
        logger.trace(f"[MATCH] Treating as literal path → {full}")
        return [full] if full.exists() else []

    glob_root, remainder = split_glob(full)
    if not glob_root.exists():
        logger.trace(f"[MATCH] glob root does not exist: {glob_root}")
        return []

    matches = sorted(p for p in glob_root.glob(remainder) if p.is_file())
    logger.trace(f"[MATCH] {pattern!r} found {len(matches)} file(s)")
    for i, m in enumerate(matches):
        logger.trace(f"[MATCH]   {i + 1:02d}. {m}")
    return matches


def expand_patterns(
    patterns: list[str], root: Path
) -> tuple[list[Path], list[str]]:
    """Expand every pattern; return (matched paths, patterns that matched nothing).

    Paths are de-duplicated while keeping first-seen order.
    """
    seen: set[Path] = set()
    matched: list[Path] = []
    unmatched: list[str] = []
    for pattern in patterns:
        found = expand_pattern(pattern, root)
        if not found:
            unmatched.append(pattern)
        for path in found:
            if path not in seen:
                seen.add(path)
                matched.append(path)
    return matched, unmatched
