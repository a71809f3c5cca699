"""Exam file discovery helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set

__all__ = [
    "parse_extensions",
    "iter_exam_files",
]


def parse_extensions(
    values: Optional[Sequence[str]],
    *,
    default: Optional[Iterable[str]] = None,
) -> Set[str]:
    """Normalize extension strings to a lowercase set without leading dots.

    Parameters
    ----------
    values:
        Raw extension inputs (with or without leading dots).
    default:
        Fallback when ``values`` is empty or holds nothing usable. Defaults to
        ``{"json"}``.
    """
    fallback = set(default or {"json"})
    if not values:
        return fallback

    normalized: Set[str] = set()
    for item in values:
        if not isinstance(item, str):
            continue
        candidate = item.strip().lower().lstrip(".")
        if candidate:
            normalized.add(candidate)
    return normalized or fallback


def iter_exam_files(
    directory: Path,
    extensions: Iterable[str] = ("json",),
    level_limit: int = 1,
) -> List[Path]:
    """Return exam source files under ``directory`` ordered by name.

    ``level_limit == 1`` only looks at files directly inside ``directory``;
    ``2`` includes one level of subdirectories and so on. ``0`` means no
    limit. A missing directory yields an empty list.
    """
    if level_limit < 0:
        raise ValueError("level_limit must be >= 0")

    root = Path(directory)
    if not root.is_dir():
        return []
    exts = parse_extensions(list(extensions))
    found = [
        child
        for child in root.rglob("*")
        if child.is_file()
        and child.suffix.lower().lstrip(".") in exts
        and _within_level_limit(child, root, level_limit)
    ]
    return sorted(found, key=lambda p: (p.name.lower(), str(p)))


def _within_level_limit(path: Path, root: Path, level_limit: int) -> bool:
    if not level_limit:
        return True
    try:
        rel = path.relative_to(root)
    except ValueError:
        return False
    return len(rel.parts) <= level_limit
