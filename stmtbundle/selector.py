"""Select, order and truncate the bundle files that get analyzed."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from .config import DEFAULT_MAX_CHARS_PER_FILE
from .roles import RoleTable

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n... [truncated]"


@dataclass(frozen=True)
class SelectedFile:
    """A recognized bundle file ready for prompting."""

    name: str
    content: str
    truncated: bool = False


def truncate_content(content: str, max_chars: int) -> tuple[str, bool]:
    """
    Cut content to ``max_chars`` characters and append the truncation marker.

    Content at or under the limit is returned unchanged.

    Returns:
        Tuple of (content, was_truncated)
    """
    if max_chars <= 0:
        raise ValueError(f"max_chars must be positive, got {max_chars}")
    if len(content) <= max_chars:
        return content, False
    return content[:max_chars] + TRUNCATION_MARKER, True


def select_files(
    contents: Mapping[str, str],
    roles: RoleTable,
    max_chars: int = DEFAULT_MAX_CHARS_PER_FILE,
    max_files: int | None = None,
) -> list[SelectedFile]:
    """
    Pick the archive entries named in the role table.

    Walks the role table in its fixed order, so the result does not depend
    on the iteration order of ``contents``.

    Args:
        contents: Archive member path -> text content
        roles: Recognized files, in selection order
        max_chars: Per-file character limit before truncation
        max_files: Optional cap on the number of selected files

    Returns:
        Selected files in role order (possibly empty)
    """
    if max_files is not None and max_files < 0:
        raise ValueError(f"max_files must not be negative, got {max_files}")

    selected: list[SelectedFile] = []
    for role in roles:
        if max_files is not None and len(selected) >= max_files:
            break
        if role.name not in contents:
            continue
        content, truncated = truncate_content(contents[role.name], max_chars)
        if truncated:
            logger.debug("Truncated %s to %d characters", role.name, max_chars)
        selected.append(SelectedFile(name=role.name, content=content, truncated=truncated))

    logger.debug("Selected %d of %d archive entries: %s", len(selected), len(contents), [f.name for f in selected])
    return selected


__all__ = [
    "SelectedFile",
    "TRUNCATION_MARKER",
    "select_files",
    "truncate_content",
]
