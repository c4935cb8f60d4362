"""
Prompt templates for statement bundle analysis.

Two shapes are produced:
- per-file: BASE_PROMPT + role instruction + file content (one request per file)
- combined: BUNDLE_PREAMBLE + every selected file (one request per bundle)
"""

from __future__ import annotations

from collections.abc import Sequence

from .roles import RoleSpec
from .selector import SelectedFile

SYSTEM_PROMPT = "You are a database performance expert."

BASE_PROMPT = """You are a CockroachDB expert. Analyze the following file and identify
inefficiencies and anti-patterns. List up to three things. Only include suggestions
that you are highly confident in being relevant to query performance. Include only the list
not any summary text beforehand.
"""

BUNDLE_PREAMBLE = """You are a CockroachDB expert. The following files come from a statement bundle
collected for a single slow query: its schema, the statement itself and its execution plan.
Analyze them together for query performance and list only the issues you are highly confident in:
* Slow operations shown in the plan
* Missing indexes that might speed up the query
* Anti-patterns in the query
* Anti-patterns in the schema
Include only the list, not any summary text beforehand.

"""


def build_prompt(selected: Sequence[SelectedFile]) -> str:
    """
    Build the single prompt used to analyze a whole bundle.

    File contents are embedded verbatim, each followed by a newline, in
    selection order. With no files the prompt is the bare preamble.
    """
    parts = [BUNDLE_PREAMBLE]
    for selected_file in selected:
        parts.append(selected_file.content + "\n")
    return "".join(parts)


def build_file_prompt(role: RoleSpec, selected_file: SelectedFile) -> str:
    """Build the prompt used to analyze one file on its own."""
    return BASE_PROMPT + role.instruction + "\n\n" + selected_file.content


__all__ = [
    "BASE_PROMPT",
    "BUNDLE_PREAMBLE",
    "SYSTEM_PROMPT",
    "build_file_prompt",
    "build_prompt",
]
