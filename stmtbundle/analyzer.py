"""
Bundle analysis pipeline: select files, build prompts, ask the model.

Per-file mode sends one request per recognized file and keeps going when a
request fails. Combined mode sends a single request for the whole bundle.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Protocol

from .config import AnalysisMode, AnalyzerConfig
from .errors import CompletionError
from .prompts import build_file_prompt, build_prompt
from .roles import DEFAULT_ROLES, RoleTable
from .selector import SelectedFile, select_files

logger = logging.getLogger(__name__)

BUNDLE_RESULT_NAME = "bundle"

# (index, total, name), index is 1-based
ProgressCallback = Callable[[int, int, str], None]


class Completer(Protocol):
    """Anything that turns a prompt into a reply."""

    def complete(self, prompt: str) -> str:
        ...


@dataclass
class FileAnalysis:
    """Outcome of one completion request."""

    name: str
    summary: str | None = None
    error: CompletionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BundleAnalysis:
    """Outcome of analyzing a bundle."""

    mode: AnalysisMode
    selected: list[SelectedFile] = field(default_factory=list)
    results: list[FileAnalysis] = field(default_factory=list)

    @property
    def failed(self) -> list[FileAnalysis]:
        return [r for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


def _selected(contents: Mapping[str, str], config: AnalyzerConfig, roles: RoleTable) -> list[SelectedFile]:
    return select_files(
        contents,
        roles,
        max_chars=config.max_chars_per_file,
        max_files=config.max_files,
    )


def render_prompts(
    contents: Mapping[str, str],
    config: AnalyzerConfig,
    roles: RoleTable = DEFAULT_ROLES,
) -> list[tuple[str, str]]:
    """
    Return the (name, prompt) pairs a run would send, without sending them.

    Combined mode yields a single pair named ``bundle``. A bundle with no
    recognized files yields nothing.
    """
    selected = _selected(contents, config, roles)
    if not selected:
        return []
    if config.mode == "combined":
        return [(BUNDLE_RESULT_NAME, build_prompt(selected))]
    return [(f.name, build_file_prompt(roles[f.name], f)) for f in selected]


def _run(client: Completer, name: str, prompt: str) -> FileAnalysis:
    try:
        return FileAnalysis(name=name, summary=client.complete(prompt))
    except CompletionError as e:
        logger.warning("Error analyzing %s: %s", name, e)
        return FileAnalysis(name=name, error=e)


def analyze_bundle(
    contents: Mapping[str, str],
    client: Completer,
    config: AnalyzerConfig,
    roles: RoleTable = DEFAULT_ROLES,
    on_progress: ProgressCallback | None = None,
) -> BundleAnalysis:
    """
    Analyze the recognized files of a bundle.

    Args:
        contents: Archive member path -> text content
        client: Completion client
        config: Mode, limits and model settings
        roles: Recognized files, in selection order
        on_progress: Called before each request

    Returns:
        BundleAnalysis with one result per request made

    Raises:
        MissingCredentialError: Propagated from the client, aborts the run
    """
    selected = _selected(contents, config, roles)
    analysis = BundleAnalysis(mode=config.mode, selected=selected)
    if not selected:
        logger.info("No recognized files in bundle, nothing to analyze")
        return analysis

    if config.mode == "combined":
        if on_progress:
            on_progress(1, 1, BUNDLE_RESULT_NAME)
        analysis.results.append(_run(client, BUNDLE_RESULT_NAME, build_prompt(selected)))
        return analysis

    total = len(selected)
    for index, selected_file in enumerate(selected, start=1):
        if on_progress:
            on_progress(index, total, selected_file.name)
        prompt = build_file_prompt(roles[selected_file.name], selected_file)
        analysis.results.append(_run(client, selected_file.name, prompt))

    return analysis


__all__ = [
    "BundleAnalysis",
    "Completer",
    "FileAnalysis",
    "ProgressCallback",
    "analyze_bundle",
    "render_prompts",
]
