"""stmtbundle: LLM-assisted analysis of CockroachDB statement bundles.

Pipeline:
- archive: read the bundle zip into memory
- selector: pick recognized files (schema.sql, statement.sql, plan.txt, env.sql)
- prompts: assemble per-file or whole-bundle prompts
- completion: one chat-completion request per prompt
"""

__version__ = "0.1.0"

from .analyzer import BundleAnalysis, FileAnalysis, analyze_bundle, render_prompts
from .archive import ArchiveEntry, iter_entries, load_bundle, read_archive
from .completion import CompletionClient, parse_reply
from .config import AnalyzerConfig, default_config
from .errors import (
    ArchiveReadError,
    BundleAnalyzerError,
    CompletionError,
    DecodeError,
    EntryReadError,
    MissingCredentialError,
    TransportError,
    UpstreamError,
    UsageError,
)
from .prompts import BUNDLE_PREAMBLE, SYSTEM_PROMPT, build_file_prompt, build_prompt
from .roles import DEFAULT_ROLES, RoleSpec, RoleTable
from .selector import SelectedFile, select_files, truncate_content

__all__ = [
    # Pipeline
    "ArchiveEntry",
    "iter_entries",
    "load_bundle",
    "read_archive",
    "RoleSpec",
    "RoleTable",
    "DEFAULT_ROLES",
    "SelectedFile",
    "select_files",
    "truncate_content",
    "BUNDLE_PREAMBLE",
    "SYSTEM_PROMPT",
    "build_file_prompt",
    "build_prompt",
    "CompletionClient",
    "parse_reply",
    "BundleAnalysis",
    "FileAnalysis",
    "analyze_bundle",
    "render_prompts",
    # Config
    "AnalyzerConfig",
    "default_config",
    # Errors
    "ArchiveReadError",
    "BundleAnalyzerError",
    "CompletionError",
    "DecodeError",
    "EntryReadError",
    "MissingCredentialError",
    "TransportError",
    "UpstreamError",
    "UsageError",
]
