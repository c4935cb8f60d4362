"""
Command-line entry point.

Usage:
    stmtbundle statement_bundle.zip
    stmtbundle --combined --model gpt-4o statement_bundle.zip
    stmtbundle --dry-run statement_bundle.zip   # print prompts, no API call

Environment:
    OPENAI_API_KEY      Required (except with --dry-run)
    OPENAI_BASE_URL     Alternative OpenAI-compatible endpoint
    STMTBUNDLE_MODEL    Default model (gpt-4)
    STMTBUNDLE_MAX_CHARS, STMTBUNDLE_TIMEOUT
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace

from dotenv import find_dotenv, load_dotenv

from .analyzer import BundleAnalysis, analyze_bundle, render_prompts
from .archive import load_bundle
from .completion import CompletionClient
from .config import AnalyzerConfig
from .errors import ArchiveReadError, EntryReadError, MissingCredentialError, UsageError

BOLD = "\033[1m"
RESET = "\033[0m"


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stmtbundle",
        description="Summarize performance issues in a CockroachDB statement bundle using an LLM",
    )
    parser.add_argument("bundle", help="Path to statement bundle .zip")
    parser.add_argument(
        "--combined",
        action="store_true",
        help="Analyze all files in a single request instead of one request per file",
    )
    parser.add_argument("--model", "-m", help="Model to use (default: gpt-4)")
    parser.add_argument("--base-url", help="OpenAI-compatible API base URL")
    parser.add_argument("--max-chars", type=_positive_int, help="Per-file character limit (default: 8000)")
    parser.add_argument("--max-files", type=_positive_int, help="Analyze at most this many files")
    parser.add_argument("--timeout", type=_positive_float, help="Request timeout in seconds (default: 120)")
    parser.add_argument("--dry-run", action="store_true", help="Print the prompts without calling the API")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI formatting")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> AnalyzerConfig:
    """Environment-derived config with command-line overrides applied."""
    config = AnalyzerConfig.from_env()
    overrides = {
        "model": args.model,
        "base_url": args.base_url,
        "max_chars_per_file": args.max_chars,
        "max_files": args.max_files,
        "timeout_s": args.timeout,
    }
    config = replace(config, **{k: v for k, v in overrides.items() if v is not None})
    if args.combined:
        config = replace(config, mode="combined")
    if args.no_color or not sys.stdout.isatty():
        config = replace(config, colors=False)
    return config


def _heading(text: str, colors: bool) -> str:
    return f"{BOLD}{text}{RESET}" if colors else text


def print_analysis(analysis: BundleAnalysis, colors: bool) -> None:
    for result in analysis.results:
        if not result.ok:
            continue
        print(f"{_heading(f'Summary for {result.name}:', colors)}\n\n{result.summary}\n\n")


def main(argv: list[str] | None = None) -> int:
    load_dotenv(find_dotenv(usecwd=True))
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = config_from_args(args)
        config.validate()
    except UsageError as e:
        parser.error(str(e))

    client = None
    if not args.dry_run:
        client = CompletionClient.from_config(config)
        try:
            client.require_credential()
        except MissingCredentialError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    try:
        contents = load_bundle(args.bundle)
    except (ArchiveReadError, EntryReadError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.dry_run:
        prompts = render_prompts(contents, config)
        if not prompts:
            print("No recognized files found in bundle.")
        for name, prompt in prompts:
            print(f"{_heading(f'Prompt for {name}:', config.colors)}\n\n{prompt}\n")
        return 0

    def on_progress(index: int, total: int, name: str) -> None:
        if config.mode == "combined":
            print("Analyzing bundle...\n", flush=True)
        else:
            print(f"Analyzing file {index} of {total}: {name}...\n", flush=True)

    try:
        with client:
            analysis = analyze_bundle(contents, client, config, on_progress=on_progress)
    except MissingCredentialError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n[interrupted]", file=sys.stderr)
        return 130

    if not analysis.selected:
        print("No recognized files found in bundle.")
        return 0

    print_analysis(analysis, config.colors)
    return 0 if analysis.ok else 1


if __name__ == "__main__":
    sys.exit(main())
