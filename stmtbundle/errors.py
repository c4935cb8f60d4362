"""Error taxonomy for the statement bundle analyzer."""

from __future__ import annotations


class BundleAnalyzerError(Exception):
    """Base class for every error raised by stmtbundle."""

    pass


class UsageError(BundleAnalyzerError):
    """Bad or missing command-line argument."""

    pass


class ArchiveReadError(BundleAnalyzerError):
    """The bundle could not be read or is not a valid zip archive."""

    pass


class EntryReadError(BundleAnalyzerError):
    """A single archive member could not be decompressed or read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"failed to read archive entry {path!r}: {reason}")


class MissingCredentialError(BundleAnalyzerError):
    """No API key configured for the completion endpoint."""

    pass


class CompletionError(BundleAnalyzerError):
    """A completion request failed."""

    pass


class TransportError(CompletionError):
    """Network-level failure (DNS, connection, timeout)."""

    pass


class UpstreamError(CompletionError):
    """The completion endpoint answered with a non-success status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"API call failed (HTTP {status_code}): {body}")


class DecodeError(CompletionError):
    """The response body did not have the expected structure."""

    def __init__(self, message: str, raw: str = ""):
        self.raw = raw
        super().__init__(message)


__all__ = [
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
