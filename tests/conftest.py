"""Shared fixtures for stmtbundle tests."""

import io
import zipfile

import pytest


def build_zip(files: dict[str, str], dirs: tuple[str, ...] = ()) -> bytes:
    """Build a zip archive in memory."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for directory in dirs:
            archive.writestr(zipfile.ZipInfo(directory.rstrip("/") + "/"), "")
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def make_bundle():
    """Factory fixture returning zip bytes for a dict of files."""
    return build_zip


@pytest.fixture
def sample_files() -> dict[str, str]:
    """A typical statement bundle plus one unrecognized file."""
    return {
        "notes.txt": "irrelevant",
        "plan.txt": "scan cost=100",
        "statement.sql": "SELECT * FROM t WHERE a = 1",
        "schema.sql": "CREATE TABLE t (a INT PRIMARY KEY, b STRING)",
    }


@pytest.fixture
def no_api_key(monkeypatch: pytest.MonkeyPatch):
    """Ensure no credential leaks in from the environment."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
