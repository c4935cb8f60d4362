"""Tests for the bundle analysis pipeline."""

import pytest

from stmtbundle.analyzer import BundleAnalysis, FileAnalysis, analyze_bundle, render_prompts
from stmtbundle.config import AnalyzerConfig
from stmtbundle.errors import DecodeError, MissingCredentialError, TransportError, UpstreamError
from stmtbundle.prompts import BASE_PROMPT, BUNDLE_PREAMBLE
from stmtbundle.roles import RoleSpec, RoleTable


class FakeCompleter:
    """Records prompts and returns canned replies or raises canned errors."""

    def __init__(self, failures: dict[str, Exception] | None = None):
        self.prompts: list[str] = []
        self.failures = failures or {}

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        for marker, error in self.failures.items():
            if marker in prompt:
                raise error
        return f"summary #{len(self.prompts)}"


class TestPerFileMode:
    """Tests for one request per file."""

    def test_one_request_per_selected_file(self, sample_files):
        """Each recognized file is analyzed once, in role order."""
        client = FakeCompleter()
        analysis = analyze_bundle(sample_files, client, AnalyzerConfig())

        assert [r.name for r in analysis.results] == ["schema.sql", "statement.sql", "plan.txt"]
        assert [r.summary for r in analysis.results] == ["summary #1", "summary #2", "summary #3"]
        assert analysis.ok
        assert len(client.prompts) == 3

    def test_prompts_use_role_instructions(self, sample_files):
        """Per-file prompts carry the base prompt, role instruction and content."""
        client = FakeCompleter()
        analyze_bundle(sample_files, client, AnalyzerConfig())

        plan_prompt = client.prompts[2]
        assert plan_prompt.startswith(BASE_PROMPT)
        assert "slowest operations" in plan_prompt
        assert plan_prompt.endswith("scan cost=100")

    def test_failure_does_not_abort_remaining_files(self, sample_files):
        """An error on one file is recorded and the others still run."""
        client = FakeCompleter(failures={"SELECT": UpstreamError(500, "boom")})
        analysis = analyze_bundle(sample_files, client, AnalyzerConfig())

        assert len(client.prompts) == 3
        assert [r.ok for r in analysis.results] == [True, False, True]
        failed = analysis.failed
        assert [r.name for r in failed] == ["statement.sql"]
        assert isinstance(failed[0].error, UpstreamError)
        assert not analysis.ok

    def test_every_file_failing(self, sample_files):
        """All failures are reported, none raised."""
        client = FakeCompleter(failures={"": TransportError("down")})
        analysis = analyze_bundle(sample_files, client, AnalyzerConfig())
        assert len(analysis.failed) == 3

    def test_failures_are_logged(self, sample_files, caplog):
        """Per-file errors are logged as warnings."""
        client = FakeCompleter(failures={"scan": DecodeError("no choices")})
        with caplog.at_level("WARNING", logger="stmtbundle.analyzer"):
            analyze_bundle(sample_files, client, AnalyzerConfig())
        assert "Error analyzing plan.txt" in caplog.text

    def test_missing_credential_aborts(self, sample_files):
        """Credential errors are not per-file errors."""
        client = FakeCompleter(failures={"": MissingCredentialError("OPENAI_API_KEY not set")})
        with pytest.raises(MissingCredentialError):
            analyze_bundle(sample_files, client, AnalyzerConfig())

    def test_progress_callback(self, sample_files):
        """Progress is reported before each request."""
        calls = []
        analyze_bundle(
            sample_files,
            FakeCompleter(),
            AnalyzerConfig(),
            on_progress=lambda i, n, name: calls.append((i, n, name)),
        )
        assert calls == [(1, 3, "schema.sql"), (2, 3, "statement.sql"), (3, 3, "plan.txt")]

    def test_max_files(self, sample_files):
        """The file cap limits the number of requests."""
        client = FakeCompleter()
        analysis = analyze_bundle(sample_files, client, AnalyzerConfig(max_files=1))
        assert [r.name for r in analysis.results] == ["schema.sql"]

    def test_custom_role_table(self):
        """A substituted table drives selection and instructions."""
        roles = RoleTable(roles=(RoleSpec("trace.json", "Look at the spans."),))
        client = FakeCompleter()
        analysis = analyze_bundle({"trace.json": "{}", "plan.txt": "x"}, client, AnalyzerConfig(), roles=roles)
        assert [r.name for r in analysis.results] == ["trace.json"]
        assert "Look at the spans." in client.prompts[0]


class TestCombinedMode:
    """Tests for one request per bundle."""

    def test_single_request_with_all_files(self, sample_files):
        """Combined mode sends the preamble and every selected file in one prompt."""
        client = FakeCompleter()
        analysis = analyze_bundle(sample_files, client, AnalyzerConfig(mode="combined"))

        assert len(client.prompts) == 1
        prompt = client.prompts[0]
        assert prompt.startswith(BUNDLE_PREAMBLE)
        assert prompt.index("CREATE TABLE") < prompt.index("SELECT") < prompt.index("scan cost=100")
        assert "irrelevant" not in prompt
        assert analysis.results == [FileAnalysis(name="bundle", summary="summary #1")]

    def test_error_recorded(self, sample_files):
        """A failing combined request is recorded on the single result."""
        client = FakeCompleter(failures={"": UpstreamError(401, "bad key")})
        analysis = analyze_bundle(sample_files, client, AnalyzerConfig(mode="combined"))
        assert len(analysis.results) == 1
        assert isinstance(analysis.results[0].error, UpstreamError)


class TestNoRecognizedFiles:
    """Tests for bundles without recognized files."""

    @pytest.mark.parametrize("mode", ["per-file", "combined"])
    def test_no_requests_made(self, mode):
        """Nothing is sent when nothing is selected."""
        client = FakeCompleter()
        analysis = analyze_bundle({"notes.txt": "x"}, client, AnalyzerConfig(mode=mode))
        assert client.prompts == []
        assert analysis == BundleAnalysis(mode=mode)
        assert analysis.ok


class TestRenderPrompts:
    """Tests for render_prompts()."""

    def test_per_file(self, sample_files):
        """One named prompt per selected file."""
        prompts = render_prompts(sample_files, AnalyzerConfig())
        assert [name for name, _ in prompts] == ["schema.sql", "statement.sql", "plan.txt"]

    def test_combined(self, sample_files):
        """A single bundle prompt."""
        prompts = render_prompts(sample_files, AnalyzerConfig(mode="combined"))
        assert len(prompts) == 1
        assert prompts[0][0] == "bundle"
        assert prompts[0][1].startswith(BUNDLE_PREAMBLE)

    def test_nothing_selected(self):
        """No recognized files, no prompts."""
        assert render_prompts({"notes.txt": "x"}, AnalyzerConfig(mode="combined")) == []
