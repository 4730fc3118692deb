# =============================================================================
# EXTERNAL TOOL RUNNER TESTS
# =============================================================================

import subprocess
from unittest.mock import patch

import pytest
from conftest import completed

from flatpak_bundler.domain.errors import ExternalToolError
from flatpak_bundler.domain.models import Stage
from flatpak_bundler.infra.process import OUTPUT_TAIL_CHARS, run_tool


class TestRunTool:
    """Test run_tool()."""

    def test_success_returns_result(self):
        with patch("subprocess.run", return_value=completed(["git"], stdout="ok")) as run:
            result = run_tool(["git", "status"], Stage.DEPENDENCY_SOURCES, "ctx")

        assert result.stdout == "ok"
        assert run.call_args.kwargs["capture_output"] is True
        assert run.call_args.kwargs["timeout"] is None

    def test_non_zero_exit(self):
        """Non-zero exit carries stage, exit code and output."""
        with patch("subprocess.run", return_value=completed(returncode=2, stderr="boom")):
            with pytest.raises(ExternalToolError) as exc_info:
                run_tool(["flatpak", "build-bundle"], Stage.EXPORT, "failed to export bundle")

        error = exc_info.value
        assert error.stage == Stage.EXPORT
        assert error.exit_code == 2
        assert error.output == "boom"
        assert error.command == ["flatpak", "build-bundle"]
        assert str(error).startswith("[export] failed to export bundle")

    def test_stdout_used_when_stderr_empty(self):
        with patch("subprocess.run", return_value=completed(returncode=1, stdout="from stdout")):
            with pytest.raises(ExternalToolError) as exc_info:
                run_tool(["git"], Stage.DEPENDENCY_SOURCES, "ctx")
        assert exc_info.value.output == "from stdout"

    def test_long_output_truncated(self):
        with patch("subprocess.run", return_value=completed(returncode=1, stderr="x" * 10000)):
            with pytest.raises(ExternalToolError) as exc_info:
                run_tool(["flatpak-builder"], Stage.SANDBOX_BUILD, "ctx")
        assert len(exc_info.value.output) == OUTPUT_TAIL_CHARS + 3

    def test_missing_tool(self):
        """A tool that cannot be spawned is an ExternalToolError."""
        with patch("subprocess.run", side_effect=FileNotFoundError("no such file")):
            with pytest.raises(ExternalToolError) as exc_info:
                run_tool(["flatpak-builder"], Stage.SANDBOX_BUILD, "failed to build sandboxed bundle")

        assert exc_info.value.exit_code is None
        assert "could not run flatpak-builder" in str(exc_info.value)

    def test_timeout(self):
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="git", timeout=5)):
            with pytest.raises(ExternalToolError) as exc_info:
                run_tool(["git", "clone"], Stage.DEPENDENCY_SOURCES, "ctx", timeout=5)
        assert "timed out" in str(exc_info.value)
