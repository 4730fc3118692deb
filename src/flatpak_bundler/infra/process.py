# -----------------------------------------------------------------------------
# EXTERNAL TOOL RUNNER
# -----------------------------------------------------------------------------
# Responsibility: Run git / flatpak-builder / flatpak and turn every way they
# can fail into an ExternalToolError tagged with the pipeline stage.
#
# - non-zero exit   -> ExternalToolError(exit_code, output tail)
# - spawn failure   -> ExternalToolError (tool missing, permission denied)
# - timeout         -> ExternalToolError (only when a timeout is given)
# -----------------------------------------------------------------------------

import shlex
import subprocess
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from flatpak_bundler.domain.errors import ExternalToolError
from flatpak_bundler.domain.models import Stage

console = Console()

# Keep error messages readable; flatpak-builder can print megabytes
OUTPUT_TAIL_CHARS = 2000


def _tail(text: str | None) -> str:
    text = (text or "").strip()
    if len(text) > OUTPUT_TAIL_CHARS:
        return "..." + text[-OUTPUT_TAIL_CHARS:]
    return text


def run_tool(
    cmd: list[str],
    stage: Stage,
    context: str,
    cwd: Path | None = None,
    timeout: int | None = None,
) -> subprocess.CompletedProcess:
    """
    Run an external tool and fail loudly.

    Args:
        cmd: Command parts (e.g., ["git", "clone", url])
        stage: Pipeline stage to tag errors with
        context: Human-readable description used as the error prefix
        cwd: Working directory for the command
        timeout: Seconds before the tool is killed (None waits forever)

    Returns:
        CompletedProcess result (exit code 0)

    Raises:
        ExternalToolError: On non-zero exit, spawn failure or timeout.
    """
    console.print(f"[dim][EXEC] {escape(shlex.join(cmd))}[/dim]")

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise ExternalToolError(
            f"{context}: {cmd[0]} timed out after {timeout}s", stage, command=cmd
        ) from e
    except (OSError, subprocess.SubprocessError) as e:
        raise ExternalToolError(
            f"{context}: could not run {cmd[0]}: {e}", stage, command=cmd
        ) from e

    if result.returncode != 0:
        output = _tail(result.stderr or result.stdout or "Unknown error")
        console.print(f"[red][EXEC] {cmd[0]} exited with {result.returncode}[/red]")
        raise ExternalToolError(
            f"{context}: {cmd[0]} exited with status {result.returncode}: {output}",
            stage,
            command=cmd,
            exit_code=result.returncode,
            output=output,
        )

    return result
