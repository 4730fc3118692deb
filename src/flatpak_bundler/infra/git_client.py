# -----------------------------------------------------------------------------
# GIT INFRASTRUCTURE - SHARED MODULES CHECKOUT
# -----------------------------------------------------------------------------
# Responsibility: Fetch the Flathub shared-modules repository that the
# manifest refers to (e.g., libappindicator) into the local staging dir.
# Uses subprocess for lean, direct git command execution.
#
# No retry: a failed or half-finished clone is removed by the next run's
# workspace cleanup, since it lives inside local/.
# -----------------------------------------------------------------------------

from pathlib import Path

from rich.console import Console

from flatpak_bundler.domain.errors import ExternalToolError
from flatpak_bundler.domain.models import SHARED_MODULES_URL, Stage
from flatpak_bundler.infra.process import run_tool

console = Console()

GIT_TIMEOUT_SECONDS = 300
FETCH_CONTEXT = "failed to generate dependency sources for bundle manifest"


def checkout_name(url: str) -> str:
    """Directory name git gives a clone of `url`."""
    name = url.rstrip("/").rsplit("/", 1)[-1]
    return name[: -len(".git")] if name.endswith(".git") else name


class GitProvider:
    """
    Lean Git operations wrapper using subprocess.

    Why subprocess over gitpython:
    - No additional dependency
    - Direct control over commands
    - The same failure handling as the flatpak tools
    """

    def __init__(self, workspace_path: Path) -> None:
        """
        Initialize Git provider with the directory clones land in.

        Args:
            workspace_path: Existing directory (the staging local/ dir).
        """
        self._workspace = Path(workspace_path)

        if not self._workspace.is_dir():
            raise ExternalToolError(
                f"{FETCH_CONTEXT}: workspace does not exist: {self._workspace}",
                Stage.DEPENDENCY_SOURCES,
            )

        console.print(f"[cyan][GIT] Workspace: {self._workspace}[/cyan]")

    def _run(self, cmd: list[str]) -> None:
        run_tool(
            cmd,
            Stage.DEPENDENCY_SOURCES,
            FETCH_CONTEXT,
            cwd=self._workspace,
            timeout=GIT_TIMEOUT_SECONDS,
        )

    def clone(self, url: str = SHARED_MODULES_URL, revision: str | None = None) -> Path:
        """
        Clone a repository into the workspace.

        Args:
            url: Repository to clone
            revision: Commit or tag to check out; None keeps the default branch

        Returns:
            Path of the checkout

        Raises:
            ExternalToolError: If git fails (tagged "dependency sources")
        """
        console.print(f"[cyan][GIT] Cloning {url}...[/cyan]")
        self._run(["git", "clone", url])

        checkout = self._workspace / checkout_name(url)
        if revision:
            console.print(f"[cyan][GIT] Pinning {checkout.name} to {revision}[/cyan]")
            self._run(["git", "-C", str(checkout), "checkout", "--detach", revision])
        else:
            console.print(
                f"[yellow][GIT] {checkout.name} is not pinned to a revision[/yellow]"
            )

        console.print(f"[green][GIT] Dependency sources ready: {checkout}[/green]")
        return checkout
