# -----------------------------------------------------------------------------
# FLATPAK INFRASTRUCTURE - BUILDER & EXPORTER
# -----------------------------------------------------------------------------
# Responsibility: Drive flatpak-builder (manifest -> repository) and
# flatpak build-bundle (repository -> single .flatpak file).
#
# No timeout on either: flatpak-builder compiles the whole dependency closure
# and its duration is governed by the tool itself.
# -----------------------------------------------------------------------------

from pathlib import Path

from rich.console import Console

from flatpak_bundler.domain.models import DEFAULT_REMOTE, DirectoryLayout, Stage
from flatpak_bundler.infra.process import run_tool

console = Console()

BUILDER_BINARY = "flatpak-builder"
FLATPAK_BINARY = "flatpak"


class FlatpakProvider:
    """Thin wrapper around the flatpak command line tools."""

    def __init__(
        self, builder_binary: str = BUILDER_BINARY, flatpak_binary: str = FLATPAK_BINARY
    ) -> None:
        self._builder = builder_binary
        self._flatpak = flatpak_binary

    def build(
        self, manifest_path: Path, layout: DirectoryLayout, remote: str = DEFAULT_REMOTE
    ) -> Path:
        """
        Build the manifest into the layout's repository.

        Returns:
            The repository directory

        Raises:
            ExternalToolError: If flatpak-builder fails (tagged "sandbox build")
        """
        console.print(f"[cyan][BUILDER] Building {manifest_path.name} (deps from {remote})...[/cyan]")
        run_tool(
            [
                self._builder,
                "--user",
                f"--install-deps-from={remote}",
                f"--state-dir={layout.state_dir}",
                f"--repo={layout.repository_dir}",
                str(layout.local_build_dir),
                str(manifest_path),
            ],
            Stage.SANDBOX_BUILD,
            "failed to build sandboxed bundle",
        )
        console.print(f"[green][BUILDER] Repository updated: {layout.repository_dir}[/green]")
        return layout.repository_dir

    def build_bundle(self, repository_dir: Path, bundle_path: Path, app_id: str) -> Path:
        """
        Export a single-file bundle from the repository.

        Raises:
            ExternalToolError: If flatpak build-bundle fails (tagged "export")
        """
        console.print(f"[cyan][EXPORT] Exporting {app_id}...[/cyan]")
        run_tool(
            [self._flatpak, "build-bundle", str(repository_dir), str(bundle_path), app_id],
            Stage.EXPORT,
            "failed to export bundle",
        )
        console.print(f"[green][EXPORT] Bundle ready: {bundle_path}[/green]")
        return bundle_path
