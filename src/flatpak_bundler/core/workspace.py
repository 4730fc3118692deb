# -----------------------------------------------------------------------------
# WORKSPACE MANAGER - STAGING LAYOUT
# -----------------------------------------------------------------------------
# Responsibility: Compute the staging layout under {project_out}/bundle/flatpak
# and give every run a clean slate.
#
# - local/ and local_build/ are deleted on every run (reruns after a failed
#   build never trip over leftovers from the previous attempt)
# - .cache/{cargo,yarn,target} survive between runs
# - repo/ is left alone; flatpak-builder updates it in place
# -----------------------------------------------------------------------------

import shutil
from pathlib import Path

from rich.console import Console

from flatpak_bundler.domain.errors import FilesystemError
from flatpak_bundler.domain.models import DirectoryLayout, Stage

console = Console()


def _remove(path: Path) -> None:
    """Remove a directory tree, or whatever else occupies the path."""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)


def prepare_workspace(project_out_directory: Path) -> DirectoryLayout:
    """
    Build the staging layout and reset its per-run directories.

    Args:
        project_out_directory: The compiled project's output directory.

    Returns:
        The DirectoryLayout for this run.

    Raises:
        FilesystemError: If a directory cannot be removed or created.
    """
    layout = DirectoryLayout.for_project(project_out_directory)
    console.print(f"[cyan][WORKSPACE] Output: {layout.output_dir}[/cyan]")

    try:
        for stale in (layout.local_dir, layout.local_build_dir):
            if stale.exists() or stale.is_symlink():
                console.print(f"[yellow][WORKSPACE] Removing stale {stale.name}/[/yellow]")
                _remove(stale)

        for directory in (
            layout.local_dir,
            layout.cargo_cache,
            layout.package_cache,
            layout.target_cache,
        ):
            directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(
            f"failed to prepare bundle workspace {layout.output_dir}: {e}", Stage.WORKSPACE
        ) from e

    console.print("[green][WORKSPACE] Clean slate ready[/green]")
    return layout
