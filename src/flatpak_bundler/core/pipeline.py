# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# THE BUNDLER - FLATPAK PIPELINE
# -----------------------------------------------------------------------------
# Responsibility: Run the stages in order, one after the other:
#
#   workspace -> assets -> manifest -> dependency sources -> sandbox build -> export
#
# Fail fast: the first stage error marks the run FAILED and is re-raised to
# the caller unchanged. There is no retry and no resume; a rerun starts over
# from the workspace clean slate.
#
# Flight Recorder: every transition is logged to flight_recorder.json in the
# output directory, pass or fail.
# -----------------------------------------------------------------------------

import json
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from flatpak_bundler.core.assets import generate_desktop_file, generate_icon_files
from flatpak_bundler.core.manifest import ManifestRenderer, build_manifest_record
from flatpak_bundler.core.workspace import prepare_workspace
from flatpak_bundler.domain.errors import AssetError, BundleError
from flatpak_bundler.domain.models import BuildSettings, DirectoryLayout, PipelineState, Stage
from flatpak_bundler.infra.flatpak_client import FlatpakProvider
from flatpak_bundler.infra.git_client import GitProvider

console = Console()

RECORDER_FILENAME = "flight_recorder.json"

AssetGenerator = Callable[[BuildSettings, Path], object]

# Forward-only transitions; FAILED is reachable from any non-terminal state
NEXT_STATE = {
    PipelineState.PENDING: PipelineState.CLEAN,
    PipelineState.CLEAN: PipelineState.MANIFEST_WRITTEN,
    PipelineState.MANIFEST_WRITTEN: PipelineState.SOURCES_FETCHED,
    PipelineState.SOURCES_FETCHED: PipelineState.BUILT,
    PipelineState.BUILT: PipelineState.EXPORTED,
}
TERMINAL_STATES = {PipelineState.EXPORTED, PipelineState.FAILED}


@dataclass
class FlightLogEntry:
    """A single entry in the flight recorder."""

    timestamp: str
    event: str
    details: str | None = None


@dataclass
class PipelineRun:
    """State of one pipeline invocation."""

    app_id: str
    state: PipelineState = PipelineState.PENDING
    log: list[FlightLogEntry] = field(default_factory=list)
    error: BundleError | None = None

    def record(self, event: str, details: str | None = None) -> None:
        self.log.append(
            FlightLogEntry(
                timestamp=datetime.now(timezone.utc).isoformat(), event=event, details=details
            )
        )

    def advance(self, new_state: PipelineState) -> None:
        """
        Move to the next state.

        Raises:
            ValueError: On a backwards or skipping transition, or out of a terminal state.
        """
        if self.state in TERMINAL_STATES:
            raise ValueError(f"pipeline already finished ({self.state.value})")
        if new_state is not PipelineState.FAILED and NEXT_STATE[self.state] is not new_state:
            raise ValueError(
                f"invalid transition {self.state.value} -> {new_state.value}"
            )
        self.record("STATE", f"{self.state.value} -> {new_state.value}")
        self.state = new_state

    def fail(self, error: BundleError) -> None:
        self.error = error
        self.advance(PipelineState.FAILED)
        self.record("FAILED", str(error))

    def save(self, folder: Path) -> Path:
        """Write flight_recorder.json into folder."""
        path = folder / RECORDER_FILENAME
        with open(path, "w") as f:
            json.dump(
                {
                    "app_id": self.app_id,
                    "state": self.state.value,
                    "stage": self.error.stage.value if self.error else None,
                    "log": [asdict(e) for e in self.log],
                },
                f,
                indent=2,
            )
        return path


class FlatpakBundler:
    """
    Sequential Flatpak bundle pipeline.

    Collaborators are injectable so the external tools can be swapped out
    (and mocked in tests) without touching the stage logic.
    """

    def __init__(
        self,
        desktop_generator: AssetGenerator = generate_desktop_file,
        icon_generator: AssetGenerator = generate_icon_files,
        renderer: ManifestRenderer | None = None,
        git_factory: Callable[[Path], GitProvider] = GitProvider,
        flatpak: FlatpakProvider | None = None,
    ) -> None:
        self._desktop_generator = desktop_generator
        self._icon_generator = icon_generator
        self._renderer = renderer or ManifestRenderer()
        self._git_factory = git_factory
        self._flatpak = flatpak or FlatpakProvider()
        self.last_run: PipelineRun | None = None

    def _generate_assets(self, settings: BuildSettings, layout: DirectoryLayout) -> None:
        """Run both asset collaborators into local/; any failure is an assets-stage error."""
        for generator in (self._desktop_generator, self._icon_generator):
            try:
                generator(settings, layout.local_dir)
            except BundleError:
                raise
            except Exception as e:
                raise AssetError(f"failed to generate desktop assets: {e}") from e

    def bundle(self, settings: BuildSettings) -> list[Path]:
        """
        Produce {project_out}/bundle/flatpak/{app_id}.flatpak.

        Args:
            settings: Build settings for the application (never mutated).

        Returns:
            A one-element list holding the bundle path.

        Raises:
            BundleError: The first stage failure, tagged with its stage.
        """
        app_id = settings.bundle_identifier
        run = PipelineRun(app_id=app_id)
        self.last_run = run
        layout = DirectoryLayout.for_project(settings.project_out_directory)

        console.print(f"[bold cyan][BUNDLER] Bundling {app_id} ({settings.version})[/bold cyan]")
        console.print(f"[cyan][BUNDLER] Flatpak workdir: {settings.flatpak.workdir}[/cyan]")

        stage = Stage.WORKSPACE
        try:
            layout = prepare_workspace(settings.project_out_directory)
            run.advance(PipelineState.CLEAN)

            stage = Stage.ASSETS
            self._generate_assets(settings, layout)
            run.record("ASSETS_GENERATED", str(layout.local_dir))

            for sidecar in settings.external_binaries:
                console.print(
                    f"[yellow][BUNDLER] External binary not installed by the manifest: {sidecar}[/yellow]"
                )

            stage = Stage.MANIFEST
            record = build_manifest_record(settings, layout)
            manifest_path = self._renderer.write(record, layout)
            run.record("MANIFEST_SAVED", str(manifest_path))
            run.advance(PipelineState.MANIFEST_WRITTEN)

            stage = Stage.DEPENDENCY_SOURCES
            git = self._git_factory(layout.local_dir)
            git.clone(settings.flatpak.shared_modules_url, settings.flatpak.shared_modules_revision)
            run.advance(PipelineState.SOURCES_FETCHED)

            stage = Stage.SANDBOX_BUILD
            self._flatpak.build(manifest_path, layout, settings.flatpak.remote)
            run.advance(PipelineState.BUILT)

            stage = Stage.EXPORT
            bundle_path = self._flatpak.build_bundle(
                layout.repository_dir, layout.bundle_path(app_id), app_id
            )
            run.record("BUNDLE_EXPORTED", str(bundle_path))
            run.advance(PipelineState.EXPORTED)
        except BundleError as e:
            console.print(f"[red][BUNDLER] Stage '{e.stage.value}' failed: {escape(str(e))}[/red]")
            run.fail(e)
            raise
        except Exception as e:
            console.print(f"[red][BUNDLER] Stage '{stage.value}' crashed: {escape(repr(e))}[/red]")
            run.fail(BundleError(f"unexpected error: {e!r}", stage))
            raise
        finally:
            self._save_recorder(run, layout)

        console.print(f"[bold green][BUNDLER] Done: {bundle_path}[/bold green]")
        return [bundle_path]

    def _save_recorder(self, run: PipelineRun, layout: DirectoryLayout) -> None:
        if not layout.output_dir.is_dir():
            return
        try:
            path = run.save(layout.output_dir)
        except OSError as e:
            console.print(f"[yellow][BUNDLER] Could not save flight recorder: {e}[/yellow]")
            return
        console.print(f"[dim][BUNDLER] Flight recorder: {path}[/dim]")


def bundle_project(settings: BuildSettings, **collaborators) -> list[Path]:
    """
    Bundle an application as a single-file Flatpak.

    The pipeline's sole entry point. Keyword arguments are passed to
    FlatpakBundler (asset generators, renderer, git factory, flatpak provider).
    """
    return FlatpakBundler(**collaborators).bundle(settings)
