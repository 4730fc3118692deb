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
# DOMAIN MODELS - BUILD SETTINGS & MANIFEST RECORD
# -----------------------------------------------------------------------------
# BuildSettings come from the caller and are never mutated by the pipeline.
# DirectoryLayout and ManifestRecord are derived fresh on every run.
#
# The ManifestRecord forbids extra fields and requires every declared field,
# so a record that does not match the manifest template is rejected before
# any rendering happens.
# -----------------------------------------------------------------------------

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_REMOTE = "flathub"
SHARED_MODULES_URL = "https://github.com/flathub/shared-modules.git"


class Stage(str, Enum):
    """
    Pipeline stages, in execution order.

    The value is the tag carried by every pipeline error so the caller can
    tell which stage failed without parsing the message.
    """

    WORKSPACE = "workspace"
    ASSETS = "assets"
    MANIFEST = "manifest"
    DEPENDENCY_SOURCES = "dependency sources"
    SANDBOX_BUILD = "sandbox build"
    EXPORT = "export"


class PipelineState(str, Enum):
    """States of one pipeline run. FAILED and EXPORTED are terminal."""

    PENDING = "pending"
    CLEAN = "clean"
    MANIFEST_WRITTEN = "manifest_written"
    SOURCES_FETCHED = "sources_fetched"
    BUILT = "built"
    EXPORTED = "exported"
    FAILED = "failed"


class FlatpakConfig(BaseModel):
    """Flatpak-specific part of the build settings."""

    model_config = ConfigDict(frozen=True)

    workdir: Path = Field(..., description="Root of the project sources copied into the sandbox")
    rel_app_dir: Path = Field(Path("."), description="Frontend directory, relative to workdir")
    rel_tauri_dir: Path = Field(
        Path("src-tauri"), description="Rust crate directory, relative to workdir"
    )
    skip_list: list[Path] = Field(
        default_factory=list, description="Paths (relative to workdir) kept out of the sandbox"
    )
    use_node_cli: bool = Field(False, description="Build through the node CLI instead of cargo")
    tauri_cli_version: str = Field(..., min_length=1, description="Pinned CLI version")
    remote: str = Field(DEFAULT_REMOTE, min_length=1, description="Remote for --install-deps-from")
    shared_modules_url: str = Field(SHARED_MODULES_URL, min_length=1)
    shared_modules_revision: str | None = Field(
        None, description="Commit or tag to check out after cloning shared modules"
    )


class BuildSettings(BaseModel):
    """
    Everything the pipeline needs to know about the application being bundled.

    Supplied by the caller, passed explicitly into every stage.
    """

    model_config = ConfigDict(frozen=True)

    bundle_identifier: str = Field(
        ...,
        min_length=1,
        pattern=r"^[A-Za-z_][A-Za-z0-9_-]*(\.[A-Za-z0-9_-]+)+$",
        description="Reverse-DNS application id (e.g., 'app.tauri.example')",
    )
    product_name: str = Field(..., min_length=1)
    main_binary_name: str = Field(..., min_length=1)
    binaries: list[str] = Field(default_factory=list)
    external_binaries: list[str] = Field(default_factory=list)
    binary_arch: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    project_out_directory: Path
    flatpak: FlatpakConfig
    short_description: str = ""
    icon_files: list[Path] = Field(default_factory=list)

    def binary_names(self) -> list[str]:
        """Binaries to install, main binary first, without duplicates."""
        names = [self.main_binary_name]
        for name in self.binaries:
            if name not in names:
                names.append(name)
        return names


@dataclass(frozen=True)
class DirectoryLayout:
    """Staging layout under {project_out}/bundle/flatpak."""

    output_dir: Path
    local_dir: Path
    local_build_dir: Path
    repository_dir: Path
    cache_dir: Path
    cargo_cache: Path
    package_cache: Path
    target_cache: Path

    @classmethod
    def for_project(cls, project_out_directory: Path) -> "DirectoryLayout":
        output_dir = Path(project_out_directory) / "bundle" / "flatpak"
        cache_dir = output_dir / ".cache"
        return cls(
            output_dir=output_dir,
            local_dir=output_dir / "local",
            local_build_dir=output_dir / "local_build",
            repository_dir=output_dir / "repo",
            cache_dir=cache_dir,
            cargo_cache=cache_dir / "cargo",
            package_cache=cache_dir / "yarn",
            target_cache=cache_dir / "target",
        )

    @property
    def state_dir(self) -> Path:
        return self.output_dir / ".flatpak-builder"

    def manifest_path(self, app_id: str) -> Path:
        return self.local_dir / f"{app_id}.json"

    def bundle_path(self, app_id: str) -> Path:
        return self.output_dir / f"{app_id}.flatpak"


class ManifestRecord(BaseModel):
    """
    The flat data record fed to the manifest template.

    Every path is already a string. Nothing here is optional: the template
    consumes all of it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    app_id: str
    app_name: str
    main_binary: str
    deb_package_name: str
    project_out_directory: str
    cargo_cache_dir: str
    yarn_cache_dir: str
    target_cache_dir: str
    workdir: str
    local_dir: str
    rel_app_dir: str
    rel_tauri_dir: str
    rel_project_out_directory: str
    binary: list[str]
    skip_list: list[str]
    use_node_cli: bool
    tauri_cli_version: str
