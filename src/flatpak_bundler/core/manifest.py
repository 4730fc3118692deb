# -----------------------------------------------------------------------------
# MANIFEST - DATA BUILDER & RENDERER
# -----------------------------------------------------------------------------
# Responsibility: Turn BuildSettings into the flatpak-builder manifest.
#
# 1. build_manifest_record(): pure function, no I/O, fully typed output
# 2. ManifestRenderer: strict Jinja2 rendering, validated before and after
#
# Unknown names, missing fields and invalid JSON are rejected before anything
# is written.
# -----------------------------------------------------------------------------

import json
import os
from pathlib import Path

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError, meta
from rich.console import Console

from flatpak_bundler.domain.errors import (
    FilesystemError,
    PathRelativizationError,
    TemplateRenderError,
)
from flatpak_bundler.domain.models import BuildSettings, DirectoryLayout, ManifestRecord, Stage

console = Console()

TEMPLATE_NAME = "flatpak-manifest.json.j2"

# Debian architecture names used in the .deb file name
ARCH_CODES = {
    "x86": "i386",
    "x86_64": "amd64",
}


def arch_code(binary_arch: str) -> str:
    """Map a target architecture to its Debian code; unknown values pass through."""
    return ARCH_CODES.get(binary_arch, binary_arch)


def build_manifest_record(settings: BuildSettings, layout: DirectoryLayout) -> ManifestRecord:
    """
    Derive the manifest record from the build settings.

    Pure: same settings and layout in, identical record out.

    Raises:
        PathRelativizationError: If project_out_directory is not inside workdir.
    """
    # Lexical only: ".." segments are collapsed without touching the filesystem
    workdir = Path(os.path.normpath(settings.flatpak.workdir))
    project_out = Path(os.path.normpath(settings.project_out_directory))
    try:
        rel_project_out = project_out.relative_to(workdir)
    except ValueError as e:
        raise PathRelativizationError(
            f"project output directory {project_out} "
            f"is not inside the flatpak workdir {workdir}"
        ) from e

    return ManifestRecord(
        app_id=settings.bundle_identifier,
        app_name=settings.product_name,
        main_binary=settings.main_binary_name,
        deb_package_name=(
            f"{settings.main_binary_name}_{settings.version}_{arch_code(settings.binary_arch)}"
        ),
        project_out_directory=str(project_out),
        cargo_cache_dir=str(layout.cargo_cache),
        yarn_cache_dir=str(layout.package_cache),
        target_cache_dir=str(layout.target_cache),
        workdir=str(workdir),
        local_dir=str(layout.local_dir),
        rel_app_dir=str(settings.flatpak.rel_app_dir),
        rel_tauri_dir=str(settings.flatpak.rel_tauri_dir),
        rel_project_out_directory=str(rel_project_out),
        binary=settings.binary_names(),
        skip_list=[str(p) for p in settings.flatpak.skip_list],
        use_node_cli=settings.flatpak.use_node_cli,
        tauri_cli_version=settings.flatpak.tauri_cli_version,
    )


class ManifestRenderer:
    """
    Strict renderer for the flatpak-builder manifest.

    Uses the template shipped with the package unless a template source is
    given (handy for alternative runtimes, and for tests).
    """

    def __init__(self, template_source: str | None = None) -> None:
        self._env = Environment(
            loader=PackageLoader("flatpak_bundler", "templates"),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        try:
            if template_source is None:
                template_source, _, _ = self._env.loader.get_source(self._env, TEMPLATE_NAME)
            self._source = template_source
            self._template = self._env.from_string(template_source)
        except TemplateError as e:
            raise TemplateRenderError(f"invalid manifest template: {e}") from e

    def referenced_fields(self) -> set[str]:
        """Top-level names the template reads from the record."""
        return meta.find_undeclared_variables(self._env.parse(self._source))

    def validate(self, record: ManifestRecord) -> None:
        """
        Check the template against the record before rendering.

        Raises:
            TemplateRenderError: If the template names a field the record lacks.
        """
        missing = sorted(self.referenced_fields() - set(record.model_dump()))
        if missing:
            raise TemplateRenderError(
                f"manifest template references unknown fields: {', '.join(missing)}"
            )

    def render(self, record: ManifestRecord) -> str:
        """
        Render the manifest document.

        Raises:
            TemplateRenderError: On any template/record mismatch or non-JSON output.
        """
        self.validate(record)
        try:
            document = self._template.render(**record.model_dump())
        except TemplateError as e:
            raise TemplateRenderError(f"failed to render manifest: {e}") from e

        try:
            json.loads(document)
        except json.JSONDecodeError as e:
            raise TemplateRenderError(f"rendered manifest is not valid JSON: {e}") from e

        return document

    def write(self, record: ManifestRecord, layout: DirectoryLayout) -> Path:
        """
        Render and write the manifest to local/{app_id}.json.

        Nothing is written unless the whole document rendered.

        Raises:
            TemplateRenderError: If rendering fails.
            FilesystemError: If the file cannot be written.
        """
        document = self.render(record)
        manifest_path = layout.manifest_path(record.app_id)

        try:
            manifest_path.write_text(document, encoding="utf-8")
        except OSError as e:
            manifest_path.unlink(missing_ok=True)
            raise FilesystemError(
                f"failed to write manifest {manifest_path}: {e}", Stage.MANIFEST
            ) from e

        console.print(f"[green][MANIFEST] Written: {manifest_path}[/green]")
        return manifest_path
