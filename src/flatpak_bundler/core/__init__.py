# -----------------------------------------------------------------------------
# CORE LAYER
# -----------------------------------------------------------------------------
# The bundle pipeline and its stages:
# - Workspace: staging layout with a clean slate per run
# - Manifest: record builder + strict Jinja2 renderer
# - FlatpakBundler: sequential, fail-fast stage runner
# - Errors: stage-tagged exception taxonomy
# -----------------------------------------------------------------------------

from flatpak_bundler.domain.errors import (
    AssetError,
    BundleError,
    ExternalToolError,
    FilesystemError,
    PathRelativizationError,
    TemplateRenderError,
)
from .manifest import ManifestRenderer, arch_code, build_manifest_record
from .pipeline import FlatpakBundler, bundle_project
from .workspace import prepare_workspace

__all__ = [
    "AssetError", "BundleError", "ExternalToolError", "FilesystemError",
    "PathRelativizationError", "TemplateRenderError",
    "ManifestRenderer", "arch_code", "build_manifest_record",
    "FlatpakBundler", "bundle_project",
    "prepare_workspace",
]
