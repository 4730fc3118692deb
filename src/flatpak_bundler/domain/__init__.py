# -----------------------------------------------------------------------------
# DOMAIN LAYER
# -----------------------------------------------------------------------------
# Build settings, the staging directory layout, the manifest record
# (Pydantic models) and the stage-tagged error taxonomy shared by every
# pipeline stage.
# -----------------------------------------------------------------------------

from .errors import (
    AssetError,
    BundleError,
    ExternalToolError,
    FilesystemError,
    PathRelativizationError,
    TemplateRenderError,
)
from .models import (
    BuildSettings,
    DirectoryLayout,
    FlatpakConfig,
    ManifestRecord,
    PipelineState,
    Stage,
)

__all__ = [
    "AssetError", "BundleError", "ExternalToolError", "FilesystemError",
    "PathRelativizationError", "TemplateRenderError",
    "BuildSettings", "DirectoryLayout", "FlatpakConfig", "ManifestRecord",
    "PipelineState", "Stage",
]
