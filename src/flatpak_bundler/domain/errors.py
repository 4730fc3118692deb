# -----------------------------------------------------------------------------
# PIPELINE ERRORS
# -----------------------------------------------------------------------------
# Every failure raised by a pipeline stage carries the stage it came from.
# Stages wrap the underlying cause with `raise ... from e` and never recover
# locally: the first error ends the run.
# -----------------------------------------------------------------------------

from .models import Stage


class BundleError(Exception):
    """Base class for stage-tagged pipeline failures."""

    def __init__(self, message: str, stage: Stage) -> None:
        super().__init__(message)
        self.stage = stage

    def __str__(self) -> str:
        return f"[{self.stage.value}] {super().__str__()}"


class FilesystemError(BundleError):
    """Raised when a staging directory or file cannot be removed or created."""

    pass


class PathRelativizationError(BundleError):
    """Raised when the project output directory is not inside the workdir."""

    def __init__(self, message: str, stage: Stage = Stage.MANIFEST) -> None:
        super().__init__(message, stage)


class TemplateRenderError(BundleError):
    """Raised when the manifest record and the template do not line up."""

    def __init__(self, message: str, stage: Stage = Stage.MANIFEST) -> None:
        super().__init__(message, stage)


class AssetError(BundleError):
    """Raised when the desktop file or icons cannot be generated."""

    def __init__(self, message: str, stage: Stage = Stage.ASSETS) -> None:
        super().__init__(message, stage)


class ExternalToolError(BundleError):
    """Raised when git, flatpak-builder or flatpak exits non-zero or cannot be spawned."""

    def __init__(
        self,
        message: str,
        stage: Stage,
        command: list[str] | None = None,
        exit_code: int | None = None,
        output: str = "",
    ) -> None:
        super().__init__(message, stage)
        self.command = command or []
        self.exit_code = exit_code
        self.output = output
