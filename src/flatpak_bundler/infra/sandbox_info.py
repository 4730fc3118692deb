# -----------------------------------------------------------------------------
# SANDBOX INFO - /.flatpak-info
# -----------------------------------------------------------------------------
# Responsibility: Detect that we run inside a Flatpak sandbox and read which
# application, runtime, arch and branch it is.
#
# The file is a GLib keyfile: keys are case-sensitive, a repeated key keeps
# its last value, and values carry GLib escapes (\s, \n, ...).
# -----------------------------------------------------------------------------

from dataclasses import dataclass
from pathlib import Path

from gi.repository import GLib

WELL_KNOWN_PATH = Path("/.flatpak-info")


class SandboxInfoError(Exception):
    """Raised when /.flatpak-info exists but cannot be parsed."""

    pass


@dataclass(frozen=True)
class FlatpakInfo:
    """Selected keys of the /.flatpak-info keyfile."""

    application_name: str  # [Application] name, e.g. app.tauri.example
    application_runtime: str  # [Application] runtime, e.g. runtime/org.gnome.Platform/x86_64/44
    instance_arch: str  # [Instance] arch
    instance_branch: str  # [Instance] branch

    def identifier_triple(self) -> str:
        """name/arch/branch, e.g. app.tauri.example/x86_64/stable."""
        return f"{self.application_name}/{self.instance_arch}/{self.instance_branch}"

    @classmethod
    def try_load(cls, path: Path = WELL_KNOWN_PATH) -> "FlatpakInfo | None":
        """Load the info file; None when not running in a sandbox."""
        if not Path(path).exists():
            return None
        return cls.load_from_file(path)

    @classmethod
    def load_from_file(cls, path: Path) -> "FlatpakInfo":
        keyfile = GLib.KeyFile()
        try:
            keyfile.load_from_file(str(path), GLib.KeyFileFlags.NONE)
            return cls(
                application_name=keyfile.get_string("Application", "name"),
                application_runtime=keyfile.get_string("Application", "runtime"),
                instance_arch=keyfile.get_string("Instance", "arch"),
                instance_branch=keyfile.get_string("Instance", "branch"),
            )
        except GLib.Error as e:
            raise SandboxInfoError(f"failed to read {path}: {e.message}") from e
