# -----------------------------------------------------------------------------
# INFRASTRUCTURE LAYER
# -----------------------------------------------------------------------------
# Contains low-level wrappers around external tools:
# - GitProvider: shared-modules checkout
# - FlatpakProvider: flatpak-builder and flatpak build-bundle
# - portal_open_uri: xdg-desktop-portal OpenURI via gdbus
# - FlatpakInfo: /.flatpak-info reader
# -----------------------------------------------------------------------------

from .flatpak_client import FlatpakProvider
from .git_client import GitProvider
from .portal import PortalError, portal_open_uri
from .sandbox_info import FlatpakInfo, SandboxInfoError

__all__ = [
    "FlatpakProvider", "GitProvider",
    "PortalError", "portal_open_uri",
    "FlatpakInfo", "SandboxInfoError",
]
