# -----------------------------------------------------------------------------
# DESKTOP PORTAL - OPEN URI
# -----------------------------------------------------------------------------
# Responsibility: Ask xdg-desktop-portal to open a URI from inside the
# sandbox (org.freedesktop.portal.OpenURI.OpenURI), via gdbus.
#
# See https://flatpak.github.io/xdg-desktop-portal/
# -----------------------------------------------------------------------------

import subprocess

from rich.console import Console

console = Console()

PORTAL_DESTINATION = "org.freedesktop.portal.Desktop"
PORTAL_OBJECT_PATH = "/org/freedesktop/portal/desktop"
OPEN_URI_METHOD = "org.freedesktop.portal.OpenURI.OpenURI"
PORTAL_TIMEOUT_SECONDS = 5


class PortalError(Exception):
    """Raised when the portal call cannot be made or is refused."""

    pass


def _gvariant_string(value: str) -> str:
    """Quote a string as a GVariant text literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def open_uri_command(uri: str, ask: bool = False) -> list[str]:
    """gdbus command line for OpenURI(parent_window="", uri, options)."""
    options = "{'ask': <true>}" if ask else "@a{sv} {}"
    return [
        "gdbus",
        "call",
        "--session",
        "--dest",
        PORTAL_DESTINATION,
        "--object-path",
        PORTAL_OBJECT_PATH,
        "--method",
        OPEN_URI_METHOD,
        "''",
        _gvariant_string(uri),
        options,
    ]


def portal_open_uri(uri: str, ask: bool = False) -> str:
    """
    Open a URI through the desktop portal.

    Args:
        uri: The URI to open (file:// is not accepted by OpenURI)
        ask: Ask the user to pick the application

    Returns:
        The portal request object path printed by gdbus

    Raises:
        PortalError: If the URI is a file:// URI or the call fails.
    """
    if uri.lower().startswith("file://"):
        raise PortalError("OpenURI does not accept file:// URIs")

    console.print(f"[cyan][PORTAL] OpenURI {uri}[/cyan]")
    try:
        result = subprocess.run(
            open_uri_command(uri, ask),
            capture_output=True,
            text=True,
            timeout=PORTAL_TIMEOUT_SECONDS,
        )
    except subprocess.TimeoutExpired as e:
        raise PortalError(f"portal did not answer within {PORTAL_TIMEOUT_SECONDS}s") from e
    except OSError as e:
        raise PortalError(f"could not run gdbus: {e}") from e

    if result.returncode != 0:
        raise PortalError(f"OpenURI failed: {(result.stderr or result.stdout).strip()}")

    return result.stdout.strip()
