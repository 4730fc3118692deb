# -----------------------------------------------------------------------------
# SHELL OPEN - PROGRAM TABLE
# -----------------------------------------------------------------------------
# Responsibility: Resolve "open with" names to a closed set of programs (or
# the desktop portal protocol) and launch them.
#
# The lookup is a fixed, case-insensitive table. Unknown names are rejected;
# there is no fuzzy matching.
# -----------------------------------------------------------------------------

import platform
import re
import subprocess
from enum import Enum

from rich.console import Console

from flatpak_bundler.infra.portal import portal_open_uri

console = Console()

DEFAULT_OPEN_PATTERN = r"^https?://"


class UnknownProgramError(ValueError):
    """Raised when a program name is not in the open-with table."""

    pass


class ShellOpenError(Exception):
    """Raised when a path is rejected or the program fails to start."""

    pass


class Program(str, Enum):
    """Programs that can open a path or URL."""

    OPEN = "open"
    START = "start"
    XDG_OPEN = "xdg-open"
    GIO = "gio"
    GNOME_OPEN = "gnome-open"
    KDE_OPEN = "kde-open"
    WSLVIEW = "wslview"
    FIREFOX = "firefox"
    CHROME = "chrome"
    CHROMIUM = "chromium"
    SAFARI = "safari"


class Protocol(str, Enum):
    """Non-program ways to open a URL."""

    XDG_DESKTOP_PORTAL = "xdg-desktop-portal"


OPEN_WITH_TABLE: dict[str, Program | Protocol] = {
    "open": Program.OPEN,
    "start": Program.START,
    "xdg-open": Program.XDG_OPEN,
    "xdg-desktop-portal": Protocol.XDG_DESKTOP_PORTAL,
    "gio": Program.GIO,
    "gnome-open": Program.GNOME_OPEN,
    "kde-open": Program.KDE_OPEN,
    "wslview": Program.WSLVIEW,
    "firefox": Program.FIREFOX,
    "chrome": Program.CHROME,
    "google chrome": Program.CHROME,
    "chromium": Program.CHROMIUM,
    "safari": Program.SAFARI,
}

# macOS launches browsers by application name, not executable
MACOS_NAMES = {
    Program.FIREFOX: "Firefox",
    Program.CHROME: "Google Chrome",
    Program.CHROMIUM: "Chromium",
    Program.SAFARI: "Safari",
}

OTHER_NAMES = {
    Program.CHROME: "google-chrome",
}


def parse_open_with(name: str) -> Program | Protocol:
    """
    Resolve a program name (case-insensitive).

    Raises:
        UnknownProgramError: If the name is not in the table.
    """
    try:
        return OPEN_WITH_TABLE[name.strip().lower()]
    except KeyError:
        raise UnknownProgramError(f"unknown program name: {name}") from None


def program_name(program: Program, system: str | None = None) -> str:
    """Platform-specific name used to invoke `program`."""
    system = system or platform.system()
    if system == "Darwin" and program in MACOS_NAMES:
        return MACOS_NAMES[program]
    return OTHER_NAMES.get(program, program.value)


def _command(path: str, program: Program | None, system: str) -> list[str]:
    """Command line that opens `path`, with the system default when program is None."""
    if program is None:
        if system == "Darwin":
            return ["open", path]
        if system == "Windows":
            return ["cmd", "/c", "start", "", path]
        return ["xdg-open", path]

    name = program_name(program, system)
    if system == "Darwin" and program in MACOS_NAMES:
        return ["open", "-a", name, path]
    if program is Program.GIO:
        return ["gio", "open", path]
    if program is Program.START:
        return ["cmd", "/c", "start", "", path]
    return [name, path]


def open_path(
    path: str,
    with_: Program | Protocol | str | None = None,
    pattern: str = DEFAULT_OPEN_PATTERN,
    system: str | None = None,
    ask: bool = False,
) -> None:
    """
    Open a path or URL with the given program, or the system default.

    Args:
        path: Path or URL to open; must match `pattern`
        with_: Program, Protocol, or a name from the table
        pattern: Validation regex (defaults to http(s) URLs only)
        system: Platform override (platform.system() values)
        ask: Let the user pick the application (desktop portal only)

    Raises:
        ShellOpenError: If the path is rejected or the program cannot be launched.
        UnknownProgramError: If `with_` is an unknown name.
    """
    if not re.match(pattern, path):
        raise ShellOpenError(f"failed to open: {path} does not match {pattern}")

    target = parse_open_with(with_) if isinstance(with_, str) else with_
    if target is Protocol.XDG_DESKTOP_PORTAL:
        portal_open_uri(path, ask=ask)
        return

    cmd = _command(path, target, system or platform.system())
    console.print(f"[cyan][SHELL] Opening {path} with {cmd[0]}[/cyan]")
    try:
        subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError as e:
        raise ShellOpenError(f"failed to open: {e}") from e
