# -----------------------------------------------------------------------------
# DESKTOP ASSETS - DESKTOP ENTRY & ICONS
# -----------------------------------------------------------------------------
# Responsibility: Generate the desktop entry and the hicolor icon tree on the
# host, under local/usr/share. The manifest copies them into /app from the
# "flatpak" source directory.
#
# These are the default collaborators of the pipeline; callers can pass their
# own generators with the same signature.
# -----------------------------------------------------------------------------

import shutil
import struct
from pathlib import Path

from rich.console import Console

from flatpak_bundler.domain.errors import AssetError
from flatpak_bundler.domain.models import BuildSettings

console = Console()

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
DEFAULT_CATEGORIES = ["Utility"]


def generate_desktop_file(settings: BuildSettings, dest_dir: Path) -> Path:
    """Write usr/share/applications/{main_binary}.desktop under dest_dir."""
    desktop_dir = Path(dest_dir) / "usr" / "share" / "applications"
    path = desktop_dir / f"{settings.main_binary_name}.desktop"

    lines = [
        "[Desktop Entry]",
        "Type=Application",
        f"Name={settings.product_name}",
        f"Exec={settings.main_binary_name}",
        f"Icon={settings.main_binary_name}",
        "Terminal=false",
        f"Categories={';'.join(DEFAULT_CATEGORIES)};",
    ]
    if settings.short_description:
        lines.insert(4, f"Comment={settings.short_description}")

    try:
        desktop_dir.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    except OSError as e:
        raise AssetError(f"failed to write desktop file {path}: {e}") from e

    console.print(f"[cyan][ASSETS] Desktop entry: {path.name}[/cyan]")
    return path


def png_size(path: Path) -> tuple[int, int]:
    """Width and height from a PNG's IHDR chunk."""
    with open(path, "rb") as f:
        header = f.read(24)
    if len(header) < 24 or not header.startswith(PNG_SIGNATURE) or header[12:16] != b"IHDR":
        raise AssetError(f"not a PNG icon: {path}")
    return struct.unpack(">II", header[16:24])


def generate_icon_files(settings: BuildSettings, dest_dir: Path) -> list[Path]:
    """
    Copy each configured PNG icon into the hicolor theme tree.

    Icons land in usr/share/icons/hicolor/{w}x{h}/apps/{main_binary}.png.
    When two icons share a size, the first one wins.

    Raises:
        AssetError: If an icon is missing, unreadable or not a PNG.
    """
    hicolor = Path(dest_dir) / "usr" / "share" / "icons" / "hicolor"
    written: list[Path] = []

    for icon in settings.icon_files:
        try:
            width, height = png_size(icon)
            target = hicolor / f"{width}x{height}" / "apps" / f"{settings.main_binary_name}.png"
            if target in written:
                console.print(f"[yellow][ASSETS] Skipping duplicate {width}x{height} icon: {icon}[/yellow]")
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(icon, target)
        except OSError as e:
            raise AssetError(f"failed to install icon {icon}: {e}") from e
        written.append(target)

    console.print(f"[cyan][ASSETS] Icons installed: {len(written)}[/cyan]")
    return written
