# -----------------------------------------------------------------------------
# SETTINGS LOADER
# -----------------------------------------------------------------------------
# Responsibility: Load BuildSettings from a YAML file and apply environment
# overrides. Relative paths in the file are resolved against the file's
# directory, so a bundle.yaml can live next to the project it describes.
#
# Environment overrides (also read from .env by the CLI):
# - FLATPAK_BUNDLER_REMOTE: remote for --install-deps-from
# - FLATPAK_BUNDLER_SHARED_MODULES_REVISION: pin the shared-modules checkout
# -----------------------------------------------------------------------------

import os
from pathlib import Path

import yaml
from pydantic import ValidationError
from rich.console import Console

from flatpak_bundler.domain.models import BuildSettings

console = Console()

ENV_REMOTE = "FLATPAK_BUNDLER_REMOTE"
ENV_SHARED_MODULES_REVISION = "FLATPAK_BUNDLER_SHARED_MODULES_REVISION"


class SettingsError(Exception):
    """Raised when the settings file is missing, unreadable or invalid."""

    pass


def _resolve(base: Path, value):
    if value is None:
        return None
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base / path
    return Path(os.path.normpath(path))


def load_settings(path: Path, environ: dict | None = None) -> BuildSettings:
    """
    Load and validate build settings.

    Args:
        path: YAML settings file.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Validated BuildSettings.

    Raises:
        SettingsError: If the file cannot be read or does not validate.
    """
    path = Path(path)
    environ = os.environ if environ is None else environ

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise SettingsError(f"failed to read settings {path}: {e}") from e

    if not isinstance(data, dict):
        raise SettingsError(f"settings file {path} must contain a mapping")

    base = path.parent.resolve()
    data["project_out_directory"] = _resolve(base, data.get("project_out_directory"))
    data["icon_files"] = [_resolve(base, p) for p in data.get("icon_files") or []]

    flatpak = dict(data.get("flatpak") or {})
    flatpak["workdir"] = _resolve(base, flatpak.get("workdir"))
    if environ.get(ENV_REMOTE):
        flatpak["remote"] = environ[ENV_REMOTE]
    if environ.get(ENV_SHARED_MODULES_REVISION):
        flatpak["shared_modules_revision"] = environ[ENV_SHARED_MODULES_REVISION]
    data["flatpak"] = flatpak

    try:
        settings = BuildSettings(**data)
    except ValidationError as e:
        raise SettingsError(f"invalid settings in {path}: {e}") from e

    console.print(f"[green][CONFIG] Settings loaded: {settings.bundle_identifier}[/green]")
    return settings
