"""
Pytest configuration and fixtures for flatpak-bundler tests.
"""

import subprocess
import sys
import textwrap
from pathlib import Path
from unittest.mock import patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from flatpak_bundler.domain.models import BuildSettings  # noqa: E402

SETTINGS_YAML = textwrap.dedent(
    """\
    bundle_identifier: app.tauri.example
    product_name: Example
    main_binary_name: example
    binaries: [example, helper]
    external_binaries: [ffmpeg]
    binary_arch: x86_64
    version: 1.0.0
    project_out_directory: target/release
    icon_files: [icons/32x32.png]
    flatpak:
      workdir: .
      rel_tauri_dir: src-tauri
      skip_list: [node_modules]
      tauri_cli_version: 1.2.3
    """
)


@pytest.fixture
def workdir(tmp_path):
    """Project root with a compiled release output directory."""
    root = tmp_path / "app"
    (root / "target" / "release").mkdir(parents=True)
    return root


@pytest.fixture
def make_settings(workdir):
    """Factory for BuildSettings with sensible defaults."""

    def _make(**overrides):
        flatpak = {
            "workdir": workdir,
            "tauri_cli_version": "1.2.3",
            **overrides.pop("flatpak", {}),
        }
        data = {
            "bundle_identifier": "app.tauri.example",
            "product_name": "Example",
            "main_binary_name": "example",
            "binaries": ["example"],
            "binary_arch": "x86_64",
            "version": "1.0.0",
            "project_out_directory": workdir / "target" / "release",
            "flatpak": flatpak,
            **overrides,
        }
        return BuildSettings(**data)

    return _make


@pytest.fixture
def settings(make_settings):
    """Default settings for app.tauri.example."""
    return make_settings()


def completed(cmd=None, returncode=0, stdout="", stderr=""):
    """Build a CompletedProcess like subprocess.run returns."""
    return subprocess.CompletedProcess(
        args=cmd or [], returncode=returncode, stdout=stdout, stderr=stderr
    )


@pytest.fixture
def mock_tools():
    """Mock subprocess.run so every external tool succeeds."""
    with patch("subprocess.run") as run:
        run.side_effect = lambda cmd, **kwargs: completed(cmd)
        yield run


def commands(run_mock):
    """Commands passed to a mocked subprocess.run, in call order."""
    return [call.args[0] for call in run_mock.call_args_list]
