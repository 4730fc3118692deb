# =============================================================================
# MANIFEST TESTS
# =============================================================================
# Tests for the manifest data builder and the strict renderer.
# =============================================================================

import json

import pytest

from flatpak_bundler.core.manifest import (
    ManifestRenderer,
    arch_code,
    build_manifest_record,
)
from flatpak_bundler.core.workspace import prepare_workspace
from flatpak_bundler.domain.errors import PathRelativizationError, TemplateRenderError
from flatpak_bundler.domain.models import DirectoryLayout, Stage


class TestArchCode:
    """Test the Debian architecture lookup."""

    def test_x86(self):
        assert arch_code("x86") == "i386"

    def test_x86_64(self):
        assert arch_code("x86_64") == "amd64"

    @pytest.mark.parametrize("arch", ["aarch64", "armv7", "riscv64", "", "AMD64"])
    def test_other_values_pass_through(self, arch):
        """Anything outside the table is returned unchanged."""
        assert arch_code(arch) == arch


class TestBuildManifestRecord:
    """Test build_manifest_record()."""

    def test_example_scenario(self, settings, workdir):
        """The documented example produces the expected names."""
        layout = DirectoryLayout.for_project(settings.project_out_directory)
        record = build_manifest_record(settings, layout)

        assert record.deb_package_name == "example_1.0.0_amd64"
        assert record.app_id == "app.tauri.example"
        assert record.main_binary == "example"
        assert record.rel_project_out_directory == "target/release"
        assert record.workdir == str(workdir)
        assert record.local_dir == str(layout.local_dir)
        assert record.cargo_cache_dir == str(layout.cargo_cache)
        assert record.yarn_cache_dir == str(layout.package_cache)
        assert record.target_cache_dir == str(layout.target_cache)

    def test_x86_deb_name(self, make_settings):
        settings = make_settings(binary_arch="x86")
        layout = DirectoryLayout.for_project(settings.project_out_directory)
        assert build_manifest_record(settings, layout).deb_package_name == "example_1.0.0_i386"

    def test_pure(self, settings):
        """Same input, identical record."""
        layout = DirectoryLayout.for_project(settings.project_out_directory)
        first = build_manifest_record(settings, layout)
        second = build_manifest_record(settings, layout)

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_no_filesystem_access(self, make_settings, tmp_path):
        """Paths that do not exist are fine; nothing is created."""
        workdir = tmp_path / "missing"
        settings = make_settings(
            project_out_directory=workdir / "out", flatpak={"workdir": workdir}
        )
        layout = DirectoryLayout.for_project(settings.project_out_directory)

        build_manifest_record(settings, layout)

        assert not workdir.exists()

    def test_output_outside_workdir_fails(self, make_settings, tmp_path):
        """project_out_directory must be inside workdir."""
        settings = make_settings(project_out_directory=tmp_path / "elsewhere" / "release")
        layout = DirectoryLayout.for_project(settings.project_out_directory)

        with pytest.raises(PathRelativizationError) as exc_info:
            build_manifest_record(settings, layout)

        assert exc_info.value.stage == Stage.MANIFEST

    def test_parent_segments_escaping_workdir_fail(self, make_settings, workdir):
        """workdir/../elsewhere is outside workdir even though it starts with it."""
        settings = make_settings(project_out_directory=workdir / ".." / "elsewhere")
        layout = DirectoryLayout.for_project(settings.project_out_directory)

        with pytest.raises(PathRelativizationError):
            build_manifest_record(settings, layout)

    def test_parent_segments_in_workdir_collapsed(self, make_settings, workdir):
        """A workdir written as src-tauri/.. still contains the output directory."""
        settings = make_settings(
            project_out_directory=workdir / "src-tauri" / "target" / "release",
            flatpak={"workdir": workdir / "src-tauri" / ".."},
        )
        layout = DirectoryLayout.for_project(settings.project_out_directory)

        record = build_manifest_record(settings, layout)

        assert record.workdir == str(workdir)
        assert record.rel_project_out_directory == "src-tauri/target/release"

    def test_skip_list_and_flags(self, make_settings):
        settings = make_settings(
            flatpak={"skip_list": ["node_modules", "src-tauri/target"], "use_node_cli": True}
        )
        layout = DirectoryLayout.for_project(settings.project_out_directory)
        record = build_manifest_record(settings, layout)

        assert record.skip_list == ["node_modules", "src-tauri/target"]
        assert record.use_node_cli is True
        assert record.tauri_cli_version == "1.2.3"


class TestManifestRenderer:
    """Test ManifestRenderer."""

    @pytest.fixture
    def record(self, settings):
        layout = DirectoryLayout.for_project(settings.project_out_directory)
        return build_manifest_record(settings, layout)

    def test_default_template_renders_json(self, record):
        """The shipped template produces a valid manifest."""
        doc = json.loads(ManifestRenderer().render(record))

        assert doc["app-id"] == "app.tauri.example"
        assert doc["command"] == "example"
        assert doc["x-app-name"] == "Example"
        assert doc["modules"][0].startswith("shared-modules/")

    def test_default_template_uses_every_field(self, record):
        """Every record field is consumed by the shipped template."""
        assert ManifestRenderer().referenced_fields() == set(record.model_dump())

    def test_build_commands_cargo_cli(self, record):
        """Without the node CLI, the pinned cargo CLI is installed."""
        module = json.loads(ManifestRenderer().render(record))["modules"][1]
        commands = module["build-commands"]

        assert "cargo install tauri-cli --locked --version 1.2.3" in commands
        assert "ar -x target/release/example_1.0.0_amd64.deb" in commands
        assert "install -Dm755 usr/bin/example /app/bin/example" in commands
        assert not any("yarn" in c for c in commands)

    def test_build_commands_node_cli(self, make_settings):
        settings = make_settings(flatpak={"use_node_cli": True})
        layout = DirectoryLayout.for_project(settings.project_out_directory)
        record = build_manifest_record(settings, layout)
        commands = json.loads(ManifestRenderer().render(record))["modules"][1]["build-commands"]

        assert "cd . && yarn tauri build --bundles deb" in commands
        assert "cd . && yarn add --dev @tauri-apps/cli@1.2.3" in commands

    def test_sources_skip_list(self, make_settings):
        """Skip-listed paths and the output dir are kept out of the sandbox."""
        settings = make_settings(flatpak={"skip_list": ["node_modules"]})
        layout = DirectoryLayout.for_project(settings.project_out_directory)
        record = build_manifest_record(settings, layout)
        sources = json.loads(ManifestRenderer().render(record))["modules"][1]["sources"]

        assert sources[0]["skip"] == ["node_modules", "target/release"]
        assert sources[1]["path"] == record.local_dir
        assert sources[1]["dest"] == "flatpak"

    def test_special_characters_escaped(self, make_settings):
        """Quotes in values do not break the JSON."""
        settings = make_settings(product_name='Say "Hi"')
        layout = DirectoryLayout.for_project(settings.project_out_directory)
        record = build_manifest_record(settings, layout)

        doc = json.loads(ManifestRenderer().render(record))
        assert doc["x-app-name"] == 'Say "Hi"'

    def test_write_location(self, settings, record):
        """The manifest lands in local/{app_id}.json."""
        layout = prepare_workspace(settings.project_out_directory)
        path = ManifestRenderer().write(record, layout)

        assert path == (
            settings.flatpak.workdir
            / "target/release/bundle/flatpak/local/app.tauri.example.json"
        )
        assert json.loads(path.read_text())["app-id"] == "app.tauri.example"

    def test_unknown_field_fails_without_writing(self, settings, record):
        """A template name the record lacks is a TemplateRenderError; no file is left."""
        layout = prepare_workspace(settings.project_out_directory)
        renderer = ManifestRenderer('{"app-id": {{ app_id|tojson }}, "x": {{ runtime|tojson }}}')

        with pytest.raises(TemplateRenderError) as exc_info:
            renderer.write(record, layout)

        assert "runtime" in str(exc_info.value)
        assert not layout.manifest_path(record.app_id).exists()

    def test_undefined_attribute_fails(self, record):
        """Strict mode: undefined attributes raise instead of rendering empty."""
        renderer = ManifestRenderer('{"x": "{{ app_id.nope }}"}')
        with pytest.raises(TemplateRenderError):
            renderer.render(record)

    def test_non_json_output_fails(self, record):
        renderer = ManifestRenderer("{{ app_id }}")
        with pytest.raises(TemplateRenderError) as exc_info:
            renderer.render(record)
        assert "not valid JSON" in str(exc_info.value)

    def test_template_syntax_error(self):
        with pytest.raises(TemplateRenderError):
            ManifestRenderer("{% if %}")
