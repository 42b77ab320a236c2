import pytest

from archinstaller.lib.manifests import (
    load_programs_manifest,
    load_yaml,
    package_names,
    programs_manifest_path,
)


class TestBundledManifest:
    def test_loads(self):
        m = load_programs_manifest()
        assert "git" in package_names(m, "helpers")
        assert "zsh" in package_names(m, "shell")

    def test_modes(self):
        m = load_programs_manifest()
        standard = package_names(m, "pacman", "standard")
        minimal = package_names(m, "pacman", "minimal")
        assert set(minimal) <= set(standard)
        assert "tmux" in package_names(m, "pacman", "server")

    def test_custom_uses_standard_lists(self):
        m = load_programs_manifest()
        assert package_names(m, "aur", "custom") == package_names(m, "aur", "standard")

    def test_server_gets_no_desktop_apps(self):
        m = load_programs_manifest()
        assert package_names(m, "essential", "server") == []
        assert package_names(m, "flatpak", "server") == []


class TestPackageNames:
    def test_mixed_entries(self):
        m = {"x": ["a", {"name": "b", "description": "B"}, {"description": "no name"}, None]}
        assert package_names(m, "x") == ["a", "b"]

    def test_missing_section(self):
        assert package_names({}, "pacman", "standard") == []


def test_env_override(tmp_path, monkeypatch):
    path = tmp_path / "programs.yaml"
    path.write_text("helpers:\n  - foo\n", encoding="utf-8")
    monkeypatch.setenv("ARCHINSTALLER_PROGRAMS", str(path))
    assert programs_manifest_path() == path
    assert package_names(load_programs_manifest(), "helpers") == ["foo"]


def test_non_mapping_manifest_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml(path)
