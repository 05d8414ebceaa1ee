"""
End-to-End Tests - Full workflows through the document API and the CLI.
"""

import subprocess
import sys
from pathlib import Path

import pytest

from vnml.document import VNmlDocument
from vnml.settings import Setting, XmlSettings
from vnml import paths


ROOT = Path(__file__).parent.parent


def run_cli(*args, env=None):
    return subprocess.run(
        [sys.executable, "-m", "vnml.cli", *args],
        capture_output=True,
        text=True,
        cwd=str(ROOT),
        env=env,
    )


class TestFullWorkflow:

    def test_two_namespaces_share_one_file(self, tmp_path):
        path = tmp_path / "shared.vnml"

        editor = VNmlDocument(namespace="editor")
        editor["font", "size"] = 11
        editor.set_comment("font", None, "Editor font")
        editor.save(path)

        viewer = VNmlDocument(namespace="viewer")
        viewer.load(path)
        viewer["font", "size"] = 14
        viewer.save(path)

        check = VNmlDocument(namespace="editor")
        check.load(path)
        assert check["font", "size"] == "11"
        check.namespace = "viewer"
        assert check["font", "size"] == "14"
        assert check.section_names() == ["editor:font", "viewer:font"]

    def test_settings_file_in_app_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("VNML_CONFIG_HOME", str(tmp_path))

        class Prefs(XmlSettings):
            theme = Setting(str, default="light")

        path = paths.get_settings_file("Demo", "xml")
        prefs = Prefs()
        assert prefs.load(path) is None
        prefs.save(path)
        assert prefs.theme == "light"

        reloaded = Prefs()
        assert reloaded.load(path) is not None
        assert reloaded.theme == "light"
        reloaded.theme = "dark"
        reloaded.save(path)

        final = Prefs()
        final.load(path)
        assert final.theme == "dark"
        assert paths.delete_settings_dir("Demo")
        assert not path.exists()


class TestCLI:
    """Test the CLI commands via subprocess."""

    def test_cli_help(self):
        result = run_cli("--help")
        assert result.returncode == 0
        assert "VNml" in result.stdout

    def test_cli_version(self):
        result = run_cli("--version")
        assert result.returncode == 0
        assert "1.0.0" in result.stdout

    def test_cli_no_command_prints_help(self):
        result = run_cli()
        assert result.returncode == 0
        assert "show" in result.stdout

    def test_set_get_show(self, tmp_path):
        path = str(tmp_path / "cli.vnml")
        result = run_cli("set", path, "window", "width", "800", "-c", "pixels")
        assert result.returncode == 0, result.stderr

        result = run_cli("get", path, "window", "width")
        assert result.returncode == 0
        assert result.stdout.strip() == "800"

        result = run_cli("show", path)
        assert result.returncode == 0
        assert "[window]" in result.stdout
        assert "width = 800" in result.stdout
        assert "; pixels" in result.stdout

        doc = VNmlDocument(namespace="")
        doc.load(path)
        assert doc.get_comment("window", "width") == ["pixels"]

    def test_binary_value(self, tmp_path):
        path = str(tmp_path / "bin.vnml")
        assert run_cli("set", path, "s", "BIN:blob", "0x00FF").returncode == 0
        result = run_cli("get", path, "s", "BIN:blob")
        assert result.stdout.strip() == "0x00FF"

    def test_namespace_option(self, tmp_path):
        path = str(tmp_path / "ns.vnml")
        assert run_cli("-n", "app", "set", path, "s", "k", "v").returncode == 0
        doc = VNmlDocument(namespace="")
        doc.load(path)
        assert doc.section_names() == ["app:s"]
        assert run_cli("get", path, "s", "k").returncode == 1
        assert run_cli("-n", "app", "get", path, "s", "k").stdout.strip() == "v"

    def test_get_missing_and_default(self, tmp_path):
        path = str(tmp_path / "d.vnml")
        run_cli("set", path, "s", "k", "v")
        result = run_cli("get", path, "s", "nope")
        assert result.returncode == 1
        assert "not found" in result.stderr
        result = run_cli("get", path, "s", "nope", "-d", "fallback")
        assert result.returncode == 0
        assert result.stdout.strip() == "fallback"

    def test_delete(self, tmp_path):
        path = tmp_path / "del.vnml"
        doc = VNmlDocument(namespace="")
        doc["Alpha", "key1"] = "1"
        doc["Alpha", "key2"] = "2"
        doc["Alpha", "other"] = "3"
        doc["Beta", "k"] = "4"
        doc.save(path)

        result = run_cli("delete", str(path), "key*", "-s", "Alpha")
        assert result.returncode == 0
        assert "2 value(s)" in result.stdout

        result = run_cli("delete", str(path), "B*")
        assert result.returncode == 0
        assert "1 section(s)" in result.stdout

        doc = VNmlDocument(namespace="")
        doc.load(path)
        assert doc.section_names() == ["Alpha"]
        assert doc.items("Alpha") == [("other", "3")]

    def test_validate(self, tmp_path):
        good = tmp_path / "good.vnml"
        good.write_text("-- VNml v.1.0. --\ns\n\tk=[v]\n", encoding="utf-8")
        result = run_cli("validate", str(good))
        assert result.returncode == 0
        assert "VALID: 1 section(s), 1 value(s)" in result.stdout

        bad = tmp_path / "bad.vnml"
        bad.write_text("-- BAD --\n", encoding="utf-8")
        result = run_cli("validate", str(bad))
        assert result.returncode == 1
        assert "banner" in result.stderr

    def test_identify(self, tmp_path):
        good = tmp_path / "good.vnml"
        good.write_text("-- VNml v.1.0. --\n", encoding="utf-8")
        other = tmp_path / "other.ini"
        other.write_text("[s]\nk=v\n", encoding="utf-8")
        assert run_cli("identify", str(good)).returncode == 0
        assert run_cli("identify", str(other)).returncode == 1

    def test_missing_file(self, tmp_path):
        result = run_cli("show", str(tmp_path / "missing.vnml"))
        assert result.returncode == 1
        assert "File not found" in result.stderr
