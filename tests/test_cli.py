"""Tests for the dist-check command."""

import json

import pytest

from conftest import PLUGINS_CONF, REPO, FakeSession
from dist_check import cli
from dist_check.report import FAILURES_FILENAME


@pytest.fixture
def conf_file(tmp_path):
    path = tmp_path / "dist-tool.conf"
    path.write_text(PLUGINS_CONF)
    return path


@pytest.fixture
def use_session(monkeypatch):
    def install(session):
        monkeypatch.setattr(cli, "get_session", lambda retries=3: session)
        return session

    return install


def test_mismatch_exits_with_failure(tmp_path, conf_file, plugins_session, use_session, capsys):
    use_session(plugins_session)
    out_dir = tmp_path / "out"
    code = cli.main(
        ["check-index-pages", "--config", str(conf_file), "--repo", REPO, "--output-dir", str(out_dir)]
    )
    assert code == 1
    output = capsys.readouterr().out
    assert "Artifacts checked: 3" in output
    assert "maven-compiler-plugin: found 3.10.1 instead of 3.11.0" in output
    assert (out_dir / FAILURES_FILENAME).read_text().startswith("maven-compiler-plugin:")


def test_ignored_failures_exit_cleanly(tmp_path, conf_file, plugins_session, use_session):
    use_session(plugins_session)
    code = cli.main(
        [
            "check-index-pages",
            "--config", str(conf_file),
            "--repo", REPO,
            "--output-dir", str(tmp_path / "out"),
            "--ignore", "maven-compiler-plugin",
        ]
    )
    assert code == 0


def test_forced_version_from_settings(tmp_path, conf_file, plugins_session, use_session):
    use_session(plugins_session)
    settings = tmp_path / "settings.json"
    settings.write_text(
        json.dumps(
            {
                "repo_base_url": REPO,
                "force_versions": {"maven-compiler-plugin": "3.10.1"},
                "output_dir": str(tmp_path / "out"),
            }
        )
    )
    code = cli.main(["check-index-pages", "--config", str(conf_file), "--settings", str(settings)])
    # the compiler row now matches; the listing date drift and missing row are warnings
    assert code == 0


def test_missing_config_option(capsys):
    assert cli.main(["check-index-pages"]) == 2
    assert "--config" in capsys.readouterr().err


def test_bad_force_value(conf_file, capsys):
    assert cli.main(["check-index-pages", "--config", str(conf_file), "--force", "nope"]) == 2


def test_invalid_range_in_configuration(tmp_path, capsys):
    path = tmp_path / "dist-tool.conf"
    path.write_text(">maven/plugins org.apache.maven.plugins https://maven.apache.org/plugins/\njar [1.0\n")
    assert cli.main(["check-index-pages", "--config", str(path)]) == 2
    assert "line 2" in capsys.readouterr().err


def test_prerequisites(conf_file, use_session, capsys):
    page = """
    <table class="bodyTable"></table>
    <table class="bodyTable">
      <tr class="a"><td>Maven 3.2.5</td></tr>
      <tr class="b"><td>JDK 1.8</td></tr>
    </table>
    """
    base = "https://maven.apache.org/plugins/"
    use_session(
        FakeSession(
            {
                base + "maven-jar-plugin/plugin-info.html": page,
                base + "maven-compiler-plugin/plugin-info.html": page,
            }
        )
    )
    code = cli.main(["prerequisites", "--config", str(conf_file)])
    output = capsys.readouterr().out
    assert "Maven 3.2.5:" in output
    assert "maven-jar-plugin" in output
    assert "maven-ghost-plugin" in output  # listed under ERRORS
    assert code == 1


def test_invalid_flag_value(conf_file, capsys):
    assert cli.main(["check-index-pages", "--config", str(conf_file), "--workers", "0"]) == 2
    assert "max_workers" in capsys.readouterr().err
